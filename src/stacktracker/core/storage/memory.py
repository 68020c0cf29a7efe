"""In-process storage backend. Nothing survives the process."""

from .base import KeyValueStore


class MemoryStorage(KeyValueStore):
    """Dict-backed key-value store, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None, **config):
        super().__init__(**config)
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def exists(self, key: str) -> bool:
        return key in self.data
