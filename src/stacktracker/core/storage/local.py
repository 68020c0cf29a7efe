"""
Local filesystem storage backend.

Each key is one UTF-8 file under ``base_path``. Writes go to a temporary
sibling first and are renamed into place, so a failed write leaves the
previous value intact.
"""

import re
from pathlib import Path

import aiofiles
import aiofiles.os

from .base import KeyValueStore, StorageError, StorageKeyError, StoragePermissionError

_SEGMENT_RE = re.compile(r"[A-Za-z0-9._-]+")


class LocalStorage(KeyValueStore):
    """Local filesystem key-value store."""

    def __init__(self, base_path: str = "~/.stacktracker-data/storage", **config):
        super().__init__(**config)
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, key: str) -> Path:
        """Map a key such as ``stack_silver_holdings`` or ``profiles/me/silver`` to a file.

        Each slash-separated segment must be a plain name, so a key can never
        point outside ``base_path``.
        """
        segments = key.split("/")
        for segment in segments:
            if segment in (".", "..") or not _SEGMENT_RE.fullmatch(segment):
                raise StorageKeyError(f"Invalid storage key {key!r}")
        return self.base_path.joinpath(*segments)

    async def get(self, key: str) -> str | None:
        path = self._get_full_path(key)
        if not path.exists():
            return None

        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                return await f.read()
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise StorageError(f"{path} is not valid UTF-8: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._get_full_path(key)
        tmp_path = path.with_name(path.name + ".tmp")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(value)
            await aiofiles.os.replace(tmp_path, path)
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write to {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot write to {path}: {e}") from e

    async def exists(self, key: str) -> bool:
        return self._get_full_path(key).exists()
