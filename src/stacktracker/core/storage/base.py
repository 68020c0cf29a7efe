"""
Abstract base class for key-value storage backends.

Holdings are persisted as named string entries. Backends only need to
support get/set/exists; the holdings store never lists or deletes keys.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract async key-value store holding text values."""

    def __init__(self, **config):
        self.config = config

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``. Raises StorageError on failure."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in storage."""


class StorageError(Exception):
    """Base exception for storage errors."""


class StorageKeyError(StorageError, KeyError):
    """Raised when a storage key is malformed."""


class StoragePermissionError(StorageError):
    """Raised when a storage operation is not permitted."""
