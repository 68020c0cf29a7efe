"""Tests for stacktracker.core.storage."""

import pytest

from stacktracker.core.storage import LocalStorage, MemoryStorage, StorageError, StorageKeyError


class TestLocalStorage:
    @pytest.fixture
    def storage(self, tmp_path):
        return LocalStorage(base_path=str(tmp_path / "store"))

    @pytest.mark.asyncio
    async def test_set_and_get(self, storage):
        await storage.set("stack_silver_holdings", '[{"id": "1"}]')
        assert await storage.get("stack_silver_holdings") == '[{"id": "1"}]'

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, storage):
        assert await storage.get("missing") is None

    @pytest.mark.asyncio
    async def test_exists(self, storage):
        assert not await storage.exists("present")
        await storage.set("present", "[]")
        assert await storage.exists("present")

    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_file(self, storage):
        await storage.set("key", "first")
        await storage.set("key", "second")
        assert await storage.get("key") == "second"
        assert sorted(p.name for p in storage.base_path.iterdir()) == ["key"]

    @pytest.mark.asyncio
    async def test_nested_keys(self, storage):
        await storage.set("profiles/me/silver", "[]")
        assert (storage.base_path / "profiles" / "me" / "silver").exists()

    @pytest.mark.asyncio
    async def test_unicode_round_trip(self, storage):
        await storage.set("notes", '["Krügerrand – 1 oz"]')
        assert await storage.get("notes") == '["Krügerrand – 1 oz"]'

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "../escape", "/etc/passwd", "~/home", "a\\b", "bad\x00key", "a//b", "spaced key"])
    async def test_rejects_unsafe_keys(self, storage, key):
        with pytest.raises(StorageKeyError):
            await storage.set(key, "x")

    @pytest.mark.asyncio
    async def test_invalid_utf8_raises_storage_error(self, storage):
        (storage.base_path / "stack_silver_holdings").write_bytes(b'[{"product": "\xff\xfe"}]')
        with pytest.raises(StorageError, match="not valid UTF-8"):
            await storage.get("stack_silver_holdings")

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, storage):
        # A directory where the file should go makes the rename fail
        (storage.base_path / "blocked").mkdir()
        (storage.base_path / "blocked" / "child").write_text("x")
        with pytest.raises(StorageError):
            await storage.set("blocked", "[]")


class TestMemoryStorage:
    @pytest.mark.asyncio
    async def test_initial_data(self):
        storage = MemoryStorage({"a": "1"})
        assert await storage.get("a") == "1"
        assert await storage.exists("a")
        assert await storage.get("b") is None

    @pytest.mark.asyncio
    async def test_set(self):
        storage = MemoryStorage()
        await storage.set("a", "2")
        assert storage.data == {"a": "2"}
