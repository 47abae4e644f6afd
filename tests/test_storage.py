"""Tests for the JSON file and in-memory storage backends."""

import asyncio
import json
import os

import pytest

from roombot.core.storage.base import Storage
from roombot.core.storage.json_file import JsonFileStorage
from roombot.core.storage.memory import MemoryStorage


class TestJsonFileStorage:
    """Test suite for JsonFileStorage."""

    def test_open_missing_file_starts_empty(self, temp_data_dir: str) -> None:
        """Test a missing file is the empty bootstrap, not an error."""
        path = os.path.join(temp_data_dir, "nested", "store.json")
        storage = JsonFileStorage.open(path)

        assert os.path.isdir(os.path.dirname(path))
        assert not os.path.exists(path)
        assert isinstance(storage, Storage)

    def test_open_corrupt_file_raises(self, temp_data_dir: str) -> None:
        """Test malformed JSON propagates as an error."""
        path = os.path.join(temp_data_dir, "store.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")

        with pytest.raises(json.JSONDecodeError):
            JsonFileStorage.open(path)

    def test_open_non_object_raises(self, temp_data_dir: str) -> None:
        """Test a top-level JSON array is rejected."""
        path = os.path.join(temp_data_dir, "store.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("[1, 2, 3]")

        with pytest.raises(ValueError):
            JsonFileStorage.open(path)

    @pytest.mark.asyncio
    async def test_get_unset_returns_none(self, temp_data_dir: str) -> None:
        """Test get() on a key that was never set."""
        storage = JsonFileStorage.open(os.path.join(temp_data_dir, "store.json"))
        assert await storage.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_survives_reopen(self, temp_data_dir: str) -> None:
        """Test set() then reopening the file returns the same value."""
        path = os.path.join(temp_data_dir, "store.json")
        value = {"nested": [1, "two", None, {"three": 3.5}], "flag": True}

        storage = JsonFileStorage.open(path)
        await storage.set("thing", value)

        reopened = JsonFileStorage.open(path)
        assert await reopened.get("thing") == value

    @pytest.mark.asyncio
    async def test_update_counter(self, temp_data_dir: str) -> None:
        """Test update() applies the default and then the stored value."""
        storage = JsonFileStorage.open(os.path.join(temp_data_dir, "store.json"))

        assert await storage.update("counter", lambda n: n + 1, 0) == 1
        assert await storage.update("counter", lambda n: n + 1, 0) == 2

    @pytest.mark.asyncio
    async def test_update_writes_through(self, temp_data_dir: str) -> None:
        """Test the file reflects the update as soon as it returns."""
        path = os.path.join(temp_data_dir, "store.json")
        storage = JsonFileStorage.open(path)

        await storage.update("counter", lambda n: n + 1, 0)

        with open(path, encoding="utf-8") as f:
            assert json.load(f) == {"counter": 1}

    @pytest.mark.asyncio
    async def test_flush_without_changes_does_not_create_file(
        self, temp_data_dir: str
    ) -> None:
        """Test flush() is a no-op when nothing changed."""
        path = os.path.join(temp_data_dir, "store.json")
        storage = JsonFileStorage.open(path)

        await storage.flush()

        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_flush_leaves_no_temp_files(self, temp_data_dir: str) -> None:
        """Test the atomic replace cleans up after itself."""
        storage = JsonFileStorage.open(os.path.join(temp_data_dir, "store.json"))
        await storage.set("a", 1)
        await storage.set("b", 2)

        assert os.listdir(temp_data_dir) == ["store.json"]

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, temp_data_dir: str) -> None:
        """Test mutating a returned value does not change the store."""
        storage = JsonFileStorage.open(os.path.join(temp_data_dir, "store.json"))
        await storage.set("items", [1, 2])

        items = await storage.get("items")
        items.append(3)

        assert await storage.get("items") == [1, 2]

    @pytest.mark.asyncio
    async def test_default_is_not_shared(self, temp_data_dir: str) -> None:
        """Test an updater mutating the default does not leak into later calls."""
        storage = JsonFileStorage.open(os.path.join(temp_data_dir, "store.json"))
        default: dict = {"items": []}

        def _append(current: dict) -> dict:
            current["items"].append("x")
            return current

        await storage.update("list", _append, default)

        assert default == {"items": []}

    @pytest.mark.asyncio
    async def test_concurrent_updates_are_not_lost(self, temp_data_dir: str) -> None:
        """Test many concurrent updates on one key all land."""
        path = os.path.join(temp_data_dir, "store.json")
        storage = JsonFileStorage.open(path)

        await asyncio.gather(
            *(storage.update("counter", lambda n: n + 1, 0) for _ in range(50))
        )

        assert await storage.get("counter") == 50
        assert await JsonFileStorage.open(path).get("counter") == 50

    @pytest.mark.asyncio
    async def test_unserializable_set_is_rolled_back(self, temp_data_dir: str) -> None:
        """Test a value JSON cannot encode does not poison later writes."""
        path = os.path.join(temp_data_dir, "store.json")
        storage = JsonFileStorage.open(path)
        await storage.set("counter", 1)

        with pytest.raises(TypeError):
            await storage.set("bad", {"when": object()})
        with pytest.raises(TypeError):
            await storage.set("counter", object())

        assert await storage.get("bad") is None
        assert await storage.get("counter") == 1

        await storage.set("other", "ok")
        await storage.flush()
        with open(path, encoding="utf-8") as f:
            assert json.load(f) == {"counter": 1, "other": "ok"}

    @pytest.mark.asyncio
    async def test_unserializable_update_keeps_previous_value(
        self, temp_data_dir: str
    ) -> None:
        """Test a failed update leaves the stored value untouched."""
        storage = JsonFileStorage.open(os.path.join(temp_data_dir, "store.json"))
        await storage.set("items", [1])

        def add_object(items: list) -> list:
            items.append(object())
            return items

        with pytest.raises(TypeError):
            await storage.update("items", add_object, [])

        assert await storage.get("items") == [1]
        assert await storage.update("items", lambda items: items + [2], []) == [1, 2]

    def test_shutdown_flushes_pending(self, temp_data_dir: str) -> None:
        """Test the lifecycle hook writes pending changes."""
        path = os.path.join(temp_data_dir, "store.json")
        storage = JsonFileStorage(path, {"seed": 1})
        storage._dirty = True

        storage.shutdown()

        with open(path, encoding="utf-8") as f:
            assert json.load(f) == {"seed": 1}


class TestMemoryStorage:
    """Test suite for MemoryStorage."""

    @pytest.mark.asyncio
    async def test_update_and_get(self) -> None:
        """Test update() and get() without a file."""
        storage = MemoryStorage()

        assert await storage.update("counter", lambda n: n + 1, 0) == 1
        assert await storage.update("counter", lambda n: n + 1, 0) == 2
        assert await storage.get("counter") == 2

    @pytest.mark.asyncio
    async def test_set_replaces(self) -> None:
        """Test set() overwrites unconditionally."""
        storage = MemoryStorage()
        await storage.set("key", "first")
        await storage.set("key", "second")
        await storage.flush()

        assert await storage.get("key") == "second"
        assert isinstance(storage, Storage)
