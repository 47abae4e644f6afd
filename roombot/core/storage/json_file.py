# roombot/core/storage/json_file.py
"""JSON file backend for the Storage protocol.

The whole document is held in memory and mirrored to one file. Every
``set``/``update`` flushes before returning, so the file and memory agree
after each successful mutation.
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from collections.abc import Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonFileStorage:
    """Storage backed by a single JSON document on local disk.

    Mutations are serialized with an asyncio.Lock so concurrent handlers
    on one event loop cannot interleave read-modify-write cycles. There
    is no coordination between processes sharing the same file.

    Attributes:
        file_path: Path to the JSON document.

    Example:
        >>> storage = JsonFileStorage.open("data/bot-store.json")
        >>> await storage.update("counter", lambda n: n + 1, 0)
        1
    """

    def __init__(self, file_path: str, data: dict[str, Any] | None = None) -> None:
        """Initialize the storage with an already-loaded document.

        Use ``JsonFileStorage.open`` to load from disk.

        Args:
            file_path: Path the document is flushed to.
            data: Initial document contents.
        """
        self.file_path = file_path
        self._data: dict[str, Any] = data if data is not None else {}
        self._dirty = False
        self._lock = asyncio.Lock()

    @classmethod
    def open(cls, file_path: str) -> "JsonFileStorage":
        """Load storage from ``file_path``.

        Creates the parent directory if needed. A missing file yields an
        empty document; unreadable or malformed files raise.

        Args:
            file_path: Path to the JSON document.

        Returns:
            JsonFileStorage holding the loaded document.

        Raises:
            OSError: If the file exists but cannot be read.
            json.JSONDecodeError: If the file is not valid JSON.
            ValueError: If the top-level JSON value is not an object.
        """
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        try:
            with open(file_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("No store at %s, starting empty", file_path)
            return cls(file_path, {})

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Store {file_path} must contain a JSON object, "
                f"got {type(data).__name__}"
            )

        logger.info("Loaded store %s (%d keys)", file_path, len(data))
        return cls(file_path, data)

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            self._commit(key, copy.deepcopy(value))

    async def update(self, key: str, updater: Callable[[T], T], default: T) -> T:
        async with self._lock:
            current = copy.deepcopy(self._data.get(key))
            if current is None:
                current = copy.deepcopy(default)
            next_value = updater(current)
            self._commit(key, next_value)
            return copy.deepcopy(next_value)

    async def flush(self) -> None:
        async with self._lock:
            self._write()

    def shutdown(self) -> None:
        """Flush pending changes synchronously (lifecycle hook)."""
        self._write()

    def _commit(self, key: str, value: Any) -> None:
        """Store one key and write the document.

        If the write fails (for example the value is not JSON
        serializable) the key is restored so later writes are unaffected.
        """
        had_key = key in self._data
        previous = self._data.get(key)
        was_dirty = self._dirty

        self._data[key] = value
        self._dirty = True
        try:
            self._write()
        except Exception:
            if had_key:
                self._data[key] = previous
            else:
                del self._data[key]
            self._dirty = was_dirty
            raise

    def _write(self) -> None:
        """Write the document if dirty, replacing the file atomically."""
        if not self._dirty:
            return

        payload = json.dumps(self._data, indent=2, ensure_ascii=False)
        directory = os.path.dirname(os.path.abspath(self.file_path))
        fd, tmp_path = tempfile.mkstemp(
            prefix=".store-", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.file_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self._dirty = False
        logger.debug("Flushed store %s", self.file_path)
