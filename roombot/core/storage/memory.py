"""In-process Storage backend with no persistence."""

import asyncio
import copy
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


class MemoryStorage:
    """Dict-backed Storage for tests and embedded use."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self.data.get(key))

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            self.data[key] = copy.deepcopy(value)

    async def update(self, key: str, updater: Callable[[T], T], default: T) -> T:
        async with self._lock:
            current = self.data.get(key)
            if current is None:
                current = copy.deepcopy(default)
            next_value = updater(current)
            self.data[key] = next_value
            return copy.deepcopy(next_value)

    async def flush(self) -> None:
        return None
