"""Key-value persistence for command state."""

from roombot.core.storage.base import Storage
from roombot.core.storage.json_file import JsonFileStorage
from roombot.core.storage.memory import MemoryStorage

__all__ = ["Storage", "JsonFileStorage", "MemoryStorage"]
