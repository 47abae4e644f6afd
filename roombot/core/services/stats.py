# roombot/core/services/stats.py
"""Command usage counters persisted under the ``"stats"`` storage key."""

from dataclasses import dataclass, field
from datetime import datetime

from roombot.core.services.format import format_timestamp
from roombot.core.storage.base import Storage

STORAGE_KEY = "stats"


@dataclass
class StatsSnapshot:
    """Point-in-time read of the command counters.

    Attributes:
        total_commands: Commands dispatched since the store was created.
        by_command: Per-command counts, in first-seen order.
        last_command_at: ISO-8601 timestamp of the latest command, if any.
    """

    total_commands: int = 0
    by_command: dict[str, int] = field(default_factory=dict)
    last_command_at: str | None = None

    def to_dict(self) -> dict:
        """Convert to the stored JSON shape.

        Returns:
            Dictionary with camelCase keys; ``lastCommandAt`` omitted when unset.
        """
        data: dict = {
            "totalCommands": self.total_commands,
            "byCommand": dict(self.by_command),
        }
        if self.last_command_at is not None:
            data["lastCommandAt"] = self.last_command_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "StatsSnapshot":
        """Create from the stored JSON shape.

        Args:
            data: Dictionary as written by ``to_dict``.

        Returns:
            StatsSnapshot instance.
        """
        return cls(
            total_commands=int(data.get("totalCommands", 0)),
            by_command=dict(data.get("byCommand", {})),
            last_command_at=data.get("lastCommandAt"),
        )

    def top_commands(self, limit: int = 5) -> list[tuple[str, int]]:
        """Most used commands, highest count first; ties keep stored order."""
        ranked = sorted(self.by_command.items(), key=lambda item: item[1], reverse=True)
        return ranked[:limit]


async def record_command(storage: Storage, command_name: str, now: datetime) -> StatsSnapshot:
    """Count one dispatched command.

    Args:
        storage: Storage holding the stats document.
        command_name: Name of the command that was matched.
        now: Dispatch time, stored as ``lastCommandAt``.

    Returns:
        The snapshot after recording.
    """

    def _increment(current: dict) -> dict:
        by_command = dict(current.get("byCommand", {}))
        by_command[command_name] = by_command.get(command_name, 0) + 1
        return {
            "totalCommands": current.get("totalCommands", 0) + 1,
            "byCommand": by_command,
            "lastCommandAt": format_timestamp(now),
        }

    stored = await storage.update(STORAGE_KEY, _increment, StatsSnapshot().to_dict())
    return StatsSnapshot.from_dict(stored)


async def get_stats(storage: Storage) -> StatsSnapshot:
    """Read the current counters, or zeroes if nothing was recorded."""
    stored = await storage.get(STORAGE_KEY)
    if stored is None:
        return StatsSnapshot()
    return StatsSnapshot.from_dict(stored)
