"""Tests for stats, suggestions and formatting services."""

from datetime import datetime, timedelta, timezone

import pytest

from roombot.core.services.format import format_duration_ms, format_timestamp
from roombot.core.services.stats import StatsSnapshot, get_stats, record_command
from roombot.core.services.suggestions import add_suggestion, get_suggestions
from roombot.core.storage.memory import MemoryStorage

T0 = datetime(2025, 6, 15, 10, 0, 0, tzinfo=timezone.utc)


class TestFormatDuration:
    """Test suite for format_duration_ms."""

    @pytest.mark.parametrize(
        ("duration_ms", "expected"),
        [
            (0, "0s"),
            (-1000, "0s"),
            (999, "0s"),
            (59_000, "59s"),
            (61_000, "1m 1s"),
            (3_600_000, "1h 0m 0s"),
            (3_661_000, "1h 1m 1s"),
            (86_400_000, "1d 0h 0m 0s"),
            (90_061_000, "1d 1h 1m 1s"),
            (40 * 86_400_000, "40d 0h 0m 0s"),
        ],
    )
    def test_format_duration_ms(self, duration_ms: int, expected: str) -> None:
        """Test unit decomposition and display rules."""
        assert format_duration_ms(duration_ms) == expected


class TestFormatTimestamp:
    """Test suite for format_timestamp."""

    def test_utc_with_milliseconds(self) -> None:
        """Test the fixed machine-sortable format."""
        moment = T0 + timedelta(milliseconds=42)
        assert format_timestamp(moment) == "2025-06-15T10:00:00.042Z"

    def test_converts_other_timezones(self) -> None:
        """Test aware datetimes are converted to UTC."""
        moment = datetime(2025, 6, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2025-06-15T10:00:00.000Z"

    def test_naive_is_utc(self) -> None:
        """Test naive datetimes are treated as UTC."""
        assert format_timestamp(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05.000Z"


class TestStats:
    """Test suite for the stats service."""

    @pytest.mark.asyncio
    async def test_get_stats_default(self) -> None:
        """Test zero-value stats before anything is recorded."""
        stats = await get_stats(MemoryStorage())

        assert stats == StatsSnapshot()
        assert stats.last_command_at is None

    @pytest.mark.asyncio
    async def test_record_command_counts(self) -> None:
        """Test totals, per-command counts and last timestamp."""
        storage = MemoryStorage()
        await record_command(storage, "ping", T0)
        await record_command(storage, "ping", T0 + timedelta(seconds=1))
        snapshot = await record_command(storage, "help", T0 + timedelta(seconds=2))

        assert snapshot.total_commands == 3
        assert snapshot.by_command == {"ping": 2, "help": 1}
        assert snapshot.last_command_at == "2025-06-15T10:00:02.000Z"
        assert await get_stats(storage) == snapshot

    @pytest.mark.asyncio
    async def test_stored_shape(self) -> None:
        """Test the persisted document uses the documented keys."""
        storage = MemoryStorage()
        await record_command(storage, "ping", T0)

        assert storage.data["stats"] == {
            "totalCommands": 1,
            "byCommand": {"ping": 1},
            "lastCommandAt": "2025-06-15T10:00:00.000Z",
        }

    def test_top_commands_stable_ties(self) -> None:
        """Test ranking by count with ties kept in stored order."""
        snapshot = StatsSnapshot(
            total_commands=10,
            by_command={"a": 1, "b": 3, "c": 1, "d": 3, "e": 1, "f": 1},
        )

        assert snapshot.top_commands(5) == [
            ("b", 3),
            ("d", 3),
            ("a", 1),
            ("c", 1),
            ("e", 1),
        ]

    def test_round_trip_omits_missing_timestamp(self) -> None:
        """Test to_dict leaves out lastCommandAt when unset."""
        assert "lastCommandAt" not in StatsSnapshot().to_dict()


class TestSuggestions:
    """Test suite for the suggestions service."""

    @pytest.mark.asyncio
    async def test_get_suggestions_empty(self) -> None:
        """Test an unwritten store yields no suggestions."""
        assert await get_suggestions(MemoryStorage()) == []

    @pytest.mark.asyncio
    async def test_sequential_ids(self) -> None:
        """Test ids are assigned 1, 2, 3 in insertion order."""
        storage = MemoryStorage()
        first = await add_suggestion(storage, "more dice", "@a:test", "!r:test", T0)
        second = await add_suggestion(storage, "dark mode", "@b:test", "!r:test", T0)
        third = await add_suggestion(storage, "polls", "@c:test", "!s:test", T0)

        assert [first.id, second.id, third.id] == [1, 2, 3]

        items = await get_suggestions(storage)
        assert [s.id for s in items] == [1, 2, 3]
        assert [s.sender for s in items] == ["@a:test", "@b:test", "@c:test"]
        assert items[2].room_id == "!s:test"
        assert items[0].created_at == "2025-06-15T10:00:00.000Z"

    @pytest.mark.asyncio
    async def test_next_id_persisted(self) -> None:
        """Test the counter is stored next to the items."""
        storage = MemoryStorage()
        await add_suggestion(storage, "one", "@a:test", "!r:test", T0)

        assert storage.data["suggestions"]["nextId"] == 2
        assert storage.data["suggestions"]["items"][0]["roomId"] == "!r:test"
