"""Services backing stateful commands."""

from roombot.core.services.format import format_duration_ms, format_timestamp
from roombot.core.services.stats import StatsSnapshot, get_stats, record_command
from roombot.core.services.suggestions import (
    Suggestion,
    add_suggestion,
    get_suggestions,
)

__all__ = [
    "format_duration_ms",
    "format_timestamp",
    "StatsSnapshot",
    "get_stats",
    "record_command",
    "Suggestion",
    "add_suggestion",
    "get_suggestions",
]
