"""Text formatting helpers for durations and timestamps."""

from datetime import datetime, timezone


def format_duration_ms(duration_ms: float) -> str:
    """Format a millisecond duration as ``"1d 2h 3m 4s"``.

    Negative durations clamp to zero. Seconds are always shown; each
    larger unit is shown when non-zero or when a larger unit precedes it.

    Examples:
        >>> format_duration_ms(0)
        '0s'
        >>> format_duration_ms(3_661_000)
        '1h 1m 1s'
        >>> format_duration_ms(86_400_000)
        '1d 0h 0m 0s'
    """
    total_seconds = max(0, int(duration_ms // 1000))
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts: list[str] = []
    if days:
        parts.append(f"{days}d")
    if hours or parts:
        parts.append(f"{hours}h")
    if minutes or parts:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with milliseconds, e.g.
    ``2025-06-15T10:00:00.000Z``. Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
