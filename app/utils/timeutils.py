"""
Time Utilities

All timestamps in the system are timezone-aware UTC. Some backends
(SQLite) hand back naive datetimes even for timezone=True columns, so
anything read from the database goes through ensure_utc before arithmetic.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_epoch_ms(ms: int) -> datetime:
    """Convert a client-declared millisecond epoch to an aware datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    return int(ensure_utc(value).timestamp() * 1000)


def minutes_between(earlier: Optional[datetime], later: datetime) -> int:
    """Whole minutes from earlier to later, rounded; 0 when earlier is unknown."""
    if earlier is None:
        return 0
    delta = ensure_utc(later) - ensure_utc(earlier)
    return max(0, round(delta.total_seconds() / 60))


def seconds_between(earlier: Optional[datetime], later: Optional[datetime]) -> int:
    if earlier is None or later is None:
        return 0
    delta = ensure_utc(later) - ensure_utc(earlier)
    return max(0, round(delta.total_seconds()))
