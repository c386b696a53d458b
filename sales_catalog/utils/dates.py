"""Timestamp helpers: everything the engine compares or stores is UTC."""
from datetime import datetime, timezone
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """
    Return a timezone-aware UTC datetime.

    Naive values are taken as UTC: SQLite hands back naive timestamps even
    for DateTime(timezone=True) columns.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_utc(value: Optional[datetime]) -> Optional[str]:
    """Serialize to ISO-8601 with an explicit UTC offset."""
    if value is None:
        return None
    return as_utc(value).isoformat()
