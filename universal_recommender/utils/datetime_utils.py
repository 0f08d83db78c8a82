from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Get current datetime in UTC.
    """
    return datetime.now(timezone.utc)


def to_iso8601(at: Optional[datetime] = None) -> str:
    """
    Format a datetime as extended ISO-8601 with offset and whole seconds.
    Naive datetimes are treated as local time. Defaults to now.
    Example: "2025-07-23T12:34:56+05:30"
    """
    if at is None:
        at = utc_now()
    if at.tzinfo is None:
        at = at.astimezone()
    return at.replace(microsecond=0).isoformat()
