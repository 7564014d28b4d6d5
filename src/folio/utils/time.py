"""UTC clock and the timestamp format stored in documents.

Stored timestamps are fixed-width (``YYYY-MM-DDTHH:MM:SS.ffffffZ``) so that
comparing them as strings orders them in time.
"""

from datetime import datetime, timezone

TIMESTAMP_EXAMPLE = "2025-01-01T12:00:00.000000Z"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """
    Render an aware datetime as a stored timestamp.

    Microseconds are always written, even when zero.

    Raises:
        ValueError: If the datetime has no timezone
    """
    if dt.tzinfo is None:
        raise ValueError(f"Timestamp needs a timezone, got naive datetime {dt}")
    text = dt.astimezone(timezone.utc).isoformat(timespec="microseconds")
    return text[: -len("+00:00")] + "Z"


def timestamp_now() -> str:
    return format_timestamp(utc_now())
