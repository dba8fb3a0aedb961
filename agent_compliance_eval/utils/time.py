"""
UTC timestamp helpers.

Evaluation records, database rows and log entries all carry timestamps in
UTC, formatted as ISO 8601 with a 'Z' suffix (e.g. 2026-03-14T09:26:53Z).
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def utc_timestamp(dt: datetime | None = None) -> str:
    """
    Format dt (default: now) as an ISO 8601 UTC string with 'Z' suffix.

    Args:
        dt: Timezone-aware datetime; converted to UTC before formatting

    Raises:
        ValueError: If dt is naive

    Example:
        >>> from datetime import datetime, timezone
        >>> utc_timestamp(datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc))
        '2026-03-14T09:26:53Z'
    """
    if dt is None:
        dt = utc_now()
    elif dt.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware (use timezone.utc)")
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
