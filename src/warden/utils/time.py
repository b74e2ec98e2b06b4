"""Time utilities for Warden.

Provides timezone-aware datetime helpers used for logs and audit records.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        datetime: Current UTC time with tzinfo=UTC
    """
    return datetime.now(UTC)


def format_timestamp(dt: datetime | None = None) -> str:
    """Format a datetime as an ISO8601 UTC string with millisecond precision.

    Args:
        dt: Datetime to format. Defaults to the current UTC time.

    Returns:
        String like ``2025-01-31T12:00:00.123Z``.
    """
    value = (dt or utc_now()).astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
