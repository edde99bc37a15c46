"""
Timezone Utilities.

Every stored timestamp (audit entries, document metadata) is UTC, written
as ISO 8601 with millisecond precision and a Z suffix:

    "2024-01-15T14:30:00.000Z"
"""

from datetime import datetime, timezone

# UTC constant
UTC = timezone.utc


def utc_now() -> datetime:
    """
    Get current time in UTC (timezone-aware).

    Always use this instead of datetime.utcnow() which returns
    naive datetime.
    """
    return datetime.now(UTC)


def to_iso8601(dt: datetime) -> str:
    """
    Format as ISO 8601 with milliseconds and Z suffix.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    utc_dt = dt.astimezone(UTC)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_dt.microsecond // 1000:03d}Z"

