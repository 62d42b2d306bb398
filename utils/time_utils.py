"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Timezone-aware "now"
- Token expiry calculation
- Timestamp formatting for notifications
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Returns the current time as an aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def calculate_expiry(issued_at: datetime, validity_minutes: int) -> datetime:
    """
    Calculates an expiry timestamp. Validity is at least one minute.
    """
    return issued_at + timedelta(minutes=max(1, int(validity_minutes)))


def format_timestamp(dt: Optional[datetime], format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """
    Formats a datetime object to string.
    """
    if not dt:
        return "N/A"
    return dt.strftime(format_str)
