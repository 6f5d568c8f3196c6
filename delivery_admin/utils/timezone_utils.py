"""
Timezone utility functions for the delivery admin backend.

Scheduled delivery times are entered as wall clock times in the reference
timezone (configurable, default Asia/Riyadh), stored as UTC instants and
rendered back in the reference timezone.
"""

from datetime import datetime, timezone
import pytz
from flask import current_app, has_app_context
from typing import Optional, Union

DEFAULT_REFERENCE_TIMEZONE = "Asia/Riyadh"


def get_reference_timezone() -> str:
    """Name of the timezone admins enter scheduled times in."""
    if has_app_context():
        return current_app.config.get('REFERENCE_TIMEZONE', DEFAULT_REFERENCE_TIMEZONE)
    return DEFAULT_REFERENCE_TIMEZONE


def utc_now() -> datetime:
    """
    Get current time in UTC.

    Returns:
        Current datetime in UTC
    """
    return datetime.now(timezone.utc)


def parse_datetime_string(dt_string: str) -> datetime:
    """
    Parse an ISO 8601 string into a datetime, keeping any offset it carries.

    Raises:
        ValueError: if the string is empty or not ISO formatted
    """
    if not dt_string or not isinstance(dt_string, str):
        raise ValueError("Datetime value is required")
    return datetime.fromisoformat(dt_string.strip().replace('Z', '+00:00'))


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Return an aware UTC datetime.

    Naive values are treated as UTC; that is how they come back from
    databases that do not keep the offset (SQLite).
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def convert_reference_to_utc(value: Union[datetime, str]) -> datetime:
    """
    Normalise a scheduled time to a UTC instant.

    Args:
        value: datetime or ISO string. Without an offset it is read as a wall
            clock time in the reference timezone; with an offset it is
            converted as-is.

    Returns:
        Aware datetime in UTC
    """
    if isinstance(value, str):
        value = parse_datetime_string(value)
    elif not isinstance(value, datetime):
        raise TypeError(f"Expected a datetime or ISO string, got {type(value).__name__}")

    if value.tzinfo is None:
        reference_tz = pytz.timezone(get_reference_timezone())
        value = reference_tz.localize(value, is_dst=None)

    return value.astimezone(timezone.utc)


def convert_utc_to_reference(utc_dt: datetime) -> datetime:
    """Convert a stored UTC datetime to the reference timezone."""
    reference_tz = pytz.timezone(get_reference_timezone())
    return ensure_utc(utc_dt).astimezone(reference_tz)


def format_datetime_for_api(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a stored datetime for API responses, in the reference timezone
    with its offset (e.g. 2025-03-01T09:00:00+03:00).
    """
    if dt is None:
        return None
    return convert_utc_to_reference(dt).isoformat()
