"""Time helpers for feed dates and trend ages."""

import email.utils
from datetime import datetime, timezone
from typing import Optional

from trendfeed.core.logging import get_logger

logger = get_logger(__name__)

ISO_FORMATS = (
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%dT%H:%M:%S.%f%z',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d',
)


def utc_now() -> datetime:
    """Get current time in UTC."""
    return datetime.now(timezone.utc)


def parse_feed_date(date_string: Optional[str]) -> Optional[datetime]:
    """
    Parse a feed date string into an aware UTC datetime.

    RSS feeds use RFC 2822 dates; ISO 8601 is accepted as a fallback.
    Returns None when the string cannot be parsed.
    """
    if not date_string:
        return None

    date_string = date_string.strip()

    try:
        dt = email.utils.parsedate_to_datetime(date_string)
    except (ValueError, TypeError, IndexError):
        dt = _try_iso_formats(date_string)

    if dt is None:
        logger.warning(f"Could not parse date: {date_string}")
        return None

    return normalize_timezone(dt)


def _try_iso_formats(date_string: str) -> Optional[datetime]:
    """Try ISO 8601 style formats."""
    if date_string.endswith('Z'):
        date_string = date_string[:-1] + '+00:00'

    for fmt in ISO_FORMATS:
        try:
            return datetime.strptime(date_string, fmt)
        except ValueError:
            continue

    return None


def normalize_timezone(dt: datetime, target_tz: timezone = timezone.utc) -> datetime:
    """Convert to target timezone, assuming UTC for naive datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(target_tz)


def hours_between(earlier: datetime, later: datetime) -> float:
    """Elapsed hours from earlier to later."""
    return (normalize_timezone(later) - normalize_timezone(earlier)).total_seconds() / 3600


def hours_since(dt: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """Whole hours elapsed since dt, rounded to the nearest hour."""
    if dt is None:
        return None

    return round(hours_between(dt, now or utc_now()))


def format_last_updated(dt: Optional[datetime]) -> str:
    """Human readable timestamp for the landing page."""
    if dt is None:
        return "Never"
    return normalize_timezone(dt).strftime('%Y-%m-%d %H:%M:%S %Z')
