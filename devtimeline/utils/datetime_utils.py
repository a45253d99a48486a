"""Date and time utilities.

Two timestamp readers live here on purpose:

* ``parse_session_timestamp`` normalizes first. Upstream stores session times
  as naive UTC, so a value without a zone marker is read as UTC.
* ``parse_timestamp`` does not normalize. ``created_at``/``assigned_date`` are
  read as wall-clock time in the viewer's local zone when naive.

Every "local" computation takes an explicit ``tz``; ``None`` means the zone of
the running process.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union

logger = logging.getLogger(__name__)

TimestampValue = Union[str, datetime, None]

MAX_BUSINESS_DAYS = 1000
MIN_BUSINESS_HOURS = 0.1

_ZONE_MARKER = re.compile(r'(?:[Zz]|[+-]\d{2}(?::?\d{2})?)$')
_DATE_ONLY = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def has_zone_marker(value: str) -> bool:
    """Return True if an ISO timestamp string ends with ``Z`` or a UTC offset."""
    text = value.strip()
    if _DATE_ONLY.match(text):
        return False
    # Only look past the time separator so "2024-01-15" never reads as "-15".
    if 'T' in text:
        text = text.split('T', 1)[1]
    elif ' ' in text:
        text = text.split(' ', 1)[1]
    else:
        return False
    return bool(_ZONE_MARKER.search(text))


def normalize_timestamp(value: TimestampValue) -> TimestampValue:
    """Mark a timestamp that has no zone information as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    text = str(value).strip()
    if not text:
        return None
    if has_zone_marker(text):
        return text
    if _DATE_ONLY.match(text):
        return f"{text}T00:00:00Z"
    return f"{text}Z"


def _parse_iso(text: str) -> Optional[datetime]:
    """Parse an ISO 8601 string, accepting a trailing ``Z``."""
    text = text.strip()
    if not text:
        return None
    if text[-1] in 'Zz':
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_session_timestamp(value: TimestampValue) -> Optional[datetime]:
    """Parse a session-side timestamp as an aware datetime, assuming UTC if unmarked."""
    normalized = normalize_timestamp(value)
    if normalized is None:
        return None
    if isinstance(normalized, datetime):
        return normalized
    return _parse_iso(normalized)


def parse_timestamp(value: TimestampValue, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a task-side timestamp; naive values are local wall-clock time."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = _parse_iso(str(value))
        if parsed is None:
            return None
    if parsed.tzinfo is None:
        return attach_local(parsed, tz)
    return parsed


def attach_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Interpret a naive datetime as local wall-clock time."""
    if tz is None:
        return value.astimezone()
    return value.replace(tzinfo=tz)


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert a datetime to the local zone (naive values are already local)."""
    if value.tzinfo is None:
        return attach_local(value, tz)
    return value.astimezone(tz)


def get_local_date_key(value: Union[date, datetime], tz: Optional[tzinfo] = None) -> str:
    """Format a date as YYYY-MM-DD using local calendar fields."""
    if isinstance(value, datetime):
        value = to_local(value, tz).date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def hour_of_day(value: datetime, tz: Optional[tzinfo] = None) -> float:
    """Local hour of day as a fraction, e.g. 9:30 -> 9.5."""
    local = to_local(value, tz)
    return local.hour + local.minute / 60 + local.second / 3600 + local.microsecond / 3.6e9


def at_hour(day: date, hour: float, tz: Optional[tzinfo] = None) -> datetime:
    """Aware datetime for a fractional hour on a local calendar day."""
    return attach_local(datetime.combine(day, time.min), tz) + timedelta(hours=hour)


def local_midnight(value: Union[date, datetime], tz: Optional[tzinfo] = None) -> datetime:
    """Start of the local calendar day containing ``value``."""
    if isinstance(value, datetime):
        value = to_local(value, tz).date()
    return attach_local(datetime.combine(value, time.min), tz)


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours from start to end."""
    return (end - start).total_seconds() / 3600


def calculate_business_duration(
    start: datetime,
    end: datetime,
    config,
    tz: Optional[tzinfo] = None,
) -> float:
    """Working hours between two instants, counting only each day's working window."""
    total_hours = 0.0
    current = to_local(start, tz)
    end = to_local(end, tz)

    iterations = 0
    while current < end and iterations < MAX_BUSINESS_DAYS:
        iterations += 1

        day_start = at_hour(current.date(), config.start_hour, tz)
        day_end = at_hour(current.date(), config.end_hour, tz)

        span_start = max(current, day_start)
        span_end = min(end, day_end)
        if span_start < span_end:
            total_hours += hours_between(span_start, span_end)

        next_day = at_hour(current.date() + timedelta(days=1), config.start_hour, tz)
        if next_day > end and end < day_end:
            break
        current = next_day
    else:
        if iterations >= MAX_BUSINESS_DAYS:
            logger.warning(
                "Business duration walk stopped after %d days (%s -> %s)",
                MAX_BUSINESS_DAYS, start, end,
            )

    return max(MIN_BUSINESS_HOURS, round(total_hours, 4))
