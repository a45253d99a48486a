"""Duration parsing and formatting."""

import math
from typing import Optional, Union

DurationValue = Union[int, float, str, None]


def _split_clock(value: str) -> Optional[tuple[float, float]]:
    """Split an "H:MM" string into (hours, minutes), or None if malformed."""
    parts = value.strip().split(':')
    if len(parts) != 2:
        return None
    try:
        hours = float(parts[0])
        minutes = float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(hours) and math.isfinite(minutes)):
        return None
    return hours, minutes


def parse_duration_to_hours(value: DurationValue) -> float:
    """Parse an hour count or an "H:MM" string into fractional hours.

    Empty or unparseable input yields 0. Plain numbers are not rounded.
    """
    if value is None or value == '' or isinstance(value, bool):
        return 0.0

    if isinstance(value, str) and ':' in value:
        clock = _split_clock(value)
        if clock is None:
            return 0.0
        hours, minutes = clock
        total = hours + minutes / 60
    else:
        try:
            total = float(value)
        except (TypeError, ValueError):
            return 0.0

    if not math.isfinite(total) or total < 0:
        return 0.0
    return total


def _format_minutes(total_minutes: int) -> str:
    """Render a whole number of minutes."""
    if total_minutes == 60:
        return "1 hr"
    if total_minutes < 60:
        return f"{total_minutes} min"

    if total_minutes % 60 == 0:
        whole = total_minutes // 60
        return f"{whole} hr{'s' if whole > 1 else ''}"

    return f"{total_minutes // 60} hr {total_minutes % 60} min"


def format_duration(hours: DurationValue) -> str:
    """Format fractional hours (or "H:MM") for display, e.g. "1 hr 30 min"."""
    if not hours:
        return "0 min"

    if isinstance(hours, str) and ':' in hours:
        clock = _split_clock(hours)
        if clock is None:
            return "0 min"
        h, m = clock
        return _format_minutes(int(round(h * 60 + m)))

    try:
        value = float(hours)
    except (TypeError, ValueError):
        return "0 min"
    if not math.isfinite(value):
        return "0 min"

    return _format_minutes(int(round(value * 60)))
