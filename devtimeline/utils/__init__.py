"""Utility functions."""

from .config import load_config, get_default_config
from .datetime_utils import (
    calculate_business_duration,
    get_local_date_key,
    normalize_timestamp,
    parse_session_timestamp,
    parse_timestamp,
)
from .duration import format_duration, parse_duration_to_hours

__all__ = [
    'load_config',
    'get_default_config',
    'calculate_business_duration',
    'get_local_date_key',
    'normalize_timestamp',
    'parse_session_timestamp',
    'parse_timestamp',
    'format_duration',
    'parse_duration_to_hours',
]
