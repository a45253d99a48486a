"""Tests for timestamp normalization and business-hour arithmetic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import at
from devtimeline.utils.datetime_utils import (
    calculate_business_duration,
    get_local_date_key,
    has_zone_marker,
    hour_of_day,
    normalize_timestamp,
    parse_session_timestamp,
    parse_timestamp,
)

IST = timezone(timedelta(hours=5, minutes=30))


class TestNormalizeTimestamp:
    def test_appends_z_to_naive(self):
        assert normalize_timestamp("2024-03-11T10:00:00") == "2024-03-11T10:00:00Z"

    def test_keeps_z(self):
        assert normalize_timestamp("2024-03-11T10:00:00Z") == "2024-03-11T10:00:00Z"

    def test_keeps_offsets(self):
        assert normalize_timestamp("2024-03-11T10:00:00+05:30") == "2024-03-11T10:00:00+05:30"
        assert normalize_timestamp("2024-03-11T10:00:00-04:00") == "2024-03-11T10:00:00-04:00"

    def test_date_only(self):
        assert normalize_timestamp("2024-03-11") == "2024-03-11T00:00:00Z"
        assert not has_zone_marker("2024-03-11")

    def test_empty(self):
        assert normalize_timestamp(None) is None
        assert normalize_timestamp("  ") is None

    def test_naive_datetime_becomes_utc(self):
        value = normalize_timestamp(datetime(2024, 3, 11, 10))
        assert value.tzinfo is timezone.utc


class TestParsing:
    def test_session_timestamp_assumed_utc(self):
        assert parse_session_timestamp("2024-03-11T10:00:00") == at(10)

    def test_session_timestamp_with_fraction(self):
        assert parse_session_timestamp("2024-03-11T10:00:00.500Z") == at(10) + timedelta(milliseconds=500)

    def test_session_timestamp_garbage(self):
        assert parse_session_timestamp("yesterday-ish") is None

    def test_task_timestamp_is_local_when_naive(self):
        parsed = parse_timestamp("2024-03-11T10:00:00", IST)
        assert parsed.utcoffset() == timedelta(hours=5, minutes=30)
        assert parsed.hour == 10

    def test_task_timestamp_keeps_offset(self):
        assert parse_timestamp("2024-03-11T10:00:00Z", IST) == at(10)

    def test_task_timestamp_garbage(self):
        assert parse_timestamp("not a date", IST) is None
        assert parse_timestamp(None, IST) is None


class TestLocalCalendar:
    def test_date_key_uses_local_fields(self):
        # 22:00 UTC is already the next morning in IST
        assert get_local_date_key(datetime(2024, 3, 10, 22, tzinfo=timezone.utc), IST) == "2024-03-11"
        assert get_local_date_key(datetime(2024, 3, 10, 22, tzinfo=timezone.utc), timezone.utc) == "2024-03-10"

    def test_date_key_for_date(self):
        assert get_local_date_key(date(2024, 1, 5)) == "2024-01-05"

    def test_hour_of_day(self):
        assert hour_of_day(at(4, 30), IST) == 10.0
        assert hour_of_day(at(9, 45), timezone.utc) == 9.75

    def test_hour_of_day_keeps_microseconds(self):
        value = at(9, 45) + timedelta(seconds=1, microseconds=500000)
        assert hour_of_day(value, timezone.utc) == pytest.approx(9.75 + 1.5 / 3600, abs=1e-12)


class TestBusinessDuration:
    def test_same_day(self, config):
        assert calculate_business_duration(at(11), at(15), config, timezone.utc) == 4.0

    def test_across_days(self, config):
        assert calculate_business_duration(at(17), at(12, day=1), config, timezone.utc) == 4.0

    def test_evening_start(self, config):
        assert calculate_business_duration(at(20), at(11, day=1), config, timezone.utc) == 1.0

    def test_clips_to_window(self, config):
        assert calculate_business_duration(at(8), at(21), config, timezone.utc) == 9.0

    def test_floor(self, config):
        assert calculate_business_duration(at(8), at(9), config, timezone.utc) == 0.1
        assert calculate_business_duration(at(12), at(11), config, timezone.utc) == 0.1

    def test_long_span_terminates(self, config):
        hours = calculate_business_duration(at(10), at(10) + timedelta(days=5000), config, timezone.utc)
        assert hours == pytest.approx(1000 * 9, rel=0.01)
