"""Shared fixtures."""

from datetime import date, datetime, timezone

import pytest

from devtimeline.models.task import CompanyConfig

DAY = date(2024, 3, 11)


def at(hour: int, minute: int = 0, day: int = 0) -> datetime:
    """Aware UTC datetime on DAY (+ ``day`` days)."""
    return datetime(2024, 3, 11 + day, hour, minute, tzinfo=timezone.utc)


def iso(hour: int, minute: int = 0, day: int = 0) -> str:
    return at(hour, minute, day).isoformat()


@pytest.fixture
def config():
    return CompanyConfig(start_hour=10, end_hour=19)
