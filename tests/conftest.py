"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest  # type: ignore[import-not-found]

CDT = timezone(timedelta(hours=-5))


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "known_limitation: Documents unsupported behavior")


class FakeClock:
    """Clock returning a fixed instant that tests advance by hand."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: Any) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at 06-24-2022 16:55:46 (UTC-05:00), a Friday."""
    return FakeClock(datetime(2022, 6, 24, 16, 55, 46, tzinfo=CDT))
