"""Shared fixtures for urlguard tests."""

from datetime import datetime, timezone

import pytest

from urlguard import FrozenClock, SignedUrlGuard, load_options

# 2024-01-01T12:00:00Z
T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
T0_UNIX = 1704110400


@pytest.fixture
def clock():
    """Clock frozen at T0."""
    return FrozenClock(T0)


@pytest.fixture
def guard(clock):
    """Guard with the sample secret and a frozen clock."""
    return SignedUrlGuard("MySecret", clock=clock)


@pytest.fixture(autouse=True)
def reset_options_cache():
    """Options loaded from the environment must not leak between tests."""
    load_options.cache_clear()
    yield
    load_options.cache_clear()
