"""
Time sources for expiration checks.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

# Zero-argument callable returning the current instant as an aware UTC datetime
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """System clock in UTC."""
    return datetime.now(timezone.utc)


class FrozenClock:
    """
    Manually driven clock.

    Calling the instance returns the current frozen instant, so it can be
    passed anywhere a ``Clock`` is expected.

    Args:
        start: Initial instant. Naive datetimes are taken as UTC.
            Default: the system time at construction.

    Example:
        >>> clock = FrozenClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
        >>> guard = SignedUrlGuard("secret", clock=clock)
        >>> clock.advance(timedelta(minutes=5))
    """

    def __init__(self, start: datetime | None = None):
        self._now = _as_utc(start) if start is not None else utc_now()

    def __call__(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> None:
        self._now = self._now + delta

    def set(self, instant: datetime) -> None:
        self._now = _as_utc(instant)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)
