"""Kernel time – Clock protocol + implementations.

Rate windows work in POSIX seconds (:meth:`Clock.timestamp`); audit events
carry aware datetimes (:meth:`Clock.now`).  Both come from the same clock so
a frozen clock moves them together.
"""
from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Port: abstract clock so rate windows and audit timestamps are testable."""

    def now(self) -> datetime: ...
    def timestamp(self) -> float: ...


class SystemClock:
    """Wall clock, UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def timestamp(self) -> float:
        return time.time()


class FrozenClock:
    """Test clock that only moves when told to.

    Defaults to 2024-01-01T00:00:00Z so audit timestamps are stable.
    """

    def __init__(self, fixed: datetime | None = None) -> None:
        self._fixed = fixed or datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self._fixed

    def timestamp(self) -> float:
        return self._fixed.timestamp()

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by ``timedelta(**kwargs)`` and return the new time."""
        delta = timedelta(**kwargs)
        if delta < timedelta(0):
            raise ValueError("FrozenClock cannot move backwards")
        self._fixed += delta
        return self._fixed


__all__ = ["Clock", "FrozenClock", "SystemClock"]
