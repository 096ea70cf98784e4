"""Application rate limiting – in-memory sliding-window implementation."""

from __future__ import annotations

import re
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from gdpr_masking.application.rate_limit.rate_limiter import (
    RateLimitDecision,
    RateLimiter,
    RateLimitProfile,
    RateLimitResult,
    RateLimitStats,
)
from gdpr_masking.kernel.errors import InvalidRateLimitConfigError
from gdpr_masking.kernel.time import Clock, SystemClock

MAX_EVENTS_LIMIT = 1_000_000
MAX_WINDOW_SECONDS = 86_400
MIN_CLEANUP_INTERVAL = 60
MAX_CLEANUP_INTERVAL = 604_800
DEFAULT_CLEANUP_INTERVAL = 300
MAX_KEY_LENGTH = 250

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


@dataclass
class RateWindow:
    """Per-key event log; only touched while ``lock`` is held."""

    window_start: float
    timestamps: deque[float] = field(default_factory=deque)
    burst_used: int = 0
    evicted: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def prune(self, now: float, window_seconds: float) -> None:
        horizon = now - window_seconds
        while self.timestamps and self.timestamps[0] <= horizon:
            self.timestamps.popleft()
        if not self.timestamps:
            self.burst_used = 0
            self.window_start = now


def _validate_positive(name: str, value: Any, upper: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidRateLimitConfigError.for_parameter(name, value, "must be a number")
    if value <= 0:
        raise InvalidRateLimitConfigError.for_parameter(name, value, "must be a positive number")
    if value > upper:
        raise InvalidRateLimitConfigError.for_parameter(name, value, f"cannot exceed {upper}")


def validate_key(key: Any) -> str:
    if not isinstance(key, str):
        raise InvalidRateLimitConfigError.invalid_key_format("key must be a string")
    if not key.strip():
        raise InvalidRateLimitConfigError.empty_key()
    if len(key) > MAX_KEY_LENGTH:
        raise InvalidRateLimitConfigError.key_too_long(key, MAX_KEY_LENGTH)
    if _CONTROL_CHARS.search(key):
        raise InvalidRateLimitConfigError.invalid_key_format("key cannot contain control characters")
    return key


class SlidingWindowRateLimiter(RateLimiter):
    """Admit at most ``max_events`` per trailing ``window_seconds`` per key.

    ``burst_allowance`` extra events may be admitted once the steady-state
    budget is spent; the burst budget refills when the window drains.

    Memory is bounded by a lazy sweep: at most once per ``cleanup_interval``
    seconds, an access drops every window whose events have all expired.
    """

    def __init__(
        self,
        max_events: int,
        window_seconds: float,
        *,
        burst_allowance: int = 0,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL,
        clock: Clock | None = None,
    ) -> None:
        _validate_positive("max_events", max_events, MAX_EVENTS_LIMIT)
        if not isinstance(max_events, int):
            raise InvalidRateLimitConfigError.for_parameter("max_events", max_events, "must be an integer")
        _validate_positive("window_seconds", window_seconds, MAX_WINDOW_SECONDS)
        if isinstance(burst_allowance, bool) or not isinstance(burst_allowance, int) or burst_allowance < 0:
            raise InvalidRateLimitConfigError.for_parameter(
                "burst_allowance", burst_allowance, "must be a non-negative integer"
            )
        if burst_allowance > MAX_EVENTS_LIMIT:
            raise InvalidRateLimitConfigError.for_parameter(
                "burst_allowance", burst_allowance, f"cannot exceed {MAX_EVENTS_LIMIT}"
            )
        _validate_positive("cleanup_interval", cleanup_interval, MAX_CLEANUP_INTERVAL)
        if cleanup_interval < MIN_CLEANUP_INTERVAL:
            raise InvalidRateLimitConfigError.for_parameter(
                "cleanup_interval", cleanup_interval, f"must be at least {MIN_CLEANUP_INTERVAL} seconds"
            )
        self._max_events = max_events
        self._window_seconds = float(window_seconds)
        self._burst_allowance = burst_allowance
        self._cleanup_interval = float(cleanup_interval)
        self._clock: Clock = clock or SystemClock()
        self._windows: dict[str, RateWindow] = {}
        self._registry_lock = threading.Lock()
        self._last_cleanup = self._clock.timestamp()

    @classmethod
    def from_profile(cls, profile: RateLimitProfile | str, *, clock: Clock | None = None) -> SlidingWindowRateLimiter:
        if isinstance(profile, str):
            profile = RateLimitProfile.named(profile)
        return cls(
            profile.max_events,
            profile.window_seconds,
            burst_allowance=profile.burst_allowance,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # RateLimiter
    # ------------------------------------------------------------------

    def check(self, key: str) -> RateLimitResult:
        validate_key(key)
        now = self._clock.timestamp()
        self._maybe_sweep(now)
        while True:
            window = self._window_for(key, now)
            with window.lock:
                if window.evicted:
                    continue
                window.prune(now, self._window_seconds)
                if len(window.timestamps) < self._max_events:
                    window.timestamps.append(now)
                    decision = RateLimitDecision.ALLOWED
                elif window.burst_used < self._burst_allowance:
                    window.burst_used += 1
                    window.timestamps.append(now)
                    decision = RateLimitDecision.ALLOWED
                else:
                    decision = RateLimitDecision.DENIED
                remaining = self._remaining_in(window)
                wait = self._wait_in(window, now)
            break
        return RateLimitResult(
            key=key,
            decision=decision,
            remaining=remaining,
            reset_at=datetime.fromtimestamp(now + wait, UTC),
            retry_after_seconds=0.0 if decision is RateLimitDecision.ALLOWED else wait,
        )

    def stats(self, key: str) -> RateLimitStats:
        validate_key(key)
        now = self._clock.timestamp()
        with self._registry_lock:
            window = self._windows.get(key)
        if window is None:
            return self._stats(key, 0, self._max_events + self._burst_allowance, 0.0, 0)
        with window.lock:
            window.prune(now, self._window_seconds)
            return self._stats(
                key,
                len(window.timestamps),
                self._remaining_in(window),
                self._wait_in(window, now),
                window.burst_used,
            )

    def clear(self, key: str) -> None:
        validate_key(key)
        with self._registry_lock:
            window = self._windows.pop(key, None)
        if window is not None:
            with window.lock:
                window.evicted = True

    def clear_all(self) -> None:
        with self._registry_lock:
            windows = list(self._windows.values())
            self._windows.clear()
        for window in windows:
            with window.lock:
                window.evicted = True

    def memory_stats(self) -> dict[str, Any]:
        with self._registry_lock:
            windows = list(self._windows.values())
            last_cleanup = self._last_cleanup
        return {
            "total_keys": len(windows),
            "total_timestamps": sum(len(w.timestamps) for w in windows),
            "last_cleanup": last_cleanup,
            "cleanup_interval": self._cleanup_interval,
        }

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _window_for(self, key: str, now: float) -> RateWindow:
        with self._registry_lock:
            window = self._windows.get(key)
            if window is None:
                window = RateWindow(window_start=now)
                self._windows[key] = window
            return window

    def _maybe_sweep(self, now: float) -> None:
        with self._registry_lock:
            if now - self._last_cleanup < self._cleanup_interval:
                return
            self._last_cleanup = now
            for key, window in list(self._windows.items()):
                with window.lock:
                    window.prune(now, self._window_seconds)
                    if not window.timestamps:
                        window.evicted = True
                        del self._windows[key]

    def _remaining_in(self, window: RateWindow) -> int:
        steady = max(0, self._max_events - len(window.timestamps))
        return steady + (self._burst_allowance - window.burst_used)

    def _wait_in(self, window: RateWindow, now: float) -> float:
        if not window.timestamps:
            return 0.0
        return max(0.0, window.timestamps[0] + self._window_seconds - now)

    def _stats(self, key: str, current: int, remaining: int, wait: float, burst_used: int) -> RateLimitStats:
        return RateLimitStats(
            key=key,
            current_events=current,
            remaining=remaining,
            time_until_reset=wait,
            burst_used=burst_used,
            max_events=self._max_events,
            window_seconds=self._window_seconds,
            burst_allowance=self._burst_allowance,
        )


__all__ = ["MAX_KEY_LENGTH", "RateWindow", "SlidingWindowRateLimiter", "validate_key"]
