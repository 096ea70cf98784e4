"""Application rate limiting – RateLimiter port, decisions and profiles."""
from __future__ import annotations

import abc
import dataclasses
from datetime import datetime
from enum import Enum
from typing import ClassVar

from gdpr_masking.kernel.errors import InvalidRateLimitConfigError, RateLimitExceededError


class RateLimitDecision(str, Enum):
    ALLOWED = "ALLOWED"
    DENIED = "DENIED"


@dataclasses.dataclass(frozen=True)
class RateLimitProfile:
    """Named ``max_events`` per ``window_seconds`` preset."""

    name: str
    max_events: int
    window_seconds: float
    burst_allowance: int = 0

    PRESETS: ClassVar[dict[str, tuple[int, int]]] = {
        "strict": (50, 60),
        "default": (100, 60),
        "relaxed": (200, 60),
        "testing": (1000, 60),
    }

    @property
    def window_label(self) -> str:
        return f"{self.max_events} events/{self.window_seconds:g}s"

    @classmethod
    def named(cls, name: str) -> RateLimitProfile:
        try:
            max_events, window = cls.PRESETS[name]
        except KeyError:
            raise InvalidRateLimitConfigError.for_parameter(
                "profile", name, f"unknown profile; expected one of {sorted(cls.PRESETS)}"
            ) from None
        return cls(name, max_events, window)


@dataclasses.dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check."""

    key: str
    decision: RateLimitDecision
    remaining: int
    reset_at: datetime
    retry_after_seconds: float

    @property
    def allowed(self) -> bool:
        return self.decision == RateLimitDecision.ALLOWED


@dataclasses.dataclass(frozen=True)
class RateLimitStats:
    key: str
    current_events: int
    remaining: int
    time_until_reset: float
    burst_used: int
    max_events: int
    window_seconds: float
    burst_allowance: int


class RateLimiter(abc.ABC):
    """Port: admit or refuse keyed events.

    Only :meth:`check` is abstract; the remaining queries have a default
    implementation on top of :meth:`stats`.
    """

    @abc.abstractmethod
    def check(self, key: str) -> RateLimitResult:
        """Record an attempt for *key* and decide whether it is admitted."""

    @abc.abstractmethod
    def stats(self, key: str) -> RateLimitStats: ...

    @abc.abstractmethod
    def clear(self, key: str) -> None: ...

    def is_allowed(self, key: str) -> bool:
        return self.check(key).allowed

    def acquire(self, key: str) -> RateLimitResult:
        """Like :meth:`check` but raise :class:`RateLimitExceededError` on denial."""
        result = self.check(key)
        if not result.allowed:
            raise RateLimitExceededError(key, result.retry_after_seconds)
        return result

    def remaining(self, key: str) -> int:
        return self.stats(key).remaining

    def time_until_reset(self, key: str) -> float:
        return self.stats(key).time_until_reset


__all__ = [
    "RateLimitDecision",
    "RateLimitProfile",
    "RateLimitResult",
    "RateLimitStats",
    "RateLimiter",
]
