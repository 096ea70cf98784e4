"""Application rate limiting – gates audit emission, never masking itself."""
from gdpr_masking.application.rate_limit.rate_limiter import (
    RateLimitDecision,
    RateLimiter,
    RateLimitProfile,
    RateLimitResult,
    RateLimitStats,
)
from gdpr_masking.application.rate_limit.sliding_window import RateWindow, SlidingWindowRateLimiter

__all__ = [
    "RateLimitDecision",
    "RateLimitProfile",
    "RateLimitResult",
    "RateLimitStats",
    "RateLimiter",
    "RateWindow",
    "SlidingWindowRateLimiter",
]
