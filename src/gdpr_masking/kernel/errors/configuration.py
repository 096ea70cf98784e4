"""Configuration-time errors – raised while building masking components.

These are deterministic: the same input always fails the same way, so they
are surfaced to the caller and never retried.
"""

from __future__ import annotations

from typing import Any

from gdpr_masking.kernel.errors.base import MaskingError
from gdpr_masking.kernel.preview import value_preview


class MaskingConfigurationError(MaskingError):
    """Base for errors detected while constructing rules, strategies or config."""

    default_code = "masking_configuration_error"
    recoverable = False


class InvalidPatternError(MaskingConfigurationError):
    """A regular expression failed to compile or was judged ReDoS-prone."""

    default_code = "invalid_pattern"

    COMPILE_ERROR = "compile_error"
    REDOS = "redos"
    EMPTY = "empty"

    def __init__(
        self,
        pattern: str,
        classification: str,
        reason: str,
        *,
        engine_error: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.pattern = pattern
        self.classification = classification
        self.engine_error = engine_error
        detail: dict[str, Any] = {
            "pattern": pattern,
            "classification": classification,
            "reason": reason,
        }
        if engine_error is not None:
            detail["engine_error"] = engine_error
        super().__init__(f"Invalid regex pattern {pattern!r}: {reason}", detail=detail, cause=cause)

    @classmethod
    def empty(cls) -> InvalidPatternError:
        return cls("", cls.EMPTY, "pattern cannot be empty")

    @classmethod
    def compilation_failed(cls, pattern: str, error: Exception) -> InvalidPatternError:
        return cls(
            pattern,
            cls.COMPILE_ERROR,
            "pattern failed to compile",
            engine_error=str(error),
            cause=error,
        )

    @classmethod
    def redos_vulnerable(cls, pattern: str, risk: str) -> InvalidPatternError:
        return cls(pattern, cls.REDOS, f"potential catastrophic backtracking ({risk})")


class InvalidConfigurationError(MaskingConfigurationError):
    """A construction parameter is out of range, mistyped or malformed."""

    default_code = "invalid_configuration"

    def __init__(self, parameter: str, value: Any, reason: str) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(
            f"Invalid configuration for '{parameter}': {reason}",
            detail={"parameter": parameter, "value": value_preview(value), "reason": reason},
        )

    @classmethod
    def for_parameter(cls, parameter: str, value: Any, reason: str) -> InvalidConfigurationError:
        return cls(parameter, value, reason)

    @classmethod
    def empty_value(cls, parameter: str) -> InvalidConfigurationError:
        return cls(parameter, "", "cannot be empty")

    @classmethod
    def wrong_type(cls, parameter: str, value: Any, expected: str) -> InvalidConfigurationError:
        return cls(parameter, value, f"expected {expected}, got {type(value).__name__}")


class InvalidRateLimitConfigError(MaskingConfigurationError):
    """Rate limiter constructed with an invalid bound, or used with a bad key."""

    default_code = "invalid_rate_limit_config"

    def __init__(self, parameter: str, value: Any, reason: str) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(
            f"Invalid rate limit {parameter}: {reason}",
            detail={"parameter": parameter, "value": value_preview(value, limit=50), "reason": reason},
        )

    @classmethod
    def for_parameter(cls, parameter: str, value: Any, reason: str) -> InvalidRateLimitConfigError:
        return cls(parameter, value, reason)

    @classmethod
    def empty_key(cls) -> InvalidRateLimitConfigError:
        return cls("key", "", "cannot be empty")

    @classmethod
    def key_too_long(cls, key: str, max_length: int) -> InvalidRateLimitConfigError:
        return cls("key", key, f"length {len(key)} exceeds maximum of {max_length} characters")

    @classmethod
    def invalid_key_format(cls, reason: str) -> InvalidRateLimitConfigError:
        return cls("key", "<redacted>", reason)


__all__ = [
    "InvalidConfigurationError",
    "InvalidPatternError",
    "InvalidRateLimitConfigError",
    "MaskingConfigurationError",
]
