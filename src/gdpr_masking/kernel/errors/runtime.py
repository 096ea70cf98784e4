"""Runtime errors – raised while a masking call is in progress."""

from __future__ import annotations

from typing import Any

from gdpr_masking.kernel.errors.base import MaskingError
from gdpr_masking.kernel.preview import value_preview


class MaskingRuntimeError(MaskingError):
    """Base for failures that happen during ``process`` rather than at setup."""

    default_code = "masking_runtime_error"


class MaskingOperationFailedError(MaskingRuntimeError):
    """A strategy's ``apply`` raised.

    Carries the operation kind, the field path and a redacted preview of the
    value being masked; the raw value itself is never stored.
    """

    default_code = "masking_operation_failed"

    def __init__(
        self,
        operation: str,
        path: str,
        value: Any,
        reason: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        self.operation = operation
        self.path = path
        self.value_preview = value_preview(value)
        super().__init__(
            f"Masking operation '{operation}' failed at '{path}': {reason}",
            detail={
                "operation": operation,
                "path": path,
                "value_preview": self.value_preview,
                "reason": reason,
            },
            cause=cause,
        )

    @classmethod
    def regex_failed(cls, pattern: str, value: Any, error: Exception, path: str = "") -> MaskingOperationFailedError:
        return cls("regex", path, value, f"pattern {pattern!r}: {error}", cause=error)

    @classmethod
    def field_path_failed(cls, path: str, value: Any, error: Exception) -> MaskingOperationFailedError:
        return cls("field_path", path, value, str(error), cause=error)

    @classmethod
    def callback_failed(cls, path: str, value: Any, error: Exception) -> MaskingOperationFailedError:
        return cls("callback", path, value, str(error), cause=error)

    @classmethod
    def data_type_failed(cls, data_type: str, path: str, value: Any, error: Exception) -> MaskingOperationFailedError:
        return cls("data_type", path, value, f"{data_type}: {error}", cause=error)

    @classmethod
    def strategy_failed(cls, strategy: str, path: str, value: Any, error: Exception) -> MaskingOperationFailedError:
        return cls("strategy", path, value, f"strategy '{strategy}' failed: {error}", cause=error)

    @classmethod
    def json_failed(cls, fragment: str, error: Exception) -> MaskingOperationFailedError:
        return cls("json", "", fragment, str(error), cause=error)


class RecursionDepthExceededError(MaskingRuntimeError):
    """The depth guard or the circular-structure guard tripped."""

    default_code = "recursion_depth_exceeded"
    recoverable = False

    def __init__(self, path: str, current_depth: int, max_depth: int, reason: str) -> None:
        self.path = path
        self.current_depth = current_depth
        self.max_depth = max_depth
        super().__init__(
            f"Recursion guard tripped at '{path}': {reason}",
            detail={
                "path": path,
                "current_depth": current_depth,
                "max_depth": max_depth,
                "reason": reason,
            },
        )

    @classmethod
    def depth_exceeded(cls, path: str, current_depth: int, max_depth: int) -> RecursionDepthExceededError:
        return cls(path, current_depth, max_depth, f"depth {current_depth} reached limit {max_depth}")

    @classmethod
    def circular_reference(cls, path: str, current_depth: int, max_depth: int) -> RecursionDepthExceededError:
        return cls(path, current_depth, max_depth, "container references one of its ancestors")


class RateLimitExceededError(MaskingRuntimeError):
    """A keyed operation was refused by the rate limiter."""

    default_code = "rate_limit_exceeded"

    def __init__(self, key: str, retry_after_seconds: float) -> None:
        self.key = key
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Rate limit exceeded for '{key}'; retry after {retry_after_seconds:.1f}s",
            detail={"key": key, "retry_after_seconds": retry_after_seconds},
        )


class AuditLoggingError(MaskingRuntimeError):
    """The audit sink raised; contained and never allowed to abort masking."""

    default_code = "audit_logging_failed"

    def __init__(self, path: str, reason: str, *, cause: BaseException | None = None) -> None:
        self.path = path
        super().__init__(
            f"Audit logging failed for '{path}': {reason}",
            detail={"path": path, "reason": reason},
            cause=cause,
        )

    @classmethod
    def callback_failed(cls, path: str, error: Exception) -> AuditLoggingError:
        return cls(path, f"{type(error).__name__}: {error}", cause=error)


__all__ = [
    "AuditLoggingError",
    "MaskingOperationFailedError",
    "MaskingRuntimeError",
    "RateLimitExceededError",
    "RecursionDepthExceededError",
]
