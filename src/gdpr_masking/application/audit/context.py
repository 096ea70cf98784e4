"""Audit – structured operation and error contexts.

:class:`ErrorContext` strips credentials, connection-string secrets and
system paths from exception messages before they reach any audit record.
"""
from __future__ import annotations

import dataclasses
import re
import uuid
from enum import Enum
from typing import Any


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    RECOVERED = "recovered"
    SKIPPED = "skipped"


class OperationType(str, Enum):
    REGEX = "regex"
    FIELD_PATH = "field_path"
    CALLBACK = "callback"
    DATA_TYPE = "data_type"
    JSON = "json"
    CONDITIONAL = "conditional"
    MASKING = "masking"


_SANITIZERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"password[=:]\s*[^\s,;]+", re.IGNORECASE), "password=[REDACTED]"),
    (re.compile(r"secret[=:]\s*[^\s,;]+", re.IGNORECASE), "secret=[REDACTED]"),
    (re.compile(r"api[_-]?key[=:]\s*[^\s,;]+", re.IGNORECASE), "api_key=[REDACTED]"),
    (re.compile(r"token[=:]\s*[^\s,;]+", re.IGNORECASE), "token=[REDACTED]"),
    (re.compile(r"bearer\s+\S+", re.IGNORECASE), "bearer [REDACTED]"),
    (re.compile(r"://([^:/@\s]+):[^@\s]+@"), r"://\1:[REDACTED]@"),
    (re.compile(r"user[=:]\s*[^\s,;@]+", re.IGNORECASE), "user=[REDACTED]"),
    (re.compile(r"host[=:]\s*[^\s,;]+", re.IGNORECASE), "host=[REDACTED]"),
    (re.compile(r"/(?:var|home|etc|usr|opt|root|tmp)/[^\s:]+"), "/[PATH_REDACTED]"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _SANITIZERS:
        message = pattern.sub(replacement, message)
    return message


def new_correlation_id() -> str:
    return uuid.uuid4().hex


@dataclasses.dataclass(frozen=True)
class ErrorContext:
    """Sanitised description of an exception."""

    error_type: str
    message: str
    code: str | None = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: BaseException, **metadata: Any) -> ErrorContext:
        code = getattr(exc, "code", None)
        text = getattr(exc, "message", None) or str(exc)
        return cls(
            error_type=type(exc).__name__,
            message=sanitize_message(str(text)),
            code=code if isinstance(code, str) else None,
            metadata=dict(metadata),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error_type": self.error_type, "message": self.message}
        if self.code is not None:
            payload["code"] = self.code
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


@dataclasses.dataclass(frozen=True)
class AuditContext:
    """Outcome of one masking operation, ready for an audit record."""

    operation_type: OperationType
    status: AuditStatus
    correlation_id: str = dataclasses.field(default_factory=new_correlation_id)
    attempt_number: int = 1
    duration_ms: float = 0.0
    error: ErrorContext | None = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    @classmethod
    def success(cls, operation_type: OperationType, duration_ms: float = 0.0, **metadata: Any) -> AuditContext:
        return cls(operation_type, AuditStatus.SUCCESS, duration_ms=duration_ms, metadata=metadata)

    @classmethod
    def failed(
        cls,
        operation_type: OperationType,
        error: BaseException | ErrorContext,
        attempt_number: int = 1,
        duration_ms: float = 0.0,
        **metadata: Any,
    ) -> AuditContext:
        if isinstance(error, BaseException):
            error = ErrorContext.from_exception(error)
        return cls(
            operation_type,
            AuditStatus.FAILED,
            attempt_number=attempt_number,
            duration_ms=duration_ms,
            error=error,
            metadata=metadata,
        )

    @classmethod
    def recovered(
        cls,
        operation_type: OperationType,
        attempt_number: int,
        duration_ms: float = 0.0,
        **metadata: Any,
    ) -> AuditContext:
        return cls(
            operation_type,
            AuditStatus.RECOVERED,
            attempt_number=attempt_number,
            duration_ms=duration_ms,
            metadata=metadata,
        )

    @classmethod
    def skipped(cls, operation_type: OperationType, reason: str, **metadata: Any) -> AuditContext:
        return cls(operation_type, AuditStatus.SKIPPED, metadata={"reason": reason, **metadata})

    @property
    def is_success(self) -> bool:
        return self.status in (AuditStatus.SUCCESS, AuditStatus.RECOVERED)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "operation_type": self.operation_type.value,
            "status": self.status.value,
            "correlation_id": self.correlation_id,
            "attempt_number": self.attempt_number,
            "duration_ms": round(self.duration_ms, 3),
        }
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


__all__ = [
    "AuditContext",
    "AuditStatus",
    "ErrorContext",
    "OperationType",
    "new_correlation_id",
    "sanitize_message",
]
