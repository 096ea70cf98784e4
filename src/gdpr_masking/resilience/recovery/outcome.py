"""Recovery – RecoveryOutcome and the retry state machine's states."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any

from gdpr_masking.application.audit.context import AuditContext, ErrorContext, OperationType


class RecoveryState(str, Enum):
    """``ATTEMPTING -> SUCCEEDED | RECOVERED | EXHAUSTED -> FALLBACK_APPLIED``."""

    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    RECOVERED = "recovered"
    EXHAUSTED = "exhausted"
    FALLBACK_APPLIED = "fallback_applied"


class RecoveryOutcomeKind(str, Enum):
    SUCCESS = "success"
    RECOVERED = "recovered"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True)
class RecoveryOutcome:
    """Result of running an operation under a recovery strategy."""

    kind: RecoveryOutcomeKind
    value: Any
    attempts: int
    elapsed_seconds: float
    last_error: BaseException | None = None

    @classmethod
    def success(cls, value: Any, elapsed_seconds: float) -> RecoveryOutcome:
        return cls(RecoveryOutcomeKind.SUCCESS, value, 1, elapsed_seconds)

    @classmethod
    def recovered(cls, value: Any, attempts: int, elapsed_seconds: float) -> RecoveryOutcome:
        return cls(RecoveryOutcomeKind.RECOVERED, value, attempts, elapsed_seconds)

    @classmethod
    def fallback(cls, value: Any, attempts: int, elapsed_seconds: float, error: BaseException) -> RecoveryOutcome:
        return cls(RecoveryOutcomeKind.FALLBACK, value, attempts, elapsed_seconds, error)

    @classmethod
    def failed(cls, value: Any, attempts: int, elapsed_seconds: float, error: BaseException) -> RecoveryOutcome:
        return cls(RecoveryOutcomeKind.FAILED, value, attempts, elapsed_seconds, error)

    @property
    def is_success(self) -> bool:
        """``True`` when the operation itself produced the value."""
        return self.kind in (RecoveryOutcomeKind.SUCCESS, RecoveryOutcomeKind.RECOVERED)

    @property
    def used_fallback(self) -> bool:
        return self.kind is RecoveryOutcomeKind.FALLBACK

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_seconds * 1000.0

    def to_audit_context(self, operation_type: OperationType = OperationType.MASKING, **metadata: Any) -> AuditContext:
        if self.kind is RecoveryOutcomeKind.SUCCESS:
            return AuditContext.success(operation_type, self.elapsed_ms, **metadata)
        if self.kind is RecoveryOutcomeKind.RECOVERED:
            return AuditContext.recovered(operation_type, self.attempts, self.elapsed_ms, **metadata)
        error = (
            ErrorContext.from_exception(self.last_error)
            if self.last_error is not None
            else ErrorContext("unknown", "no error recorded")
        )
        return AuditContext.failed(
            operation_type,
            error,
            attempt_number=self.attempts,
            duration_ms=self.elapsed_ms,
            outcome=self.kind.value,
            **metadata,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "outcome": self.kind.value,
            "attempts": self.attempts,
            "elapsed_ms": round(self.elapsed_ms, 3),
        }
        if self.last_error is not None:
            payload["error"] = ErrorContext.from_exception(self.last_error).to_dict()
        return payload


__all__ = ["RecoveryOutcome", "RecoveryOutcomeKind", "RecoveryState"]
