"""Resilience recovery – retry, failure modes and fallback values."""
from gdpr_masking.resilience.recovery.failure_mode import FailureMode
from gdpr_masking.resilience.recovery.fallback import FallbackMaskStrategy
from gdpr_masking.resilience.recovery.outcome import RecoveryOutcome, RecoveryOutcomeKind, RecoveryState
from gdpr_masking.resilience.recovery.strategy import RecoveryStrategy, RetryStrategy, is_recoverable

__all__ = [
    "FailureMode",
    "FallbackMaskStrategy",
    "RecoveryOutcome",
    "RecoveryOutcomeKind",
    "RecoveryState",
    "RecoveryStrategy",
    "RetryStrategy",
    "is_recoverable",
]
