"""Recovery – RecoveryStrategy port and the tenacity-backed RetryStrategy.

:meth:`RetryStrategy.execute` is a small state machine::

    ATTEMPTING -> SUCCEEDED          first attempt returned
               -> RECOVERED          a later attempt returned
               -> EXHAUSTED          attempts used up, or a non-recoverable error
                  -> FALLBACK_APPLIED

and always returns a :class:`RecoveryOutcome`; the operation's exception is
never propagated.
"""
from __future__ import annotations

import abc
import time
from typing import Any, Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_none,
    wait_random,
)

from gdpr_masking.application.audit.emitter import AuditEmitter
from gdpr_masking.application.audit.events import AuditEvent, AuditTag
from gdpr_masking.kernel.errors import InvalidConfigurationError
from gdpr_masking.observability.logging import get_logger
from gdpr_masking.resilience.recovery.failure_mode import FailureMode
from gdpr_masking.resilience.recovery.fallback import FallbackMaskStrategy
from gdpr_masking.resilience.recovery.outcome import RecoveryOutcome, RecoveryState

logger = get_logger(__name__)

MAX_ATTEMPTS_LIMIT = 10


def is_recoverable(exc: BaseException) -> bool:
    """False when *exc*, or anything in its cause chain, is flagged non-recoverable."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if not getattr(current, "recoverable", True):
            return False
        seen.add(id(current))
        current = current.__cause__
    return True


class RecoveryStrategy(abc.ABC):
    """Port: run a masking operation and always produce a usable value."""

    @property
    @abc.abstractmethod
    def failure_mode(self) -> FailureMode: ...

    @abc.abstractmethod
    def execute(
        self,
        operation: Callable[[], Any],
        original_value: Any,
        path: str,
        audit: AuditEmitter | None = None,
    ) -> RecoveryOutcome: ...

    def is_recoverable(self, exc: BaseException) -> bool:
        return is_recoverable(exc)


class RetryStrategy(RecoveryStrategy):
    """Retry with exponential backoff, then fall back per :class:`FailureMode`.

    The delay before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)``
    capped at ``max_delay``, plus up to ``jitter * base_delay`` of random
    spread.

    Parameters
    ----------
    max_attempts:
        Total attempts including the first (1..10).
    base_delay, max_delay:
        Backoff bounds in seconds.
    failure_mode:
        Resolution once attempts are exhausted.  Defaults to ``FAIL_SAFE``.
    fallback:
        Resolves fallback values; defaults to :meth:`FallbackMaskStrategy.default`.
    fallback_mask:
        Fixed literal used instead of ``fallback`` under ``FAIL_SAFE`` and
        ``FAIL_CLOSED``.
    sleep:
        Injected sleep function; tests pass a recorder.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.01,
        max_delay: float = 0.1,
        failure_mode: FailureMode = FailureMode.FAIL_SAFE,
        *,
        fallback: FallbackMaskStrategy | None = None,
        fallback_mask: str | None = None,
        jitter: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or not 1 <= max_attempts <= MAX_ATTEMPTS_LIMIT:
            raise InvalidConfigurationError.for_parameter(
                "max_attempts", max_attempts, f"must be an integer between 1 and {MAX_ATTEMPTS_LIMIT}"
            )
        if base_delay < 0 or max_delay < 0:
            raise InvalidConfigurationError.for_parameter("base_delay", base_delay, "delays cannot be negative")
        if base_delay > max_delay:
            raise InvalidConfigurationError.for_parameter("base_delay", base_delay, "cannot exceed max_delay")
        if not 0.0 <= jitter <= 1.0:
            raise InvalidConfigurationError.for_parameter("jitter", jitter, "must be between 0 and 1")
        if not isinstance(failure_mode, FailureMode):
            raise InvalidConfigurationError.wrong_type("failure_mode", failure_mode, "FailureMode")
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._failure_mode = failure_mode
        self._fallback = fallback or FallbackMaskStrategy.default()
        self._fallback_mask = fallback_mask
        self._jitter = jitter
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> RetryStrategy:
        return cls()

    @classmethod
    def no_retry(cls, failure_mode: FailureMode = FailureMode.FAIL_SAFE) -> RetryStrategy:
        return cls(max_attempts=1, failure_mode=failure_mode)

    @classmethod
    def fast(cls) -> RetryStrategy:
        return cls(max_attempts=2, base_delay=0.005, max_delay=0.02)

    @classmethod
    def thorough(cls) -> RetryStrategy:
        return cls(max_attempts=5, base_delay=0.02, max_delay=0.5)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def failure_mode(self) -> FailureMode:
        return self._failure_mode

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def delay_for(self, attempt: int) -> float:
        """Backoff (without jitter) slept after failed attempt number *attempt*."""
        return min(self._base_delay * 2 ** (attempt - 1), self._max_delay)

    def configuration(self) -> dict[str, Any]:
        return {
            "max_attempts": self._max_attempts,
            "base_delay": self._base_delay,
            "max_delay": self._max_delay,
            "failure_mode": self._failure_mode.value,
            "fallback_mask": self._fallback_mask,
            "jitter": self._jitter,
        }

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(
        self,
        operation: Callable[[], Any],
        original_value: Any,
        path: str,
        audit: AuditEmitter | None = None,
    ) -> RecoveryOutcome:
        attempts = 0
        state = RecoveryState.ATTEMPTING
        started = time.perf_counter()

        def _attempt() -> Any:
            nonlocal attempts
            attempts += 1
            return operation()

        try:
            value = self._build_retrying(path, audit)(_attempt)
        except Exception as exc:
            state = RecoveryState.EXHAUSTED
            last_error: BaseException = exc
        else:
            state = RecoveryState.SUCCEEDED if attempts == 1 else RecoveryState.RECOVERED
            elapsed = time.perf_counter() - started
            if state is RecoveryState.SUCCEEDED:
                return RecoveryOutcome.success(value, elapsed)
            return RecoveryOutcome.recovered(value, attempts, elapsed)

        fallback_value = self._resolve_fallback(original_value)
        state = RecoveryState.FALLBACK_APPLIED
        elapsed = time.perf_counter() - started
        logger.warning(
            "recovery.fallback",
            path=path,
            attempts=attempts,
            failure_mode=self._failure_mode.value,
            state=state.value,
            error=type(last_error).__name__,
        )
        if audit is not None:
            audit.emit(
                AuditEvent.notice(
                    AuditTag.RECOVERY_FALLBACK,
                    path,
                    f"{self._failure_mode.value} after {attempts} attempt(s): {type(last_error).__name__}",
                    clock=audit.clock,
                )
            )
        if self._failure_mode is FailureMode.FAIL_OPEN:
            return RecoveryOutcome.failed(fallback_value, attempts, elapsed, last_error)
        return RecoveryOutcome.fallback(fallback_value, attempts, elapsed, last_error)

    def _resolve_fallback(self, original_value: Any) -> Any:
        if self._fallback_mask is not None and self._failure_mode is not FailureMode.FAIL_OPEN:
            return self._fallback_mask
        return self._fallback.fallback_for(original_value, self._failure_mode)

    def _build_retrying(self, path: str, audit: AuditEmitter | None) -> Retrying:
        wait = (
            wait_exponential(multiplier=self._base_delay, max=self._max_delay)
            if self._base_delay > 0
            else wait_none()
        )
        if self._jitter > 0 and self._base_delay > 0:
            wait = wait + wait_random(0, self._base_delay * self._jitter)

        def _before_sleep(retry_state: RetryCallState) -> None:
            error = type(retry_state.outcome.exception()).__name__ if retry_state.outcome is not None else "unknown"
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.debug(
                "recovery.retry",
                path=path,
                attempt=retry_state.attempt_number,
                delay=round(delay, 4),
                error=error,
            )
            if audit is not None:
                audit.emit(
                    AuditEvent.notice(
                        AuditTag.RECOVERY_RETRY,
                        path,
                        f"attempt {retry_state.attempt_number} failed: {error}",
                        clock=audit.clock,
                    )
                )

        return Retrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait,
            retry=retry_if_exception(self.is_recoverable),
            reraise=True,
            sleep=self._sleep,
            before_sleep=_before_sleep,
        )


__all__ = ["RecoveryStrategy", "RetryStrategy", "is_recoverable"]
