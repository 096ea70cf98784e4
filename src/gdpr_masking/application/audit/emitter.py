"""Audit – rate-limited emission with contained sink failures."""
from __future__ import annotations

from typing import Any

from gdpr_masking.application.audit.events import AuditEvent, AuditSink, AuditTag
from gdpr_masking.application.rate_limit import RateLimiter, RateLimitProfile, SlidingWindowRateLimiter
from gdpr_masking.kernel.errors import AuditLoggingError
from gdpr_masking.kernel.time import Clock, SystemClock
from gdpr_masking.observability.logging import get_logger

logger = get_logger(__name__)

_KEY_BY_TAG: dict[AuditTag, str] = {
    AuditTag.JSON_MASKED: "audit:json_operations",
    AuditTag.JSON_ERROR: "audit:json_operations",
    AuditTag.CONDITIONAL_SKIP: "audit:conditional_operations",
    AuditTag.CONDITIONAL_ERROR: "audit:conditional_operations",
    AuditTag.REGEX_ERROR: "audit:regex_operations",
    AuditTag.RECOVERY_RETRY: "audit:error_operations",
    AuditTag.RECOVERY_FALLBACK: "audit:error_operations",
}
_GENERAL_KEY = "audit:general_operations"


def rate_limit_key(event: AuditEvent) -> str:
    return _KEY_BY_TAG.get(event.tag, _GENERAL_KEY)


class AuditEmitter:
    """Forward :class:`AuditEvent` objects to a sink.

    When a ``rate_limiter`` is given, events are admitted per operation-type
    key; a throttled key produces at most one ``rate_limit_exceeded`` notice
    per minute.  Sink exceptions are wrapped in :class:`AuditLoggingError`,
    logged and suppressed.

    Parameters
    ----------
    sink:
        ``(path, original, masked) -> None`` or ``None`` to only collect.
    rate_limiter:
        Limiter consulted before every delivery.
    """

    def __init__(
        self,
        sink: AuditSink | None = None,
        rate_limiter: RateLimiter | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._sink = sink
        self._rate_limiter = rate_limiter
        self._clock: Clock = clock or SystemClock()
        self._notice_limiter = (
            SlidingWindowRateLimiter(1, 60, clock=self._clock) if rate_limiter is not None else None
        )

    @classmethod
    def with_profile(
        cls,
        sink: AuditSink | None,
        profile: RateLimitProfile | str,
        *,
        clock: Clock | None = None,
    ) -> AuditEmitter:
        clock = clock or SystemClock()
        return cls(sink, SlidingWindowRateLimiter.from_profile(profile, clock=clock), clock=clock)

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def has_sink(self) -> bool:
        return self._sink is not None

    def emit(self, event: AuditEvent) -> bool:
        """Deliver *event*; return ``False`` if it was throttled."""
        if self._rate_limiter is not None:
            key = rate_limit_key(event)
            if not self._rate_limiter.is_allowed(key):
                self._notify_throttled(key)
                return False
        if self._sink is not None:
            self._deliver(*event.sink_args())
        return True

    def _notify_throttled(self, key: str) -> None:
        logger.debug("masking.audit_rate_limited", key=key)
        notices = self._notice_limiter
        if self._sink is not None and notices is not None and notices.is_allowed(key):
            self._deliver(AuditTag.RATE_LIMIT_EXCEEDED.value, key, "Audit logging rate limit exceeded")

    def _deliver(self, path: str, original: Any, masked: Any) -> None:
        sink = self._sink
        if sink is None:
            return
        try:
            sink(path, original, masked)
        except Exception as exc:
            error = AuditLoggingError.callback_failed(path, exc)
            logger.warning("masking.audit_sink_failed", **error.to_dict())


class ListAuditSink:
    """Collect ``(path, original, masked)`` tuples in memory."""

    def __init__(self) -> None:
        self.records: list[tuple[str, Any, Any]] = []

    def __call__(self, path: str, original: Any, masked: Any) -> None:
        self.records.append((path, original, masked))

    def paths(self) -> list[str]:
        return [path for path, _, _ in self.records]


class StructlogAuditSink:
    """Write audit records at ``WARNING`` so they survive strict level filters."""

    def __init__(self, logger: Any = None, service: str = "unknown") -> None:
        self._log = logger or get_logger("audit")
        self._service = service

    def __call__(self, path: str, original: Any, masked: Any) -> None:
        self._log.warning(
            "audit.masking",
            service=self._service,
            path=path,
            original=original,
            masked=masked,
        )


__all__ = ["AuditEmitter", "ListAuditSink", "StructlogAuditSink", "rate_limit_key"]
