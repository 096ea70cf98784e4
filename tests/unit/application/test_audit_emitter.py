"""Unit tests for audit events, contexts and the emitter."""

from __future__ import annotations

from typing import Any

from structlog.testing import capture_logs

from gdpr_masking.application.audit import (
    AuditContext,
    AuditEmitter,
    AuditEvent,
    AuditStatus,
    AuditTag,
    ErrorContext,
    ListAuditSink,
    OperationType,
    StructlogAuditSink,
    rate_limit_key,
    sanitize_message,
)
from gdpr_masking.application.rate_limit import SlidingWindowRateLimiter
from gdpr_masking.kernel.time import FrozenClock


# ---------------------------------------------------------------------------
# AuditEvent
# ---------------------------------------------------------------------------


class TestAuditEvent:
    def test_masked_event(self) -> None:
        clock = FrozenClock()
        event = AuditEvent.masked("user.tags", ["a", "b"], "[]", clock=clock)
        assert event.original_preview == "<array:2 items>"
        assert event.timestamp == clock.now()
        assert event.sink_args() == ("user.tags", "<array:2 items>", "[]")

    def test_notice_uses_tag_as_sink_path(self) -> None:
        event = AuditEvent.notice(AuditTag.MAX_DEPTH_REACHED, "a.b", "too deep")
        assert event.sink_args() == ("max_depth_reached", "a.b", "too deep")

    def test_long_values_truncated(self) -> None:
        event = AuditEvent.masked("p", "x" * 500, "y")
        assert event.original_preview == "x" * 97 + "..."
        assert len(event.original_preview) == 100

    def test_to_dict(self) -> None:
        event = AuditEvent.masked("p", 1, 2, clock=FrozenClock())
        assert event.to_dict() == {
            "tag": "masked",
            "path": "p",
            "original": "1",
            "masked": "2",
            "timestamp": "2024-01-01T00:00:00+00:00",
        }


# ---------------------------------------------------------------------------
# Rate-limit keys
# ---------------------------------------------------------------------------


class TestRateLimitKeys:
    def test_keys_by_operation(self) -> None:
        assert rate_limit_key(AuditEvent.notice(AuditTag.JSON_MASKED, "a", "b")) == "audit:json_operations"
        assert rate_limit_key(AuditEvent.notice(AuditTag.CONDITIONAL_SKIP, "a", "b")) == "audit:conditional_operations"
        assert rate_limit_key(AuditEvent.notice(AuditTag.REGEX_ERROR, "a", "b")) == "audit:regex_operations"
        assert rate_limit_key(AuditEvent.notice(AuditTag.RECOVERY_RETRY, "a", "b")) == "audit:error_operations"
        assert rate_limit_key(AuditEvent.masked("a", 1, 2)) == "audit:general_operations"


# ---------------------------------------------------------------------------
# AuditEmitter
# ---------------------------------------------------------------------------


class TestAuditEmitter:
    def test_delivers_to_sink(self) -> None:
        sink = ListAuditSink()
        emitter = AuditEmitter(sink)
        assert emitter.emit(AuditEvent.masked("p", "a", "b"))
        assert sink.records == [("p", "a", "b")]

    def test_no_sink_still_admits(self) -> None:
        emitter = AuditEmitter()
        assert not emitter.has_sink
        assert emitter.emit(AuditEvent.masked("p", "a", "b"))

    def test_sink_exception_contained(self) -> None:
        def sink(path: str, original: Any, masked: Any) -> None:
            raise RuntimeError("sink down")

        with capture_logs() as logs:
            assert AuditEmitter(sink).emit(AuditEvent.masked("p", "a", "b"))
        assert logs[0]["event"] == "masking.audit_sink_failed"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["detail"]["path"] == "p"

    def test_throttled_events_and_single_notice(self) -> None:
        clock = FrozenClock()
        sink = ListAuditSink()
        emitter = AuditEmitter(sink, SlidingWindowRateLimiter(1, 60, clock=clock), clock=clock)
        results = [emitter.emit(AuditEvent.masked(f"p{i}", "a", "b", clock=clock)) for i in range(4)]
        assert results == [True, False, False, False]
        assert sink.records == [
            ("p0", "a", "b"),
            ("rate_limit_exceeded", "audit:general_operations", "Audit logging rate limit exceeded"),
        ]

    def test_keys_throttled_separately(self) -> None:
        clock = FrozenClock()
        emitter = AuditEmitter(None, SlidingWindowRateLimiter(1, 60, clock=clock), clock=clock)
        assert emitter.emit(AuditEvent.masked("p", "a", "b"))
        assert emitter.emit(AuditEvent.notice(AuditTag.JSON_MASKED, "{}", "{}"))
        assert not emitter.emit(AuditEvent.masked("q", "a", "b"))

    def test_with_profile(self) -> None:
        sink = ListAuditSink()
        emitter = AuditEmitter.with_profile(sink, "strict", clock=FrozenClock())
        admitted = sum(emitter.emit(AuditEvent.masked("p", "a", "b")) for _ in range(60))
        assert admitted == 50


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class TestSinks:
    def test_list_sink_paths(self) -> None:
        sink = ListAuditSink()
        sink("a", 1, 2)
        sink("b", 3, 4)
        assert sink.paths() == ["a", "b"]

    def test_structlog_sink(self) -> None:
        with capture_logs() as logs:
            StructlogAuditSink(service="billing")("user.email", "a@b.io", "[email]")
        assert logs == [
            {
                "event": "audit.masking",
                "log_level": "warning",
                "service": "billing",
                "path": "user.email",
                "original": "a@b.io",
                "masked": "[email]",
            }
        ]


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


class TestContexts:
    def test_sanitize_message(self) -> None:
        text = "connect postgres://admin:hunter2@db failed, password=abc token: xyz in /var/lib/app/conf"
        cleaned = sanitize_message(text)
        for secret in ("hunter2", "abc", "xyz", "/var/lib"):
            assert secret not in cleaned
        assert "password=[REDACTED]" in cleaned

    def test_error_context_from_exception(self) -> None:
        context = ErrorContext.from_exception(ValueError("api_key=sk_live_123 rejected"), attempt=2)
        assert context.error_type == "ValueError"
        assert "sk_live_123" not in context.message
        assert context.to_dict()["metadata"] == {"attempt": 2}

    def test_audit_context_states(self) -> None:
        assert AuditContext.success(OperationType.REGEX).is_success
        assert AuditContext.recovered(OperationType.CALLBACK, 2).status is AuditStatus.RECOVERED
        failed = AuditContext.failed(OperationType.JSON, RuntimeError("x"), attempt_number=3)
        assert not failed.is_success
        assert failed.to_dict()["error"]["error_type"] == "RuntimeError"
        skipped = AuditContext.skipped(OperationType.CONDITIONAL, "rule false")
        assert skipped.metadata == {"reason": "rule false"}

    def test_correlation_ids_unique(self) -> None:
        first = AuditContext.success(OperationType.MASKING)
        second = AuditContext.success(OperationType.MASKING)
        assert first.correlation_id != second.correlation_id
