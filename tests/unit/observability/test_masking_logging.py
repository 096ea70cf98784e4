"""Unit tests for the structlog processor, the stdlib filter and the JSON factory."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import pytest
import structlog
from structlog.testing import LogCapture

from gdpr_masking.application.masking import MaskingConfig, MaskingLogFilter, MaskingOrchestrator
from gdpr_masking.observability.logging import JsonLoggerFactory, MaskingProcessor, get_logger

SSN = r"\d{3}-\d{2}-\d{4}"


@pytest.fixture()
def orchestrator() -> MaskingOrchestrator:
    return MaskingOrchestrator(MaskingConfig(patterns={SSN: "***"}, field_rules={"user.email": "[email]"}))


@pytest.fixture()
def capture() -> Iterator[LogCapture]:
    log_capture = LogCapture()
    yield log_capture
    structlog.reset_defaults()


@pytest.fixture()
def root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# MaskingProcessor
# ---------------------------------------------------------------------------


class TestMaskingProcessor:
    def test_masks_event_and_context(self, orchestrator: MaskingOrchestrator) -> None:
        processor = MaskingProcessor(orchestrator)
        result = processor(
            None,
            "info",
            {"event": "SSN 123-45-6789", "user": {"email": "a@b.io"}, "timestamp": "123-45-6789"},
        )
        assert result == {"event": "SSN ***", "user": {"email": "[email]"}, "timestamp": "123-45-6789"}

    def test_non_string_event_left_alone(self, orchestrator: MaskingOrchestrator) -> None:
        processor = MaskingProcessor(orchestrator)
        result = processor(None, "info", {"event": {"raw": 1}, "ssn": "123-45-6789"})
        assert result == {"event": {"raw": 1}, "ssn": "***"}

    def test_level_reaches_conditional_rules(self) -> None:
        orchestrator = MaskingOrchestrator(
            MaskingConfig(patterns={SSN: "***"}, conditional_rules={"errors": lambda r: r.level == "ERROR"})
        )
        processor = MaskingProcessor(orchestrator)
        assert processor(None, "info", {"event": "123-45-6789"})["event"] == "123-45-6789"
        assert processor(None, "error", {"event": "123-45-6789"})["event"] == "***"

    def test_in_structlog_pipeline(self, orchestrator: MaskingOrchestrator, capture: LogCapture) -> None:
        structlog.configure(processors=[MaskingProcessor(orchestrator), capture])
        structlog.get_logger("test").warning("payment for 123-45-6789", user={"email": "a@b.io"})
        assert capture.entries == [
            {"event": "payment for ***", "user": {"email": "[email]"}, "log_level": "warning"}
        ]

    def test_engine_logs_pass_through(self, capture: LogCapture) -> None:
        def failing_sink(path: str, original: Any, masked: Any) -> None:
            raise OSError("disk full")

        orchestrator = MaskingOrchestrator(
            MaskingConfig(field_rules={"user.email": "[email]"}, audit_sink=failing_sink)
        )
        structlog.configure(processors=[MaskingProcessor(orchestrator), capture])
        get_logger("test").info("signup", user={"email": "a@b.io"})
        events = [entry["event"] for entry in capture.entries]
        assert events == ["masking.audit_sink_failed", "signup"]
        assert capture.entries[0]["detail"]["path"] == "user.email"
        assert capture.entries[1]["user"] == {"email": "[email]"}


# ---------------------------------------------------------------------------
# MaskingLogFilter
# ---------------------------------------------------------------------------


def _record(msg: Any, args: Any) -> logging.LogRecord:
    return logging.LogRecord("app", logging.INFO, __file__, 1, msg, args, None)


class TestMaskingLogFilter:
    def test_masks_message_and_tuple_args(self, orchestrator: MaskingOrchestrator) -> None:
        record = _record("SSN %s (was 123-45-6789)", ("123-45-6789",))
        assert MaskingLogFilter(orchestrator).filter(record)
        assert record.getMessage() == "SSN *** (was ***)"

    def test_masks_mapping_args(self, orchestrator: MaskingOrchestrator) -> None:
        record = _record("%(user)s", ({"user": {"email": "a@b.io"}},))
        MaskingLogFilter(orchestrator).filter(record)
        assert record.args == {"user": {"email": "[email]"}}

    def test_masks_dict_message(self, orchestrator: MaskingOrchestrator) -> None:
        record = _record({"user": {"email": "a@b.io"}}, None)
        MaskingLogFilter(orchestrator).filter(record)
        assert record.msg == {"user": {"email": "[email]"}}

    def test_non_string_args_untouched(self, orchestrator: MaskingOrchestrator) -> None:
        record = _record("%d items", (3,))
        MaskingLogFilter(orchestrator).filter(record)
        assert record.args == (3,)

    def test_attached_to_handler(self, orchestrator: MaskingOrchestrator, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("gdpr_masking.tests.filter")
        logger.addFilter(MaskingLogFilter(orchestrator))
        try:
            with caplog.at_level(logging.INFO, logger=logger.name):
                logger.info("customer %s", "123-45-6789")
        finally:
            logger.filters.clear()
        assert caplog.messages == ["customer ***"]


# ---------------------------------------------------------------------------
# JsonLoggerFactory
# ---------------------------------------------------------------------------


class TestJsonLoggerFactory:
    def test_masking_processor_installed_first(self, orchestrator: MaskingOrchestrator, root_logger: logging.Logger) -> None:
        JsonLoggerFactory.configure(orchestrator, level=logging.WARNING)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[0], MaskingProcessor)
        assert root_logger.level == logging.WARNING
        assert len(root_logger.handlers) == 1

    def test_without_orchestrator(self, root_logger: logging.Logger) -> None:
        JsonLoggerFactory.configure()
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, MaskingProcessor) for p in processors)
