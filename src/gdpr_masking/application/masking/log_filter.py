"""Masking – stdlib ``logging.Filter`` adapter."""
from __future__ import annotations

import logging
from typing import Any

from gdpr_masking.application.masking.orchestrator import MaskingOrchestrator


class MaskingLogFilter(logging.Filter):
    """Mask ``record.msg`` and ``record.args`` before a record is emitted.

    Attach to any :class:`logging.Handler` or :class:`logging.Logger`::

        handler.addFilter(MaskingLogFilter(orchestrator))

    A string ``msg`` is masked as the message; a dict ``msg`` is masked as a
    context.  Dict ``args`` are masked as a context and tuple ``args`` item by
    item, each as the message of its own call.
    """

    def __init__(self, orchestrator: MaskingOrchestrator, name: str = "") -> None:
        super().__init__(name)
        self._orchestrator = orchestrator

    def filter(self, record: logging.LogRecord) -> bool:
        level = record.levelname
        channel = record.name
        if isinstance(record.msg, str):
            record.msg = self._orchestrator.process(record.msg, {}, level=level, channel=channel).message
        elif isinstance(record.msg, dict):
            record.msg = self._orchestrator.process("", record.msg, level=level, channel=channel).context
        if isinstance(record.args, dict):
            record.args = self._orchestrator.process("", record.args, level=level, channel=channel).context
        elif isinstance(record.args, tuple):
            record.args = tuple(self._mask_arg(arg, level, channel) for arg in record.args)
        return True

    def _mask_arg(self, arg: Any, level: str, channel: str) -> Any:
        if isinstance(arg, str):
            return self._orchestrator.process(arg, {}, level=level, channel=channel).message
        if isinstance(arg, dict):
            return self._orchestrator.process("", arg, level=level, channel=channel).context
        return arg


__all__ = ["MaskingLogFilter"]
