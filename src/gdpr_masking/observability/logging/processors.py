"""Observability – structlog processor that masks every event.

Usage::

    import structlog
    from gdpr_masking.application.masking import MaskingConfig, MaskingOrchestrator
    from gdpr_masking.observability.logging import MaskingProcessor

    orchestrator = MaskingOrchestrator(MaskingConfig(patterns={...}))
    structlog.configure(processors=[MaskingProcessor(orchestrator), ...])
"""
from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gdpr_masking.application.masking.orchestrator import MaskingOrchestrator

# keys structlog itself manages; never handed to the masking engine
_RESERVED_KEYS = frozenset({"event", "level", "logger", "timestamp", "_record", "_from_structlog"})


class MaskingProcessor:
    """Mask ``event`` as the message and the remaining keys as the context.

    Events logged by the engine itself while it is masking (audit sink
    failures and the like) pass through untouched; they carry no raw values.
    """

    def __init__(self, orchestrator: MaskingOrchestrator, channel: str = "app") -> None:
        self._orchestrator = orchestrator
        self._channel = channel
        self._local = threading.local()

    def __call__(
        self,
        logger: Any,           # noqa: ARG002
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        if getattr(self._local, "active", False):
            return event_dict
        event = event_dict.get("event")
        message = event if isinstance(event, str) else ""
        context = {k: v for k, v in event_dict.items() if k not in _RESERVED_KEYS}
        self._local.active = True
        try:
            result = self._orchestrator.process(
                message,
                context,
                level=method_name,
                channel=self._channel,
            )
        finally:
            self._local.active = False
        masked: dict[str, Any] = {k: v for k, v in event_dict.items() if k in _RESERVED_KEYS}
        if isinstance(event, str):
            masked["event"] = result.message
        masked.update(result.context)
        return masked


__all__ = ["MaskingProcessor"]
