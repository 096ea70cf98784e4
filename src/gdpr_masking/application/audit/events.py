"""Audit – AuditEvent and the sink contract."""
from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from gdpr_masking.kernel.preview import value_preview
from gdpr_masking.kernel.time import Clock, SystemClock

AuditSink = Callable[[str, Any, Any], None]
"""``(path, original, masked) -> None``; receives previews, never raw values."""


class AuditTag(str, Enum):
    """What an audit event reports."""

    MASKED = "masked"
    MAX_DEPTH_REACHED = "max_depth_reached"
    CIRCULAR_REFERENCE = "circular_reference_detected"
    CONDITIONAL_SKIP = "conditional_skip"
    CONDITIONAL_ERROR = "conditional_error"
    REGEX_ERROR = "regex_error"
    JSON_MASKED = "json_masked"
    JSON_ERROR = "json_error"
    RECOVERY_RETRY = "recovery_retry"
    RECOVERY_FALLBACK = "recovery_fallback"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"


@dataclasses.dataclass(frozen=True)
class AuditEvent:
    """One audit record.

    For ``MASKED`` events the sink sees ``(path, original, masked)``.  Other
    tags are reported with the tag as the sink path, the subject (usually
    the data path) as ``original`` and a short description as ``masked``.
    """

    path: str
    original_preview: str
    masked_preview: str
    timestamp: datetime
    tag: AuditTag = AuditTag.MASKED

    @classmethod
    def masked(cls, path: str, original: Any, masked: Any, clock: Clock | None = None) -> AuditEvent:
        return cls(
            path=path,
            original_preview=value_preview(original),
            masked_preview=value_preview(masked),
            timestamp=(clock or SystemClock()).now(),
        )

    @classmethod
    def notice(cls, tag: AuditTag, subject: str, description: str, clock: Clock | None = None) -> AuditEvent:
        return cls(
            path=subject,
            original_preview=value_preview(subject),
            masked_preview=value_preview(description),
            timestamp=(clock or SystemClock()).now(),
            tag=tag,
        )

    def sink_args(self) -> tuple[str, str, str]:
        if self.tag is AuditTag.MASKED:
            return self.path, self.original_preview, self.masked_preview
        return self.tag.value, self.original_preview, self.masked_preview

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag.value,
            "path": self.path,
            "original": self.original_preview,
            "masked": self.masked_preview,
            "timestamp": self.timestamp.isoformat(),
        }


__all__ = ["AuditEvent", "AuditSink", "AuditTag"]
