"""Recovery – FailureMode."""
from __future__ import annotations

from enum import Enum


class FailureMode(str, Enum):
    """What a failed masking operation resolves to."""

    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"
    FAIL_SAFE = "fail_safe"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def recommended(cls) -> FailureMode:
        return cls.FAIL_SAFE


_DESCRIPTIONS = {
    FailureMode.FAIL_OPEN: "Return the original value unmasked (availability over confidentiality)",
    FailureMode.FAIL_CLOSED: "Return a fixed redaction literal regardless of type",
    FailureMode.FAIL_SAFE: "Return a type-shaped placeholder that reveals shape but not content",
}

__all__ = ["FailureMode"]
