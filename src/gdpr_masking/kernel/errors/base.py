"""Root of the masking error hierarchy."""

from __future__ import annotations

import json
from typing import Any, ClassVar


class MaskingError(Exception):
    """Base class for every error the masking engine raises.

    Args:
        message: Human-readable description; never contains raw field values.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Structured context for logs and audit records.
        cause: Underlying exception, also chained as ``__cause__``.

    ``recoverable`` tells the retry machinery whether another attempt can
    succeed.  Configuration problems are deterministic and set it to
    ``False``.
    """

    default_code: ClassVar[str] = "masking_error"
    recoverable: ClassVar[bool] = True

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = dict(detail or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
            "detail": dict(self.detail),
        }
        if self.cause is not None:
            payload["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return payload

    def to_json(self) -> str:
        """Single-line JSON form of :meth:`to_dict`."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


__all__ = ["MaskingError"]
