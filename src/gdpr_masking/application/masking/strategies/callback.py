"""Masking strategies – CallbackMaskingStrategy."""
from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any, Callable

from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.paths import is_wildcard, path_matches
from gdpr_masking.application.masking.strategies.base import MaskingStrategy
from gdpr_masking.kernel.errors import InvalidConfigurationError, MaskingOperationFailedError


class CallbackMaskingStrategy(MaskingStrategy):
    """Run a user function for one field path.

    Whatever the callback returns is used verbatim (no type coercion).  Any
    exception it raises surfaces as :class:`MaskingOperationFailedError`.
    """

    DEFAULT_PRIORITY = 50

    def __init__(
        self,
        field_path: str,
        callback: Callable[[Any], Any],
        *,
        priority: int = DEFAULT_PRIORITY,
        exact_match: bool = True,
    ) -> None:
        if not isinstance(field_path, str) or not field_path.strip():
            raise InvalidConfigurationError.empty_value("field_path")
        if not callable(callback):
            raise InvalidConfigurationError.wrong_type(f"custom_callbacks[{field_path!r}]", callback, "callable")
        super().__init__(priority, {"field_path": field_path, "exact_match": exact_match})
        self._field_path = field_path
        self._callback = callback
        self._exact_match = exact_match

    @property
    def field_path(self) -> str:
        return self._field_path

    @classmethod
    def for_paths(
        cls,
        field_paths: Iterable[str],
        callback: Callable[[Any], Any],
        *,
        priority: int = DEFAULT_PRIORITY,
        exact_match: bool = True,
    ) -> list[CallbackMaskingStrategy]:
        return [cls(path, callback, priority=priority, exact_match=exact_match) for path in field_paths]

    @classmethod
    def constant(cls, field_path: str, replacement: Any, *, priority: int = DEFAULT_PRIORITY) -> CallbackMaskingStrategy:
        return cls(field_path, lambda _value: replacement, priority=priority)

    @classmethod
    def hash(
        cls,
        field_path: str,
        *,
        algorithm: str = "sha256",
        truncate: int = 8,
        priority: int = DEFAULT_PRIORITY,
    ) -> CallbackMaskingStrategy:
        """Replace the value with a (truncated) hex digest of itself."""
        hashlib.new(algorithm)

        def _hash(value: Any) -> str:
            text = value if isinstance(value, str) else json.dumps(value, default=str)
            digest = hashlib.new(algorithm, text.encode()).hexdigest()
            return digest[:truncate] + "..." if truncate > 0 else digest

        return cls(field_path, _hash, priority=priority)

    @classmethod
    def partial(
        cls,
        field_path: str,
        *,
        visible_start: int = 2,
        visible_end: int = 2,
        mask_char: str = "*",
        priority: int = DEFAULT_PRIORITY,
    ) -> CallbackMaskingStrategy:
        """Keep the first/last characters and mask the middle (``jo***om``)."""

        def _partial(value: Any) -> str:
            text = str(value) if isinstance(value, (str, int, float)) else "[OBJECT]"
            length = len(text)
            if length <= visible_start + visible_end:
                return mask_char * length
            hidden = mask_char * (length - visible_start - visible_end)
            return text[:visible_start] + hidden + (text[-visible_end:] if visible_end else "")

        return cls(field_path, _partial, priority=priority)

    def should_apply(self, value: Any, path: str, record: RecordContext) -> bool:
        if self._exact_match or not is_wildcard(self._field_path):
            return path == self._field_path
        return path_matches(path, self._field_path)

    def apply(self, value: Any, path: str, record: RecordContext) -> Any:
        try:
            return self._callback(value)
        except Exception as exc:
            raise MaskingOperationFailedError.callback_failed(path, value, exc) from exc

    def preserve_type(self, original: Any, masked: Any) -> Any:
        return masked


__all__ = ["CallbackMaskingStrategy"]
