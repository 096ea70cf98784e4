"""Masking strategies – the MaskingStrategy port and shared helpers."""
from __future__ import annotations

import abc
import json
import math
import re
from collections.abc import Iterable
from typing import Any

from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.paths import path_matches
from gdpr_masking.kernel.preview import type_name

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def value_to_string(value: Any) -> str:
    """Stringify *value* for pattern matching."""
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def numeric_literal(text: str, family: type) -> int | float | None:
    """Parse *text* as an ``int`` or ``float`` literal.

    Returns ``None`` when *text* is not a number or does not fit *family*
    (``"1e999"`` overflows both).
    """
    text = text.strip()
    try:
        if family is int:
            if _INT_RE.fullmatch(text):
                return int(text)
            if _FLOAT_RE.fullmatch(text):
                return int(float(text))
        elif _FLOAT_RE.fullmatch(text):
            number = float(text)
            return number if math.isfinite(number) else None
    except (OverflowError, ValueError):
        return None
    return None


def looks_numeric(text: str) -> bool:
    return _FLOAT_RE.fullmatch(text.strip()) is not None


def coerce_like(original: Any, masked: Any) -> Any:
    """Convert a string *masked* back into the primitive family of *original*.

    Returns *masked* unchanged when it is not a string or cannot be
    represented in the original type.
    """
    if not isinstance(masked, str) or isinstance(original, str):
        return masked
    text = masked.strip()
    if isinstance(original, bool):
        lowered = text.lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0", ""):
            return False
        return masked
    if isinstance(original, (int, float)):
        number = numeric_literal(text, int if isinstance(original, int) else float)
        return masked if number is None else number
    if original is None:
        return None if text.lower() == "null" else masked
    if isinstance(original, (dict, list, tuple)):
        try:
            decoded = json.loads(text)
        except ValueError:
            return masked
        if isinstance(original, dict) and isinstance(decoded, dict):
            return decoded
        if isinstance(original, (list, tuple)) and isinstance(decoded, list):
            return type(original)(decoded) if isinstance(original, tuple) else decoded
        return masked
    return masked


class MaskingStrategy(abc.ABC):
    """Port: a prioritised, side-effect-free masking policy.

    Subclasses implement :meth:`should_apply` and :meth:`apply`.  ``apply`` may
    return :data:`~gdpr_masking.application.masking.rules.REMOVED` to ask the
    processor to drop the key.
    """

    def __init__(self, priority: int = 50, configuration: dict[str, Any] | None = None) -> None:
        self._priority = priority
        self._configuration = dict(configuration or {})

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    def should_apply(self, value: Any, path: str, record: RecordContext) -> bool: ...

    @abc.abstractmethod
    def apply(self, value: Any, path: str, record: RecordContext) -> Any: ...

    def preserve_type(self, original: Any, masked: Any) -> Any:
        return coerce_like(original, masked)

    def validate(self) -> bool:
        return isinstance(self._priority, int) and not isinstance(self._priority, bool)

    def configuration(self) -> dict[str, Any]:
        return dict(self._configuration)

    def __repr__(self) -> str:
        return f"{self.name}(priority={self._priority})"

    # helpers shared by subclasses

    @staticmethod
    def _path_in(path: str, patterns: Iterable[str]) -> bool:
        return any(path_matches(path, pattern) for pattern in patterns)

    @staticmethod
    def _type_of(value: Any) -> str:
        return type_name(value)


__all__ = ["MaskingStrategy", "coerce_like", "looks_numeric", "numeric_literal", "value_to_string"]
