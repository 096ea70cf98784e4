"""Recovery – FallbackMaskStrategy (values used once masking has given up)."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gdpr_masking.kernel.masks import MASK_REDACTED
from gdpr_masking.kernel.preview import type_name
from gdpr_masking.resilience.recovery.failure_mode import FailureMode


class FallbackMaskStrategy:
    """Resolve a fallback value for *value* under a :class:`FailureMode`.

    ``custom_fallbacks`` maps type names (``string``, ``integer``, ``float``,
    ``boolean``, ``null``, ``array``, ``object``) to fixed literals that take
    precedence over the type-shaped placeholders under ``FAIL_SAFE``.
    """

    def __init__(
        self,
        custom_fallbacks: Mapping[str, str] | None = None,
        default_fallback: str = MASK_REDACTED,
    ) -> None:
        self._custom = dict(custom_fallbacks or {})
        self._default = default_fallback

    @classmethod
    def default(cls) -> FallbackMaskStrategy:
        return cls()

    @classmethod
    def strict(cls, mask: str = MASK_REDACTED) -> FallbackMaskStrategy:
        """Same literal for every type, even under ``FAIL_SAFE``."""
        return cls(
            {name: mask for name in ("string", "integer", "float", "boolean", "null", "array", "object")},
            default_fallback=mask,
        )

    @classmethod
    def with_mappings(cls, mappings: Mapping[str, str], default_fallback: str = MASK_REDACTED) -> FallbackMaskStrategy:
        return cls(mappings, default_fallback)

    def fallback_for(self, value: Any, mode: FailureMode) -> Any:
        if mode is FailureMode.FAIL_OPEN:
            return value
        if mode is FailureMode.FAIL_CLOSED:
            return self._default
        custom = self._custom.get(type_name(value))
        if custom is not None:
            return custom
        return self.type_shaped(value)

    @staticmethod
    def type_shaped(value: Any) -> str:
        if isinstance(value, str):
            return f"[STRING:{len(value)} chars]"
        if value is None:
            return "[NULL]"
        if isinstance(value, bool):
            return "[BOOL]"
        if isinstance(value, int):
            return "[INT]"
        if isinstance(value, float):
            return "[FLOAT]"
        if isinstance(value, dict):
            return f"[OBJECT:{len(value)} keys]"
        if isinstance(value, (list, tuple)):
            return f"[ARRAY:{len(value)} items]"
        return f"[{type(value).__name__.upper()}]"

    def describe(self) -> dict[str, Any]:
        return {"custom_fallbacks": dict(self._custom), "default_fallback": self._default}


__all__ = ["FallbackMaskStrategy"]
