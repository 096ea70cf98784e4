"""Masking strategies – ConditionalMaskingStrategy."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from gdpr_masking.application.masking.conditions import Condition, ConditionalRuleFactory, RecordContext
from gdpr_masking.application.masking.strategies.base import MaskingStrategy
from gdpr_masking.kernel.errors import InvalidConfigurationError
from gdpr_masking.observability.logging import get_logger

logger = get_logger(__name__)


class ConditionalMaskingStrategy(MaskingStrategy):
    """Delegate to *wrapped* only when record-level conditions hold.

    With ``require_all=True`` (AND) a condition that raises counts as not
    satisfied.  With ``require_all=False`` (OR) a raising condition is
    ignored, and at least one remaining condition must return ``True``.
    """

    DEFAULT_PRIORITY = 70

    def __init__(
        self,
        wrapped: MaskingStrategy,
        conditions: Mapping[str, Condition],
        *,
        require_all: bool = True,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        if not isinstance(wrapped, MaskingStrategy):
            raise InvalidConfigurationError.wrong_type("wrapped", wrapped, "MaskingStrategy")
        for name, condition in conditions.items():
            if not isinstance(name, str) or not name.strip():
                raise InvalidConfigurationError.empty_value("conditions")
            if not callable(condition):
                raise InvalidConfigurationError.wrong_type(f"conditions[{name!r}]", condition, "callable")
        super().__init__(
            priority,
            {
                "wrapped": wrapped.name,
                "conditions": sorted(conditions),
                "require_all": require_all,
            },
        )
        self._wrapped = wrapped
        self._conditions = dict(conditions)
        self._require_all = require_all

    @property
    def wrapped(self) -> MaskingStrategy:
        return self._wrapped

    @classmethod
    def for_levels(cls, wrapped: MaskingStrategy, levels: Iterable[str], priority: int = DEFAULT_PRIORITY) -> ConditionalMaskingStrategy:
        return cls(wrapped, {"level": ConditionalRuleFactory.level_based(levels)}, priority=priority)

    @classmethod
    def for_channels(cls, wrapped: MaskingStrategy, channels: Iterable[str], priority: int = DEFAULT_PRIORITY) -> ConditionalMaskingStrategy:
        return cls(wrapped, {"channel": ConditionalRuleFactory.channel_based(channels)}, priority=priority)

    @classmethod
    def for_context(
        cls,
        wrapped: MaskingStrategy,
        required_context: Mapping[str, Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> ConditionalMaskingStrategy:
        conditions = {
            f"context.{path}": ConditionalRuleFactory.context_value(path, expected)
            for path, expected in required_context.items()
        }
        return cls(wrapped, conditions, priority=priority)

    def conditions_satisfied(self, record: RecordContext) -> bool:
        if not self._conditions:
            return True
        any_true = False
        for name, condition in self._conditions.items():
            try:
                result = bool(condition(record))
            except Exception as exc:
                logger.warning("masking.condition_failed", condition=name, error=type(exc).__name__)
                if self._require_all:
                    return False
                continue
            if self._require_all and not result:
                return False
            if result:
                any_true = True
                if not self._require_all:
                    return True
        return any_true

    def should_apply(self, value: Any, path: str, record: RecordContext) -> bool:
        return self.conditions_satisfied(record) and self._wrapped.should_apply(value, path, record)

    def apply(self, value: Any, path: str, record: RecordContext) -> Any:
        return self._wrapped.apply(value, path, record)

    def preserve_type(self, original: Any, masked: Any) -> Any:
        return self._wrapped.preserve_type(original, masked)

    def validate(self) -> bool:
        return super().validate() and self._wrapped.validate()


__all__ = ["ConditionalMaskingStrategy"]
