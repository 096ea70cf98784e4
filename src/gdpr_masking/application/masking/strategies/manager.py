"""Masking strategies – StrategyManager (priority dispatch)."""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.rules import REMOVED, MaskRule
from gdpr_masking.application.masking.strategies.base import MaskingStrategy
from gdpr_masking.application.masking.strategies.data_type import DataTypeMaskingStrategy
from gdpr_masking.application.masking.strategies.field_path import FieldPathMaskingStrategy
from gdpr_masking.application.masking.strategies.regex import RegexMaskingStrategy
from gdpr_masking.kernel.errors import InvalidConfigurationError, MaskingError, MaskingOperationFailedError
from gdpr_masking.observability.logging import get_logger

logger = get_logger(__name__)

_PRIORITY_BUCKETS: tuple[tuple[str, int, int], ...] = (
    ("90-100", 90, 100),
    ("80-89", 80, 89),
    ("60-79", 60, 79),
    ("40-59", 40, 59),
    ("0-39", 0, 39),
)


class StrategyManager:
    """Pick exactly one strategy per value: the highest-priority applicable one.

    Strategies of equal priority keep their insertion order.  The sorted order
    is memoised and rebuilt lazily after ``add``/``remove``.
    """

    def __init__(self, strategies: Iterable[MaskingStrategy] = ()) -> None:
        self._strategies: list[MaskingStrategy] = []
        self._sorted: tuple[MaskingStrategy, ...] | None = None
        for strategy in strategies:
            self.add(strategy)

    def __len__(self) -> int:
        return len(self._strategies)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, strategy: MaskingStrategy) -> StrategyManager:
        if not isinstance(strategy, MaskingStrategy):
            raise InvalidConfigurationError.wrong_type("strategy", strategy, "MaskingStrategy")
        if not strategy.validate():
            raise InvalidConfigurationError.for_parameter(
                "strategy", strategy.name, "strategy failed validation"
            )
        self._strategies = [*self._strategies, strategy]
        self._sorted = None
        return self

    def add_all(self, strategies: Iterable[MaskingStrategy]) -> StrategyManager:
        for strategy in strategies:
            self.add(strategy)
        return self

    def remove(self, strategy: MaskingStrategy) -> bool:
        remaining = [s for s in self._strategies if s is not strategy]
        if len(remaining) == len(self._strategies):
            return False
        self._strategies = remaining
        self._sorted = None
        return True

    def remove_by_class(self, strategy_class: type[MaskingStrategy]) -> int:
        remaining = [s for s in self._strategies if not isinstance(s, strategy_class)]
        removed = len(self._strategies) - len(remaining)
        if removed:
            self._strategies = remaining
            self._sorted = None
        return removed

    def clear(self) -> None:
        self._strategies = []
        self._sorted = None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def sorted_strategies(self) -> tuple[MaskingStrategy, ...]:
        order = self._sorted
        if order is None:
            order = tuple(sorted(self._strategies, key=lambda s: -s.priority))
            self._sorted = order
        return order

    def select(self, value: Any, path: str, record: RecordContext) -> MaskingStrategy | None:
        for strategy in self.sorted_strategies():
            if self._applies(strategy, value, path, record):
                return strategy
        return None

    @staticmethod
    def _applies(strategy: MaskingStrategy, value: Any, path: str, record: RecordContext) -> bool:
        """A guard that raises counts as not applicable."""
        try:
            return bool(strategy.should_apply(value, path, record))
        except Exception as exc:
            logger.warning(
                "masking.strategy_guard_failed", strategy=strategy.name, path=path, error=type(exc).__name__
            )
            return False

    def mask_value(self, value: Any, path: str, record: RecordContext | None = None) -> Any:
        """Apply the first applicable strategy, or return *value* unchanged.

        Raises:
            MaskingOperationFailedError: the chosen strategy raised.
        """
        record = record or RecordContext()
        strategy = self.select(value, path, record)
        if strategy is None:
            return value
        try:
            masked = strategy.apply(value, path, record)
            if masked is REMOVED:
                return masked
            return strategy.preserve_type(value, masked)
        except MaskingError:
            raise
        except Exception as exc:
            raise MaskingOperationFailedError.strategy_failed(strategy.name, path, value, exc) from exc

    def has_applicable_strategy(self, value: Any, path: str, record: RecordContext | None = None) -> bool:
        return self.select(value, path, record or RecordContext()) is not None

    def applicable_strategies(self, value: Any, path: str, record: RecordContext | None = None) -> list[MaskingStrategy]:
        record = record or RecordContext()
        return [s for s in self.sorted_strategies() if self._applies(s, value, path, record)]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def statistics(self) -> dict[str, Any]:
        strategies = self.sorted_strategies()
        buckets = {label: 0 for label, _, _ in _PRIORITY_BUCKETS}
        buckets["other"] = 0
        for strategy in strategies:
            for label, low, high in _PRIORITY_BUCKETS:
                if low <= strategy.priority <= high:
                    buckets[label] += 1
                    break
            else:
                buckets["other"] += 1
        return {
            "total_strategies": len(strategies),
            "strategy_types": dict(Counter(s.name for s in strategies)),
            "priority_distribution": buckets,
            "strategies": [
                {"name": s.name, "priority": s.priority, "configuration": s.configuration()}
                for s in strategies
            ],
        }

    def validate_all(self) -> dict[str, bool]:
        """Map ``"<index>:<name>"`` to each strategy's ``validate()`` result."""
        return {f"{i}:{s.name}": s.validate() for i, s in enumerate(self._strategies)}

    @classmethod
    def create_default(
        cls,
        patterns: Mapping[str, str] | None = None,
        field_rules: Mapping[str, str | MaskRule] | None = None,
        type_masks: Mapping[str, str] | None = None,
    ) -> StrategyManager:
        manager = cls()
        if field_rules:
            manager.add(FieldPathMaskingStrategy(field_rules))
        if patterns:
            manager.add(RegexMaskingStrategy(patterns))
        if type_masks:
            manager.add(DataTypeMaskingStrategy(type_masks))
        return manager


__all__ = ["StrategyManager"]
