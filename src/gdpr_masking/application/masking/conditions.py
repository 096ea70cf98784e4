"""Masking – record-level context and predicate builders.

A *condition* is any ``Callable[[RecordContext], bool]``.  Conditions gate
whole records (``MaskingConfig.conditional_rules``) or individual strategies
(:class:`~gdpr_masking.application.masking.strategies.ConditionalMaskingStrategy`).
"""
from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from gdpr_masking.application.masking.paths import MISSING, get_path


@dataclasses.dataclass(frozen=True)
class RecordContext:
    """The log record a value belongs to, as seen by conditions."""

    message: str = ""
    level: str = "INFO"
    channel: str = "app"
    context: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", str(self.level).upper())


Condition = Callable[[RecordContext], bool]


class ConditionalRuleFactory:
    """Build common conditions."""

    @staticmethod
    def level_based(levels: Iterable[str]) -> Condition:
        """True when the record level is one of *levels* (case-insensitive)."""
        wanted = frozenset(level.upper() for level in levels)

        def _condition(record: RecordContext) -> bool:
            return record.level in wanted

        return _condition

    @staticmethod
    def channel_based(channels: Iterable[str]) -> Condition:
        wanted = frozenset(channels)

        def _condition(record: RecordContext) -> bool:
            return record.channel in wanted

        return _condition

    @staticmethod
    def context_field_present(path: str) -> Condition:
        """True when *path* (dot notation) exists in the record context."""

        def _condition(record: RecordContext) -> bool:
            return get_path(record.context, path) is not MISSING

        return _condition

    @staticmethod
    def context_value(path: str, expected: Any) -> Condition:
        """True when the value at *path* equals *expected*."""

        def _condition(record: RecordContext) -> bool:
            return get_path(record.context, path) == expected

        return _condition


__all__ = ["Condition", "ConditionalRuleFactory", "RecordContext"]
