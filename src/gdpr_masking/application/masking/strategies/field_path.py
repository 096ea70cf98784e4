"""Masking strategies – FieldPathMaskingStrategy."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.patterns import PatternValidator
from gdpr_masking.application.masking.rules import REMOVED, RULE_PATTERNS, FieldRule, MaskRule, MaskRuleKind
from gdpr_masking.application.masking.strategies.base import MaskingStrategy, value_to_string
from gdpr_masking.kernel.errors import MaskingOperationFailedError


class FieldPathMaskingStrategy(MaskingStrategy):
    """Mask values addressed by dot path.

    Exact paths win over wildcard paths; among wildcards the first configured
    match wins.
    """

    DEFAULT_PRIORITY = 80

    def __init__(
        self,
        field_rules: Mapping[str, str | MaskRule],
        *,
        priority: int = DEFAULT_PRIORITY,
        validator: PatternValidator | None = None,
    ) -> None:
        rules = [FieldRule.of(path, rule) for path, rule in field_rules.items()]
        super().__init__(priority, {"field_rules": {r.path: r.rule.to_dict() for r in rules}})
        self._exact = {r.path: r.rule for r in rules if not r.is_wildcard}
        self._wildcards = tuple(r for r in rules if r.is_wildcard)
        validator = validator or RULE_PATTERNS
        self._compiled = {
            r.rule.pattern: validator.validate(r.rule.pattern)
            for r in rules
            if r.rule.kind is MaskRuleKind.MASK_REGEX and r.rule.pattern
        }

    def rule_for(self, path: str) -> MaskRule | None:
        rule = self._exact.get(path)
        if rule is not None:
            return rule
        for candidate in self._wildcards:
            if candidate.matches(path):
                return candidate.rule
        return None

    def should_apply(self, value: Any, path: str, record: RecordContext) -> bool:
        return self.rule_for(path) is not None

    def apply(self, value: Any, path: str, record: RecordContext) -> Any:
        rule = self.rule_for(path)
        if rule is None:
            return value
        try:
            if rule.kind is MaskRuleKind.REMOVE:
                return REMOVED
            if rule.kind is MaskRuleKind.REPLACE:
                return self.preserve_type(value, rule.value)
            if rule.pattern is None or rule.replacement is None:
                return value
            masked = self._compiled[rule.pattern].sub(rule.replacement, value_to_string(value))
            return self.preserve_type(value, masked)
        except Exception as exc:
            raise MaskingOperationFailedError.field_path_failed(path, value, exc) from exc

    def validate(self) -> bool:
        return super().validate() and bool(self._exact or self._wildcards)


__all__ = ["FieldPathMaskingStrategy"]
