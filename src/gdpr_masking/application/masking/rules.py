"""Masking – MaskRule, FieldRule and the REMOVED sentinel."""
from __future__ import annotations

import dataclasses
import re
from enum import Enum
from typing import Any, Final

from gdpr_masking.kernel.masks import MASK_MASKED
from gdpr_masking.application.masking.paths import is_wildcard, path_matches
from gdpr_masking.application.masking.patterns import PatternValidator
from gdpr_masking.kernel.errors import InvalidConfigurationError, InvalidPatternError

# MaskRule validates its own pattern when built; every rule shares this cache.
RULE_PATTERNS: Final = PatternValidator()


class _Removed:
    """Marker returned by a strategy to ask the processor to drop the key."""

    _instance: _Removed | None = None

    def __new__(cls) -> _Removed:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<REMOVED>"


REMOVED: Final = _Removed()


class MaskRuleKind(str, Enum):
    MASK_REGEX = "mask_regex"
    REMOVE = "remove"
    REPLACE = "replace"


@dataclasses.dataclass(frozen=True)
class MaskRule:
    """How one field is masked.

    Build rules with the factories rather than the constructor::

        MaskRule.remove()
        MaskRule.replace("[REDACTED]")
        MaskRule.regex_mask(r"\\d{4}$", "****")
    """

    kind: MaskRuleKind
    pattern: str | None = None
    replacement: str | None = None
    value: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, MaskRuleKind):
            try:
                object.__setattr__(self, "kind", MaskRuleKind(self.kind))
            except ValueError:
                raise InvalidConfigurationError.for_parameter(
                    "kind", self.kind, f"must be one of {[k.value for k in MaskRuleKind]}"
                ) from None
        if self.kind is MaskRuleKind.MASK_REGEX:
            if not isinstance(self.pattern, str) or not self.pattern:
                raise InvalidPatternError.empty()
            if not isinstance(self.replacement, str):
                raise InvalidConfigurationError.wrong_type("replacement", self.replacement, "str")
            compiled = RULE_PATTERNS.validate(self.pattern)
            check_template(compiled, self.replacement)
        elif self.kind is MaskRuleKind.REPLACE:
            if not isinstance(self.value, str):
                raise InvalidConfigurationError.wrong_type("value", self.value, "str")
            if not self.value:
                raise InvalidConfigurationError.empty_value("value")

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def remove(cls) -> MaskRule:
        return cls(MaskRuleKind.REMOVE)

    @classmethod
    def replace(cls, value: str) -> MaskRule:
        return cls(MaskRuleKind.REPLACE, value=value)

    @classmethod
    def regex_mask(cls, pattern: str, replacement: str = MASK_MASKED) -> MaskRule:
        return cls(MaskRuleKind.MASK_REGEX, pattern=pattern, replacement=replacement)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind.value}
        if self.kind is MaskRuleKind.MASK_REGEX:
            payload["pattern"] = self.pattern
            payload["replacement"] = self.replacement
        elif self.kind is MaskRuleKind.REPLACE:
            payload["value"] = self.value
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MaskRule:
        if not isinstance(data, dict) or "kind" not in data:
            raise InvalidConfigurationError.for_parameter("rule", data, "expected a mapping with a 'kind' key")
        return cls(
            data["kind"],
            pattern=data.get("pattern"),
            replacement=data.get("replacement"),
            value=data.get("value"),
        )

    @property
    def removes(self) -> bool:
        return self.kind is MaskRuleKind.REMOVE

    @property
    def compiled(self) -> re.Pattern[str] | None:
        """The validated pattern of a ``MASK_REGEX`` rule, from :data:`RULE_PATTERNS`."""
        if self.kind is not MaskRuleKind.MASK_REGEX or self.pattern is None:
            return None
        return RULE_PATTERNS.validate(self.pattern)


def check_template(compiled: re.Pattern[str], replacement: str) -> None:
    """Reject replacement templates that reference missing groups.

    ``re`` parses the template eagerly, so substituting into an empty string
    is enough to surface bad group references.
    """
    try:
        compiled.sub(replacement, "")
    except (re.error, IndexError) as exc:
        raise InvalidConfigurationError.for_parameter(
            "replacement", replacement, f"invalid replacement template for {compiled.pattern!r}: {exc}"
        ) from exc


def normalize_rule(path: str, rule: str | MaskRule) -> MaskRule:
    """Turn a config value (literal string or :class:`MaskRule`) into a rule."""
    if isinstance(rule, MaskRule):
        return rule
    if isinstance(rule, str):
        if not rule:
            raise InvalidConfigurationError.empty_value(f"field_rules[{path!r}]")
        return MaskRule.replace(rule)
    raise InvalidConfigurationError.wrong_type(f"field_rules[{path!r}]", rule, "str or MaskRule")


@dataclasses.dataclass(frozen=True)
class FieldRule:
    """A :class:`MaskRule` bound to a dot path (``*`` wildcards allowed)."""

    path: str
    rule: MaskRule

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path.strip():
            raise InvalidConfigurationError.empty_value("path")

    @classmethod
    def of(cls, path: str, rule: str | MaskRule) -> FieldRule:
        return cls(path, normalize_rule(path, rule))

    @property
    def is_wildcard(self) -> bool:
        return is_wildcard(self.path)

    def matches(self, path: str) -> bool:
        return path_matches(path, self.path)

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "rule": self.rule.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldRule:
        if not isinstance(data, dict) or "path" not in data or "rule" not in data:
            raise InvalidConfigurationError.for_parameter(
                "field_rule", data, "expected a mapping with 'path' and 'rule' keys"
            )
        return cls(data["path"], MaskRule.from_dict(data["rule"]))


__all__ = ["REMOVED", "RULE_PATTERNS", "FieldRule", "MaskRule", "MaskRuleKind", "check_template", "normalize_rule"]
