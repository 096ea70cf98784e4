"""Masking – MaskingConfig (validated at construction)."""
from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any

from gdpr_masking.application.audit import AuditSink
from gdpr_masking.application.masking.conditions import Condition
from gdpr_masking.application.masking.patterns import PatternCache, PatternValidator
from gdpr_masking.application.masking.rules import MaskRule, check_template, normalize_rule
from gdpr_masking.application.masking.strategies import MaskingStrategy, validate_data_type_masks
from gdpr_masking.application.rate_limit import RateLimitProfile
from gdpr_masking.kernel.errors import InvalidConfigurationError, InvalidPatternError
from gdpr_masking.kernel.time import Clock
from gdpr_masking.resilience.recovery import FailureMode, RecoveryStrategy
from gdpr_masking.resilience.recovery.strategy import MAX_ATTEMPTS_LIMIT

MIN_DEPTH = 1
MAX_DEPTH = 1000


def _check_names(parameter: str, names: Mapping[Any, Any]) -> None:
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise InvalidConfigurationError.for_parameter(parameter, name, "keys must be non-empty strings")


@dataclasses.dataclass
class MaskingConfig:
    """Everything the masking engine needs; invalid input fails fast.

    Attributes
    ----------
    patterns:
        ``regex -> replacement`` applied to the message and to scalar values.
    field_rules:
        ``dot.path -> literal | MaskRule``; ``*`` wildcards allowed.
    custom_callbacks:
        ``dot.path -> fn(value) -> masked``; exact paths only.
    data_type_masks:
        ``type name -> literal`` (``string``, ``integer``, ``float``,
        ``boolean``, ``null``, ``array``, ``object``).
    conditional_rules:
        ``name -> fn(RecordContext) -> bool``; masking runs only when every
        rule returns ``True``.
    audit_sink:
        ``(path, original, masked) -> None``.
    pattern_cache:
        Compiled-pattern cache; created during validation when omitted and
        reused by :class:`MaskingOrchestrator`, so each pattern compiles once.
    """

    patterns: Mapping[str, str] = dataclasses.field(default_factory=dict)
    field_rules: Mapping[str, str | MaskRule] = dataclasses.field(default_factory=dict)
    custom_callbacks: Mapping[str, Callable[[Any], Any]] = dataclasses.field(default_factory=dict)
    data_type_masks: Mapping[str, str] = dataclasses.field(default_factory=dict)
    conditional_rules: Mapping[str, Condition] = dataclasses.field(default_factory=dict)
    max_depth: int = 100
    audit_sink: AuditSink | None = None
    strategies: tuple[MaskingStrategy, ...] = ()
    failure_mode: FailureMode = FailureMode.FAIL_SAFE
    max_attempts: int = 3
    base_delay: float = 0.01
    max_delay: float = 0.1
    recovery: RecoveryStrategy | None = None
    audit_rate_limit: RateLimitProfile | str | None = None
    mask_json_in_message: bool = True
    clock: Clock | None = None
    pattern_cache: PatternCache | None = dataclasses.field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        self._validate_patterns()
        _check_names("field_rules", self.field_rules)
        self.field_rules = {path: normalize_rule(path, rule) for path, rule in self.field_rules.items()}
        _check_names("custom_callbacks", self.custom_callbacks)
        for path, callback in self.custom_callbacks.items():
            if not callable(callback):
                raise InvalidConfigurationError.wrong_type(f"custom_callbacks[{path!r}]", callback, "callable")
        self.data_type_masks = validate_data_type_masks(self.data_type_masks)
        _check_names("conditional_rules", self.conditional_rules)
        for name, rule in self.conditional_rules.items():
            if not callable(rule):
                raise InvalidConfigurationError.wrong_type(f"conditional_rules[{name!r}]", rule, "callable")
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise InvalidConfigurationError.wrong_type("max_depth", self.max_depth, "int")
        if not MIN_DEPTH <= self.max_depth <= MAX_DEPTH:
            raise InvalidConfigurationError.for_parameter(
                "max_depth", self.max_depth, f"must be between {MIN_DEPTH} and {MAX_DEPTH}"
            )
        if self.audit_sink is not None and not callable(self.audit_sink):
            raise InvalidConfigurationError.wrong_type("audit_sink", self.audit_sink, "callable")
        self.strategies = tuple(self.strategies)
        for strategy in self.strategies:
            if not isinstance(strategy, MaskingStrategy):
                raise InvalidConfigurationError.wrong_type("strategies", strategy, "MaskingStrategy")
        self._validate_recovery()
        if isinstance(self.audit_rate_limit, str):
            self.audit_rate_limit = RateLimitProfile.named(self.audit_rate_limit)
        elif self.audit_rate_limit is not None and not isinstance(self.audit_rate_limit, RateLimitProfile):
            raise InvalidConfigurationError.wrong_type("audit_rate_limit", self.audit_rate_limit, "RateLimitProfile or str")

    def _validate_patterns(self) -> None:
        if self.pattern_cache is None:
            self.pattern_cache = PatternCache()
        validator = PatternValidator(self.pattern_cache)
        for pattern, replacement in self.patterns.items():
            if not isinstance(pattern, str):
                raise InvalidConfigurationError.wrong_type("patterns", pattern, "str")
            if not pattern:
                raise InvalidPatternError.empty()
            if not isinstance(replacement, str):
                raise InvalidConfigurationError.wrong_type(f"patterns[{pattern!r}]", replacement, "str")
            check_template(validator.validate(pattern), replacement)

    def _validate_recovery(self) -> None:
        if self.recovery is not None:
            if not isinstance(self.recovery, RecoveryStrategy):
                raise InvalidConfigurationError.wrong_type("recovery", self.recovery, "RecoveryStrategy")
            return
        if not isinstance(self.failure_mode, FailureMode):
            try:
                self.failure_mode = FailureMode(self.failure_mode)
            except ValueError:
                raise InvalidConfigurationError.for_parameter(
                    "failure_mode", self.failure_mode, f"expected one of {[m.value for m in FailureMode]}"
                ) from None
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or not 1 <= self.max_attempts <= MAX_ATTEMPTS_LIMIT:
            raise InvalidConfigurationError.for_parameter(
                "max_attempts", self.max_attempts, f"must be an integer between 1 and {MAX_ATTEMPTS_LIMIT}"
            )
        if self.base_delay < 0 or self.max_delay < self.base_delay:
            raise InvalidConfigurationError.for_parameter(
                "base_delay", self.base_delay, "must be >= 0 and not exceed max_delay"
            )


__all__ = ["MAX_DEPTH", "MIN_DEPTH", "MaskingConfig"]
