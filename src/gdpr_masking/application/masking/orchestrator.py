"""Masking – MaskingOrchestrator, the ``process`` entry point.

Wiring, highest priority first::

    custom_callbacks   CallbackMaskingStrategy      90
    field_rules        FieldPathMaskingStrategy     80
    patterns           RegexMaskingStrategy         60
    data_type_masks    DataTypeMaskingStrategy      40
    strategies         user supplied                own priority
"""
from __future__ import annotations

from typing import Any

from gdpr_masking.application.audit import AuditEmitter, AuditEvent, AuditTag
from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.config import MaskingConfig
from gdpr_masking.application.masking.patterns import PatternCache, PatternValidator
from gdpr_masking.application.masking.processor import MaskResult, RecursiveProcessor
from gdpr_masking.application.masking.strategies import (
    CallbackMaskingStrategy,
    DataTypeMaskingStrategy,
    FieldPathMaskingStrategy,
    MaskingStrategy,
    RegexMaskingStrategy,
    StrategyManager,
)
from gdpr_masking.application.rate_limit import SlidingWindowRateLimiter
from gdpr_masking.kernel.time import SystemClock
from gdpr_masking.observability.logging import get_logger
from gdpr_masking.resilience.recovery import RecoveryStrategy, RetryStrategy

logger = get_logger(__name__)

CALLBACK_PRIORITY = 90
FIELD_PATH_PRIORITY = FieldPathMaskingStrategy.DEFAULT_PRIORITY
REGEX_PRIORITY = RegexMaskingStrategy.DEFAULT_PRIORITY
DATA_TYPE_PRIORITY = DataTypeMaskingStrategy.DEFAULT_PRIORITY


class MaskingOrchestrator:
    """Build the engine once from a :class:`MaskingConfig`; call :meth:`process` per record.

    Safe to share across threads: strategies are immutable, and the pattern
    cache and rate windows lock internally.
    """

    def __init__(self, config: MaskingConfig, *, pattern_cache: PatternCache | None = None) -> None:
        self._config = config
        self._validator = PatternValidator(pattern_cache if pattern_cache is not None else config.pattern_cache)
        self._clock = config.clock or SystemClock()
        self._manager = StrategyManager(self._build_strategies())
        self._recovery = config.recovery or self._build_recovery()
        rate_limiter = (
            SlidingWindowRateLimiter.from_profile(config.audit_rate_limit, clock=self._clock)
            if config.audit_rate_limit is not None
            else None
        )
        self._emitter = AuditEmitter(config.audit_sink, rate_limiter, clock=self._clock)
        self._processor = RecursiveProcessor(
            self._manager,
            max_depth=config.max_depth,
            recovery=self._recovery,
            emitter=self._emitter,
            message_patterns=[
                (self._validator.validate(pattern), replacement)
                for pattern, replacement in config.patterns.items()
            ],
            mask_json_in_message=config.mask_json_in_message,
        )

    @property
    def config(self) -> MaskingConfig:
        return self._config

    @property
    def manager(self) -> StrategyManager:
        return self._manager

    @property
    def recovery(self) -> RecoveryStrategy:
        return self._recovery

    @property
    def processor(self) -> RecursiveProcessor:
        return self._processor

    def process(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        *,
        level: str = "INFO",
        channel: str = "app",
    ) -> MaskResult:
        context = context if context is not None else {}
        record = RecordContext(message=message, level=level, channel=channel, context=context)
        if not self._should_mask(record):
            return MaskResult(message, context)
        return self._processor.mask(message, context, record)

    def mask_value(self, value: Any, path: str, record: RecordContext | None = None) -> Any:
        """Mask a single value as if it sat at *path* in a context."""
        return self._manager.mask_value(value, path, record)

    def _should_mask(self, record: RecordContext) -> bool:
        for name, rule in self._config.conditional_rules.items():
            try:
                passed = bool(rule(record))
            except Exception as exc:
                logger.warning("masking.conditional_rule_failed", rule=name, error=type(exc).__name__)
                self._emitter.emit(
                    AuditEvent.notice(AuditTag.CONDITIONAL_ERROR, name, f"rule raised {type(exc).__name__}", clock=self._clock)
                )
                continue
            if not passed:
                self._emitter.emit(
                    AuditEvent.notice(AuditTag.CONDITIONAL_SKIP, name, "masking skipped by conditional rule", clock=self._clock)
                )
                return False
        return True

    def _build_strategies(self) -> list[MaskingStrategy]:
        config = self._config
        strategies: list[MaskingStrategy] = [
            CallbackMaskingStrategy(path, callback, priority=CALLBACK_PRIORITY)
            for path, callback in config.custom_callbacks.items()
        ]
        if config.field_rules:
            strategies.append(
                FieldPathMaskingStrategy(config.field_rules, priority=FIELD_PATH_PRIORITY)
            )
        if config.patterns:
            strategies.append(
                RegexMaskingStrategy(config.patterns, priority=REGEX_PRIORITY, validator=self._validator)
            )
        if config.data_type_masks:
            strategies.append(DataTypeMaskingStrategy(config.data_type_masks, priority=DATA_TYPE_PRIORITY))
        strategies.extend(config.strategies)
        return strategies

    def _build_recovery(self) -> RecoveryStrategy:
        config = self._config
        return RetryStrategy(
            max_attempts=config.max_attempts,
            base_delay=config.base_delay,
            max_delay=config.max_delay,
            failure_mode=config.failure_mode,
        )


def process(
    message: str,
    context: dict[str, Any],
    config: MaskingConfig,
    *,
    level: str = "INFO",
    channel: str = "app",
) -> MaskResult:
    """One-shot helper; build a :class:`MaskingOrchestrator` to reuse the engine."""
    return MaskingOrchestrator(config).process(message, context, level=level, channel=channel)


__all__ = ["MaskingOrchestrator", "process"]
