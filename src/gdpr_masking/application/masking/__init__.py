"""Application masking – rules, strategies, traversal and orchestration."""
from gdpr_masking.application.masking.conditions import ConditionalRuleFactory, RecordContext
from gdpr_masking.application.masking.config import MaskingConfig
from gdpr_masking.application.masking.defaults import default_patterns
from gdpr_masking.application.masking.json_masker import JsonMasker
from gdpr_masking.application.masking.log_filter import MaskingLogFilter
from gdpr_masking.application.masking.orchestrator import MaskingOrchestrator, process
from gdpr_masking.application.masking.patterns import PatternCache, PatternValidator, detect_redos_risk
from gdpr_masking.application.masking.processor import MaskResult, RecursiveProcessor, TraversalState
from gdpr_masking.application.masking.rules import REMOVED, FieldRule, MaskRule, MaskRuleKind
from gdpr_masking.application.masking.strategies import (
    CallbackMaskingStrategy,
    ConditionalMaskingStrategy,
    DataType,
    DataTypeMaskingStrategy,
    FieldPathMaskingStrategy,
    MaskingStrategy,
    RegexMaskingStrategy,
    StrategyManager,
)

__all__ = [
    "REMOVED",
    "CallbackMaskingStrategy",
    "ConditionalMaskingStrategy",
    "ConditionalRuleFactory",
    "DataType",
    "DataTypeMaskingStrategy",
    "FieldPathMaskingStrategy",
    "FieldRule",
    "JsonMasker",
    "MaskResult",
    "MaskRule",
    "MaskRuleKind",
    "MaskingConfig",
    "MaskingLogFilter",
    "MaskingOrchestrator",
    "MaskingStrategy",
    "PatternCache",
    "PatternValidator",
    "RecordContext",
    "RecursiveProcessor",
    "RegexMaskingStrategy",
    "StrategyManager",
    "TraversalState",
    "default_patterns",
    "detect_redos_risk",
    "process",
]
