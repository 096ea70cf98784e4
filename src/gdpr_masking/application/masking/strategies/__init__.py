"""Masking strategies – one applicable strategy is chosen per value."""
from gdpr_masking.application.masking.strategies.base import MaskingStrategy, coerce_like, value_to_string
from gdpr_masking.application.masking.strategies.callback import CallbackMaskingStrategy
from gdpr_masking.application.masking.strategies.conditional import ConditionalMaskingStrategy
from gdpr_masking.application.masking.strategies.data_type import (
    DataType,
    DataTypeMaskingStrategy,
    validate_data_type_masks,
)
from gdpr_masking.application.masking.strategies.field_path import FieldPathMaskingStrategy
from gdpr_masking.application.masking.strategies.manager import StrategyManager
from gdpr_masking.application.masking.strategies.regex import RegexMaskingStrategy

__all__ = [
    "CallbackMaskingStrategy",
    "ConditionalMaskingStrategy",
    "DataType",
    "DataTypeMaskingStrategy",
    "FieldPathMaskingStrategy",
    "MaskingStrategy",
    "RegexMaskingStrategy",
    "StrategyManager",
    "coerce_like",
    "validate_data_type_masks",
    "value_to_string",
]
