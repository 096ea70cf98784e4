"""Observability logging – get_logger, masking processor and JSON factory."""
from gdpr_masking.observability.logging.factory import JsonLoggerFactory
from gdpr_masking.observability.logging.logger import get_logger
from gdpr_masking.observability.logging.processors import MaskingProcessor

__all__ = ["JsonLoggerFactory", "MaskingProcessor", "get_logger"]
