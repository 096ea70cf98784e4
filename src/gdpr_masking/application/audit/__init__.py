"""Application audit – events, emission and structured contexts."""
from gdpr_masking.application.audit.context import (
    AuditContext,
    AuditStatus,
    ErrorContext,
    OperationType,
    new_correlation_id,
    sanitize_message,
)
from gdpr_masking.application.audit.emitter import (
    AuditEmitter,
    ListAuditSink,
    StructlogAuditSink,
    rate_limit_key,
)
from gdpr_masking.application.audit.events import AuditEvent, AuditSink, AuditTag

__all__ = [
    "AuditContext",
    "AuditEmitter",
    "AuditEvent",
    "AuditSink",
    "AuditStatus",
    "AuditTag",
    "ErrorContext",
    "ListAuditSink",
    "OperationType",
    "StructlogAuditSink",
    "new_correlation_id",
    "rate_limit_key",
    "sanitize_message",
]
