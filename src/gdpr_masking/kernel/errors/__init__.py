"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    MaskingError
    ├── MaskingConfigurationError      (configuration.py)
    │   ├── InvalidPatternError
    │   ├── InvalidConfigurationError
    │   └── InvalidRateLimitConfigError
    └── MaskingRuntimeError            (runtime.py)
        ├── MaskingOperationFailedError
        ├── RecursionDepthExceededError
        ├── RateLimitExceededError
        └── AuditLoggingError
"""

from gdpr_masking.kernel.errors.base import MaskingError
from gdpr_masking.kernel.errors.configuration import (
    InvalidConfigurationError,
    InvalidPatternError,
    InvalidRateLimitConfigError,
    MaskingConfigurationError,
)
from gdpr_masking.kernel.errors.runtime import (
    AuditLoggingError,
    MaskingOperationFailedError,
    MaskingRuntimeError,
    RateLimitExceededError,
    RecursionDepthExceededError,
)

__all__ = [
    "AuditLoggingError",
    "InvalidConfigurationError",
    "InvalidPatternError",
    "InvalidRateLimitConfigError",
    "MaskingConfigurationError",
    "MaskingError",
    "MaskingOperationFailedError",
    "MaskingRuntimeError",
    "RateLimitExceededError",
    "RecursionDepthExceededError",
]
