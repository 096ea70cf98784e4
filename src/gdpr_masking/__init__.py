"""gdpr-masking – sensitive-data masking engine for log messages and context.

Import paths::

    from gdpr_masking.application.masking import MaskingConfig, MaskingOrchestrator
    from gdpr_masking.application.masking import MaskRule, FieldRule
    from gdpr_masking.application.rate_limit import SlidingWindowRateLimiter
    from gdpr_masking.resilience.recovery import RetryStrategy, FailureMode
    from gdpr_masking.kernel.errors import InvalidPatternError
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
