"""Kernel time – Clock port."""
from gdpr_masking.kernel.time.clock import Clock, FrozenClock, SystemClock

__all__ = ["Clock", "FrozenClock", "SystemClock"]
