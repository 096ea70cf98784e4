"""Resilience – bounded retry and fallback for masking operations."""
