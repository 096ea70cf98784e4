"""Observability – structlog integration."""
