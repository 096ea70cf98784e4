"""Kernel – size-capped, type-tagged value previews.

Previews are what the audit channel and error payloads carry instead of raw
values, so they never run past ``limit`` characters (ellipsis included) and
never serialise container contents.
"""
from __future__ import annotations

from typing import Any

PREVIEW_LIMIT = 100


def type_name(value: Any) -> str:
    """Return the primitive-family name of *value*.

    ``bool`` is checked before ``int`` because it is a subclass of it.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def value_preview(value: Any, limit: int = PREVIEW_LIMIT) -> str:
    """Render *value* as an audit-safe preview string."""
    if isinstance(value, dict):
        return f"<object:{len(value)} keys>"
    if isinstance(value, (list, tuple)):
        return f"<array:{len(value)} items>"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    text = value if isinstance(value, str) else str(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


__all__ = ["PREVIEW_LIMIT", "type_name", "value_preview"]
