"""Masking – dot-notation field paths.

Paths address nested maps (``user.address.zip``) and sequences by index
(``users.0.email``).  A ``*`` in a pattern matches any run of characters,
dots included, so ``user.*`` covers ``user.email`` and ``user.address.zip``.
"""
from __future__ import annotations

import functools
import re
from collections.abc import Mapping, Sequence
from typing import Any, Final


class _Missing:
    def __repr__(self) -> str:
        return "<MISSING>"


MISSING: Final = _Missing()


def join_path(prefix: str, key: object) -> str:
    return f"{prefix}.{key}" if prefix else str(key)


@functools.lru_cache(maxsize=512)
def _wildcard_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


def is_wildcard(pattern: str) -> bool:
    return "*" in pattern


def path_matches(path: str, pattern: str) -> bool:
    """Return ``True`` if *path* equals *pattern* or matches it as a wildcard."""
    if path == pattern:
        return True
    if not is_wildcard(pattern):
        return False
    return _wildcard_regex(pattern).fullmatch(path) is not None


def get_path(data: Any, path: str) -> Any:
    """Resolve a dot path inside *data*; return :data:`MISSING` if absent."""
    node = data
    for segment in path.split("."):
        if isinstance(node, Mapping):
            if segment not in node:
                return MISSING
            node = node[segment]
        elif isinstance(node, Sequence) and not isinstance(node, str) and segment.isdigit():
            index = int(segment)
            if index >= len(node):
                return MISSING
            node = node[index]
        else:
            return MISSING
    return node


__all__ = ["MISSING", "get_path", "is_wildcard", "join_path", "path_matches"]
