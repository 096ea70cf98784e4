"""Masking – structural masking of JSON fragments embedded in messages.

``'payload {"email": "a@b.io"} rejected'`` has its ``{...}`` fragment decoded,
masked like a context map and re-encoded in place.  Fragments that are not
valid JSON are left for the message regex pass.

Bracket matching stays linear: one scan records the closing index of every
opener it passes outside a string literal, and later openers reuse that
result instead of rescanning.  Total scanning and decoding work is capped at
``SCAN_BUDGET_FACTOR`` times the message length; past that the remaining
text is left to the regex pass.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Iterator

_OPENERS = {"{": "}", "[": "]"}
_CLOSERS = frozenset(_OPENERS.values())

SCAN_BUDGET_FACTOR = 8


def _scan(text: str, start: int) -> tuple[dict[int, int], int]:
    """Match brackets from the opener at *start*.

    Returns the closing index of every opener seen outside a string (``-1``
    for those still open when scanning stopped) and the index scanning
    stopped at.  An opener still open at a mismatched closer or at the end of
    the text can never be closed, whichever opener the scan started from.
    """
    closes = {start: -1}
    stack = [(_OPENERS[text[start]], start)]
    in_string = False
    escaped = False
    for i in range(start + 1, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _OPENERS:
            stack.append((_OPENERS[ch], i))
            closes[i] = -1
        elif ch in _CLOSERS:
            expected, opened = stack.pop()
            if ch != expected:
                return closes, i + 1
            closes[opened] = i
            if not stack:
                return closes, i + 1
    return closes, len(text)


def _decode(fragment: str) -> Any:
    try:
        return json.loads(fragment)
    except (ValueError, RecursionError):
        return None


def iter_json_fragments(text: str) -> Iterator[tuple[int, int, Any]]:
    """Yield ``(start, end, decoded)`` for each top-level JSON container."""
    n = len(text)
    budget = SCAN_BUDGET_FACTOR * n
    known: dict[int, int] = {}
    i = 0
    while i < n:
        if text[i] not in _OPENERS:
            i += 1
            continue
        end = known.get(i)
        if end is None:
            closes, stop = _scan(text, i)
            budget -= stop - i
            known.update(closes)
            end = closes[i]
        if end != -1:
            budget -= end + 1 - i
            if budget < 0:
                return
            decoded = _decode(text[i:end + 1])
            if isinstance(decoded, (dict, list)):
                yield i, end + 1, decoded
                i = end + 1
                continue
        elif budget < 0:
            return
        i += 1


def encode(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)


class JsonMasker:
    """Replace JSON fragments in a message with their masked encoding.

    Parameters
    ----------
    mask_structure:
        Masks a decoded fragment and returns the masked copy.
    on_masked:
        Called with ``(original_fragment, masked_fragment)`` for every
        fragment that changed.
    """

    def __init__(
        self,
        mask_structure: Callable[[Any], Any],
        on_masked: Callable[[str, str], None] | None = None,
    ) -> None:
        self._mask_structure = mask_structure
        self._on_masked = on_masked

    def mask(self, message: str) -> str:
        if "{" not in message and "[" not in message:
            return message
        parts: list[str] = []
        cursor = 0
        for start, end, decoded in iter_json_fragments(message):
            masked = self._mask_structure(decoded)
            if masked == decoded:
                continue
            fragment = message[start:end]
            replacement = encode(masked)
            parts.append(message[cursor:start])
            parts.append(replacement)
            cursor = end
            if self._on_masked is not None:
                self._on_masked(fragment, replacement)
        if not parts:
            return message
        parts.append(message[cursor:])
        return "".join(parts)


__all__ = ["JsonMasker", "encode", "iter_json_fragments"]
