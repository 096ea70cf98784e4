"""Masking – regex validation with ReDoS heuristics and a shared pattern cache.

:class:`PatternValidator` compiles a pattern and rejects it when a static
heuristic suggests catastrophic backtracking:

* a quantified group whose body is itself quantified (``(a+)+``, ``(a*)*``,
  ``(x+){2,5}``);
* a quantified group whose alternation contains identical branches
  (``(a|a|a)*``, ``(.*|.*)+``).

A heuristic hit rejects the pattern even when the engine would compile it.

Results (compiled pattern or the rejection) are memoised in a
:class:`PatternCache`, which is owned by whoever builds the validator and is
safe to share across threads.
"""
from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, cast

from gdpr_masking.kernel.errors import InvalidPatternError


@dataclass(frozen=True)
class _Entry:
    compiled: re.Pattern[str] | None
    error: InvalidPatternError | None


class PatternCache:
    """Thread-safe memo of validation results keyed by pattern text.

    Reads of already-cached keys take no lock.  A miss takes a per-key lock so
    exactly one thread computes a given entry while threads validating other
    patterns proceed in parallel.
    """

    def __init__(self, max_entries: int = 1024) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: dict[str, _Entry] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._entries

    def get_or_compute(self, pattern: str, compute: Callable[[str], _Entry]) -> _Entry:
        entry = self._entries.get(pattern)
        if entry is not None:
            return entry
        with self._registry_lock:
            key_lock = self._key_locks.setdefault(pattern, threading.Lock())
        with key_lock:
            entry = self._entries.get(pattern)
            if entry is None:
                entry = compute(pattern)
                with self._registry_lock:
                    while len(self._entries) >= self._max_entries:
                        oldest = next(iter(self._entries))
                        del self._entries[oldest]
                        self._key_locks.pop(oldest, None)
                    self._entries[pattern] = entry
        return entry

    def clear(self) -> None:
        with self._registry_lock:
            self._entries.clear()
            self._key_locks.clear()

_QUANTIFIER_RE = re.compile(r"[*+]|\{\d*,\d*\}")
_FOLLOWING_QUANTIFIER_RE = re.compile(r"[*+]|\{(\d+),(\d*)\}")


def _scan_groups(pattern: str) -> Iterable[tuple[str, str]]:
    """Yield ``(group_body, trailing_text)`` for every parenthesised group.

    Escapes and character classes are skipped so ``\\(`` and ``[(+]`` do not
    count as structure.
    """
    stack: list[int] = []
    in_class = False
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
            # a literal ']' directly after '[' or '[^' belongs to the class
            if pattern[i + 1:i + 2] == "^":
                i += 1
            if pattern[i + 1:i + 2] == "]":
                i += 1
        elif ch == "(":
            stack.append(i)
        elif ch == ")" and stack:
            start = stack.pop()
            yield pattern[start + 1:i], pattern[i + 1:]
        i += 1


def _strip_structure(body: str) -> str:
    """Drop escapes, character classes and the group prefix from *body*."""
    body = re.sub(r"^\?(?:P?<[^>]*>|[:=!>]|<[=!])", "", body)
    body = re.sub(r"\\.", "x", body)
    return re.sub(r"\[\^?\]?[^\]]*\]", "x", body)


def _top_level_branches(body: str) -> list[str]:
    branches: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in body:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "|" and depth == 0:
            branches.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    branches.append("".join(current).strip())
    return branches


def _is_repeating(trailing: str) -> bool:
    match = _FOLLOWING_QUANTIFIER_RE.match(trailing)
    if match is None:
        return False
    if match.group(1) is None:
        return True
    upper = match.group(2)
    return upper == "" or int(upper) > int(match.group(1))


def detect_redos_risk(pattern: str) -> str | None:
    """Return a short description of the first backtracking risk, or ``None``."""
    for raw_body, trailing in _scan_groups(pattern):
        if not _is_repeating(trailing):
            continue
        body = _strip_structure(raw_body)
        if _QUANTIFIER_RE.search(body):
            return f"nested quantifier in group '({raw_body})'"
        branches = _top_level_branches(body)
        if len(branches) > 1 and len(set(branches)) < len(branches):
            return f"repeated alternation in group '({raw_body})'"
    return None


class PatternValidator:
    """Validate and compile regular expressions.

    Usage::

        validator = PatternValidator()
        compiled = validator.validate(r"\\d{3}-\\d{2}-\\d{4}")
        validator.is_valid(r"(a+)+$")  # False
    """

    def __init__(self, cache: PatternCache | None = None) -> None:
        self._cache = cache if cache is not None else PatternCache()

    @property
    def cache(self) -> PatternCache:
        return self._cache

    def validate(self, pattern: str) -> re.Pattern[str]:
        """Return the compiled pattern or raise :class:`InvalidPatternError`."""
        entry = self._cache.get_or_compute(pattern, self._compute)
        if entry.error is not None:
            raise entry.error.with_traceback(None)
        return cast("re.Pattern[str]", entry.compiled)

    def is_valid(self, pattern: str) -> bool:
        return self._cache.get_or_compute(pattern, self._compute).error is None

    def validate_all(self, patterns: Iterable[str]) -> dict[str, re.Pattern[str]]:
        """Validate every pattern; the first failure is raised."""
        return {pattern: self.validate(pattern) for pattern in patterns}

    def clear_cache(self) -> None:
        self._cache.clear()

    @staticmethod
    def _compute(pattern: str) -> _Entry:
        if not pattern:
            return _Entry(None, InvalidPatternError.empty())
        risk = detect_redos_risk(pattern)
        if risk is not None:
            return _Entry(None, InvalidPatternError.redos_vulnerable(pattern, risk))
        try:
            compiled = re.compile(pattern)
            compiled.search("")
        except re.error as exc:
            return _Entry(None, InvalidPatternError.compilation_failed(pattern, exc))
        return _Entry(compiled, None)


__all__ = ["PatternCache", "PatternValidator", "detect_redos_risk"]
