"""Masking strategies – RegexMaskingStrategy."""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.patterns import PatternValidator
from gdpr_masking.application.masking.rules import check_template
from gdpr_masking.application.masking.strategies.base import MaskingStrategy, value_to_string
from gdpr_masking.kernel.errors import InvalidConfigurationError, MaskingOperationFailedError


class RegexMaskingStrategy(MaskingStrategy):
    """Substitute every configured pattern in scalar values.

    Patterns are applied in insertion order, each over the output of the
    previous one.  Containers are never matched; the processor descends into
    them and masks their scalars individually.
    """

    DEFAULT_PRIORITY = 60

    def __init__(
        self,
        patterns: Mapping[str, str],
        *,
        include_paths: Sequence[str] = (),
        exclude_paths: Sequence[str] = (),
        priority: int = DEFAULT_PRIORITY,
        validator: PatternValidator | None = None,
    ) -> None:
        super().__init__(
            priority,
            {
                "patterns": dict(patterns),
                "include_paths": list(include_paths),
                "exclude_paths": list(exclude_paths),
            },
        )
        validator = validator or PatternValidator()
        compiled: list[tuple[re.Pattern[str], str]] = []
        for pattern, replacement in patterns.items():
            if not isinstance(replacement, str):
                raise InvalidConfigurationError.wrong_type(f"patterns[{pattern!r}]", replacement, "str")
            regex = validator.validate(pattern)
            check_template(regex, replacement)
            compiled.append((regex, replacement))
        self._compiled = tuple(compiled)
        self._include_paths = tuple(include_paths)
        self._exclude_paths = tuple(exclude_paths)

    def should_apply(self, value: Any, path: str, record: RecordContext) -> bool:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return False
        if self._exclude_paths and self._path_in(path, self._exclude_paths):
            return False
        if self._include_paths and not self._path_in(path, self._include_paths):
            return False
        text = value_to_string(value)
        return any(regex.search(text) for regex, _ in self._compiled)

    def apply(self, value: Any, path: str, record: RecordContext) -> Any:
        text = value_to_string(value)
        for regex, replacement in self._compiled:
            try:
                text = regex.sub(replacement, text)
            except (re.error, IndexError, RecursionError) as exc:
                raise MaskingOperationFailedError.regex_failed(regex.pattern, value, exc, path) from exc
        return self.preserve_type(value, text)

    def validate(self) -> bool:
        return super().validate() and bool(self._compiled)


__all__ = ["RegexMaskingStrategy"]
