"""Masking – RecursiveProcessor (depth-bounded traversal of the context).

Depth is counted in containers: the root context map is depth 0, a map
nested inside it depth 1, and so on.  A container reached at
``depth >= max_depth`` is returned as-is (the same object) and reported once
as ``max_depth_reached``.
"""
from __future__ import annotations

import dataclasses
import gc
import itertools
import re
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from gdpr_masking.application.audit import AuditEmitter, AuditEvent, AuditTag, sanitize_message
from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.json_masker import JsonMasker
from gdpr_masking.application.masking.paths import join_path
from gdpr_masking.application.masking.rules import REMOVED
from gdpr_masking.application.masking.strategies import MaskingStrategy, StrategyManager
from gdpr_masking.kernel.errors import InvalidConfigurationError, RecursionDepthExceededError
from gdpr_masking.kernel.masks import MASK_CIRCULAR
from gdpr_masking.observability.logging import get_logger
from gdpr_masking.resilience.recovery import RecoveryStrategy, RetryStrategy

logger = get_logger(__name__)

CHUNK_THRESHOLD = 1_000
CHUNK_SIZE = 1_000
GC_THRESHOLD = 10_000
MAX_DEPTH_LIMIT = 1_000

_REMOVED_PREVIEW = "[REMOVED]"


@dataclasses.dataclass(frozen=True)
class TraversalState:
    """Depth carried by value through one traversal."""

    current_depth: int
    max_depth: int

    @property
    def at_limit(self) -> bool:
        return self.current_depth >= self.max_depth

    def descend(self) -> TraversalState:
        return TraversalState(self.current_depth + 1, self.max_depth)


@dataclasses.dataclass(frozen=True)
class MaskResult:
    message: str
    context: dict[str, Any]
    audit_events: tuple[AuditEvent, ...] = ()


class _Call:
    """Per-invocation scratch space: record, emitted events, open containers."""

    __slots__ = ("record", "events", "ancestors", "emitter")

    def __init__(self, record: RecordContext, emitter: AuditEmitter) -> None:
        self.record = record
        self.emitter = emitter
        self.events: list[AuditEvent] = []
        self.ancestors: set[int] = set()

    def audit(self, event: AuditEvent) -> None:
        if self.emitter.emit(event):
            self.events.append(event)


def _changed(original: Any, masked: Any) -> bool:
    return type(original) is not type(masked) or original != masked


def _batches(items: Iterable[Any], size: int) -> Iterator[list[Any]]:
    iterator = iter(items)
    while batch := list(itertools.islice(iterator, size)):
        yield batch


class RecursiveProcessor:
    """Walk ``context`` depth-first and mask every value via the strategy manager.

    Each strategy application runs under the recovery strategy, so a failing
    strategy degrades to its fallback value instead of raising.
    """

    def __init__(
        self,
        manager: StrategyManager,
        *,
        max_depth: int = 100,
        recovery: RecoveryStrategy | None = None,
        emitter: AuditEmitter | None = None,
        message_patterns: Sequence[tuple[re.Pattern[str], str]] = (),
        mask_json_in_message: bool = True,
    ) -> None:
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or not 1 <= max_depth <= MAX_DEPTH_LIMIT:
            raise InvalidConfigurationError.for_parameter(
                "max_depth", max_depth, f"must be an integer between 1 and {MAX_DEPTH_LIMIT}"
            )
        self._manager = manager
        self._max_depth = max_depth
        self._recovery = recovery or RetryStrategy.default()
        self._emitter = emitter or AuditEmitter()
        self._message_patterns = tuple(message_patterns)
        self._mask_json_in_message = mask_json_in_message

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def mask(
        self,
        message: str,
        context: dict[str, Any],
        record: RecordContext | None = None,
        *,
        max_depth: int | None = None,
    ) -> MaskResult:
        """Mask *message* and *context*; *max_depth* overrides the configured bound."""
        depth = self._max_depth if max_depth is None else max(1, min(max_depth, MAX_DEPTH_LIMIT))
        call = _Call(record or RecordContext(message=message, context=context), self._emitter)
        masked_message = self._mask_message(message, call)
        masked_context = self._walk(context, "", TraversalState(0, depth), call)
        if not isinstance(masked_context, dict):
            masked_context = context
        return MaskResult(masked_message, masked_context, tuple(call.events))

    def mask_structure(self, data: Any, record: RecordContext | None = None) -> tuple[Any, tuple[AuditEvent, ...]]:
        """Mask a standalone map or sequence with root depth 0."""
        call = _Call(record or RecordContext(), self._emitter)
        masked = self._walk(data, "", TraversalState(0, self._max_depth), call)
        return masked, tuple(call.events)

    # ------------------------------------------------------------------
    # message
    # ------------------------------------------------------------------

    def _mask_message(self, message: str, call: _Call) -> str:
        if not message:
            return message
        if self._mask_json_in_message:
            message = self._json_masker(call).mask(message)
        for regex, replacement in self._message_patterns:
            try:
                message = regex.sub(replacement, message)
            except (re.error, IndexError, RecursionError) as exc:
                reason = sanitize_message(str(exc))
                logger.warning("masking.message_pattern_failed", pattern=regex.pattern, error=reason)
                call.audit(AuditEvent.notice(AuditTag.REGEX_ERROR, regex.pattern, reason, clock=self._emitter.clock))
        return message

    def _json_masker(self, call: _Call) -> JsonMasker:
        def _mask_structure(data: Any) -> Any:
            return self._walk(data, "", TraversalState(0, self._max_depth), call)

        def _on_masked(original: str, masked: str) -> None:
            call.audit(AuditEvent.notice(AuditTag.JSON_MASKED, original, masked, clock=self._emitter.clock))

        return JsonMasker(_mask_structure, _on_masked)

    # ------------------------------------------------------------------
    # context
    # ------------------------------------------------------------------

    def _walk(self, node: Any, path: str, state: TraversalState, call: _Call) -> Any:
        if not isinstance(node, (dict, list, tuple)):
            return node
        if state.at_limit:
            error = RecursionDepthExceededError.depth_exceeded(path or "<root>", state.current_depth, state.max_depth)
            logger.debug("masking.max_depth_reached", **error.detail)
            call.audit(AuditEvent.notice(AuditTag.MAX_DEPTH_REACHED, path or "<root>", error.message, clock=self._emitter.clock))
            return node
        node_id = id(node)
        if node_id in call.ancestors:
            error = RecursionDepthExceededError.circular_reference(path or "<root>", state.current_depth, state.max_depth)
            logger.debug("masking.circular_reference", **error.detail)
            call.audit(AuditEvent.notice(AuditTag.CIRCULAR_REFERENCE, path or "<root>", error.message, clock=self._emitter.clock))
            return MASK_CIRCULAR
        call.ancestors.add(node_id)
        try:
            child_state = state.descend()
            if isinstance(node, dict):
                return self._walk_mapping(node, path, child_state, call)
            items = self._walk_sequence(node, path, child_state, call)
            return tuple(items) if isinstance(node, tuple) else items
        finally:
            call.ancestors.discard(node_id)

    def _walk_mapping(self, node: dict[Any, Any], path: str, state: TraversalState, call: _Call) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        for key, value in self._entries(node.items(), len(node)):
            masked = self._mask_entry(value, join_path(path, key), state, call)
            if masked is not REMOVED:
                result[key] = masked
        return result

    def _walk_sequence(self, node: Sequence[Any], path: str, state: TraversalState, call: _Call) -> list[Any]:
        result: list[Any] = []
        for index, value in self._entries(enumerate(node), len(node)):
            masked = self._mask_entry(value, join_path(path, index), state, call)
            if masked is not REMOVED:
                result.append(masked)
        return result

    @staticmethod
    def _entries(items: Iterable[Any], size: int) -> Iterator[Any]:
        if size <= CHUNK_THRESHOLD:
            yield from items
            return
        for batch in _batches(items, CHUNK_SIZE):
            yield from batch
            if size > GC_THRESHOLD:
                gc.collect()

    def _mask_entry(self, value: Any, path: str, state: TraversalState, call: _Call) -> Any:
        strategy = self._manager.select(value, path, call.record)
        if strategy is None:
            return self._walk(value, path, state, call)
        masked = self._apply(strategy, value, path, call)
        if masked is REMOVED:
            call.audit(AuditEvent.masked(path, value, _REMOVED_PREVIEW, clock=self._emitter.clock))
        elif _changed(value, masked):
            call.audit(AuditEvent.masked(path, value, masked, clock=self._emitter.clock))
        return masked

    def _apply(self, strategy: MaskingStrategy, value: Any, path: str, call: _Call) -> Any:
        record = call.record
        outcome = self._recovery.execute(
            lambda: strategy.apply(value, path, record),
            value,
            path,
            self._emitter,
        )
        if outcome.is_success and outcome.value is not REMOVED:
            return strategy.preserve_type(value, outcome.value)
        return outcome.value


__all__ = ["CHUNK_THRESHOLD", "GC_THRESHOLD", "MaskResult", "RecursiveProcessor", "TraversalState"]
