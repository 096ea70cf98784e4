"""Unit tests for JSON fragment masking inside messages."""

from __future__ import annotations

import time
from typing import Any

import pytest

from gdpr_masking.application.masking import JsonMasker
from gdpr_masking.application.masking.json_masker import encode, iter_json_fragments


def _redact_emails(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: "[email]" if k == "email" else _redact_emails(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_redact_emails(v) for v in data]
    return data


class TestIterJsonFragments:
    def test_finds_objects_and_arrays(self) -> None:
        text = 'a {"x": 1} b [1, 2] c'
        fragments = list(iter_json_fragments(text))
        assert [(text[s:e], d) for s, e, d in fragments] == [('{"x": 1}', {"x": 1}), ("[1, 2]", [1, 2])]

    def test_brackets_inside_strings(self) -> None:
        text = 'x {"a": "}]{"} y'
        assert [d for _, _, d in iter_json_fragments(text)] == [{"a": "}]{"}]

    def test_invalid_fragments_skipped(self) -> None:
        assert list(iter_json_fragments("{not json} and [1}")) == []

    def test_nested_yields_outer_only(self) -> None:
        fragments = list(iter_json_fragments('{"a": {"b": [1]}}'))
        assert len(fragments) == 1

    def test_unclosed_prefix_does_not_hide_fragment(self) -> None:
        text = '[note {"a": 1} trailing'
        assert [d for _, _, d in iter_json_fragments(text)] == [{"a": 1}]

    def test_mismatched_closer_then_fragment(self) -> None:
        text = '[1} {"a": 2}'
        assert [d for _, _, d in iter_json_fragments(text)] == [{"a": 2}]

    @pytest.mark.parametrize(
        "text",
        [
            "[" * 100_000,
            "{" * 100_000,
            "{" * 50_000 + '"' + "[" * 50_000,
            '["' * 50_000,
        ],
    )
    def test_unbalanced_input_scans_in_linear_time(self, text: str) -> None:
        started = time.perf_counter()
        assert list(iter_json_fragments(text)) == []
        assert time.perf_counter() - started < 2.0

    def test_fragment_after_many_openers_is_found(self) -> None:
        text = "{" * 20_000 + ' {"email": "x"}'
        assert [d for _, _, d in iter_json_fragments(text)] == [{"email": "x"}]

    def test_nesting_deeper_than_decoder_does_not_raise(self) -> None:
        text = "[" * 5_000 + "]" * 5_000
        assert len(list(iter_json_fragments(text))) <= 1


class TestJsonMasker:
    def test_masks_fragment_in_place(self) -> None:
        seen: list[tuple[str, str]] = []
        masker = JsonMasker(_redact_emails, lambda original, masked: seen.append((original, masked)))
        message = 'user {"email": "a@b.io"} signed in'
        assert masker.mask(message) == 'user {"email":"[email]"} signed in'
        assert seen == [('{"email": "a@b.io"}', '{"email":"[email]"}')]

    def test_unchanged_message_returned_verbatim(self) -> None:
        masker = JsonMasker(_redact_emails)
        message = 'ids {"id": 1}  [1,  2]'
        assert masker.mask(message) == message

    def test_plain_text(self) -> None:
        assert JsonMasker(_redact_emails).mask("no json here") == "no json here"

    def test_multiple_fragments(self) -> None:
        masker = JsonMasker(_redact_emails)
        message = '[{"email": "x"}] and {"email": "y"}'
        assert masker.mask(message) == '[{"email":"[email]"}] and {"email":"[email]"}'

    def test_encode_keeps_unicode(self) -> None:
        assert encode({"name": "José"}) == '{"name":"José"}'

    def test_unbalanced_message_left_unchanged(self) -> None:
        message = "[" * 50_000 + " contact a@b.io"
        assert JsonMasker(_redact_emails).mask(message) == message
