"""Unit tests for the five masking strategies."""

from __future__ import annotations

import hashlib

import pytest

from gdpr_masking.application.masking import (
    REMOVED,
    CallbackMaskingStrategy,
    ConditionalMaskingStrategy,
    ConditionalRuleFactory,
    DataTypeMaskingStrategy,
    FieldPathMaskingStrategy,
    MaskRule,
    RecordContext,
    RegexMaskingStrategy,
)
from gdpr_masking.application.masking.strategies import coerce_like, value_to_string
from gdpr_masking.kernel.errors import InvalidConfigurationError, InvalidPatternError, MaskingOperationFailedError

RECORD = RecordContext(message="m", level="INFO", channel="app")
SSN = r"\d{3}-\d{2}-\d{4}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("a", "a"), (None, ""), (True, "true"), (7, "7"), ([1], "[1]"), ({"a": 1}, '{"a": 1}')],
    )
    def test_value_to_string(self, value: object, expected: str) -> None:
        assert value_to_string(value) == expected

    @pytest.mark.parametrize(
        ("original", "masked", "expected"),
        [
            (42, "999", 999),
            (42, "***", "***"),
            (1.5, "0.0", 0.0),
            (True, "false", False),
            (True, "nope", "nope"),
            (None, "null", None),
            ([1, 2], "[]", []),
            ({"a": 1}, "{}", {}),
            ("text", "123", "123"),
            (42, 7, 7),
            (42, "1e999", "1e999"),
            (1.5, "1e999", "1e999"),
        ],
    )
    def test_coerce_like(self, original: object, masked: object, expected: object) -> None:
        result = coerce_like(original, masked)
        assert result == expected
        assert type(result) is type(expected)


# ---------------------------------------------------------------------------
# RegexMaskingStrategy
# ---------------------------------------------------------------------------


class TestRegexMaskingStrategy:
    def test_applies_to_matching_string(self) -> None:
        strategy = RegexMaskingStrategy({SSN: "***-**-****"})
        assert strategy.should_apply("ssn 123-45-6789", "a", RECORD)
        assert strategy.apply("ssn 123-45-6789", "a", RECORD) == "ssn ***-**-****"

    def test_patterns_applied_in_order(self) -> None:
        strategy = RegexMaskingStrategy({r"secret": "token", r"token": "[T]"})
        assert strategy.apply("secret", "a", RECORD) == "[T]"

    def test_skips_non_matching_and_containers(self) -> None:
        strategy = RegexMaskingStrategy({SSN: "x"})
        assert not strategy.should_apply("nothing here", "a", RECORD)
        assert not strategy.should_apply({"ssn": "123-45-6789"}, "a", RECORD)
        assert not strategy.should_apply(True, "a", RECORD)

    def test_numeric_type_preserved(self) -> None:
        strategy = RegexMaskingStrategy({r"^\d+$": "0"})
        assert strategy.apply(4111, "card", RECORD) == 0

    def test_include_and_exclude_paths(self) -> None:
        strategy = RegexMaskingStrategy(
            {SSN: "x"}, include_paths=["user.*"], exclude_paths=["user.public"]
        )
        assert strategy.should_apply("123-45-6789", "user.ssn", RECORD)
        assert not strategy.should_apply("123-45-6789", "user.public", RECORD)
        assert not strategy.should_apply("123-45-6789", "order.ssn", RECORD)

    def test_redos_rejected_at_construction(self) -> None:
        with pytest.raises(InvalidPatternError):
            RegexMaskingStrategy({r"(a+)+$": "x"})

    def test_replacement_must_be_string(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            RegexMaskingStrategy({SSN: 1})  # type: ignore[dict-item]

    def test_default_priority(self) -> None:
        assert RegexMaskingStrategy({SSN: "x"}).priority == 60


# ---------------------------------------------------------------------------
# FieldPathMaskingStrategy
# ---------------------------------------------------------------------------


class TestFieldPathMaskingStrategy:
    def test_remove_returns_sentinel(self) -> None:
        strategy = FieldPathMaskingStrategy({"user.ssn": MaskRule.remove()})
        assert strategy.apply("123", "user.ssn", RECORD) is REMOVED

    def test_literal_replacement(self) -> None:
        strategy = FieldPathMaskingStrategy({"user.email": "[email]"})
        assert strategy.apply("a@b.io", "user.email", RECORD) == "[email]"

    def test_replace_coerces_numeric(self) -> None:
        strategy = FieldPathMaskingStrategy({"age": MaskRule.replace("0")})
        assert strategy.apply(37, "age", RECORD) == 0

    def test_replace_keeps_string_when_not_coercible(self) -> None:
        strategy = FieldPathMaskingStrategy({"age": MaskRule.replace("***")})
        assert strategy.apply(37, "age", RECORD) == "***"

    def test_regex_rule(self) -> None:
        strategy = FieldPathMaskingStrategy({"card": MaskRule.regex_mask(r"\d(?=\d{4})", "*")})
        assert strategy.apply("4111111111111111", "card", RECORD) == "************1111"

    def test_exact_beats_wildcard(self) -> None:
        strategy = FieldPathMaskingStrategy(
            {"user.*": MaskRule.replace("[wild]"), "user.email": MaskRule.replace("[exact]")}
        )
        assert strategy.apply("x", "user.email", RECORD) == "[exact]"
        assert strategy.apply("x", "user.phone", RECORD) == "[wild]"

    def test_should_apply_only_for_configured_paths(self) -> None:
        strategy = FieldPathMaskingStrategy({"a.b": "x"})
        assert strategy.should_apply("v", "a.b", RECORD)
        assert not strategy.should_apply("v", "a.c", RECORD)

    def test_applies_to_containers(self) -> None:
        strategy = FieldPathMaskingStrategy({"user": MaskRule.replace("[user]")})
        assert strategy.apply({"email": "x"}, "user", RECORD) == "[user]"

    def test_invalid_rule_value(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            FieldPathMaskingStrategy({"a": 5})  # type: ignore[dict-item]


# ---------------------------------------------------------------------------
# DataTypeMaskingStrategy
# ---------------------------------------------------------------------------


class TestDataTypeMaskingStrategy:
    def test_integer_mask_keeps_int(self) -> None:
        strategy = DataTypeMaskingStrategy({"integer": "999"})
        result = strategy.apply(42, "count", RECORD)
        assert result == 999
        assert isinstance(result, int)

    def test_bool_is_not_integer(self) -> None:
        strategy = DataTypeMaskingStrategy({"integer": "999"})
        assert not strategy.should_apply(True, "flag", RECORD)

    def test_boolean_and_float(self) -> None:
        strategy = DataTypeMaskingStrategy({"boolean": "false", "float": "0.5"})
        assert strategy.apply(True, "f", RECORD) is False
        assert strategy.apply(9.99, "p", RECORD) == 0.5

    def test_json_literals_for_containers(self) -> None:
        strategy = DataTypeMaskingStrategy({"array": '["x"]', "object": '{"masked": true}'})
        assert strategy.apply([1, 2, 3], "items", RECORD) == ["x"]
        assert strategy.apply({"a": 1}, "obj", RECORD) == {"masked": True}

    def test_unconvertible_literal_stays_string(self) -> None:
        strategy = DataTypeMaskingStrategy({"integer": "***INT***"})
        assert strategy.apply(5, "n", RECORD) == "***INT***"

    def test_exclude_paths(self) -> None:
        strategy = DataTypeMaskingStrategy({"string": "***"}, exclude_paths=["meta.*"])
        assert not strategy.should_apply("v", "meta.id", RECORD)
        assert strategy.should_apply("v", "user.id", RECORD)

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            DataTypeMaskingStrategy({"double": "0"})

    def test_empty_mask_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            DataTypeMaskingStrategy({"string": " "})

    @pytest.mark.parametrize("masks", [{"integer": "1e999"}, {"float": "-1e400"}])
    def test_out_of_range_numeric_literal_rejected(self, masks: dict[str, str]) -> None:
        with pytest.raises(InvalidConfigurationError) as exc_info:
            DataTypeMaskingStrategy(masks)
        assert "out of range" in exc_info.value.message

    def test_presets(self) -> None:
        default = DataTypeMaskingStrategy.create_default()
        assert default.apply("secret", "a", RECORD) == "***STRING***"
        assert default.apply([1], "a", RECORD) == []
        sensitive = DataTypeMaskingStrategy.create_sensitive_only()
        assert not sensitive.should_apply(1, "a", RECORD)
        assert sensitive.apply("x", "a", RECORD) == "***MASKED***"


# ---------------------------------------------------------------------------
# ConditionalMaskingStrategy
# ---------------------------------------------------------------------------


def _boom(_record: RecordContext) -> bool:
    raise RuntimeError("broken condition")


class TestConditionalMaskingStrategy:
    wrapped = FieldPathMaskingStrategy({"email": "[email]"})

    def test_for_levels(self) -> None:
        strategy = ConditionalMaskingStrategy.for_levels(self.wrapped, ["error"])
        assert strategy.should_apply("x", "email", RecordContext(level="ERROR"))
        assert not strategy.should_apply("x", "email", RecordContext(level="INFO"))

    def test_for_channels(self) -> None:
        strategy = ConditionalMaskingStrategy.for_channels(self.wrapped, ["security"])
        assert strategy.should_apply("x", "email", RecordContext(channel="security"))
        assert not strategy.should_apply("x", "email", RecordContext(channel="app"))

    def test_for_context(self) -> None:
        strategy = ConditionalMaskingStrategy.for_context(self.wrapped, {"user.region": "eu"})
        assert strategy.should_apply("x", "email", RecordContext(context={"user": {"region": "eu"}}))
        assert not strategy.should_apply("x", "email", RecordContext(context={"user": {"region": "us"}}))

    def test_delegates_should_apply(self) -> None:
        strategy = ConditionalMaskingStrategy(self.wrapped, {})
        assert not strategy.should_apply("x", "phone", RECORD)
        assert strategy.apply("x", "email", RECORD) == "[email]"

    def test_raising_condition_fails_and_semantics(self) -> None:
        strategy = ConditionalMaskingStrategy(
            self.wrapped, {"ok": lambda r: True, "broken": _boom}, require_all=True
        )
        assert not strategy.should_apply("x", "email", RECORD)

    def test_raising_condition_ignored_under_or(self) -> None:
        strategy = ConditionalMaskingStrategy(
            self.wrapped, {"broken": _boom, "ok": lambda r: True}, require_all=False
        )
        assert strategy.should_apply("x", "email", RECORD)

    def test_or_with_only_raising_condition_is_not_satisfied(self) -> None:
        strategy = ConditionalMaskingStrategy(self.wrapped, {"broken": _boom}, require_all=False)
        assert not strategy.should_apply("x", "email", RECORD)

    def test_non_callable_condition_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            ConditionalMaskingStrategy(self.wrapped, {"bad": "nope"})  # type: ignore[dict-item]

    def test_rule_factory_presence(self) -> None:
        condition = ConditionalRuleFactory.context_field_present("user.id")
        assert condition(RecordContext(context={"user": {"id": 1}}))
        assert not condition(RecordContext(context={}))


# ---------------------------------------------------------------------------
# CallbackMaskingStrategy
# ---------------------------------------------------------------------------


class TestCallbackMaskingStrategy:
    def test_exact_path(self) -> None:
        strategy = CallbackMaskingStrategy("user.name", str.upper)
        assert strategy.should_apply("ann", "user.name", RECORD)
        assert not strategy.should_apply("ann", "user.names", RECORD)
        assert strategy.apply("ann", "user.name", RECORD) == "ANN"

    def test_wildcard_when_not_exact(self) -> None:
        strategy = CallbackMaskingStrategy("users.*.name", str.upper, exact_match=False)
        assert strategy.should_apply("ann", "users.0.name", RECORD)

    def test_callback_error_is_wrapped(self) -> None:
        def explode(_value: object) -> object:
            raise KeyError("nope")

        strategy = CallbackMaskingStrategy("a", explode)
        with pytest.raises(MaskingOperationFailedError) as exc_info:
            strategy.apply("secret-value", "a", RECORD)
        assert exc_info.value.path == "a"
        assert exc_info.value.operation == "callback"
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_result_is_not_coerced(self) -> None:
        strategy = CallbackMaskingStrategy("n", lambda v: "123")
        assert strategy.preserve_type(5, strategy.apply(5, "n", RECORD)) == "123"

    def test_hash(self) -> None:
        strategy = CallbackMaskingStrategy.hash("email")
        expected = hashlib.sha256(b"a@b.io").hexdigest()[:8] + "..."
        assert strategy.apply("a@b.io", "email", RECORD) == expected

    def test_partial(self) -> None:
        strategy = CallbackMaskingStrategy.partial("card", visible_start=2, visible_end=2)
        assert strategy.apply("1234567890", "card", RECORD) == "12******90"
        assert strategy.apply("123", "card", RECORD) == "***"

    def test_constant_and_for_paths(self) -> None:
        assert CallbackMaskingStrategy.constant("a", "[x]").apply("v", "a", RECORD) == "[x]"
        strategies = CallbackMaskingStrategy.for_paths(["a", "b"], str.lower)
        assert [s.field_path for s in strategies] == ["a", "b"]

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            CallbackMaskingStrategy("a", "not callable")  # type: ignore[arg-type]

    def test_empty_path_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            CallbackMaskingStrategy("", str.upper)
