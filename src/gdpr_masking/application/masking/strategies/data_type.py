"""Masking strategies – DataTypeMaskingStrategy."""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from gdpr_masking.kernel import masks as mask
from gdpr_masking.application.masking.conditions import RecordContext
from gdpr_masking.application.masking.strategies.base import MaskingStrategy, coerce_like, looks_numeric, numeric_literal
from gdpr_masking.kernel.errors import InvalidConfigurationError, MaskingOperationFailedError


class DataType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"


_NUMERIC_FAMILIES: dict[str, type] = {DataType.INTEGER.value: int, DataType.FLOAT.value: float}

_SAMPLES: dict[str, Any] = {
    DataType.INTEGER.value: 0,
    DataType.FLOAT.value: 0.0,
    DataType.BOOLEAN.value: False,
    DataType.NULL.value: None,
}


def validate_data_type_masks(masks: Mapping[str, str]) -> dict[str, str]:
    """Check keys against :class:`DataType` and values for non-empty strings.

    A numeric-looking literal for ``integer`` or ``float`` must fit that type;
    other literals are allowed and stay strings when applied.
    """
    allowed = {t.value for t in DataType}
    checked: dict[str, str] = {}
    for key, value in masks.items():
        name = key.value if isinstance(key, DataType) else key
        if name not in allowed:
            raise InvalidConfigurationError.for_parameter(
                "data_type_masks", key, f"unknown data type; expected one of {sorted(allowed)}"
            )
        if not isinstance(value, str):
            raise InvalidConfigurationError.wrong_type(f"data_type_masks[{name!r}]", value, "str")
        if not value.strip():
            raise InvalidConfigurationError.empty_value(f"data_type_masks[{name!r}]")
        family = _NUMERIC_FAMILIES.get(name)
        if family is not None and looks_numeric(value) and numeric_literal(value, family) is None:
            raise InvalidConfigurationError.for_parameter(
                f"data_type_masks[{name!r}]", value, f"numeric literal out of range for {name}"
            )
        checked[name] = value
    return checked


class DataTypeMaskingStrategy(MaskingStrategy):
    """Replace every value of a configured type with a per-type literal.

    The literal is converted back into the type family of the value:
    ``{"integer": "999"}`` turns ``42`` into ``999``, ``{"array": "[]"}`` turns
    any list into ``[]``.  Literals that cannot be converted stay strings.
    """

    DEFAULT_PRIORITY = 40

    def __init__(
        self,
        type_masks: Mapping[str, str],
        *,
        include_paths: Sequence[str] = (),
        exclude_paths: Sequence[str] = (),
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        masks = validate_data_type_masks(type_masks)
        super().__init__(
            priority,
            {
                "type_masks": masks,
                "include_paths": list(include_paths),
                "exclude_paths": list(exclude_paths),
            },
        )
        self._masks = masks
        self._include_paths = tuple(include_paths)
        self._exclude_paths = tuple(exclude_paths)

    @classmethod
    def create_default(cls, custom_masks: Mapping[str, str] | None = None, priority: int = DEFAULT_PRIORITY) -> DataTypeMaskingStrategy:
        masks = {
            DataType.STRING.value: mask.MASK_STRING,
            DataType.INTEGER.value: "999",
            DataType.FLOAT.value: "99.99",
            DataType.BOOLEAN.value: "false",
            DataType.ARRAY.value: "[]",
            DataType.OBJECT.value: "{}",
        }
        masks.update(custom_masks or {})
        return cls(masks, priority=priority)

    @classmethod
    def create_sensitive_only(cls, custom_masks: Mapping[str, str] | None = None, priority: int = DEFAULT_PRIORITY) -> DataTypeMaskingStrategy:
        masks = {
            DataType.STRING.value: mask.MASK_MASKED,
            DataType.ARRAY.value: "[]",
            DataType.OBJECT.value: "{}",
        }
        masks.update(custom_masks or {})
        return cls(masks, priority=priority)

    def should_apply(self, value: Any, path: str, record: RecordContext) -> bool:
        if self._type_of(value) not in self._masks:
            return False
        if self._exclude_paths and self._path_in(path, self._exclude_paths):
            return False
        if self._include_paths and not self._path_in(path, self._include_paths):
            return False
        return True

    def apply(self, value: Any, path: str, record: RecordContext) -> Any:
        data_type = self._type_of(value)
        literal = self._masks.get(data_type)
        if literal is None:
            return value
        try:
            return self._convert(data_type, literal, value)
        except Exception as exc:
            raise MaskingOperationFailedError.data_type_failed(data_type, path, value, exc) from exc

    def _convert(self, data_type: str, literal: str, original: Any) -> Any:
        if data_type in _SAMPLES:
            return coerce_like(_SAMPLES[data_type], literal)
        if data_type == DataType.ARRAY.value:
            return self._parse_container(literal, list, original)
        if data_type == DataType.OBJECT.value:
            return self._parse_container(literal, dict, original)
        return literal

    @staticmethod
    def _parse_container(literal: str, family: type, original: Any) -> Any:
        text = literal.strip()
        if (family is list and text.startswith("[")) or (family is dict and text.startswith("{")):
            try:
                decoded = json.loads(text)
            except ValueError:
                return literal
            if isinstance(decoded, family):
                if isinstance(original, tuple):
                    return tuple(decoded)
                return decoded
        return literal

    def validate(self) -> bool:
        return super().validate() and bool(self._masks)


__all__ = ["DataType", "DataTypeMaskingStrategy", "validate_data_type_masks"]
