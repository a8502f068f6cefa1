"""Field kinds and their empty values.

The field-type set is closed. Every function that branches on it does so
with an exhaustive ``match`` ending in ``assert_never`` so that adding a
kind without handling it is a type-checker error.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, assert_never


class FieldType(StrEnum):
    """Kinds of form fields."""

    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    ARRAY = "array"
    DATE = "date"
    MULTI = "multi"
    HIDDEN = "hidden"
    LABEL = "label"


# Spellings found in existing configs.
FIELD_TYPE_ALIASES: dict[str, FieldType] = {
    "dropdown": FieldType.SELECT,
}

# Kinds whose value is a list.
LIST_TYPES: frozenset[FieldType] = frozenset({FieldType.ARRAY, FieldType.MULTI})


def parse_field_type(raw: Any) -> FieldType:
    """Resolve a config type string, honoring aliases.

    Raises:
        ValueError: If *raw* is not a known field type.
    """
    if isinstance(raw, FieldType):
        return raw
    text = str(raw).strip()
    if text in FIELD_TYPE_ALIASES:
        return FIELD_TYPE_ALIASES[text]
    try:
        return FieldType(text)
    except ValueError:
        msg = f"Unknown field type: {raw!r}"
        raise ValueError(msg) from None


def empty_value(field_type: FieldType) -> Any:
    """The value a field is reset to when it becomes hidden."""
    match field_type:
        case FieldType.CHECKBOX:
            return False
        case FieldType.ARRAY | FieldType.MULTI:
            return []
        case FieldType.LABEL:
            return None
        case (
            FieldType.TEXT
            | FieldType.EMAIL
            | FieldType.PASSWORD
            | FieldType.NUMBER
            | FieldType.TEXTAREA
            | FieldType.SELECT
            | FieldType.RADIO
            | FieldType.DATE
            | FieldType.HIDDEN
        ):
            return ""
        case _:
            assert_never(field_type)


def carries_value(field_type: FieldType) -> bool:
    """Whether the field contributes a value to the submitted payload."""
    match field_type:
        case FieldType.LABEL:
            return False
        case (
            FieldType.TEXT
            | FieldType.EMAIL
            | FieldType.PASSWORD
            | FieldType.NUMBER
            | FieldType.TEXTAREA
            | FieldType.SELECT
            | FieldType.CHECKBOX
            | FieldType.RADIO
            | FieldType.ARRAY
            | FieldType.DATE
            | FieldType.MULTI
            | FieldType.HIDDEN
        ):
            return True
        case _:
            assert_never(field_type)


def is_empty(value: Any, field_type: FieldType | None = None) -> bool:
    """Emptiness as the ``required`` rule sees it.

    ``None``, ``''``, ``[]`` and ``{}`` are empty. A checkbox is empty
    unless its value is literally ``True``. ``0`` and ``"0"`` are not empty.
    """
    if field_type == FieldType.CHECKBOX:
        return value is not True
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False
