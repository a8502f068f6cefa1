"""Tests for field kinds, empty values and emptiness."""

from __future__ import annotations

from typing import Any

import pytest

from formlogic.domain.types import FieldType, carries_value, empty_value, is_empty, parse_field_type


class TestParseFieldType:
    def test_known(self) -> None:
        assert parse_field_type("number") == FieldType.NUMBER
        assert parse_field_type(" multi ") == FieldType.MULTI

    def test_alias(self) -> None:
        assert parse_field_type("dropdown") == FieldType.SELECT

    def test_passthrough(self) -> None:
        assert parse_field_type(FieldType.DATE) is FieldType.DATE

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown field type"):
            parse_field_type("slider")


class TestEmptyValue:
    @pytest.mark.parametrize(
        ("field_type", "expected"),
        [
            (FieldType.CHECKBOX, False),
            (FieldType.ARRAY, []),
            (FieldType.MULTI, []),
            (FieldType.TEXT, ""),
            (FieldType.NUMBER, ""),
            (FieldType.SELECT, ""),
            (FieldType.DATE, ""),
            (FieldType.LABEL, None),
        ],
    )
    def test_empty_value(self, field_type: FieldType, expected: Any) -> None:
        assert empty_value(field_type) == expected

    def test_every_type_has_an_empty_value(self) -> None:
        for field_type in FieldType:
            empty_value(field_type)

    def test_empty_lists_are_fresh(self) -> None:
        assert empty_value(FieldType.ARRAY) is not empty_value(FieldType.ARRAY)


class TestCarriesValue:
    def test_label_carries_no_value(self) -> None:
        assert not carries_value(FieldType.LABEL)

    def test_others_do(self) -> None:
        assert all(carries_value(t) for t in FieldType if t != FieldType.LABEL)


class TestIsEmpty:
    @pytest.mark.parametrize("value", [None, "", [], {}, ()])
    def test_empty(self, value: Any) -> None:
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, "0", " ", False, [None], 0.0])
    def test_not_empty(self, value: Any) -> None:
        assert not is_empty(value)

    @pytest.mark.parametrize(("value", "expected"), [(True, False), (False, True), ("true", True), (None, True)])
    def test_checkbox(self, value: Any, expected: bool) -> None:
        assert is_empty(value, FieldType.CHECKBOX) is expected
