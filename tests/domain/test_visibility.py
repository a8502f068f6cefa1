"""Tests for field and step visibility."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

import pytest

from formlogic.domain.expressions import Logical
from formlogic.domain.fields import FieldSpec, FormSpec
from formlogic.domain.forms import load_form
from formlogic.domain.interpreter import Environment
from formlogic.domain.visibility import is_visible, visibility_map, visible_field_names, visible_steps


def _env(**values: Any) -> Environment:
    return Environment.snapshot(values)


class TestIsVisible:
    def test_no_rule_is_visible(self) -> None:
        spec = FieldSpec.from_config({"name": "a", "type": "text", "label": "A"})
        assert is_visible(spec, _env())

    def test_rule(self, registration: FormSpec) -> None:
        employed = registration.field("employed")
        assert employed is not None
        assert is_visible(employed, _env(age=18))
        assert not is_visible(employed, _env(age=17))
        assert not is_visible(employed, _env())

    def test_broken_rule_fails_open(self, caplog: pytest.LogCaptureFixture) -> None:
        spec = FieldSpec.from_config(
            {"name": "a", "type": "text", "label": "A", "conditions": {"regexMatch": [{"var": "b"}, "^x"]}}
        )
        with caplog.at_level(logging.WARNING, logger="formlogic"):
            assert is_visible(spec, _env(b="y"))
        records = [r for r in caplog.records if r.getMessage() == "rule_error"]
        assert records
        assert records[0].target == "a"  # type: ignore[attr-defined]

    def test_deeply_nested_rule_fails_open(self, deep_rule: Logical) -> None:
        spec = replace(FieldSpec.from_config({"name": "a", "type": "text", "label": "A"}), visibility_rule=deep_rule)
        assert is_visible(spec, _env())

    def test_broken_step_rule_fails_open(self) -> None:
        form = load_form({"steps": [{"id": "s", "conditions": {"==": [1]}, "fields": []}]}).form
        assert is_visible(form.steps[0], _env())


class TestFormVisibility:
    @pytest.fixture
    def form(self) -> FormSpec:
        return load_form(
            {
                "steps": [
                    {
                        "id": "contact",
                        "fields": [
                            {"name": "more", "type": "checkbox", "label": "More"},
                            {"name": "nickname", "type": "text", "label": "Nickname", "conditions": {"var": "more"}},
                        ],
                    },
                    {
                        "id": "extra",
                        "conditions": {"===": [{"var": "more"}, True]},
                        "fields": [{"name": "notes", "type": "textarea", "label": "Notes"}],
                    },
                ]
            }
        ).form

    def test_hidden_step_hides_its_fields(self, form: FormSpec) -> None:
        assert visibility_map(form, _env(more=False)) == {"more": True, "nickname": False, "notes": False}
        assert visibility_map(form, _env(more=True)) == {"more": True, "nickname": True, "notes": True}

    def test_visible_field_names(self, form: FormSpec) -> None:
        assert visible_field_names(form, _env(more=False)) == ["more"]

    def test_visible_steps(self, form: FormSpec) -> None:
        assert visible_steps(form, _env(more=False)) == ["contact"]
        assert visible_steps(form, _env(more=True)) == ["contact", "extra"]
