"""Tests for form document loading."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from formlogic.domain.errors import ConfigShapeError
from formlogic.domain.expressions import VariableRef
from formlogic.domain.forms import IMPLICIT_STEP_ID, ConfigIssue, load_form


class TestLoadForm:
    def test_steps_shape(self, registration_doc: dict[str, Any]) -> None:
        loaded = load_form(registration_doc)
        assert loaded.clean
        form = loaded.form
        assert form.title == "Registration"
        assert [s.id for s in form.steps] == ["about"]
        assert form.submit_button_text == "Submit"
        assert form.version is None

    def test_flat_shape_gets_implicit_step(self) -> None:
        loaded = load_form(
            {
                "title": "Contact",
                "submitButtonText": "Send",
                "fields": [{"name": "email", "type": "email", "label": "Email"}],
            }
        )
        assert [s.id for s in loaded.form.steps] == [IMPLICIT_STEP_ID]
        assert loaded.form.field_names() == ["email"]
        assert loaded.form.submit_button_text == "Send"

    def test_wrapped_shape(self, registration_doc: dict[str, Any]) -> None:
        loaded = load_form({"version": 3, "form": registration_doc})
        assert loaded.form.version == "3"
        assert loaded.form.field_names() == ["age", "employed", "companyName"]

    def test_step_defaults_and_conditions(self) -> None:
        loaded = load_form(
            {"steps": [{"fields": [], "conditions": [{"var": "x"}]}, {"id": "two", "fields": []}]}
        )
        first, second = loaded.form.steps
        assert first.id == "step1"
        assert first.label == "step1"
        assert first.visibility_rule == VariableRef("x")
        assert second.id == "two"

    def test_malformed_field_is_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        doc = {
            "fields": [
                {"name": "ok", "type": "text", "label": "OK"},
                {"name": "broken", "type": "slider", "label": "Broken"},
                {"name": "later", "type": "text", "label": "Later"},
            ]
        }
        with caplog.at_level(logging.WARNING, logger="formlogic"):
            loaded = load_form(doc)
        assert loaded.form.field_names() == ["ok", "later"]
        assert not loaded.clean
        assert loaded.issues == (ConfigIssue(path="fields[1]", message="Unknown field type: 'slider'", field="broken"),)
        assert any(r.getMessage() == "config_field_dropped" for r in caplog.records)

    def test_malformed_validation_path(self) -> None:
        loaded = load_form(
            {"steps": [{"id": "s", "fields": [{"name": "a", "type": "text", "label": "A", "validation": []}]}]}
        )
        assert loaded.issues[0].path == "steps[0].fields[0].validation"
        assert loaded.issues[0].field == "a"

    def test_non_object_step_reported(self) -> None:
        loaded = load_form({"steps": ["nope", {"id": "s", "fields": []}]})
        assert [s.id for s in loaded.form.steps] == ["s"]
        assert loaded.issues[0].path == "steps[0]"

    def test_step_fields_not_a_list(self) -> None:
        loaded = load_form({"steps": [{"id": "s", "fields": "x"}]})
        assert loaded.form.steps[0].fields == ()
        assert loaded.issues[0].path == "steps[0].fields"

    @pytest.mark.parametrize("doc", [[], "form", None, {"title": "No fields"}])
    def test_malformed_document(self, doc: Any) -> None:
        with pytest.raises(ConfigShapeError):
            load_form(doc)
