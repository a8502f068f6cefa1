"""Shared pytest fixtures for formlogic tests."""

from __future__ import annotations

import json
import sys
from collections.abc import Generator
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from formlogic.domain.expressions import Literal, Logical, LogicalOp
from formlogic.domain.fields import FormSpec
from formlogic.domain.forms import load_form
from formlogic.infrastructure.documents import FormDocumentStore
from formlogic.services.telemetry import _current_span, disable_telemetry

TODAY = date(2024, 3, 14)

REGISTRATION: dict[str, Any] = {
    "title": "Registration",
    "steps": [
        {
            "id": "about",
            "label": "About you",
            "fields": [
                {
                    "name": "age",
                    "type": "number",
                    "label": "Age",
                    "validation": {"required": True, "min": 0},
                },
                {
                    "name": "employed",
                    "type": "radio",
                    "label": "Employed",
                    "options": [{"label": "Yes", "value": "yes"}, {"label": "No", "value": "no"}],
                    "conditions": {">": [{"var": "age"}, 17]},
                    "validation": {"required": "Please select your employment status"},
                },
                {
                    "name": "companyName",
                    "type": "text",
                    "label": "Company Name",
                    "required": True,
                    "conditions": {"===": [{"var": "employed"}, "yes"]},
                },
            ],
        }
    ],
}

# Two steps, a hidden step, computed field, cross-field and date rules.
PROFILE_YAML = """\
version: 2
form:
  title: Profile
  steps:
    - id: contact
      label: Contact
      fields:
        - name: firstName
          type: text
          label: First name
          validation:
            required: true
        - name: lastName
          type: text
          label: Last name
        - name: fullName
          type: hidden
          computeValue:
            if:
              - {var: lastName}
              - {var: lastName}
              - {var: firstName}
        - name: phone
          type: text
          label: Phone
          validation:
            phoneUS: Please enter a valid US phone number
        - name: altPhone
          type: text
          label: Alternate phone
          validation:
            notEqualToPhone: Alternate phone must differ from phone
        - name: wantsExtra
          type: checkbox
          label: More
    - id: extra
      label: Extra
      conditions:
        - {"===": [{var: wantsExtra}, true]}
      fields:
        - name: dob
          type: date
          label: Date of birth
          validation:
            minAge: {value: 18, message: You must be 18 or older}
        - name: interests
          type: multi
          label: Interests
          options: [golf, chess]
          minItems: 1
"""


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """Ensure clean telemetry state for every test."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FORMLOGIC_CONFIG", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def registration_doc() -> dict[str, Any]:
    return json.loads(json.dumps(REGISTRATION))


@pytest.fixture
def registration(registration_doc: dict[str, Any]) -> FormSpec:
    loaded = load_form(registration_doc)
    assert loaded.clean
    return loaded.form


@pytest.fixture
def forms_dir(tmp_path: Path) -> Path:
    """A project directory with ``forms/registration.json`` and ``forms/profile.yaml``."""
    forms = tmp_path / "forms"
    forms.mkdir()
    (forms / "registration.json").write_text(json.dumps(REGISTRATION, indent=2), encoding="utf-8")
    (forms / "profile.yaml").write_text(PROFILE_YAML, encoding="utf-8")
    return forms


@pytest.fixture
def store(forms_dir: Path) -> FormDocumentStore:
    return FormDocumentStore(forms_dir)


@pytest.fixture
def _isolated_project(forms_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp project so the CLI resolves ``forms/``.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    monkeypatch.chdir(forms_dir.parent)


@pytest.fixture
def deep_rule() -> Logical:
    """A ``not`` chain deeper than the interpreter's recursion limit."""
    expr: Logical | Literal = Literal(True)
    for _ in range(sys.getrecursionlimit()):
        expr = Logical(LogicalOp.NOT, (expr,))
    assert isinstance(expr, Logical)
    return expr
