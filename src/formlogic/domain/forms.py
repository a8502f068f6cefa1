"""Form documents -> :class:`FormSpec`.

Three document shapes are accepted::

    {"title": ..., "steps": [{"id", "label", "fields": [...], "conditions"?}]}
    {"title": ..., "fields": [...]}                 # one implicit step "main"
    {"version": ..., "form": {...either of the above...}}

A malformed field is dropped and reported as a :class:`ConfigIssue`; the
rest of the form still loads. Only a malformed document as a whole
raises :class:`ConfigShapeError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from formlogic.domain.errors import ConfigShapeError
from formlogic.domain.expressions import parse_conditions
from formlogic.domain.fields import FieldSpec, FormSpec, StepSpec

logger = logging.getLogger(__name__)

IMPLICIT_STEP_ID = "main"


@dataclass(frozen=True)
class ConfigIssue:
    """A per-field load problem."""

    path: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class LoadedForm:
    form: FormSpec
    issues: tuple[ConfigIssue, ...] = field(default=())

    @property
    def clean(self) -> bool:
        return not self.issues


def load_form(document: Any) -> LoadedForm:
    """Build a :class:`FormSpec` from a parsed JSON/YAML document.

    Raises:
        ConfigShapeError: If *document* is not an object or has neither
            ``steps`` nor ``fields``.
    """
    if not isinstance(document, Mapping):
        raise ConfigShapeError("form document must be an object")

    version = document.get("version")
    body = document
    if "steps" not in document and "fields" not in document and isinstance(document.get("form"), Mapping):
        body = document["form"]

    issues: list[ConfigIssue] = []

    if isinstance(body.get("steps"), list):
        raw_steps = body["steps"]
        steps = tuple(
            _load_step(raw, i, issues) for i, raw in enumerate(raw_steps) if _is_step(raw, i, issues)
        )
    elif isinstance(body.get("fields"), list):
        fields = _load_fields(body["fields"], "fields", issues)
        steps = (StepSpec(id=IMPLICIT_STEP_ID, label=str(body.get("title") or ""), fields=fields),)
    else:
        raise ConfigShapeError("form document needs a 'steps' or 'fields' list")

    form = FormSpec(
        title=str(body.get("title") or ""),
        description=body.get("description"),
        steps=steps,
        submit_button_text=str(body.get("submitButtonText") or "Submit"),
        reset_button_text=str(body.get("resetButtonText") or "Reset"),
        version=None if version is None else str(version),
    )
    return LoadedForm(form=form, issues=tuple(issues))


def _is_step(raw: Any, index: int, issues: list[ConfigIssue]) -> bool:
    if isinstance(raw, Mapping):
        return True
    _drop(issues, ConfigShapeError("step must be an object", f"steps[{index}]"), None)
    return False


def _load_step(raw: Mapping[str, Any], index: int, issues: list[ConfigIssue]) -> StepSpec:
    path = f"steps[{index}]"
    step_id = str(raw.get("id") or f"step{index + 1}")
    raw_fields = raw.get("fields") or []
    if not isinstance(raw_fields, list):
        _drop(issues, ConfigShapeError("fields must be a list", f"{path}.fields"), None)
        raw_fields = []
    return StepSpec(
        id=step_id,
        label=str(raw.get("label") or step_id),
        fields=_load_fields(raw_fields, f"{path}.fields", issues),
        visibility_rule=parse_conditions(raw.get("conditions")),
        description=raw.get("description"),
    )


def _load_fields(raw_fields: list[Any], path: str, issues: list[ConfigIssue]) -> tuple[FieldSpec, ...]:
    fields: list[FieldSpec] = []
    for i, raw in enumerate(raw_fields):
        field_path = f"{path}[{i}]"
        try:
            fields.append(FieldSpec.from_config(raw, field_path))
        except ConfigShapeError as exc:
            name = raw.get("name") if isinstance(raw, Mapping) else None
            _drop(issues, exc, name if isinstance(name, str) else None, default_path=field_path)
    return tuple(fields)


def _drop(
    issues: list[ConfigIssue],
    exc: ConfigShapeError,
    name: str | None,
    *,
    default_path: str = "",
) -> None:
    issue = ConfigIssue(path=exc.path or default_path, message=exc.message, field=name)
    issues.append(issue)
    logger.warning(
        "config_field_dropped",
        extra={"path": issue.path, "field": name, "error": exc.message},
    )
