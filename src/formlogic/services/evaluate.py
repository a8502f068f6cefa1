"""EvaluateService — run the rule engine over one set of values.

Reports, per field, visibility, the value after computed fields and
hidden-field resets, and the validation outcome the field would show.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

from formlogic.domain.validation import Invalid
from formlogic.services._helpers import jsonable
from formlogic.services.base import BaseService
from formlogic.services.result import ServiceResult
from formlogic.services.session import FormSession
from formlogic.services.telemetry import trace_span, traced


class EvaluateService(BaseService):
    """Evaluates visibility, computed values and validation for a value set."""

    @traced
    def evaluate(
        self,
        source: str | Path,
        values: Mapping[str, Any] | None = None,
        *,
        today: date | None = None,
    ) -> ServiceResult:
        loaded = self._load("evaluate", source)
        if isinstance(loaded, ServiceResult):
            return loaded
        path, form_load = loaded
        form = form_load.form
        values = dict(values or {})
        pass_today = self._today_for(today) or self._interpreter.today()

        with trace_span("session"):
            session = FormSession(form, values, today=pass_today, validator=self._validator)

        fields: list[dict[str, Any]] = []
        env = session.environment()
        current = session.values
        with trace_span("validate"):
            for step in form.steps:
                for spec in step.fields:
                    visible = session.is_visible(spec.name)
                    outcome = self._validator.validate(spec, current.get(spec.name), env, visible=visible)
                    fields.append(
                        {
                            "name": spec.name,
                            "step": step.id,
                            "type": str(spec.type),
                            "label": spec.display_label,
                            "visible": visible,
                            "computed": spec.is_computed,
                            "value": jsonable(current.get(spec.name)),
                            "error": outcome.message if isinstance(outcome, Invalid) else None,
                        }
                    )

        warnings = self._issue_warnings(form_load)
        known = set(form.field_names()) | set(session.graph.order())
        warnings.extend(f"Ignoring value for unknown field {name!r}" for name in values if name not in known)

        return ServiceResult(
            ok=True,
            op="evaluate",
            data={
                "source": str(path),
                "title": form.title,
                "today": pass_today.isoformat(),
                "fields": fields,
                "visible_steps": session.visible_steps(),
                "values": jsonable(session.values),
                "error_count": sum(1 for f in fields if f["error"]),
            },
            warnings=warnings,
        )
