"""SubmitService — the form-level submit contract.

Re-evaluates visibility against the final values, validates every
visible field, and either blocks with per-field errors (focus on the
first failing field in configuration order) or returns the payload of
visible fields only.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

from formlogic.services._helpers import jsonable
from formlogic.services.base import BaseService
from formlogic.services.result import ErrorCode, ServiceResult, failure
from formlogic.services.session import FormSession
from formlogic.services.telemetry import trace_span, traced


class SubmitService(BaseService):
    """Validates a complete value set and builds the submission payload."""

    @traced
    def submit(
        self,
        source: str | Path,
        values: Mapping[str, Any] | None = None,
        *,
        today: date | None = None,
    ) -> ServiceResult:
        loaded = self._load("submit", source)
        if isinstance(loaded, ServiceResult):
            return loaded
        path, form_load = loaded
        warnings = self._issue_warnings(form_load)

        with trace_span("submit"):
            session = FormSession(
                form_load.form,
                values,
                today=self._today_for(today),
                validator=self._validator,
            )
            outcome = session.submit()

        if not outcome.ok:
            count = len(outcome.errors)
            return failure(
                "submit",
                ErrorCode.VALIDATION_FAILED,
                f"Submission blocked: {count} field{'s' if count != 1 else ''} invalid",
                detail={"errors": outcome.errors, "focus": outcome.focus},
                data={"source": str(path)},
                warnings=warnings,
            )

        payload = jsonable(outcome.payload or {})
        return ServiceResult(
            ok=True,
            op="submit",
            data={"source": str(path), "title": form_load.form.title, "payload": payload},
            warnings=warnings,
        )
