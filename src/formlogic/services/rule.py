"""RuleService — evaluate a single JSON-Logic rule against values."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date
from typing import Any

from formlogic.domain.errors import RuleError
from formlogic.domain.expressions import parse_rule, references
from formlogic.domain.interpreter import truthy
from formlogic.services._helpers import jsonable
from formlogic.services.base import BaseService
from formlogic.services.result import ErrorCode, ServiceResult, failure
from formlogic.services.telemetry import traced


class RuleService(BaseService):
    """Ad-hoc rule evaluation, for debugging visibility and compute rules."""

    @traced
    def evaluate_rule(
        self,
        rule: str | Mapping[str, Any] | list[Any],
        values: Mapping[str, Any] | None = None,
        *,
        today: date | None = None,
    ) -> ServiceResult:
        """Parse and evaluate *rule*; a JSON string is decoded first."""
        raw: Any = rule
        try:
            if isinstance(rule, str):
                raw = json.loads(rule)
            expr = parse_rule(raw)
        except json.JSONDecodeError as exc:
            return failure("rule", ErrorCode.INVALID_INPUT, f"Rule is not valid JSON: {exc.msg}")
        except RecursionError:
            return failure("rule", ErrorCode.RULE_ERROR, "Rule is nested too deeply to parse")

        env = self._interpreter.environment(values, today=self._today_for(today))
        try:
            result = self._interpreter.evaluate(expr, env)
        except RuleError as exc:
            return failure(
                "rule",
                ErrorCode.RULE_ERROR,
                str(exc),
                detail={"rule": raw, "references": sorted(references(expr))},
            )

        return ServiceResult(
            ok=True,
            op="rule",
            data={
                "rule": raw,
                "result": jsonable(result),
                "truthy": truthy(result),
                "references": sorted(references(expr)),
                "today": env.today.isoformat(),
            },
        )
