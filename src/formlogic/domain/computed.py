"""Computed field values (``computeValue`` rules)."""

from __future__ import annotations

import logging
from typing import Any

from formlogic.domain.errors import RuleError
from formlogic.domain.fields import FieldSpec
from formlogic.domain.interpreter import Environment, Interpreter, default_interpreter

logger = logging.getLogger(__name__)


def recompute(field: FieldSpec, env: Environment, *, interpreter: Interpreter | None = None) -> Any:
    """Evaluate *field*'s compute rule against *env*.

    Fields without a rule keep their current value. A rule that fails to
    evaluate yields the field's initial value.
    """
    if field.compute is None:
        return env.get(field.name, field.initial_value())
    interp = interpreter or default_interpreter()
    try:
        return interp.evaluate(field.compute, env)
    except RuleError as exc:
        logger.warning(
            "rule_error",
            extra={"target": field.name, "rule": "compute", "error": str(exc)},
        )
        return field.initial_value()
