"""Visibility resolution for fields and steps.

A field or step with no rule is visible. A rule that cannot be evaluated
(``RuleError``) also counts as visible: a broken rule must never hide a
field the user may need to fill in.
"""

from __future__ import annotations

import logging

from formlogic.domain.errors import RuleError
from formlogic.domain.fields import FieldSpec, FormSpec, StepSpec
from formlogic.domain.interpreter import Environment, Interpreter, default_interpreter

logger = logging.getLogger(__name__)


def is_visible(
    spec: FieldSpec | StepSpec,
    env: Environment,
    *,
    interpreter: Interpreter | None = None,
) -> bool:
    """Whether *spec*'s own rule passes against *env*."""
    if spec.visibility_rule is None:
        return True
    interp = interpreter or default_interpreter()
    try:
        return interp.test(spec.visibility_rule, env)
    except RuleError as exc:
        target = spec.name if isinstance(spec, FieldSpec) else spec.id
        logger.warning(
            "rule_error",
            extra={"target": target, "rule": "visibility", "error": str(exc)},
        )
        return True


def visibility_map(
    form: FormSpec,
    env: Environment,
    *,
    interpreter: Interpreter | None = None,
) -> dict[str, bool]:
    """Field name -> visible, for every field in the form.

    A field in a hidden step is hidden regardless of its own rule.
    """
    result: dict[str, bool] = {}
    for step in form.steps:
        step_visible = is_visible(step, env, interpreter=interpreter)
        for spec in step.fields:
            result[spec.name] = step_visible and is_visible(spec, env, interpreter=interpreter)
    return result


def visible_field_names(
    form: FormSpec,
    env: Environment,
    *,
    interpreter: Interpreter | None = None,
) -> list[str]:
    """Names of visible fields, in configuration order."""
    return [name for name, visible in visibility_map(form, env, interpreter=interpreter).items() if visible]


def visible_steps(
    form: FormSpec,
    env: Environment,
    *,
    interpreter: Interpreter | None = None,
) -> list[str]:
    return [step.id for step in form.steps if is_visible(step, env, interpreter=interpreter)]
