"""Per-field validation.

A field produces zero or one error. Constraints run in one fixed order
for every field kind and the first failure wins:

1. required
2. email, numeric (not-a-number before range), length, dates
3. pattern, US phone
4. array cardinality
5. cross-field inequality
6. custom predicates

Hidden fields are always valid. Blank values pass every check except
``required``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from formlogic.domain.dates import date_diff_years, parse_date
from formlogic.domain.errors import CustomValidatorError
from formlogic.domain.expressions import CompareOp
from formlogic.domain.fields import FieldSpec
from formlogic.domain.interpreter import (
    Environment,
    Interpreter,
    compare,
    default_interpreter,
    strict_equals,
    to_number,
)
from formlogic.domain.rules import CustomRuleRegistry, ValidationRuleSet
from formlogic.domain.types import LIST_TYPES, FieldType, is_empty
from formlogic.domain.visibility import is_visible

logger = logging.getLogger(__name__)

DEFAULT_EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
DEFAULT_PHONE_PATTERN = r"^(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})$"

_DATE_OPS: dict[str, CompareOp] = {
    "<": CompareOp.LT,
    "<=": CompareOp.LE,
    ">": CompareOp.GT,
    ">=": CompareOp.GE,
    "==": CompareOp.EQ,
    "!=": CompareOp.NE,
}


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Valid:
    @property
    def ok(self) -> bool:
        return True

    @property
    def message(self) -> None:
        return None


@dataclass(frozen=True)
class Invalid:
    message: str

    @property
    def ok(self) -> bool:
        return False


type ValidationOutcome = Valid | Invalid

VALID = Valid()


@dataclass(frozen=True)
class ValidationSettings:
    """Patterns and message templates used when a rule gives none."""

    email_pattern: str = DEFAULT_EMAIL_PATTERN
    phone_pattern: str = DEFAULT_PHONE_PATTERN
    required_message: str = "{label} is required"
    number_message: str = "{label} must be a valid number"


def _fmt(value: float) -> str:
    """Render thresholds without a trailing ``.0``."""
    return str(int(value)) if float(value).is_integer() else str(value)


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class Validator:
    """Runs a field's :class:`ValidationRuleSet` against one value."""

    def __init__(
        self,
        interpreter: Interpreter | None = None,
        registry: CustomRuleRegistry | None = None,
        settings: ValidationSettings | None = None,
    ) -> None:
        self.interpreter = interpreter or default_interpreter()
        self.registry = registry or CustomRuleRegistry()
        self.settings = settings or ValidationSettings()
        self._email = re.compile(self.settings.email_pattern)
        self._phone = re.compile(self.settings.phone_pattern)

    def validate(
        self,
        field: FieldSpec,
        value: Any,
        env: Environment,
        *,
        visible: bool | None = None,
    ) -> ValidationOutcome:
        """Validate *value* for *field*.

        *visible* overrides the field's own visibility rule; pass it when
        the caller already knows the step is hidden.
        """
        if visible is None:
            visible = is_visible(field, env, interpreter=self.interpreter)
        if not visible:
            return VALID

        rules = field.validation
        label = field.display_label

        if is_empty(value, field.type):
            if rules.required is not None:
                return Invalid(rules.required.message or self.settings.required_message.format(label=label))
            return VALID

        for check in (
            self._check_email,
            self._check_number,
            self._check_length,
            self._check_dates,
            self._check_pattern,
            self._check_items,
            self._check_cross_field,
            self._check_custom,
        ):
            failure = check(field, rules, label, value, env)
            if failure is not None:
                return Invalid(failure)
        return VALID

    # --- Checks (each returns an error message or None) ---

    def _check_email(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        if rules.email is None and field.type != FieldType.EMAIL:
            return None
        if isinstance(value, str) and self._email.match(value.strip()):
            return None
        return (rules.email and rules.email.message) or "Please enter a valid email address"

    def _check_number(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        if field.type != FieldType.NUMBER and rules.min is None and rules.max is None:
            return None
        number = to_number(value)
        if number is None or isinstance(value, bool):
            return self.settings.number_message.format(label=label)
        if rules.min is not None and number < rules.min.value:
            return rules.min.message or f"{label} must be at least {_fmt(rules.min.value)}"
        if rules.max is not None and number > rules.max.value:
            return rules.max.message or f"{label} must be no more than {_fmt(rules.max.value)}"
        return None

    def _check_length(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        if rules.min_length is None and rules.max_length is None:
            return None
        if isinstance(value, (list, tuple, dict)):
            return None
        length = len(str(value))
        if rules.min_length is not None and length < rules.min_length.value:
            return rules.min_length.message or f"{label} must be at least {_fmt(rules.min_length.value)} characters"
        if rules.max_length is not None and length > rules.max_length.value:
            return rules.max_length.message or f"{label} must be no more than {_fmt(rules.max_length.value)} characters"
        return None

    def _check_dates(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        uses_dates = (
            field.type == FieldType.DATE
            or field.min_date
            or field.max_date
            or rules.min_age
            or rules.max_age
            or rules.compare_dates
        )
        if not uses_dates:
            return None
        when = parse_date(value)
        if when is None:
            return "Please enter a valid date"

        lower, upper = parse_date(field.min_date), parse_date(field.max_date)
        if lower is not None and when < lower:
            return f"Date must be after {lower.isoformat()}"
        if upper is not None and when > upper:
            return f"Date must be before {upper.isoformat()}"

        age = date_diff_years(when, env.today)
        if rules.min_age is not None and age < rules.min_age.value:
            return rules.min_age.message or f"Must be at least {_fmt(rules.min_age.value)} years old"
        if rules.max_age is not None and age > rules.max_age.value:
            return rules.max_age.message or f"Must be no more than {_fmt(rules.max_age.value)} years old"

        for comparison in rules.compare_dates:
            target: date | None = env.today if comparison.today else parse_date(env.get(comparison.field or ""))
            if target is None:
                continue
            if not compare(_DATE_OPS[comparison.operator], when, target):
                return comparison.message or f"{label} is invalid"
        return None

    def _check_pattern(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        text = value if isinstance(value, str) else str(value)
        if rules.pattern is not None and not rules.pattern.compiled().search(text):
            return rules.pattern.message or f"{label} format is invalid"
        if rules.phone_us is not None and not self._phone.match(text.strip()):
            return rules.phone_us.message or "Please enter a valid US phone number"
        return None

    def _check_items(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        if field.type not in LIST_TYPES and rules.min_items is None and rules.max_items is None:
            return None
        if not isinstance(value, (list, tuple)):
            return f"{label} must be a list"
        count = len(value)
        if rules.min_items is not None and count < rules.min_items.value:
            return rules.min_items.message or f"{label} must have at least {_fmt(rules.min_items.value)} items"
        if rules.max_items is not None and count > rules.max_items.value:
            return rules.max_items.message or f"{label} must have no more than {_fmt(rules.max_items.value)} items"
        return None

    def _check_cross_field(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        for rule in rules.not_equal:
            other = env.get(rule.field)
            if is_empty(value) or is_empty(other):
                continue
            if strict_equals(value, other):
                return rule.message or f"{label} must be different from {rule.field}"
        return None

    def _check_custom(
        self, field: FieldSpec, rules: ValidationRuleSet, label: str, value: Any, env: Environment
    ) -> str | None:
        for rule in rules.custom:
            predicate, registered_message = rule.predicate, None
            if predicate is None:
                entry = self.registry.get(rule.name)
                if entry is None:
                    continue
                predicate, registered_message = entry
            message = rule.message or registered_message or f"{label} is invalid"
            try:
                passed = bool(predicate(value, env.values))
            except Exception as exc:
                error = CustomValidatorError(rule.name, exc)
                logger.warning(
                    "custom_validator_error",
                    extra={"field": field.name, "rule": rule.name, "error": str(error)},
                )
                passed = False
            if not passed:
                return message
        return None


_default = Validator()


def validate(
    field: FieldSpec,
    value: Any,
    env: Environment | Mapping[str, Any],
    *,
    visible: bool | None = None,
) -> ValidationOutcome:
    """Validate with a default :class:`Validator` (no custom rules registered)."""
    if not isinstance(env, Environment):
        env = _default.interpreter.environment(env)
    return _default.validate(field, value, env, visible=visible)
