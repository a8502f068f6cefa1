"""ValidationRuleSet — declarative per-field constraints.

Parsed from the ``validation`` block of a field config. Each constraint
carries its threshold and an optional custom message; missing messages
fall back to the defaults in :mod:`formlogic.domain.validation`.

Config shapes accepted (all keys optional)::

    required: true | "message"
    email: true | "message"
    minLength / maxLength / min / max / minItems / maxItems / minAge / maxAge:
        5 | {value: 5, message: "..."}
    pattern: "^\\d+$" | {value: "^\\d+$", message: "..."}
    matches: {pattern: "^\\d+$", message: "..."}
    phoneUS: "message"
    compareDates: [{today: true, operator: "<", message: "..."}]
    crossFieldNotEqual: {field: "phone", message: "..."}
    notEqualToPhone / notEqualToEmail / notEqualToSSN: "message" | {field, message}
    custom: {rule: "name", message: "..."} | [...]

Any other key is kept as a named custom rule, resolved at validation time
against a :class:`CustomRuleRegistry`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from formlogic.domain.errors import ConfigShapeError

# (value, all current values) -> passes?
type Predicate = Callable[[Any, Mapping[str, Any]], bool]

# Named inequality shorthands and the field each one compares against.
NOT_EQUAL_SHORTHANDS: dict[str, str] = {
    "notEqualToPhone": "phone",
    "notEqualToEmail": "email",
    "notEqualToSSN": "ssn",
}

BUILTIN_RULE_KEYS: frozenset[str] = frozenset(
    {
        "required",
        "email",
        "minLength",
        "maxLength",
        "min",
        "max",
        "pattern",
        "matches",
        "phoneUS",
        "minItems",
        "maxItems",
        "minAge",
        "maxAge",
        "compareDates",
        "crossFieldNotEqual",
        "custom",
        *NOT_EQUAL_SHORTHANDS,
    }
)


# ---------------------------------------------------------------------------
# Constraint models
# ---------------------------------------------------------------------------


class MessageRule(BaseModel):
    """A switch-style constraint (``required``, ``email``, ``phoneUS``)."""

    model_config = ConfigDict(frozen=True)

    message: str | None = None


class Threshold(BaseModel):
    """A numeric bound with an optional message."""

    model_config = ConfigDict(frozen=True)

    value: float
    message: str | None = None


class PatternRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str
    message: str | None = None

    def compiled(self) -> re.Pattern[str]:
        return re.compile(self.pattern)


class CrossFieldRule(BaseModel):
    """Value must differ from ``field``'s value when both are non-empty."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str | None = None


class DateComparison(BaseModel):
    """Compare a date value against today or another field's date."""

    model_config = ConfigDict(frozen=True)

    operator: Literal["<", "<=", ">", ">=", "==", "!="]
    today: bool = False
    field: str | None = None
    message: str | None = None


class CustomRule(BaseModel):
    """A predicate, given inline or resolved by ``name`` from a registry."""

    model_config = ConfigDict(frozen=True)

    name: str
    message: str | None = None
    predicate: Predicate | None = Field(default=None, exclude=True)


class ValidationRuleSet(BaseModel):
    """All constraints declared for one field."""

    model_config = ConfigDict(frozen=True)

    required: MessageRule | None = None
    email: MessageRule | None = None
    min_length: Threshold | None = None
    max_length: Threshold | None = None
    min: Threshold | None = None
    max: Threshold | None = None
    pattern: PatternRule | None = None
    phone_us: MessageRule | None = None
    min_items: Threshold | None = None
    max_items: Threshold | None = None
    min_age: Threshold | None = None
    max_age: Threshold | None = None
    compare_dates: tuple[DateComparison, ...] = ()
    not_equal: tuple[CrossFieldRule, ...] = ()
    custom: tuple[CustomRule, ...] = ()

    @property
    def is_required(self) -> bool:
        return self.required is not None

    @property
    def is_empty(self) -> bool:
        return not any(
            getattr(self, name) for name in type(self).model_fields
        )

    def cross_field_targets(self) -> set[str]:
        """Other fields this rule set reads (for the dependency graph)."""
        targets = {rule.field for rule in self.not_equal}
        targets.update(c.field for c in self.compare_dates if c.field)
        return targets

    @classmethod
    def from_config(cls, raw: Mapping[str, Any] | None) -> ValidationRuleSet:
        """Build a rule set from a config ``validation`` block.

        Raises:
            ConfigShapeError: If the block or one of its values is malformed.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            msg = "validation must be an object"
            raise ConfigShapeError(msg, "validation")
        try:
            return cls(**dict(_parse_entries(raw)))
        except (TypeError, ValueError) as exc:
            raise ConfigShapeError(str(exc), "validation") from exc

    def merged(self, **changes: Any) -> ValidationRuleSet:
        """Copy with constraints added only where not already set."""
        update = {k: v for k, v in changes.items() if v is not None and not getattr(self, k)}
        return self.model_copy(update=update) if update else self


# ---------------------------------------------------------------------------
# Config parsing
# ---------------------------------------------------------------------------


def _message_rule(value: Any) -> MessageRule | None:
    if value is False or value is None:
        return None
    if isinstance(value, str):
        return MessageRule(message=value)
    if isinstance(value, Mapping):
        return MessageRule(message=value.get("message"))
    return MessageRule()


def _threshold(key: str, value: Any) -> Threshold:
    if isinstance(value, Mapping):
        if "value" not in value:
            msg = f"{key} requires a 'value'"
            raise ValueError(msg)
        return Threshold(value=value["value"], message=value.get("message"))
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{key} must be a number or {{value, message}}, got {value!r}"
        raise ValueError(msg)
    return Threshold(value=value)


def _pattern(key: str, value: Any) -> PatternRule:
    if isinstance(value, str):
        pattern, message = value, None
    elif isinstance(value, Mapping):
        pattern = value.get("pattern", value.get("value"))
        message = value.get("message")
    else:
        msg = f"{key} must be a string or an object"
        raise ValueError(msg)
    if not isinstance(pattern, str):
        msg = f"{key} requires a string pattern"
        raise ValueError(msg)
    try:
        re.compile(pattern)
    except re.error as exc:
        msg = f"{key} is not a valid regular expression: {exc}"
        raise ValueError(msg) from exc
    return PatternRule(pattern=pattern, message=message)


def _cross_field(key: str, value: Any, default_field: str | None) -> CrossFieldRule:
    if isinstance(value, str) and default_field:
        return CrossFieldRule(field=default_field, message=value)
    if isinstance(value, Mapping) and (value.get("field") or default_field):
        return CrossFieldRule(field=value.get("field") or default_field, message=value.get("message"))
    msg = f"{key} requires a target 'field'"
    raise ValueError(msg)


def _custom(value: Any) -> list[CustomRule]:
    items = value if isinstance(value, list) else [value]
    rules: list[CustomRule] = []
    for item in items:
        if isinstance(item, str):
            rules.append(CustomRule(name=item))
        elif isinstance(item, Mapping) and item.get("rule"):
            rules.append(CustomRule(name=str(item["rule"]), message=item.get("message")))
        else:
            msg = "custom requires {rule, message}"
            raise ValueError(msg)
    return rules


def _parse_entries(raw: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
    not_equal: list[CrossFieldRule] = []
    custom: list[CustomRule] = []

    for key, value in raw.items():
        match key:
            case "required" | "email" | "phoneUS":
                rule = _message_rule(value)
                if rule is not None:
                    yield {"phoneUS": "phone_us"}.get(key, key), rule
            case "minLength" | "maxLength" | "min" | "max" | "minItems" | "maxItems" | "minAge" | "maxAge":
                yield _snake(key), _threshold(key, value)
            case "pattern" | "matches":
                yield "pattern", _pattern(key, value)
            case "compareDates":
                entries = value if isinstance(value, list) else [value]
                yield "compare_dates", tuple(DateComparison.model_validate(e) for e in entries)
            case "crossFieldNotEqual":
                entries = value if isinstance(value, list) else [value]
                not_equal.extend(_cross_field(key, e, None) for e in entries)
            case "custom":
                custom.extend(_custom(value))
            case _ if key in NOT_EQUAL_SHORTHANDS:
                not_equal.append(_cross_field(key, value, NOT_EQUAL_SHORTHANDS[key]))
            case _:
                custom.append(CustomRule(name=key, message=value if isinstance(value, str) else None))

    if not_equal:
        yield "not_equal", tuple(not_equal)
    if custom:
        yield "custom", tuple(custom)


_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(name: str) -> str:
    return _CAMEL.sub("_", name).lower()


# ---------------------------------------------------------------------------
# Custom rule registry
# ---------------------------------------------------------------------------


class CustomRuleRegistry:
    """Named custom predicates, constructed and passed explicitly.

    Usage::

        registry = CustomRuleRegistry()
        registry.register("isAdult", lambda value, values: int(value) >= 18)
        Validator(registry=registry)
    """

    def __init__(self) -> None:
        self._rules: dict[str, tuple[Predicate, str | None]] = {}

    def register(self, name: str, predicate: Predicate, message: str | None = None) -> None:
        """Register *predicate* under *name*.

        Raises:
            ValueError: If *name* is empty, built-in, or already registered.
        """
        normalized = name.strip()
        if not normalized:
            msg = "Custom rule name must not be empty"
            raise ValueError(msg)
        if normalized in BUILTIN_RULE_KEYS:
            msg = f"Custom rule {normalized!r} conflicts with a built-in rule"
            raise ValueError(msg)
        if normalized in self._rules:
            msg = f"Custom rule {normalized!r} is already registered"
            raise ValueError(msg)
        self._rules[normalized] = (predicate, message)

    def get(self, name: str) -> tuple[Predicate, str | None] | None:
        return self._rules.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def names(self) -> list[str]:
        return sorted(self._rules)
