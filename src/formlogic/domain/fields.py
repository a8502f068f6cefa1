"""Field, step and form specifications.

Specs are immutable and built once from configuration; rules are parsed
into expression trees at build time so evaluation never re-reads JSON.
Document-level loading (shape detection, per-field isolation) lives in
:mod:`formlogic.domain.forms`.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from formlogic.domain.errors import ConfigShapeError
from formlogic.domain.expressions import Expression, parse_conditions, parse_rule, references
from formlogic.domain.rules import Threshold, ValidationRuleSet
from formlogic.domain.types import FieldType, empty_value, parse_field_type

# Field kinds that may omit a label.
_LABEL_OPTIONAL: frozenset[FieldType] = frozenset({FieldType.HIDDEN})


@dataclass(frozen=True)
class FieldOption:
    label: str
    value: Any

    @classmethod
    def from_config(cls, raw: Any) -> FieldOption:
        if isinstance(raw, Mapping):
            value = raw.get("value", raw.get("label"))
            return cls(label=str(raw.get("label", value)), value=value)
        return cls(label=str(raw), value=raw)


@dataclass(frozen=True)
class FieldSpec:
    """One form field."""

    name: str
    type: FieldType
    label: str = ""
    visibility_rule: Expression | None = None
    validation: ValidationRuleSet = field(default_factory=ValidationRuleSet)
    options: tuple[FieldOption, ...] = ()
    item_fields: tuple[FieldSpec, ...] = ()
    default_value: Any = None
    compute: Expression | None = None
    min_date: str | None = None
    max_date: str | None = None
    description: str | None = None
    placeholder: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.name

    @property
    def is_computed(self) -> bool:
        return self.compute is not None

    @property
    def is_conditional(self) -> bool:
        return self.visibility_rule is not None

    def initial_value(self) -> Any:
        """Value a fresh form starts with."""
        if self.default_value is not None:
            return self.default_value
        return empty_value(self.type)

    def dependencies(self) -> set[str]:
        """Other fields this field's rules read."""
        deps = references(self.visibility_rule) | references(self.compute)
        deps |= self.validation.cross_field_targets()
        deps.discard(self.name)
        return deps

    @classmethod
    def from_config(cls, raw: Any, path: str = "") -> FieldSpec:
        """Build a field from its config object.

        Raises:
            ConfigShapeError: Missing ``name``/``type``/``label``, unknown
                type, or a malformed rule or validation block.
        """
        if not isinstance(raw, Mapping):
            raise ConfigShapeError("field must be an object", path)

        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigShapeError("field is missing 'name'", path)
        if "type" not in raw:
            raise ConfigShapeError(f"field {name!r} is missing 'type'", path)
        try:
            field_type = parse_field_type(raw["type"])
        except ValueError as exc:
            raise ConfigShapeError(str(exc), path) from exc

        label = raw.get("label")
        if label is None and field_type not in _LABEL_OPTIONAL:
            raise ConfigShapeError(f"field {name!r} is missing 'label'", path)

        try:
            validation = _merge_shorthands(ValidationRuleSet.from_config(raw.get("validation")), raw)
        except ConfigShapeError as exc:
            raise ConfigShapeError(exc.message, f"{path}.validation") from exc

        rule = _parse(parse_conditions, raw.get("conditions"), f"{path}.conditions")
        compute = None
        if raw.get("computeValue") is not None:
            compute = _parse(parse_rule, raw["computeValue"], f"{path}.computeValue")

        other = raw.get("otherProps") or {}
        if not isinstance(other, Mapping):
            raise ConfigShapeError("otherProps must be an object", path)

        items = raw.get("arrayItemFields") or []
        if not isinstance(items, list):
            raise ConfigShapeError("arrayItemFields must be a list", path)

        options = raw.get("options") or []
        if not isinstance(options, list):
            raise ConfigShapeError("options must be a list", path)

        return cls(
            name=name.strip(),
            type=field_type,
            label="" if label is None else str(label),
            visibility_rule=rule,
            validation=validation,
            options=tuple(FieldOption.from_config(o) for o in options),
            item_fields=tuple(
                cls.from_config(item, f"{path}.arrayItemFields[{i}]") for i, item in enumerate(items)
            ),
            default_value=raw.get("defaultValue"),
            compute=compute,
            min_date=other.get("minDate") or raw.get("minDate"),
            max_date=other.get("maxDate") or raw.get("maxDate"),
            description=raw.get("description"),
            placeholder=raw.get("placeholder"),
        )


def _parse(parser: Any, raw: Any, path: str) -> Expression | None:
    try:
        return parser(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ConfigShapeError(f"rule cannot be parsed: {exc}", path) from exc


def _merge_shorthands(validation: ValidationRuleSet, raw: Mapping[str, Any]) -> ValidationRuleSet:
    """Fold top-level ``required``/``minItems``/``maxItems`` into the rule set."""
    changes: dict[str, Any] = {}
    if raw.get("required") is True:
        changes["required"] = ValidationRuleSet.from_config({"required": True}).required
    for key, attr in (("minItems", "min_items"), ("maxItems", "max_items")):
        value = raw.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            changes[attr] = Threshold(value=value)
    return validation.merged(**changes)


@dataclass(frozen=True)
class StepSpec:
    id: str
    label: str
    fields: tuple[FieldSpec, ...] = ()
    visibility_rule: Expression | None = None
    description: str | None = None


@dataclass(frozen=True)
class FormSpec:
    """A whole form: ordered steps of ordered fields."""

    title: str = ""
    description: str | None = None
    steps: tuple[StepSpec, ...] = ()
    submit_button_text: str = "Submit"
    reset_button_text: str = "Reset"
    version: str | None = None

    @property
    def fields(self) -> Iterator[FieldSpec]:
        """All fields in configuration order."""
        for step in self.steps:
            yield from step.fields

    def field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def step_of(self, name: str) -> StepSpec | None:
        for step in self.steps:
            if any(spec.name == name for spec in step.fields):
                return step
        return None

    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    def dependency_map(self) -> dict[str, set[str]]:
        """Field name -> names it reads, including its step's rule."""
        deps: dict[str, set[str]] = {}
        for step in self.steps:
            step_refs = references(step.visibility_rule)
            for spec in step.fields:
                deps.setdefault(spec.name, set()).update((spec.dependencies() | step_refs) - {spec.name})
        return deps
