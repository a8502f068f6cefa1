"""FormSession — the caller-side state of one form being filled in.

Holds values, errors, touched flags and visibility, and keeps them
consistent after every change with one synchronous pass:

1. Walk the changed field and everything downstream of it in the static
   dependency graph, in topological order.
2. Recompute computed fields.
3. Re-evaluate visibility. A field that is hidden has its value reset to
   its type's empty value and its error and touched flag cleared; the
   caller is told via :class:`ClearValue` / :class:`ClearError`.
4. Re-validate visible fields that are touched (or all visible fields
   once a submit has been attempted).

Every step of a pass evaluates against an immutable snapshot sharing one
"today"; a write made during the pass produces the next snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from formlogic.domain.computed import recompute
from formlogic.domain.fields import FieldSpec, FormSpec, StepSpec
from formlogic.domain.interpreter import Environment, Interpreter, strict_equals
from formlogic.domain.types import carries_value, empty_value
from formlogic.domain.validation import Invalid, ValidationOutcome, Validator
from formlogic.domain.visibility import is_visible
from formlogic.infrastructure.graph import DependencyGraph

# --- Directives ---


@dataclass(frozen=True)
class ClearValue:
    """The field became hidden; its value was reset to ``value``."""

    field: str
    value: Any


@dataclass(frozen=True)
class ClearError:
    """The field's reported error must be removed."""

    field: str


type Directive = ClearValue | ClearError


@dataclass(frozen=True)
class ChangeSet:
    """What one ``set_value`` pass changed."""

    changed: str
    values: dict[str, Any] = field(default_factory=dict)
    visibility: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, str | None] = field(default_factory=dict)
    directives: tuple[Directive, ...] = ()

    @property
    def hidden(self) -> list[str]:
        return [name for name, visible in self.visibility.items() if not visible]

    @property
    def shown(self) -> list[str]:
        return [name for name, visible in self.visibility.items() if visible]


@dataclass(frozen=True)
class SubmitOutcome:
    ok: bool
    errors: dict[str, str] = field(default_factory=dict)
    focus: str | None = None
    payload: dict[str, Any] | None = None


@dataclass
class _Pass:
    values: dict[str, Any] = field(default_factory=dict)
    visibility: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, str | None] = field(default_factory=dict)
    directives: list[Directive] = field(default_factory=list)


# --- Session ---


class FormSession:
    """Mutable form state driven by the rule engine."""

    def __init__(
        self,
        form: FormSpec,
        values: Mapping[str, Any] | None = None,
        *,
        today: date | None = None,
        interpreter: Interpreter | None = None,
        validator: Validator | None = None,
    ) -> None:
        self.form = form
        self._validator = validator or Validator(interpreter=interpreter)
        self._interpreter = interpreter or self._validator.interpreter
        self._today = today
        self._graph = DependencyGraph(form.dependency_map())

        self._fields: dict[str, FieldSpec] = {}
        self._steps: dict[str, StepSpec] = {}
        for step in form.steps:
            for spec in step.fields:
                self._fields.setdefault(spec.name, spec)
                self._steps.setdefault(spec.name, step)

        self._initial = {name: spec.initial_value() for name, spec in self._fields.items()}
        self._provided = dict(values or {})
        self._values: dict[str, Any] = {}
        self._errors: dict[str, str] = {}
        self._touched: set[str] = set()
        self._visible: dict[str, bool] = {}
        self._submitted = False
        self.reset()

    # --- State ---

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    @property
    def touched(self) -> frozenset[str]:
        return frozenset(self._touched)

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    def visibility(self) -> dict[str, bool]:
        """Field name -> visible, as of the last pass."""
        return dict(self._visible)

    def is_visible(self, name: str) -> bool:
        return self._visible.get(name, True)

    def environment(self) -> Environment:
        """Snapshot of the current values."""
        return self._snapshot(self._pass_today())

    def visible_steps(self) -> list[str]:
        env = self.environment()
        return [step.id for step in self.form.steps if is_visible(step, env, interpreter=self._interpreter)]

    # --- Operations ---

    def reset(self) -> None:
        """Return to the initial values, with no errors or touched fields."""
        self._values = {**self._initial, **self._provided}
        self._errors.clear()
        self._touched.clear()
        self._visible.clear()
        self._submitted = False
        self._run(self._graph.order())

    def set_value(self, name: str, value: Any) -> ChangeSet:
        """Record a user edit and propagate it through dependent fields."""
        self._values[name] = value
        if name in self._fields:
            self._touched.add(name)
        result = self._run(self._graph.affected_by(name))
        return ChangeSet(
            changed=name,
            values=result.values,
            visibility=result.visibility,
            errors=result.errors,
            directives=tuple(result.directives),
        )

    def validate_field(self, name: str) -> ValidationOutcome:
        """Validate one field now (e.g. on blur) and record the outcome.

        Raises:
            KeyError: If *name* is not a field of the form.
        """
        spec = self._fields[name]
        self._touched.add(name)
        env = self._snapshot(self._pass_today())
        outcome = self._validator.validate(spec, self._values.get(name), env, visible=self._visible.get(name, True))
        self._record(name, outcome, _Pass())
        return outcome

    def submit(self) -> SubmitOutcome:
        """Validate every visible field and build the payload.

        Visibility is re-evaluated for every field of every step against
        the final values first. The payload holds visible value-carrying
        fields only.
        """
        self._submitted = True
        self._run(self._graph.order())

        env = self._snapshot(self._pass_today())
        errors: dict[str, str] = {}
        for spec in self.form.fields:
            if spec.name in errors or not self._visible.get(spec.name, True):
                continue
            outcome = self._validator.validate(spec, self._values.get(spec.name), env, visible=True)
            if isinstance(outcome, Invalid):
                errors[spec.name] = outcome.message
        self._errors = dict(errors)

        if errors:
            return SubmitOutcome(ok=False, errors=errors, focus=next(iter(errors)))

        payload = {
            spec.name: self._values.get(spec.name)
            for spec in self.form.fields
            if self._visible.get(spec.name, True) and carries_value(spec.type)
        }
        return SubmitOutcome(ok=True, payload=payload)

    # --- Pass ---

    def _pass_today(self) -> date:
        return self._today or self._interpreter.today()

    def _snapshot(self, today: date) -> Environment:
        return Environment.snapshot(self._values, today=today)

    def _field_visible(self, spec: FieldSpec, env: Environment) -> bool:
        step = self._steps.get(spec.name)
        if step is not None and not is_visible(step, env, interpreter=self._interpreter):
            return False
        return is_visible(spec, env, interpreter=self._interpreter)

    def _run(self, names: Iterable[str]) -> _Pass:
        today = self._pass_today()
        env = self._snapshot(today)
        result = _Pass()

        for name in names:
            spec = self._fields.get(name)
            if spec is None:
                continue

            if spec.is_computed:
                computed = recompute(spec, env, interpreter=self._interpreter)
                if not strict_equals(computed, self._values.get(name)):
                    self._values[name] = computed
                    result.values[name] = computed
                    env = self._snapshot(today)

            visible = self._field_visible(spec, env)
            if self._visible.get(name) != visible:
                result.visibility[name] = visible
            self._visible[name] = visible

            if not visible:
                if self._hide(spec, result):
                    env = self._snapshot(today)
                continue

            if name in self._touched or self._submitted:
                outcome = self._validator.validate(spec, self._values.get(name), env, visible=True)
                self._record(name, outcome, result)

        return result

    def _hide(self, spec: FieldSpec, result: _Pass) -> bool:
        """Reset a hidden field; returns whether its value changed."""
        name = spec.name
        self._touched.discard(name)
        if name in self._errors:
            del self._errors[name]
            result.errors[name] = None
            result.directives.append(ClearError(name))

        empty = empty_value(spec.type)
        if strict_equals(self._values.get(name), empty):
            return False
        self._values[name] = empty
        result.values[name] = empty
        result.directives.append(ClearValue(name, empty))
        return True

    def _record(self, name: str, outcome: ValidationOutcome, result: _Pass) -> None:
        if isinstance(outcome, Invalid):
            if self._errors.get(name) != outcome.message:
                self._errors[name] = outcome.message
                result.errors[name] = outcome.message
        elif name in self._errors:
            del self._errors[name]
            result.errors[name] = None
            result.directives.append(ClearError(name))
