"""Rule interpreter — evaluates expression trees against a value snapshot.

Evaluation is a pure function of ``(expression, environment)``:

- A missing variable is ``None`` (undefined), never an error, and every
  operator defines its behavior for ``None`` operands.
- Equality is strict: ``"5"`` never equals ``5`` and ``True`` never
  equals ``1``.
- ``CurrentDate()`` reads the date fixed on the :class:`Environment`
  when the snapshot was taken, so one pass sees one "today".

The only failure is :class:`~formlogic.domain.errors.RuleError` for a
malformed tree. Callers decide what it means (visibility fails open).
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any

from formlogic.domain.dates import date_diff_years, parse_date
from formlogic.domain.errors import RuleError
from formlogic.domain.expressions import (
    ArrayExpr,
    CompareOp,
    Comparison,
    Conditional,
    Containment,
    CurrentDate,
    DateDiffYears,
    Expression,
    Literal,
    Logical,
    LogicalOp,
    UnknownOperation,
    VariableRef,
)

_INDEX = re.compile(r"\[(\d+)\]")
# Plain decimal literals; float() alone also takes "1_000" and "inf".
_NUMERIC = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Environment:
    """Immutable snapshot of form values for one evaluation pass."""

    values: Mapping[str, Any] = field(default_factory=dict)
    today: date = field(default_factory=date.today)

    @classmethod
    def snapshot(cls, values: Mapping[str, Any] | None = None, today: date | None = None) -> Environment:
        """Copy *values* into a read-only snapshot and fix the pass date."""
        return cls(
            values=MappingProxyType(dict(values or {})),
            today=today or date.today(),
        )

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def resolve(self, path: str) -> Any:
        """Resolve a dotted/bracketed path; any missing step yields ``None``."""
        if not path:
            return dict(self.values)
        current: Any = self.values
        for segment in _INDEX.sub(r".\1", path).split("."):
            if segment == "":
                continue
            if isinstance(current, Mapping):
                current = current.get(segment)
            elif isinstance(current, (list, tuple)) and segment.isdigit():
                index = int(segment)
                current = current[index] if index < len(current) else None
            else:
                return None
            if current is None:
                return None
        return current


# ---------------------------------------------------------------------------
# Value semantics
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(a: Any, b: Any) -> bool:
    """Equality without coercion (``===``).

    Numbers compare by value across int/float; every other pair must be
    of the same kind. Lists and dicts compare structurally.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if type(a) is not type(b):
        return False
    return bool(a == b)


def truthy(value: Any) -> bool:
    """JSON-Logic truthiness: ``None``, ``''``, ``0``, NaN, ``[]``, ``False`` are falsy."""
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def to_number(value: Any) -> float | None:
    """Numeric coercion for ordering comparisons; ``None`` when impossible."""
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str) and _NUMERIC.fullmatch(value.strip()):
        number = float(value.strip())
    else:
        return None
    return None if math.isnan(number) else number


_ORDERINGS: dict[CompareOp, Callable[[Any, Any], bool]] = {
    CompareOp.LT: lambda a, b: a < b,
    CompareOp.LE: lambda a, b: a <= b,
    CompareOp.GT: lambda a, b: a > b,
    CompareOp.GE: lambda a, b: a >= b,
}


def compare(op: CompareOp, left: Any, right: Any) -> bool:
    """Apply a comparison operator to two already-evaluated operands."""
    if op == CompareOp.EQ:
        return strict_equals(left, right)
    if op == CompareOp.NE:
        return not strict_equals(left, right)

    ordering = _ORDERINGS.get(op)
    if ordering is None:
        msg = f"Unknown comparison operator: {op!r}"
        raise RuleError(msg)

    if left is None or right is None:
        return False
    if isinstance(left, str) and isinstance(right, str):
        return ordering(left, right)
    if isinstance(left, date) and isinstance(right, date):
        return ordering(left, right)
    a, b = to_number(left), to_number(right)
    if a is None or b is None:
        return False
    return ordering(a, b)


def contains(haystack: Any, needle: Any) -> bool:
    """Array membership (strict) or substring containment; otherwise ``False``."""
    if isinstance(haystack, (list, tuple)):
        return any(strict_equals(item, needle) for item in haystack)
    if isinstance(haystack, str) and isinstance(needle, str):
        return needle in haystack
    return False


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------


class Interpreter:
    """Evaluates :data:`~formlogic.domain.expressions.Expression` trees.

    Each instance owns a fixed dispatch table from node type to handler;
    nothing is registered globally. *clock* supplies "today" when a plain
    mapping is passed instead of an :class:`Environment`.
    """

    def __init__(self, clock: Callable[[], date] | None = None) -> None:
        self._clock = clock or date.today
        self._handlers: dict[type, Callable[[Any, Environment], Any]] = {
            Literal: self._literal,
            VariableRef: self._variable,
            Comparison: self._comparison,
            Logical: self._logical,
            Containment: self._containment,
            DateDiffYears: self._date_diff,
            CurrentDate: self._current_date,
            Conditional: self._conditional,
            ArrayExpr: self._array,
            UnknownOperation: self._unknown,
        }

    def today(self) -> date:
        return self._clock()

    def environment(self, values: Mapping[str, Any] | None = None, today: date | None = None) -> Environment:
        """Snapshot *values*, fixing today from the clock unless given."""
        return Environment.snapshot(values, today=today or self._clock())

    def evaluate(self, expr: Expression, env: Environment | Mapping[str, Any]) -> Any:
        """Evaluate *expr*.

        Raises:
            RuleError: On a malformed tree, or one nested too deeply to
                evaluate.
        """
        if not isinstance(env, Environment):
            env = self.environment(env)
        try:
            return self._eval(expr, env)
        except RecursionError as exc:
            msg = "Rule is nested too deeply to evaluate"
            raise RuleError(msg) from exc

    def test(self, expr: Expression, env: Environment | Mapping[str, Any]) -> bool:
        """Evaluate *expr* and apply JSON-Logic truthiness."""
        return truthy(self.evaluate(expr, env))

    def _eval(self, expr: Expression, env: Environment) -> Any:
        handler = self._handlers.get(type(expr))
        if handler is None:
            msg = f"Unsupported expression node: {type(expr).__name__}"
            raise RuleError(msg)
        return handler(expr, env)

    def _test(self, expr: Expression, env: Environment) -> bool:
        return truthy(self._eval(expr, env))

    # --- Handlers ---

    def _literal(self, expr: Literal, env: Environment) -> Any:
        return expr.value

    def _variable(self, expr: VariableRef, env: Environment) -> Any:
        value = env.resolve(expr.path)
        return expr.default if value is None else value

    def _comparison(self, expr: Comparison, env: Environment) -> bool:
        try:
            op = CompareOp(expr.op)
        except ValueError as exc:
            msg = f"Unknown comparison operator: {expr.op!r}"
            raise RuleError(msg) from exc
        return compare(op, self._eval(expr.left, env), self._eval(expr.right, env))

    def _logical(self, expr: Logical, env: Environment) -> bool:
        match expr.op:
            case LogicalOp.AND:
                return all(self._test(operand, env) for operand in expr.operands)
            case LogicalOp.OR:
                return any(self._test(operand, env) for operand in expr.operands)
            case LogicalOp.NOT:
                if len(expr.operands) != 1:
                    msg = f"'not' takes one operand, got {len(expr.operands)}"
                    raise RuleError(msg)
                return not self._test(expr.operands[0], env)
        msg = f"Unknown logical operator: {expr.op!r}"
        raise RuleError(msg)

    def _containment(self, expr: Containment, env: Environment) -> bool:
        return contains(self._eval(expr.haystack, env), self._eval(expr.needle, env))

    def _date_diff(self, expr: DateDiffYears, env: Environment) -> int | None:
        start = parse_date(self._eval(expr.start, env))
        end = parse_date(self._eval(expr.end, env))
        if start is None or end is None:
            return None
        return date_diff_years(start, end)

    def _current_date(self, expr: CurrentDate, env: Environment) -> date:
        return env.today

    def _conditional(self, expr: Conditional, env: Environment) -> Any:
        branches = expr.branches
        for i in range(0, len(branches) - 1, 2):
            if self._test(branches[i], env):
                return self._eval(branches[i + 1], env)
        if len(branches) % 2 == 1:
            return self._eval(branches[-1], env)
        return None

    def _array(self, expr: ArrayExpr, env: Environment) -> list[Any]:
        return [self._eval(item, env) for item in expr.items]

    def _unknown(self, expr: UnknownOperation, env: Environment) -> Any:
        msg = f"{expr.reason}: {expr.op!r}"
        raise RuleError(msg)


_default = Interpreter()


def default_interpreter() -> Interpreter:
    """The shared stateless interpreter (system clock)."""
    return _default


def evaluate(expr: Expression, env: Environment | Mapping[str, Any]) -> Any:
    """Evaluate *expr* with the default interpreter."""
    return _default.evaluate(expr, env)
