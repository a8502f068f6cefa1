"""Expression trees for visibility rules and computed fields.

Rules arrive as JSON-Logic objects (``{"===": [{"var": "x"}, "JOINT"]}``)
and are parsed once, at form-build time, into immutable node objects.
Evaluation lives in :mod:`formlogic.domain.interpreter`; this module is
structure only.

Unknown operator tags are not rejected here. They become
:class:`UnknownOperation` nodes so the failure surfaces at evaluation
time as a ``RuleError``, which visibility checks treat as "visible".
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class CompareOp(StrEnum):
    """Comparison operators."""

    EQ = "="
    NE = "≠"
    LT = "<"
    LE = "≤"
    GT = ">"
    GE = "≥"


class LogicalOp(StrEnum):
    """Boolean connectives."""

    AND = "and"
    OR = "or"
    NOT = "not"


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class VariableRef:
    """Dotted or bracketed path into the environment (``a.0.b``, ``a[0].b``)."""

    path: str
    default: Any = None


@dataclass(frozen=True)
class Comparison:
    op: CompareOp
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Logical:
    op: LogicalOp
    operands: tuple[Expression, ...]


@dataclass(frozen=True)
class Containment:
    """Array membership or substring test (``contains`` and ``in`` forms)."""

    haystack: Expression
    needle: Expression


@dataclass(frozen=True)
class DateDiffYears:
    """Whole calendar years from ``start`` to ``end``."""

    start: Expression
    end: Expression


@dataclass(frozen=True)
class CurrentDate:
    """The evaluation-time date of the current pass."""


@dataclass(frozen=True)
class Conditional:
    """JSON-Logic ``if``: ``[cond, then, cond, then, ..., else]``."""

    branches: tuple[Expression, ...]


@dataclass(frozen=True)
class ArrayExpr:
    items: tuple[Expression, ...]


@dataclass(frozen=True)
class UnknownOperation:
    """An operator tag outside the fixed table, or one used with a bad arity."""

    op: str
    operands: tuple[Any, ...] = ()
    reason: str = "unknown operator"


type Expression = (
    Literal
    | VariableRef
    | Comparison
    | Logical
    | Containment
    | DateDiffYears
    | CurrentDate
    | Conditional
    | ArrayExpr
    | UnknownOperation
)


# ---------------------------------------------------------------------------
# JSON-Logic parsing
# ---------------------------------------------------------------------------

_COMPARISONS: dict[str, CompareOp] = {
    "===": CompareOp.EQ,
    "==": CompareOp.EQ,
    "!==": CompareOp.NE,
    "!=": CompareOp.NE,
    "<": CompareOp.LT,
    "<=": CompareOp.LE,
    ">": CompareOp.GT,
    ">=": CompareOp.GE,
}

# Every tag the parser understands. Anything else is an UnknownOperation.
OPERATOR_TAGS: frozenset[str] = frozenset(
    {
        *_COMPARISONS,
        "var",
        "and",
        "or",
        "!",
        "not",
        "contains",
        "in",
        "dateDiffInYears",
        "CURRENT_DATE",
        "if",
    }
)


def _args(raw: Any) -> list[Any]:
    # JSON-Logic allows a bare operand in place of a one-element list.
    if isinstance(raw, list):
        return raw
    return [raw]


def _arity(op: str, args: list[Any], expected: int) -> UnknownOperation | None:
    if len(args) != expected:
        return UnknownOperation(
            op, tuple(args), reason=f"expected {expected} operands, got {len(args)}"
        )
    return None


def parse_rule(obj: Any) -> Expression:
    """Parse a JSON-Logic value into an :data:`Expression`.

    A dict with exactly one key is an operation; every other value
    (scalars, multi-key dicts) is literal data, as in JSON-Logic itself.
    """
    if isinstance(obj, list):
        items = tuple(parse_rule(item) for item in obj)
        if all(isinstance(item, Literal) for item in items):
            return Literal([item.value for item in items])  # type: ignore[union-attr]
        return ArrayExpr(items)

    if not isinstance(obj, dict) or len(obj) != 1:
        return Literal(obj)

    op, raw = next(iter(obj.items()))

    if op == "var":
        args = _args(raw)
        if not args:
            return VariableRef("")
        path = "" if args[0] is None else str(args[0])
        default = args[1] if len(args) > 1 else None
        return VariableRef(path, default)

    args = _args(raw)

    if op in _COMPARISONS:
        bad = _arity(op, args, 2)
        if bad:
            return bad
        return Comparison(_COMPARISONS[op], parse_rule(args[0]), parse_rule(args[1]))

    if op in ("and", "or"):
        logical = LogicalOp.AND if op == "and" else LogicalOp.OR
        return Logical(logical, tuple(parse_rule(a) for a in args))

    if op in ("!", "not"):
        bad = _arity(op, args, 1)
        if bad:
            return bad
        return Logical(LogicalOp.NOT, (parse_rule(args[0]),))

    if op == "contains":
        bad = _arity(op, args, 2)
        if bad:
            return bad
        return Containment(haystack=parse_rule(args[0]), needle=parse_rule(args[1]))

    if op == "in":
        bad = _arity(op, args, 2)
        if bad:
            return bad
        return Containment(haystack=parse_rule(args[1]), needle=parse_rule(args[0]))

    if op == "dateDiffInYears":
        bad = _arity(op, args, 2)
        if bad:
            return bad
        return DateDiffYears(parse_rule(args[0]), parse_rule(args[1]))

    if op == "CURRENT_DATE":
        return CurrentDate()

    if op == "if":
        return Conditional(tuple(parse_rule(a) for a in args))

    return UnknownOperation(str(op), tuple(args))


def parse_conditions(obj: Any) -> Expression | None:
    """Parse a field/step ``conditions`` value.

    Accepts a single rule object or a list of rule objects; a list is an
    implicit AND. ``None`` and an empty list mean "no rule".
    """
    if obj is None:
        return None
    if isinstance(obj, list):
        if not obj:
            return None
        if len(obj) == 1:
            return parse_rule(obj[0])
        return Logical(LogicalOp.AND, tuple(parse_rule(item) for item in obj))
    return parse_rule(obj)


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------


def children(expr: Expression) -> tuple[Expression, ...]:
    """Direct sub-expressions of *expr*, in evaluation order."""
    match expr:
        case Comparison(left=left, right=right):
            return (left, right)
        case Logical(operands=operands) | Conditional(branches=operands) | ArrayExpr(
            items=operands
        ):
            return tuple(operands)
        case Containment(haystack=haystack, needle=needle):
            return (haystack, needle)
        case DateDiffYears(start=start, end=end):
            return (start, end)
        case _:
            return ()


def walk(expr: Expression) -> Iterator[Expression]:
    """Yield *expr* and every sub-expression, depth first.

    Uses an explicit stack, so arbitrarily deep trees never hit the
    recursion limit.
    """
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def root_name(path: str) -> str:
    """Top-level field name of a variable path (``a.0.b`` and ``a[0].b`` -> ``a``)."""
    return path.split(".", 1)[0].split("[", 1)[0]


def references(expr: Expression | None) -> set[str]:
    """Top-level field names an expression reads."""
    if expr is None:
        return set()
    names: set[str] = set()
    for node in walk(expr):
        if isinstance(node, VariableRef) and node.path:
            names.add(root_name(node.path))
    return names


def unknown_operations(expr: Expression | None) -> list[UnknownOperation]:
    """All :class:`UnknownOperation` nodes in *expr* (for config checks)."""
    if expr is None:
        return []
    return [node for node in walk(expr) if isinstance(node, UnknownOperation)]
