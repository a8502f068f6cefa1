"""Error taxonomy for the rule engine.

Only load-time and rule-evaluation problems are exceptions. A failing
field constraint is never raised: it is returned as an ``Invalid``
outcome by :mod:`formlogic.domain.validation`.
"""

from __future__ import annotations


class FormlogicError(Exception):
    """Base class for all formlogic errors."""


class RuleError(FormlogicError):
    """A malformed expression tree (unknown operator, bad arity).

    Visibility checks treat this as "visible" (fail-open).
    """


class CustomValidatorError(FormlogicError):
    """A user-supplied predicate raised while validating a field."""

    def __init__(self, rule: str, cause: BaseException) -> None:
        super().__init__(f"Custom rule {rule!r} raised {type(cause).__name__}: {cause}")
        self.rule = rule
        self.cause = cause


class ConfigShapeError(FormlogicError):
    """Malformed form configuration.

    ``path`` locates the offending node, e.g. ``steps[1].fields[3]``.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.message = message
        self.path = path
