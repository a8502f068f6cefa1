"""CheckService — static health check of a form document.

Single command following the linter pattern. Four categories:
config shape, rules, validation, dependencies.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any

from formlogic.domain.expressions import Expression, unknown_operations
from formlogic.domain.fields import FormSpec
from formlogic.domain.forms import LoadedForm
from formlogic.infrastructure.graph import DependencyGraph
from formlogic.services.base import BaseService
from formlogic.services.result import ServiceResult
from formlogic.services.telemetry import trace_span, traced

# ---------------------------------------------------------------------------
# Issue severity and category constants
# ---------------------------------------------------------------------------

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

CAT_SHAPE = "config_shape"
CAT_RULES = "rules"
CAT_VALIDATION = "validation"
CAT_DEPENDENCIES = "dependencies"


def _issue(category: str, severity: str, field: str | None, message: str) -> dict[str, Any]:
    return {"category": category, "severity": severity, "field": field, "message": message}


# ---------------------------------------------------------------------------
# CheckService
# ---------------------------------------------------------------------------


class CheckService(BaseService):
    """Reports problems in a form document without evaluating values."""

    @traced
    def check(self, source: str | Path, *, errors_only: bool = False) -> ServiceResult:
        """Load *source* and report shape, rule, validation and dependency issues."""
        loaded = self._load("check", source)
        if isinstance(loaded, ServiceResult):
            return loaded
        path, form_load = loaded
        form = form_load.form

        issues: list[dict[str, Any]] = []
        with trace_span("config_shape"):
            issues.extend(self._check_shape(form_load))
        with trace_span("rules"):
            issues.extend(self._check_rules(form))
        with trace_span("validation"):
            issues.extend(self._check_validation(form))
        with trace_span("dependencies"):
            issues.extend(self._check_dependencies(form))

        error_count = sum(1 for i in issues if i["severity"] == SEVERITY_ERROR)
        warning_count = len(issues) - error_count
        if errors_only:
            issues = [i for i in issues if i["severity"] == SEVERITY_ERROR]

        return ServiceResult(
            ok=True,
            op="check",
            data={
                "source": str(path),
                "title": form.title,
                "issues": issues,
                "summary": self._summary(form),
                "error_count": error_count,
                "warning_count": warning_count,
                "healthy": error_count == 0,
            },
        )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def _check_shape(self, loaded: LoadedForm) -> list[dict[str, Any]]:
        issues = [
            _issue(CAT_SHAPE, SEVERITY_ERROR, issue.field, f"{issue.path}: {issue.message}")
            for issue in loaded.issues
        ]
        counts = Counter(spec.name for spec in loaded.form.fields)
        for name, count in counts.items():
            if count > 1:
                issues.append(
                    _issue(CAT_SHAPE, SEVERITY_WARNING, name, f"Field name {name!r} is declared {count} times")
                )
        if not any(True for _ in loaded.form.fields):
            issues.append(_issue(CAT_SHAPE, SEVERITY_WARNING, None, "Form has no fields"))
        return issues

    def _check_rules(self, form: FormSpec) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []

        def scan(expr: Expression | None, owner: str | None, kind: str) -> None:
            for node in unknown_operations(expr):
                issues.append(
                    _issue(
                        CAT_RULES,
                        SEVERITY_WARNING,
                        owner,
                        f"{kind} rule uses {node.op!r} ({node.reason}); it will fail open",
                    )
                )

        for step in form.steps:
            scan(step.visibility_rule, None, f"Step {step.id!r} visibility")
            for spec in step.fields:
                scan(spec.visibility_rule, spec.name, "Visibility")
                scan(spec.compute, spec.name, "Compute")
        return issues

    def _check_validation(self, form: FormSpec) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        for spec in form.fields:
            for rule in spec.validation.custom:
                if rule.predicate is None and rule.name not in self._registry:
                    issues.append(
                        _issue(
                            CAT_VALIDATION,
                            SEVERITY_WARNING,
                            spec.name,
                            f"Unknown validation rule {rule.name!r} (no custom rule registered); ignored",
                        )
                    )
        return issues

    def _check_dependencies(self, form: FormSpec) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []
        graph = DependencyGraph(form.dependency_map())
        for cycle in graph.cycles():
            chain = " -> ".join([*cycle, cycle[0]])
            issues.append(_issue(CAT_DEPENDENCIES, SEVERITY_ERROR, cycle[0], f"Dependency cycle: {chain}"))
        for name, reads in form.dependency_map().items():
            for source in sorted(reads):
                if not graph.is_declared(source):
                    issues.append(
                        _issue(
                            CAT_DEPENDENCIES,
                            SEVERITY_WARNING,
                            name,
                            f"Rule reads {source!r}, which is not a field of this form",
                        )
                    )
        return issues

    @staticmethod
    def _summary(form: FormSpec) -> dict[str, int]:
        fields = list(form.fields)
        return {
            "steps": len(form.steps),
            "fields": len(fields),
            "conditional_fields": sum(1 for f in fields if f.is_conditional),
            "computed_fields": sum(1 for f in fields if f.is_computed),
        }
