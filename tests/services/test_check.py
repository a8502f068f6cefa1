"""Tests for CheckService — static form health check."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from formlogic.domain.rules import CustomRuleRegistry
from formlogic.infrastructure.documents import FormDocumentStore
from formlogic.services.check import CheckService


def _write(forms_dir: Path, name: str, doc: dict[str, Any]) -> str:
    (forms_dir / f"{name}.json").write_text(json.dumps(doc), encoding="utf-8")
    return name


def _issues(result: Any, category: str) -> list[dict[str, Any]]:
    return [i for i in result.data["issues"] if i["category"] == category]


class TestCheckCleanForm:
    def test_registration_is_healthy(self, store: FormDocumentStore) -> None:
        result = CheckService(store).check("registration")
        assert result.ok
        assert result.data["issues"] == []
        assert result.data["healthy"]
        assert result.data["title"] == "Registration"
        assert result.data["summary"] == {"steps": 1, "fields": 3, "conditional_fields": 2, "computed_fields": 0}

    def test_yaml_form(self, store: FormDocumentStore) -> None:
        result = CheckService(store).check("profile")
        assert result.ok
        assert result.data["error_count"] == 0
        assert result.data["summary"]["steps"] == 2
        assert result.data["summary"]["computed_fields"] == 1


class TestCheckShape:
    def test_dropped_field_is_an_error(self, store: FormDocumentStore, forms_dir: Path) -> None:
        name = _write(
            forms_dir,
            "bad",
            {"fields": [{"name": "a", "type": "slider", "label": "A"}, {"name": "b", "type": "text", "label": "B"}]},
        )
        result = CheckService(store).check(name)
        assert result.ok
        shape = _issues(result, "config_shape")
        assert shape[0]["severity"] == "error"
        assert shape[0]["field"] == "a"
        assert shape[0]["message"].startswith("fields[0]:")
        assert not result.data["healthy"]

    def test_duplicate_names(self, store: FormDocumentStore, forms_dir: Path) -> None:
        field = {"name": "a", "type": "text", "label": "A"}
        name = _write(forms_dir, "dupes", {"fields": [field, field]})
        shape = _issues(CheckService(store).check(name), "config_shape")
        assert shape == [
            {
                "category": "config_shape",
                "severity": "warning",
                "field": "a",
                "message": "Field name 'a' is declared 2 times",
            }
        ]

    def test_empty_form(self, store: FormDocumentStore, forms_dir: Path) -> None:
        name = _write(forms_dir, "empty", {"fields": []})
        shape = _issues(CheckService(store).check(name), "config_shape")
        assert [i["message"] for i in shape] == ["Form has no fields"]

    def test_unloadable_document_fails(self, store: FormDocumentStore, forms_dir: Path) -> None:
        (forms_dir / "list.json").write_text("[]", encoding="utf-8")
        result = CheckService(store).check("list")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFIG_ERROR"


class TestCheckRules:
    def test_unknown_operator_warns(self, store: FormDocumentStore, forms_dir: Path) -> None:
        name = _write(
            forms_dir,
            "rules",
            {
                "steps": [
                    {
                        "id": "s",
                        "conditions": {"==": [1]},
                        "fields": [
                            {"name": "a", "type": "text", "label": "A", "conditions": {"regexMatch": ["x", "y"]}}
                        ],
                    }
                ]
            },
        )
        rules = _issues(CheckService(store).check(name), "rules")
        assert len(rules) == 2
        assert all(i["severity"] == "warning" for i in rules)
        assert rules[0]["field"] is None
        assert "Step 's' visibility" in rules[0]["message"]
        assert rules[1]["field"] == "a"
        assert "'regexMatch'" in rules[1]["message"]


class TestCheckValidation:
    def test_unregistered_custom_rule_warns(self, store: FormDocumentStore, forms_dir: Path) -> None:
        doc = {"fields": [{"name": "n", "type": "text", "label": "N", "validation": {"isEven": "Even"}}]}
        name = _write(forms_dir, "custom", doc)
        issues = _issues(CheckService(store).check(name), "validation")
        assert len(issues) == 1
        assert "'isEven'" in issues[0]["message"]

    def test_registered_custom_rule_is_fine(self, store: FormDocumentStore, forms_dir: Path) -> None:
        doc = {"fields": [{"name": "n", "type": "text", "label": "N", "validation": {"isEven": "Even"}}]}
        name = _write(forms_dir, "custom", doc)
        registry = CustomRuleRegistry()
        registry.register("isEven", lambda value, values: True)
        assert _issues(CheckService(store, registry=registry).check(name), "validation") == []


class TestCheckDependencies:
    def test_cycle_is_an_error(self, store: FormDocumentStore, forms_dir: Path) -> None:
        name = _write(
            forms_dir,
            "cycle",
            {
                "fields": [
                    {"name": "a", "type": "text", "label": "A", "conditions": {"var": "b"}},
                    {"name": "b", "type": "text", "label": "B", "conditions": {"var": "a"}},
                ]
            },
        )
        result = CheckService(store).check(name)
        deps = _issues(result, "dependencies")
        assert deps[0]["severity"] == "error"
        assert deps[0]["message"] == "Dependency cycle: a -> b -> a"
        assert not result.data["healthy"]

    def test_undeclared_reference_warns(self, store: FormDocumentStore, forms_dir: Path) -> None:
        name = _write(
            forms_dir,
            "external",
            {"fields": [{"name": "a", "type": "text", "label": "A", "conditions": {"var": "country"}}]},
        )
        deps = _issues(CheckService(store).check(name), "dependencies")
        assert deps == [
            {
                "category": "dependencies",
                "severity": "warning",
                "field": "a",
                "message": "Rule reads 'country', which is not a field of this form",
            }
        ]

    def test_errors_only(self, store: FormDocumentStore, forms_dir: Path) -> None:
        name = _write(
            forms_dir,
            "mixed",
            {
                "fields": [
                    {"name": "a", "type": "text", "label": "A", "conditions": {"var": "b"}},
                    {"name": "b", "type": "text", "label": "B", "conditions": {"var": "a"}},
                    {"name": "c", "type": "text", "label": "C", "conditions": {"var": "country"}},
                ]
            },
        )
        result = CheckService(store).check(name, errors_only=True)
        assert all(i["severity"] == "error" for i in result.data["issues"])
        assert result.data["warning_count"] == 1
        assert result.data["error_count"] == 1


class TestCheckNotFound:
    def test_missing_form(self, store: FormDocumentStore) -> None:
        result = CheckService(store).check("nope")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
