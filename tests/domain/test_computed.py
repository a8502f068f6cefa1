"""Tests for computed field values."""

from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from formlogic.domain.computed import recompute
from formlogic.domain.expressions import Logical
from formlogic.domain.fields import FieldSpec
from formlogic.domain.interpreter import Environment


def _computed(rule: object, **extra: object) -> FieldSpec:
    return FieldSpec.from_config({"name": "fullName", "type": "hidden", "computeValue": rule, **extra})


class TestRecompute:
    def test_evaluates_rule(self) -> None:
        spec = _computed({"if": [{"var": "lastName"}, {"var": "lastName"}, {"var": "firstName"}]})
        assert recompute(spec, Environment.snapshot({"firstName": "Ada", "lastName": ""})) == "Ada"
        assert recompute(spec, Environment.snapshot({"firstName": "Ada", "lastName": "Lovelace"})) == "Lovelace"

    def test_without_rule_keeps_current_value(self) -> None:
        spec = FieldSpec.from_config({"name": "city", "type": "text", "label": "City"})
        assert recompute(spec, Environment.snapshot({"city": "Paris"})) == "Paris"
        assert recompute(spec, Environment.snapshot({})) == ""

    def test_broken_rule_yields_initial_value(self, caplog: pytest.LogCaptureFixture) -> None:
        spec = _computed({"concat": [{"var": "a"}, {"var": "b"}]}, defaultValue="n/a")
        with caplog.at_level(logging.WARNING, logger="formlogic"):
            assert recompute(spec, Environment.snapshot({"a": "x"})) == "n/a"
        assert any(r.getMessage() == "rule_error" for r in caplog.records)

    def test_deeply_nested_rule_yields_initial_value(self, deep_rule: Logical) -> None:
        spec = replace(_computed({"var": "a"}, defaultValue="n/a"), compute=deep_rule)
        assert recompute(spec, Environment.snapshot({})) == "n/a"
