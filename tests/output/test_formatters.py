"""Tests for the format_result dispatch."""

from __future__ import annotations

import json

from formlogic.output.formatters import OutputSettings, format_result
from formlogic.services.result import ErrorCode, ServiceResult, failure


class TestFormatResult:
    def test_json_output(self) -> None:
        result = ServiceResult(ok=True, op="submit", data={"payload": {"age": 18}})
        parsed = json.loads(format_result(result, json_output=True))
        assert parsed["ok"] is True
        assert parsed["data"]["payload"] == {"age": 18}

    def test_settings_take_precedence(self) -> None:
        result = ServiceResult(ok=True, op="submit", data={"payload": {}})
        out = format_result(result, settings=OutputSettings(quiet=True), json_output=True)
        assert out == "OK: submit"

    def test_json_failure_keeps_detail(self) -> None:
        result = failure(
            "submit",
            ErrorCode.VALIDATION_FAILED,
            "Submission blocked: 1 field invalid",
            detail={"errors": {"age": "Age is required"}, "focus": "age"},
        )
        parsed = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert parsed["error"]["detail"]["focus"] == "age"

    def test_human_default(self) -> None:
        result = ServiceResult(ok=True, op="custom", data={"answer": 42})
        out = format_result(result)
        assert "OK" in out
        assert "answer: 42" in out
