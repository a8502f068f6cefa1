"""Tests for ServiceResult and ServiceError models."""

from __future__ import annotations

import pydantic
import pytest

from formlogic.services.result import ErrorCode, ServiceError, ServiceResult, failure


class TestServiceError:
    def test_minimal(self) -> None:
        err = ServiceError(code=ErrorCode.NOT_FOUND, message="No form")
        assert err.code == "NOT_FOUND"
        assert err.detail == {}

    def test_frozen(self) -> None:
        err = ServiceError(code="X", message="m")
        with pytest.raises(pydantic.ValidationError):
            err.message = "other"  # type: ignore[misc]


class TestServiceResult:
    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="check")
        assert result.data == {}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_serialization(self) -> None:
        result = ServiceResult(ok=True, op="submit", data={"payload": {"age": 18}})
        dumped = result.model_dump()
        assert dumped["data"]["payload"] == {"age": 18}
        assert '"op":"submit"' in result.model_dump_json()


class TestFailure:
    def test_builds_error(self) -> None:
        result = failure(
            "submit",
            ErrorCode.VALIDATION_FAILED,
            "Submission blocked: 1 field invalid",
            detail={"errors": {"age": "Age is required"}, "focus": "age"},
            warnings=["w"],
        )
        assert not result.ok
        assert result.op == "submit"
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.detail["focus"] == "age"
        assert result.warnings == ["w"]
        assert result.data == {}
