"""Tests for submit CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from formlogic.cli import cli


@pytest.mark.usefixtures("_isolated_project")
class TestSubmitCommand:
    def test_submit_payload(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["submit", "registration", "--set", "age=18", "--set", "employed=yes", "--set", "companyName=Acme"],
        )
        assert result.exit_code == 0
        assert "companyName = Acme" in result.output

    def test_submit_json_excludes_hidden(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["--json", "submit", "registration", "--set", "age=15", "--set", "companyName=Acme"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["payload"] == {"age": 15}

    def test_submit_blocked(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["submit", "registration", "--set", "age=18", "--set", "employed=yes"])
        assert result.exit_code == 1
        assert "Submission blocked: 1 field invalid" in result.output
        assert "companyName: Company Name is required" in result.output
        assert "focus: companyName" in result.output

    def test_submit_blocked_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "submit", "registration"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["ok"] is False
        assert data["error"]["code"] == "VALIDATION_FAILED"
        assert data["error"]["detail"] == {"errors": {"age": "Age is required"}, "focus": "age"}

    def test_submit_values_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps({"firstName": "Ada", "phone": "555-123-4567"}), encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "submit", "profile", "--values", str(answers)])
        assert result.exit_code == 0
        payload = json.loads(result.output)["data"]["payload"]
        assert payload["fullName"] == "Ada"
        assert "dob" not in payload

    def test_submit_quiet_failure(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "submit", "registration"])
        assert result.exit_code == 1
        assert "ERROR: submit — Submission blocked: 1 field invalid" in result.output
