"""Tests for --values / --set parsing."""

from __future__ import annotations

import json
from pathlib import Path

import click
import pytest

from formlogic.commands._inputs import collect_values, parse_assignment


class TestParseAssignment:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("age=18", ("age", 18)),
            ("ok=true", ("ok", True)),
            ('tags=["a", "b"]', ("tags", ["a", "b"])),
            ("name=Ada", ("name", "Ada")),
            ("note=a=b", ("note", "a=b")),
            ("blank=", ("blank", "")),
            (" age =18", ("age", 18)),
        ],
    )
    def test_parse(self, text: str, expected: tuple) -> None:
        assert parse_assignment(text) == expected

    @pytest.mark.parametrize("text", ["age", "=18"])
    def test_rejects(self, text: str) -> None:
        with pytest.raises(click.BadParameter):
            parse_assignment(text)


class TestCollectValues:
    def test_no_inputs(self) -> None:
        assert collect_values(None, ()) == {}

    def test_file_then_assignments(self, tmp_path: Path) -> None:
        path = tmp_path / "v.json"
        path.write_text(json.dumps({"age": 15, "employed": "no"}), encoding="utf-8")
        assert collect_values(path, ("age=30",)) == {"age": 30, "employed": "no"}

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "v.yml"
        path.write_text("interests:\n  - golf\n", encoding="utf-8")
        assert collect_values(path, ()) == {"interests": ["golf"]}

    def test_unparseable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "v.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(click.BadParameter):
            collect_values(path, ())

    def test_binary_file(self, tmp_path: Path) -> None:
        path = tmp_path / "v.json"
        path.write_bytes(b"\xff\xfe{")
        with pytest.raises(click.BadParameter, match="not valid UTF-8"):
            collect_values(path, ())
