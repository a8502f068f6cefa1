"""Tests for form document resolution and parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from formlogic.infrastructure.documents import (
    DocumentNotFoundError,
    DocumentParseError,
    FormDocumentStore,
    read_document,
)


class TestReadDocument:
    def test_json(self, forms_dir: Path) -> None:
        doc = read_document(forms_dir / "registration.json")
        assert doc["title"] == "Registration"

    def test_yaml(self, forms_dir: Path) -> None:
        doc = read_document(forms_dir / "profile.yaml")
        assert doc["version"] == 2
        assert doc["form"]["title"] == "Profile"
        assert doc["form"]["steps"][1]["conditions"] == [{"===": [{"var": "wantsExtra"}, True]}]

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentNotFoundError):
            read_document(tmp_path / "nope.json")

    def test_not_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_bytes(b"\xff\xfe{")
        with pytest.raises(DocumentParseError, match="not valid UTF-8"):
            read_document(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text('{"title": ', encoding="utf-8")
        with pytest.raises(DocumentParseError, match="invalid JSON") as exc_info:
            read_document(path)
        assert exc_info.value.path == path

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("title: [unclosed\n", encoding="utf-8")
        with pytest.raises(DocumentParseError):
            read_document(path)


class TestFormDocumentStore:
    def test_resolve_by_name(self, store: FormDocumentStore, forms_dir: Path) -> None:
        assert store.resolve("registration") == forms_dir / "registration.json"
        assert store.resolve("profile") == forms_dir / "profile.yaml"

    def test_resolve_relative_to_root(self, store: FormDocumentStore, forms_dir: Path) -> None:
        assert store.resolve("profile.yaml") == forms_dir / "profile.yaml"

    def test_resolve_explicit_path(self, store: FormDocumentStore, tmp_path: Path) -> None:
        other = tmp_path / "elsewhere.json"
        other.write_text("{}", encoding="utf-8")
        assert store.resolve(other) == other

    def test_not_found_lists_candidates(self, store: FormDocumentStore, forms_dir: Path) -> None:
        with pytest.raises(DocumentNotFoundError) as exc_info:
            store.resolve("missing")
        assert forms_dir / "missing.yml" in exc_info.value.searched
        assert exc_info.value.source == "missing"

    def test_load(self, store: FormDocumentStore, forms_dir: Path) -> None:
        path, doc = store.load("registration")
        assert path == forms_dir / "registration.json"
        assert doc["steps"][0]["id"] == "about"

    def test_names(self, store: FormDocumentStore) -> None:
        assert store.names() == ["profile", "registration"]

    def test_names_without_root(self, tmp_path: Path) -> None:
        assert FormDocumentStore(tmp_path / "absent").names() == []
