"""Form and value documents on disk.

A form is addressed either by a path or by a bare name resolved inside
the configured forms directory (``<name>.json``, ``<name>.yaml``,
``<name>.yml``, tried in that order). JSON is read with the stdlib
parser, YAML with ruamel.yaml in safe mode.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

SUFFIXES: tuple[str, ...] = (".json", ".yaml", ".yml")


class DocumentNotFoundError(FileNotFoundError):
    """No document exists for the requested source."""

    def __init__(self, source: str, searched: list[Path] | None = None) -> None:
        super().__init__(f"No form document found for {source!r}")
        self.source = source
        self.searched = searched or []


class DocumentParseError(ValueError):
    """A document exists but is not valid JSON/YAML."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def _new_yaml() -> YAML:
    return YAML(typ="safe", pure=True)


def read_document(path: Path) -> Any:
    """Parse *path* as YAML (``.yaml``/``.yml``) or JSON (anything else).

    Raises:
        DocumentNotFoundError: If *path* does not exist.
        DocumentParseError: If the content cannot be parsed.
    """
    if not path.is_file():
        raise DocumentNotFoundError(str(path), [path])
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentParseError(path, f"not valid UTF-8: {exc.reason}") from exc
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            return _new_yaml().load(text)
        except YAMLError as exc:
            raise DocumentParseError(path, str(exc)) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentParseError(path, f"invalid JSON at line {exc.lineno}: {exc.msg}") from exc


class FormDocumentStore:
    """Resolves and reads form documents under a root directory."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or Path.cwd()

    def resolve(self, source: str | Path) -> Path:
        """Locate the document for *source*.

        Raises:
            DocumentNotFoundError: If neither the path nor any
                ``<root>/<name><suffix>`` exists.
        """
        path = Path(source)
        if path.is_file():
            return path
        candidates = [self.root / path] if path.suffix else []
        candidates += [self.root / f"{source}{suffix}" for suffix in SUFFIXES]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        raise DocumentNotFoundError(str(source), [path, *candidates])

    def load(self, source: str | Path) -> tuple[Path, Any]:
        """Resolve and parse *source*, returning ``(path, document)``."""
        path = self.resolve(source)
        return path, read_document(path)

    def names(self) -> list[str]:
        """Form names available in the root directory."""
        if not self.root.is_dir():
            return []
        return sorted({p.stem for p in self.root.iterdir() if p.suffix in SUFFIXES and p.is_file()})
