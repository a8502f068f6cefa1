"""Shared ``--values`` / ``--set`` / ``--today`` options.

Values come from an optional JSON/YAML file, then ``--set name=value``
pairs override them in order. A ``--set`` value is parsed as JSON when
it is valid JSON (``18``, ``true``, ``["a"]``), otherwise kept as text.
"""

from __future__ import annotations

import functools
import json
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path
from typing import Any, TypeVar

import click

_F = TypeVar("_F", bound=Callable[..., Any])


def parse_assignment(text: str) -> tuple[str, Any]:
    """Split ``name=value``; the value is JSON-decoded when possible.

    Raises:
        click.BadParameter: If there is no ``=`` or the name is empty.
    """
    name, sep, raw = text.partition("=")
    if not sep or not name.strip():
        msg = f"Expected name=value, got {text!r}"
        raise click.BadParameter(msg, param_hint="--set")
    try:
        value: Any = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return name.strip(), value


def collect_values(values_file: Path | None, assignments: tuple[str, ...]) -> dict[str, Any]:
    """Merge the values file and ``--set`` assignments.

    Raises:
        click.BadParameter: If the file is unreadable or not an object.
    """
    from formlogic.infrastructure.documents import (
        DocumentNotFoundError,
        DocumentParseError,
        read_document,
    )

    values: dict[str, Any] = {}
    if values_file is not None:
        try:
            loaded = read_document(values_file)
        except (DocumentNotFoundError, DocumentParseError) as exc:
            raise click.BadParameter(str(exc), param_hint="--values") from exc
        if not isinstance(loaded, dict):
            msg = f"{values_file} must contain an object of field values"
            raise click.BadParameter(msg, param_hint="--values")
        values.update(loaded)
    for text in assignments:
        name, value = parse_assignment(text)
        values[name] = value
    return values


def value_options(func: _F) -> _F:
    """Add ``--values``, ``--set`` and ``--today`` to a command.

    The wrapped command receives ``values: dict`` and ``today: date | None``.
    """

    @click.option(
        "--values",
        "values_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="JSON/YAML file of field values.",
    )
    @click.option(
        "--set",
        "assignments",
        multiple=True,
        metavar="NAME=VALUE",
        help="Set one field value (repeatable; JSON-decoded when possible).",
    )
    @click.option(
        "--today",
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        help="Evaluation date (YYYY-MM-DD) instead of the system date.",
    )
    @functools.wraps(func)
    def wrapper(
        *args: Any,
        values_file: Path | None,
        assignments: tuple[str, ...],
        today: datetime | None,
        **kwargs: Any,
    ) -> Any:
        values = collect_values(values_file, assignments)
        day: date | None = today.date() if today else None
        return func(*args, values=values, today=day, **kwargs)

    return wrapper  # type: ignore[return-value]
