"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from formlogic.output.console import create_console, get_output, style_for_visibility

if TYPE_CHECKING:
    from rich.console import Console

    from formlogic.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False, show_hidden: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose, show_hidden=show_hidden)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "rule":
        return _dumps(result.data.get("result"))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _dumps(value: Any) -> str:
    return _json.dumps(value, separators=(",", ":"), default=str)


def _display(value: Any) -> str:
    """Show strings bare and everything else as JSON (``""``, ``[]``, ``null``)."""
    if isinstance(value, str) and value:
        return value
    return _dumps(value)


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="fl.ok")
    op = Text(f"  {result.op}", style="fl.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="fl.key")
    if key in ("field", "focus"):
        v = Text(str(value), style="fl.field")
    elif key == "source":
        v = Text(str(value), style="fl.path")
    elif key == "title":
        v = Text(str(value), style="fl.title")
    else:
        v = Text(_display(value) if isinstance(value, (dict, list)) or value is None else str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="fl.error")
    op = Text(f"  {result.op}", style="fl.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if err and err.code == "VALIDATION_FAILED":
        for name, message in (err.detail.get("errors") or {}).items():
            console.print(Text(f"  {name}", style="fl.field"), Text(f": {message}"), sep="")
        if err.detail.get("focus"):
            _field(console, "focus", err.detail["focus"])
        return

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False, **_: Any) -> None:
    """Render check results with issues grouped by category."""
    issues = result.data.get("issues", [])
    summary = result.data.get("summary") or {}

    if verbose and summary:
        _field(console, "source", result.data.get("source", ""))
        for key, value in summary.items():
            _field(console, key, value)

    if not issues:
        console.print("[fl.ok]OK[/fl.ok]  No issues found.")
        if verbose:
            _render_meta(console, result)
        return

    severity_styles = {"error": "fl.error", "warning": "fl.warning"}

    by_category: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        by_category.setdefault(str(issue.get("category", "unknown")), []).append(issue)

    for cat, cat_issues in by_category.items():
        console.print(f"\n[bold]{cat}[/bold]")
        for issue in cat_issues:
            sev = str(issue.get("severity", "warning"))
            style = severity_styles.get(sev, "")
            prefix = f"[{style}]{sev}[/{style}]" if style else sev
            name = issue.get("field")
            where = f" \\[{escape(str(name))}]" if name else ""
            console.print(f"  {prefix}{where}: {escape(str(issue.get('message', '')))}")

    errors = result.data.get("error_count", sum(1 for i in issues if i.get("severity") == "error"))
    warnings = result.data.get("warning_count", len(issues) - errors)
    console.print(f"\n{errors} errors, {warnings} warnings")
    if verbose:
        _render_meta(console, result)


def _render_evaluate(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    show_hidden: bool = False,
) -> None:
    """Render per-field visibility, value and error as a table."""
    _status_line(console, result)
    _field(console, "source", result.data.get("source", ""))
    _field(console, "today", result.data.get("today", ""))
    _field(console, "visible_steps", ", ".join(result.data.get("visible_steps", [])))

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Field", style="fl.field", no_wrap=True)
    if verbose:
        table.add_column("Step", style="dim")
        table.add_column("Type", style="dim")
    table.add_column("Visible")
    table.add_column("Value")
    table.add_column("Error", style="fl.error")

    for item in result.data.get("fields", []):
        visible = bool(item.get("visible"))
        if not visible and not show_hidden:
            continue
        name = Text(str(item.get("name", "")))
        if item.get("computed"):
            name.append(" =", style="fl.computed")
        row: list[Any] = [name]
        if verbose:
            row += [str(item.get("step", "")), str(item.get("type", ""))]
        row += [
            Text("yes" if visible else "no", style=style_for_visibility(visible)),
            Text(_display(item.get("value"))),
            Text(item.get("error") or ""),
        ]
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('error_count', 0)} fields with errors")
    if verbose:
        _render_meta(console, result)


def _render_submit(result: ServiceResult, console: Console, *, verbose: bool = False, **_: Any) -> None:
    """Render the submitted payload."""
    _status_line(console, result)
    _field(console, "source", result.data.get("source", ""))
    console.print(Text("  payload:", style="fl.key"))
    for key, value in (result.data.get("payload") or {}).items():
        console.print(Text(f"    {key}", style="fl.field"), Text(f" = {_display(value)}"), sep="")
    if verbose:
        _render_meta(console, result)


def _render_rule(result: ServiceResult, console: Console, *, verbose: bool = False, **_: Any) -> None:
    _status_line(console, result)
    _field(console, "result", _display(result.data.get("result")))
    _field(console, "truthy", result.data.get("truthy"))
    _field(console, "references", ", ".join(result.data.get("references", [])) or "-")
    if verbose:
        _field(console, "today", result.data.get("today", ""))
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False, **_: Any) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "check": _render_check,
    "evaluate": _render_evaluate,
    "submit": _render_submit,
    "rule": _render_rule,
}
