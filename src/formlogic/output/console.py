"""Rich Console factory and theme for formlogic output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FORMLOGIC_THEME = Theme(
    {
        "fl.ok": "bold green",
        "fl.error": "bold red",
        "fl.warning": "bold yellow",
        "fl.op": "bold cyan",
        "fl.key": "dim",
        "fl.field": "bold blue",
        "fl.path": "dim",
        "fl.title": "bold",
        "fl.visible": "green",
        "fl.hidden": "dim",
        "fl.computed": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=FORMLOGIC_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_visibility(visible: bool) -> str:
    return "fl.visible" if visible else "fl.hidden"
