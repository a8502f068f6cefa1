"""Subcommand modules for formlogic.

Provides register_commands() which uses deferred imports to keep
``formlogic --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from formlogic.commands.check import check
    from formlogic.commands.evaluate import evaluate
    from formlogic.commands.rule import rule
    from formlogic.commands.submit import submit

    cli.add_command(check)
    cli.add_command(evaluate)
    cli.add_command(submit)
    cli.add_command(rule)
