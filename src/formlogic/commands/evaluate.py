"""Command: evaluate visibility, computed values and validation."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

import click

from formlogic.commands._base import FormlogicCommand
from formlogic.commands._inputs import value_options

if TYPE_CHECKING:
    from formlogic.commands._context import AppContext


@click.command(
    cls=FormlogicCommand,
    examples="""\
  formlogic evaluate registration --set age=18 --set employed=yes
  formlogic evaluate registration --values answers.json
  formlogic evaluate registration --values answers.yaml --today 2024-03-14
  formlogic --json evaluate registration --set 'interests=["golf"]'""",
)
@click.argument("source")
@value_options
@click.pass_obj
def evaluate(app: AppContext, source: str, values: dict[str, Any], today: date | None) -> None:
    """Show each field's visibility, value and validation error."""
    from formlogic.services.evaluate import EvaluateService

    svc = EvaluateService(app.store, **app.service_options())
    app.emit(svc.evaluate(source, values, today=today))
