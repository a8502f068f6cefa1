"""Command: validate a value set and print the submission payload."""

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
  formlogic submit registration --values answers.json
  formlogic submit registration --set age=18 --set employed=yes --set companyName=Acme
  formlogic --json submit registration --values answers.yaml""",
)
@click.argument("source")
@value_options
@click.pass_obj
def submit(app: AppContext, source: str, values: dict[str, Any], today: date | None) -> None:
    """Submit values: print the payload, or the blocking errors (exit 1)."""
    from formlogic.services.submit import SubmitService

    svc = SubmitService(app.store, **app.service_options())
    app.emit(svc.submit(source, values, today=today))
