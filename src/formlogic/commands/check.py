"""Command: static health check of a form document."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from formlogic.commands._base import FormlogicCommand

if TYPE_CHECKING:
    from formlogic.commands._context import AppContext


@click.command(
    cls=FormlogicCommand,
    examples="""\
  formlogic check registration
  formlogic check forms/registration.yaml
  formlogic check registration --errors-only
  formlogic --json check registration""",
)
@click.argument("source")
@click.option("--errors-only", is_flag=True, help="Hide warnings.")
@click.pass_obj
def check(app: AppContext, source: str, errors_only: bool) -> None:
    """Check a form document for shape, rule and dependency problems.

    SOURCE is a path, or a form name resolved in the forms directory.
    """
    from formlogic.services.check import CheckService

    svc = CheckService(app.store, **app.service_options())
    app.emit(svc.check(source, errors_only=errors_only))
