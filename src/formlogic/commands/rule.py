"""Command: evaluate one JSON-Logic rule."""

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
  formlogic rule '{">": [{"var": "age"}, 17]}' --set age=18
  formlogic rule '{"in": ["golf", {"var": "interests"}]}' --set 'interests=["golf"]'
  formlogic rule '{"dateDiffInYears": [{"var": "dob"}, {"CURRENT_DATE": []}]}' \\
      --set dob=2006-03-15 --today 2024-03-14""",
)
@click.argument("rule_json", metavar="RULE_JSON")
@value_options
@click.pass_obj
def rule(app: AppContext, rule_json: str, values: dict[str, Any], today: date | None) -> None:
    """Evaluate RULE_JSON against the given values."""
    from formlogic.services.rule import RuleService

    svc = RuleService(app.store, **app.service_options())
    app.emit(svc.evaluate_rule(rule_json, values, today=today))
