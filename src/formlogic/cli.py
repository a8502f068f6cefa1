"""Root CLI group for formlogic with global flags and command registration."""

from __future__ import annotations

import click

from formlogic import __version__
from formlogic.commands import register_commands
from formlogic.commands._base import FormlogicGroup
from formlogic.commands._context import AppContext
from formlogic.config.settings import FormlogicSettings


@click.group(
    cls=FormlogicGroup,
    invoke_without_command=True,
    examples="""\
  formlogic check registration
  formlogic evaluate registration --set age=18
  formlogic submit registration --values answers.json
  formlogic rule '{"===": [{"var": "employed"}, "yes"]}' --set employed=yes""",
)
@click.version_option(version=__version__, prog_name="formlogic")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """formlogic — conditional visibility and validation for JSON-configured forms."""
    ctx.ensure_object(dict)
    settings = FormlogicSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
