"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy document-store construction, the
service options derived from settings, and centralized result emission
(stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from formlogic.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from formlogic.config.settings import FormlogicSettings
    from formlogic.domain.rules import CustomRuleRegistry
    from formlogic.infrastructure.documents import FormDocumentStore
    from formlogic.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The document store is
    created on first use so ``--help`` and ``--version`` never touch disk.
    """

    def __init__(self, settings: FormlogicSettings, registry: CustomRuleRegistry | None = None) -> None:
        self.settings = settings
        self.registry = registry
        self._store: FormDocumentStore | None = None

        from formlogic.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from formlogic.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> FormDocumentStore:
        """Document store rooted at the configured forms directory."""
        if self._store is None:
            from formlogic.infrastructure.documents import FormDocumentStore

            self._store = FormDocumentStore(self.settings.forms_dir)
        return self._store

    def service_options(self) -> dict[str, Any]:
        """Keyword arguments every service is constructed with."""
        from formlogic.domain.validation import ValidationSettings

        return {
            "today": self.settings.engine.today,
            "validation": ValidationSettings(**self.settings.validation.model_dump()),
            "registry": self.registry,
        }

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            show_hidden=self.settings.output.show_hidden,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
