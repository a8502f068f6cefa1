"""BaseService — shared foundation for formlogic services.

Every service receives a :class:`FormDocumentStore` at construction
time, plus the engine options that shape evaluation: a fixed "today",
validation patterns/messages, and the custom rule registry.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from formlogic.domain.errors import ConfigShapeError
from formlogic.domain.forms import LoadedForm, load_form
from formlogic.domain.interpreter import Interpreter
from formlogic.domain.rules import CustomRuleRegistry
from formlogic.domain.validation import ValidationSettings, Validator
from formlogic.infrastructure.documents import (
    DocumentNotFoundError,
    DocumentParseError,
    FormDocumentStore,
)
from formlogic.services.result import ErrorCode, ServiceResult, failure

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class SubmitService(BaseService):
            def submit(self, source: str, values: dict) -> ServiceResult:
                loaded = self._load("submit", source)
                if isinstance(loaded, ServiceResult):
                    return loaded
                ...
    """

    def __init__(
        self,
        store: FormDocumentStore,
        *,
        today: date | None = None,
        validation: ValidationSettings | None = None,
        registry: CustomRuleRegistry | None = None,
    ) -> None:
        self._store = store
        self._today = today
        self._registry = registry or CustomRuleRegistry()
        self._interpreter = Interpreter(clock=(lambda: today) if today else None)
        self._validator = Validator(
            interpreter=self._interpreter,
            registry=self._registry,
            settings=validation,
        )

    def _today_for(self, override: date | None) -> date | None:
        return override or self._today

    def _load(self, op: str, source: str | Path) -> tuple[Path, LoadedForm] | ServiceResult:
        """Resolve, parse and build the form, or a failed result."""
        try:
            path, document = self._store.load(source)
        except DocumentNotFoundError as exc:
            return failure(
                op,
                ErrorCode.NOT_FOUND,
                str(exc),
                detail={"searched": [str(p) for p in exc.searched]},
            )
        except DocumentParseError as exc:
            return failure(op, ErrorCode.PARSE_ERROR, str(exc), detail={"path": str(exc.path)})

        try:
            loaded = load_form(document)
        except ConfigShapeError as exc:
            return failure(op, ErrorCode.CONFIG_ERROR, exc.message, detail={"path": str(path)})

        logger.debug("Loaded form %s (%d issues)", path, len(loaded.issues))
        return path, loaded

    @staticmethod
    def _issue_warnings(loaded: LoadedForm) -> list[str]:
        return [f"{issue.path}: {issue.message} (field dropped)" for issue in loaded.issues]
