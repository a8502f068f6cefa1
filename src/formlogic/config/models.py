"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, formlogic.toml only contains
overrides. A project with forms in ``./forms`` needs no config file.
"""

from __future__ import annotations

import re
from datetime import date

from pydantic import BaseModel, Field, field_validator

DEFAULT_EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
DEFAULT_PHONE_PATTERN = r"^(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})$"


# --- formlogic.toml sections ---


class FormsConfig(BaseModel):
    """[forms] section."""

    model_config = {"frozen": True}

    directory: str = "forms"


class EngineConfig(BaseModel):
    """[engine] section.

    ``today`` pins the evaluation date (``CURRENT_DATE``, age checks) for
    reproducible runs; unset means the system date.
    """

    model_config = {"frozen": True}

    today: date | None = None


class ValidationConfig(BaseModel):
    """[validation] section.

    Patterns must compile; message templates may only use ``{label}``.
    """

    model_config = {"frozen": True}

    email_pattern: str = DEFAULT_EMAIL_PATTERN
    phone_pattern: str = DEFAULT_PHONE_PATTERN
    required_message: str = "{label} is required"
    number_message: str = "{label} must be a valid number"

    @field_validator("email_pattern", "phone_pattern")
    @classmethod
    def check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            msg = f"invalid regular expression: {exc}"
            raise ValueError(msg) from exc
        return value

    @field_validator("required_message", "number_message")
    @classmethod
    def check_template(cls, value: str) -> str:
        try:
            value.format(label="Label")
        except (KeyError, IndexError, ValueError) as exc:
            msg = f"template may only use the {{label}} placeholder: {value!r}"
            raise ValueError(msg) from exc
        return value


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    show_hidden: bool = False


class FormlogicConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    forms: FormsConfig = Field(default_factory=FormsConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
