"""User settings for the command line."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator

from .schema.errors import SnapshotError, format_validation_errors
from .schema.loader import read_document

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseModel):
    """Defaults the CLI falls back to when an option is not given."""

    unicode: bool = True
    strict: bool = False
    log_level: LogLevel = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.upper()
        return value


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Path to the settings file; defaults apply when omitted.

    Returns:
        The settings.

    Raises:
        SnapshotLoadError: If the file cannot be read or parsed.
        SnapshotError: If the file contains invalid settings.
    """
    if path is None:
        return Settings()

    data = read_document(path)
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        errors = format_validation_errors(e)
        raise SnapshotError(f"Invalid settings in {path}", errors) from e
