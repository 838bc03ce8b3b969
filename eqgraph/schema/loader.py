"""Reading graph snapshots from YAML or JSON documents."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .errors import SnapshotError, SnapshotLoadError, format_validation_errors
from .models import GraphSnapshot

JSON_SUFFIXES = frozenset({".json"})


def _decode(text: str, source: str | None = None, dialect: str = "YAML") -> dict:
    """Decode a snapshot document into its top-level mapping.

    JSON is a subset of YAML, so one ``yaml.safe_load`` call handles both;
    ``dialect`` only names the format in error messages. An empty
    document decodes to an empty mapping.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SnapshotLoadError(f"Invalid {dialect}: {e}", source) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SnapshotLoadError(
            f"Expected a mapping at root, got {type(data).__name__}", source
        )
    return data


def read_document(path: str | Path) -> dict:
    """Read a snapshot or settings file and return its top-level mapping.

    Files ending in ``.json`` are reported as JSON, anything else as YAML.

    Raises:
        SnapshotLoadError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    if not path.is_file():
        reason = "Not a file" if path.exists() else "File not found"
        raise SnapshotLoadError(f"{reason}: {path}", str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotLoadError(f"Cannot read file: {e}", str(path)) from e

    dialect = "JSON" if path.suffix.lower() in JSON_SUFFIXES else "YAML"
    return _decode(text, str(path), dialect)


def parse_snapshot(path: str | Path) -> GraphSnapshot:
    """Load and parse a file into a GraphSnapshot.

    Raises:
        SnapshotLoadError: If the file cannot be read or parsed.
        SnapshotError: If the data fails validation.
    """
    return parse_snapshot_data(read_document(path))


def parse_snapshot_from_string(text: str) -> GraphSnapshot:
    """Parse a YAML or JSON string into a GraphSnapshot.

    Raises:
        SnapshotLoadError: If the text cannot be parsed.
        SnapshotError: If the data fails validation.
    """
    return parse_snapshot_data(_decode(text))


def parse_snapshot_data(data: dict) -> GraphSnapshot:
    """Validate raw data into a GraphSnapshot.

    Raises:
        SnapshotError: If the data fails validation.
    """
    try:
        return GraphSnapshot.model_validate(data)
    except ValidationError as e:
        errors = format_validation_errors(e)
        raise SnapshotError(
            f"Snapshot validation failed with {len(errors)} error(s)", errors
        ) from e
