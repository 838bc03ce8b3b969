"""Snapshot-related exceptions."""

from pydantic import ValidationError


def format_validation_errors(error: ValidationError) -> list[dict]:
    """Flatten a pydantic ValidationError into ``{loc, msg, type}`` dicts."""
    return [
        {
            "loc": ".".join(str(x) for x in err["loc"]),
            "msg": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


class SnapshotLoadError(Exception):
    """Raised when a snapshot file cannot be loaded."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class SnapshotError(Exception):
    """Raised when snapshot data fails validation."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.errors = errors or []
        super().__init__(message)
