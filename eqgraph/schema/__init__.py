"""Snapshot schema definitions and loading."""

from .errors import SnapshotError, SnapshotLoadError
from .models import ConnectionRecord, GraphSnapshot, NodeRecord, Position
from .loader import parse_snapshot, parse_snapshot_data, parse_snapshot_from_string, read_document

__all__ = [
    "SnapshotError",
    "SnapshotLoadError",
    "ConnectionRecord",
    "GraphSnapshot",
    "NodeRecord",
    "Position",
    "read_document",
    "parse_snapshot",
    "parse_snapshot_data",
    "parse_snapshot_from_string",
]
