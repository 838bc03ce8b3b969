"""Validation runner that orchestrates all validators."""

from pathlib import Path
from typing import TYPE_CHECKING

from .base import ValidationResult
from .constraint_checks import check_constraint_conflicts, check_constraint_violations
from .equations import (
    check_circular_references,
    check_division_by_zero,
    check_missing_output,
    check_unconnected_inputs,
)
from .orphan_detector import check_orphan_nodes

if TYPE_CHECKING:
    from ..workspace import EquationWorkspace


def run_validators(workspace: "EquationWorkspace") -> ValidationResult:
    """Run all validators on a workspace.

    Args:
        workspace: The workspace to check.

    Returns:
        Combined ValidationResult from all validators.
    """
    result = ValidationResult()

    # Run structural checks first (most fundamental)
    result.merge(check_missing_output(workspace))
    result.merge(check_circular_references(workspace))
    result.merge(check_unconnected_inputs(workspace))

    result.merge(check_orphan_nodes(workspace))
    result.merge(check_division_by_zero(workspace))

    # Run constraint validators
    result.merge(check_constraint_conflicts(workspace))
    result.merge(check_constraint_violations(workspace))

    return result


def validate_snapshot_file(path: str | Path) -> ValidationResult:
    """Load a snapshot file, restore it and validate the result.

    Issues found while restoring (rejected connections, bad input counts)
    come first, followed by the issues from :func:`run_validators`.

    Args:
        path: Path to the YAML or JSON snapshot.

    Returns:
        ValidationResult from restoring and all validators.

    Raises:
        SnapshotLoadError: If the file cannot be loaded.
        SnapshotError: If the snapshot fails schema validation.
    """
    # Imported here because the workspace itself depends on this package
    from ..schema.loader import parse_snapshot
    from ..workspace import EquationWorkspace

    snapshot = parse_snapshot(path)
    workspace = EquationWorkspace()
    result = workspace.restore(snapshot)
    result.merge(run_validators(workspace))
    return result
