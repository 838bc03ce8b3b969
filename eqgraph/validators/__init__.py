"""Validators for equation graphs."""

from .base import Severity, ValidationIssue, ValidationResult
from .structural import PortRules, StructuralValidator
from .constraint_checks import check_constraint_conflicts, check_constraint_violations
from .equations import (
    check_circular_references,
    check_division_by_zero,
    check_missing_output,
    check_unconnected_inputs,
)
from .orphan_detector import check_orphan_nodes
from .runner import run_validators, validate_snapshot_file

__all__ = [
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "PortRules",
    "StructuralValidator",
    "check_constraint_conflicts",
    "check_constraint_violations",
    "check_circular_references",
    "check_division_by_zero",
    "check_missing_output",
    "check_unconnected_inputs",
    "check_orphan_nodes",
    "run_validators",
    "validate_snapshot_file",
]
