"""Validators for node constraints."""

from typing import TYPE_CHECKING

from ..graph.models import CheckStatus
from .base import ValidationResult

if TYPE_CHECKING:
    from ..workspace import EquationWorkspace


def check_constraint_conflicts(workspace: "EquationWorkspace") -> ValidationResult:
    """Check for constraints on the same node that cannot both hold.

    Returns:
        ValidationResult with a warning per conflicting pair.
    """
    result = ValidationResult()
    engine = workspace.constraints

    for node_id in engine.node_ids():
        for conflict in engine.detect_conflicts(node_id):
            result.add_warning(
                code="CONSTRAINT_CONFLICT",
                message=(
                    f"Constraints {conflict.constraint1} and {conflict.constraint2} "
                    f"conflict ({conflict.conflict_type})"
                ),
                node=node_id,
                conflict_type=conflict.conflict_type,
            )

    return result


def check_constraint_violations(workspace: "EquationWorkspace") -> ValidationResult:
    """Check the last constraint evaluation of every node.

    Violations are errors. Constrained nodes whose value could not be
    computed are reported as info, since nothing was checked.

    Returns:
        ValidationResult with the violations found.
    """
    result = ValidationResult()
    engine = workspace.constraints

    for node in workspace.registry:
        if not engine.has_constraints(node.id):
            continue

        if node.check_status == CheckStatus.INVALID:
            for violation in node.violations or []:
                result.add_error(
                    code="CONSTRAINT_VIOLATION",
                    message=(
                        f"Value {violation.violated_value:g} of '{node.content}' violates "
                        f"{engine.describe_violation(violation)}"
                    ),
                    node=node.id,
                    constraint=violation.constraint_id,
                )
        elif node.check_status == CheckStatus.UNCHECKED:
            result.add_info(
                code="CONSTRAINT_UNCHECKED",
                message=node.note or "Constraints not checked",
                node=node.id,
            )

    return result
