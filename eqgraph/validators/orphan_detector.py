"""Orphan node detection validator."""

from typing import TYPE_CHECKING

from ..graph.node_types import NodeKind
from .base import ValidationResult

if TYPE_CHECKING:
    from ..workspace import EquationWorkspace


def check_orphan_nodes(workspace: "EquationWorkspace") -> ValidationResult:
    """Check for nodes that do not feed any output.

    An orphan node contributes to no equation. This may indicate a missing
    connection or a leftover node that should be removed. Nothing is
    reported when the graph has no output node at all; that case belongs
    to :func:`check_missing_output`.

    Args:
        workspace: The workspace to check.

    Returns:
        ValidationResult with warnings for orphan nodes.
    """
    result = ValidationResult()

    output_ids = workspace.registry.output_ids()
    if not output_ids:
        return result

    feeding: set[str] = set(output_ids)
    for output_id in output_ids:
        feeding |= workspace.store.upstream_of(output_id)

    for node in workspace.registry:
        if node.kind == NodeKind.OUTPUT or node.id in feeding:
            continue
        result.add_warning(
            code="ORPHAN_NODE",
            message=f"Node '{node.content}' ({node.label}) does not feed any output",
            node=node.id,
        )

    return result
