"""Validators for the equations rendered at output nodes."""

from typing import TYPE_CHECKING

from ..graph.node_types import NodeKind
from .base import ValidationResult

if TYPE_CHECKING:
    from ..workspace import EquationWorkspace


def check_missing_output(workspace: "EquationWorkspace") -> ValidationResult:
    """Check that the graph has somewhere to render an equation.

    Returns:
        ValidationResult with an info for an empty graph, or a warning
        when nodes exist but none is an output node.
    """
    result = ValidationResult()

    if len(workspace.registry) == 0:
        result.add_info(code="EMPTY_GRAPH", message="Graph has no nodes")
    elif not workspace.registry.output_ids():
        result.add_warning(
            code="NO_OUTPUT_NODE",
            message="Graph has no output node (=); no equation is generated",
        )

    return result


def check_unconnected_inputs(workspace: "EquationWorkspace") -> ValidationResult:
    """Check for empty input ports on nodes that feed an output.

    Each empty port renders as the placeholder in the equation.

    Returns:
        ValidationResult with an error per empty port.
    """
    result = ValidationResult()
    registry = workspace.registry
    store = workspace.store

    relevant: set[str] = set()
    for output_id in registry.output_ids():
        relevant.add(output_id)
        relevant |= store.upstream_of(output_id)

    for node in registry:
        if node.id not in relevant:
            continue
        for port in range(node.arity.current):
            if store.input_at(node.id, port) is None:
                if node.kind == NodeKind.OUTPUT:
                    message = f"Output node {node.id} has no input"
                else:
                    message = f"Input {port} of '{node.content}' ({node.label}) is not connected"
                result.add_error(
                    code="UNCONNECTED_INPUT",
                    message=message,
                    node=node.id,
                    port=port,
                )

    return result


def check_division_by_zero(workspace: "EquationWorkspace") -> ValidationResult:
    """Check output equations for a visible division by a literal zero.

    Returns:
        ValidationResult with a warning per affected output.
    """
    result = ValidationResult()

    for output_id in workspace.registry.output_ids():
        for issue in workspace.generator.validate(output_id).issues:
            if issue.code == "DIVISION_BY_ZERO":
                result.add_issue(issue)

    return result


def check_circular_references(workspace: "EquationWorkspace") -> ValidationResult:
    """Check every output for circular references among its inputs.

    The connection store keeps the graph acyclic, so this only fires if
    that invariant has been bypassed.
    """
    result = ValidationResult()

    for output_id in workspace.registry.output_ids():
        if workspace.generator.has_circular_reference(output_id):
            result.add_error(
                code="CIRCULAR_REFERENCE",
                message="Equation contains circular references",
                node=output_id,
            )

    return result
