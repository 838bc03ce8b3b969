"""Port compatibility rules consulted before a connection is stored."""

from collections.abc import Mapping, Sequence
from typing import Protocol

from ..graph.models import Connection, Node
from .base import ValidationResult


class StructuralValidator(Protocol):
    """Supplies the port/type rules the connection store cannot infer."""

    def validate_connection(
        self,
        from_node: str,
        to_node: str,
        from_port: int,
        to_port: int,
        nodes: Mapping[str, Node],
        connections: Sequence[Connection],
    ) -> ValidationResult:
        ...


class PortRules:
    """Default structural validator based on each node's ports.

    Output nodes are sinks only, constants and variables have no inputs,
    and a connection must target an input port that currently exists.
    """

    def validate_connection(
        self,
        from_node: str,
        to_node: str,
        from_port: int,
        to_port: int,
        nodes: Mapping[str, Node],
        connections: Sequence[Connection],
    ) -> ValidationResult:
        result = ValidationResult()

        source = nodes.get(from_node)
        target = nodes.get(to_node)
        if source is None:
            result.add_error("UNKNOWN_NODE", "Source node not found", node=from_node)
        if target is None:
            result.add_error("UNKNOWN_NODE", "Target node not found", node=to_node)
        if source is None or target is None:
            return result

        if source.output_count == 0:
            result.add_error(
                "NO_OUTPUT_PORT",
                f"Node '{source.content}' ({source.label}) has no output port",
                node=from_node,
            )
        elif not 0 <= from_port < source.output_count:
            result.add_error(
                "INVALID_OUTPUT_PORT",
                f"Output port {from_port} does not exist on '{source.content}'",
                node=from_node,
                port=from_port,
            )

        inputs = target.arity.current
        if inputs == 0:
            result.add_error(
                "NO_INPUT_PORT",
                f"Node '{target.content}' ({target.label}) has no input ports",
                node=to_node,
            )
        elif not 0 <= to_port < inputs:
            result.add_error(
                "INVALID_INPUT_PORT",
                f"Input port {to_port} does not exist on '{target.content}' "
                f"({inputs} input(s))",
                node=to_node,
                port=to_port,
            )

        return result
