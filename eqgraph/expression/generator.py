"""Recursive expression rendering and evaluation over an equation graph."""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from ..graph.connection_store import ConnectionStore
from ..graph.errors import CircularReferenceError
from ..graph.node_registry import NodeRegistry
from ..graph.node_types import Function, NodeKind, Operator, parse_number
from ..validators.base import ValidationResult
from .evaluator import apply_operator, evaluate_expression

logger = logging.getLogger(__name__)

NO_INPUT = "(no input)"
NO_INPUTS = "(no inputs)"

# "÷ 0", "÷ (0)", "÷ 0.0" but not "÷ 0.5" or "÷ 05"
_DIVISION_BY_ZERO = re.compile(r"÷ \(?[+-]?0+(?:\.0*)?\)?(?![\d.])")

_ASCII_GLYPHS = (("×", "*"), ("÷", "/"), ("√", "sqrt"))


@dataclass
class EquationStats:
    """Summary statistics of the equations in a graph."""

    total_nodes: int = 0
    node_kinds: dict[str, int] = field(default_factory=dict)
    output_nodes: int = 0
    valid_equations: int = 0
    total_connections: int = 0
    complexity: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_nodes": self.total_nodes,
            "node_kinds": dict(self.node_kinds),
            "output_nodes": self.output_nodes,
            "valid_equations": self.valid_equations,
            "total_connections": self.total_connections,
            "complexity": self.complexity,
        }


class ExpressionGenerator:
    """Derives infix expressions and numeric results from node graphs.

    Rendering is a pure function of the current registry and store; nothing
    is cached, so the output always reflects the latest edit.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        store: ConnectionStore,
        placeholder: str = "?",
    ):
        """Initialize the generator.

        Args:
            registry: Node records to render.
            store: Connections between the nodes.
            placeholder: Text shown for an empty input port.
        """
        self._registry = registry
        self._store = store
        self.placeholder = placeholder

    @property
    def registry(self) -> NodeRegistry:
        """Get the node registry being rendered."""
        return self._registry

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self, node_id: str) -> str:
        """Render the expression rooted at a node.

        Args:
            node_id: The node to start from.

        Returns:
            The infix expression, or an empty string for an unknown node.

        Raises:
            CircularReferenceError: If the walk revisits a node on its path.
        """
        return self._render(node_id, ())

    def _render(self, node_id: str, path: tuple[str, ...]) -> str:
        node = self._registry.get(node_id)
        if node is None:
            return ""
        if node_id in path:
            raise CircularReferenceError(node_id)
        path = path + (node_id,)

        if node.kind == NodeKind.OUTPUT:
            connection = self._store.input_at(node_id, 0)
            if connection is None:
                return NO_INPUT
            return self._render(connection.from_node, path)

        if node.has_value:
            return node.content

        inputs = [self._fill(text) for text in self._render_inputs(node_id, path)]

        if node.op in (Operator.ADD, Operator.MULTIPLY):
            if not inputs:
                return NO_INPUTS
            if len(inputs) == 1:
                return inputs[0]
            joiner = f" {node.symbol} "
            return f"({joiner.join(inputs)})"

        first = inputs[0] if inputs else self.placeholder
        second = inputs[1] if len(inputs) > 1 else self.placeholder

        if node.op == Operator.SUBTRACT:
            return f"({first} - {second})"
        if node.op == Operator.DIVIDE:
            return f"({first} ÷ {second})"
        if node.op == Operator.POWER:
            return f"({first})^({second})"
        if isinstance(node.op, Function):
            return f"{node.symbol}({first})"
        return node.content

    def _render_inputs(self, node_id: str, path: tuple[str, ...]) -> list[str | None]:
        """Render each input port in order; empty ports are None."""
        node = self._registry.require(node_id)
        inputs: list[str | None] = [None] * node.arity.current
        for connection in self._store.inputs_for(node_id):
            if connection.to_port < len(inputs):
                inputs[connection.to_port] = self._render(connection.from_node, path)
        return inputs

    def _fill(self, text: str | None) -> str:
        return text if text else self.placeholder

    def render_outputs(self) -> dict[str, str]:
        """Render every output node, keyed by node id."""
        return {node_id: self.render(node_id) for node_id in self._registry.output_ids()}

    def render_formatted(
        self, node_id: str, unicode: bool = True, parentheses: bool = True
    ) -> str:
        """Render with formatting options.

        Args:
            node_id: The node to start from.
            unicode: Keep the ``×``, ``÷`` and ``√`` glyphs; when False they
                become ``*``, ``/`` and ``sqrt``.
            parentheses: When False, strip one pair of outer parentheses.
        """
        text = self.render(node_id)
        if not unicode:
            for glyph, ascii_text in _ASCII_GLYPHS:
                text = text.replace(glyph, ascii_text)
        if not parentheses and text.startswith("(") and text.endswith(")"):
            text = text[1:-1]
        return text

    # -------------------------------------------------------------------------
    # Numeric evaluation
    # -------------------------------------------------------------------------

    def evaluate(self, node_id: str) -> float | None:
        """Compute the numeric value of a node.

        Constants evaluate to their literal value (``π`` and ``e`` included).
        Operators and functions evaluate their inputs recursively and apply
        the operation; output nodes evaluate their rendered expression with
        the restricted evaluator.

        Returns:
            The value, or None when any input is missing, non-numeric or
            the operation is undefined for its arguments.
        """
        try:
            return self._evaluate(node_id, ())
        except CircularReferenceError:
            return None

    def _evaluate(self, node_id: str, path: tuple[str, ...]) -> float | None:
        node = self._registry.get(node_id)
        if node is None:
            return None
        if node_id in path:
            raise CircularReferenceError(node_id)
        path = path + (node_id,)

        if node.kind == NodeKind.OUTPUT:
            return evaluate_expression(self._render(node_id, ()))

        if node.has_value:
            value = parse_number(node.content)
            return None if math.isnan(value) else value

        args: list[float] = []
        for port in range(node.arity.current):
            connection = self._store.input_at(node_id, port)
            if connection is None:
                return None
            value = self._evaluate(connection.from_node, path)
            if value is None:
                return None
            args.append(value)

        return apply_operator(node.op, args)

    # -------------------------------------------------------------------------
    # Validation and reporting
    # -------------------------------------------------------------------------

    def has_circular_reference(self, node_id: str) -> bool:
        """Check whether the input graph behind a node contains a cycle."""
        return self._has_cycle(node_id, set())

    def _has_cycle(self, node_id: str, visiting: set[str]) -> bool:
        if node_id in visiting:
            return True
        visiting = visiting | {node_id}
        return any(
            self._has_cycle(connection.from_node, visiting)
            for connection in self._store.inputs_for(node_id)
        )

    def validate(self, node_id: str) -> ValidationResult:
        """Validate the equation rooted at a node.

        Reports unconnected inputs and circular references as errors and a
        visible division by a literal zero as a warning.
        """
        result = ValidationResult()

        try:
            equation = self.render(node_id)
        except CircularReferenceError:
            result.add_error(
                "CIRCULAR_REFERENCE",
                "Equation contains circular references",
                node=node_id,
            )
            return result

        if self.placeholder in equation:
            result.add_error(
                "UNCONNECTED_INPUT",
                f"Equation contains unconnected inputs ({self.placeholder})",
                node=node_id,
                equation=equation,
            )

        if self.has_circular_reference(node_id):
            result.add_error(
                "CIRCULAR_REFERENCE",
                "Equation contains circular references",
                node=node_id,
            )

        if _DIVISION_BY_ZERO.search(equation):
            result.add_warning(
                "DIVISION_BY_ZERO",
                "Equation may contain division by zero",
                node=node_id,
                equation=equation,
            )

        return result

    def count_nodes_by_kind(self) -> dict[str, int]:
        """Count nodes per kind label (operator and function names split out)."""
        counts: dict[str, int] = {}
        for node in self._registry:
            counts[node.label] = counts.get(node.label, 0) + 1
        return counts

    def stats(self) -> EquationStats:
        """Collect statistics over every output equation."""
        stats = EquationStats(
            total_nodes=len(self._registry),
            node_kinds=self.count_nodes_by_kind(),
            total_connections=len(self._store),
        )

        for node_id in self._registry.output_ids():
            stats.output_nodes += 1
            result = self.validate(node_id)
            if result.is_valid:
                stats.valid_equations += 1
            else:
                logger.debug("Equation at %s is not valid", node_id)
            if not any(issue.code == "CIRCULAR_REFERENCE" for issue in result.errors):
                stats.complexity += len(self.render(node_id))

        return stats
