"""Workspace tying nodes, connections, rendering and constraints together.

Every accepted mutation re-renders each output node, pushes the result to
the render listeners and re-checks constraints on computed nodes. Every
outcome, accepted or rejected, is reported through the notifier.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .constraints.engine import ConstraintEngine
from .constraints.models import ConstraintType
from .constraints.results import AddConstraintResult, ConstraintCheck
from .expression.generator import ExpressionGenerator
from .graph.connection_store import ConnectionStore
from .graph.errors import ArityError, ArityNotConfigurableError, ArityOutOfBoundsError
from .graph.models import CheckStatus, Connection, ConnectResult, MutationResult, Node, RejectReason
from .graph.node_registry import NodeRegistry
from .notifications import Notifier
from .schema.models import ConnectionRecord, GraphSnapshot, NodeRecord, Position
from .validators.base import ValidationResult
from .validators.structural import PortRules, StructuralValidator

logger = logging.getLogger(__name__)

RenderListener = Callable[[dict[str, str]], None]

CLONE_OFFSET = 20.0


@dataclass
class ConstraintReport:
    """Outcome of re-checking every constrained node."""

    total_violations: int = 0
    violating_nodes: list[Node] = field(default_factory=list)

    @property
    def has_violations(self) -> bool:
        return self.total_violations > 0


class EquationWorkspace:
    """An editable equation graph.

    Owns one node registry, one connection store, one constraint engine
    and the expression generator reading from them.

    Example:
        ws = EquationWorkspace()
        two = ws.create_node("2")
        three = ws.create_node("3")
        plus = ws.create_node("+")
        out = ws.create_node("=")
        ws.connect(two, plus, to_port=0)
        ws.connect(three, plus, to_port=1)
        ws.connect(plus, out)
        ws.render(out)  # "(2 + 3)"
    """

    def __init__(
        self,
        validator: StructuralValidator | None = None,
        notifier: Notifier | None = None,
        placeholder: str = "?",
    ):
        """Initialize an empty workspace.

        Args:
            validator: Port rules for connections; defaults to PortRules.
            notifier: Receives user-facing messages.
            placeholder: Text rendered for an empty input port.
        """
        self.notifier = notifier or Notifier()
        self.registry = NodeRegistry()
        self.store = ConnectionStore(
            validator if validator is not None else PortRules(),
            on_drop=self._on_connection_dropped,
        )
        self.constraints = ConstraintEngine()
        self.generator = ExpressionGenerator(self.registry, self.store, placeholder)
        self.restore_result: ValidationResult | None = None
        self._render_listeners: list[RenderListener] = []

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def create_node(
        self, content: str, position: tuple[float, float] | None = None
    ) -> str:
        """Create a node from its content; the kind is inferred once."""
        node_id = self.registry.create_node(content, position)
        self.store.add_node(node_id)
        self.notifier.success(f"Node '{content}' created!", node=node_id)
        self._refresh()
        return node_id

    def get_node(self, node_id: str) -> Node | None:
        return self.registry.get(node_id)

    @property
    def nodes(self) -> list[Node]:
        return list(self.registry)

    def update_content(self, node_id: str, content: str) -> Node | None:
        """Change a node's content.

        The new content is always stored. For constants and variables a
        constraint violation marks the node invalid and is reported.

        Returns:
            The updated node, or None if it does not exist.
        """
        node = self.registry.update_content(node_id, content, self.constraints)
        if node is None:
            self.notifier.error("Node not found!", node=node_id)
            return None

        if node.check_status == CheckStatus.INVALID:
            self.notifier.error(
                f'Value "{content}" violates constraints: {self._violation_text(node)}',
                node=node_id,
            )

        self._refresh()
        return node

    def delete_node(self, node_id: str) -> bool:
        """Delete a node together with its connections and constraints."""
        if node_id not in self.registry:
            self.notifier.error("Node not found!", node=node_id)
            return False

        removed = self.store.remove_node(node_id)
        self.constraints.clear(node_id)
        self.registry.delete_node(node_id)
        logger.debug("Deleted %s with %d connection(s)", node_id, removed)

        self.notifier.success("Node deleted!", node=node_id)
        self._refresh()
        return True

    def reset_node(self, node_id: str) -> Node | None:
        """Restore a node's default content."""
        if node_id not in self.registry:
            self.notifier.error("Node not found!", node=node_id)
            return None
        node = self.update_content(node_id, self.registry.default_content_for(node_id))
        self.notifier.success("Node reset to default!", node=node_id)
        return node

    def clone_node(self, node_id: str) -> str | None:
        """Create a new node with the same content, offset on the canvas."""
        node = self.registry.get(node_id)
        if node is None:
            return None
        position = None
        if node.position is not None:
            position = (node.position[0] + CLONE_OFFSET, node.position[1] + CLONE_OFFSET)
        return self.create_node(node.content, position)

    # -------------------------------------------------------------------------
    # Input ports
    # -------------------------------------------------------------------------

    def set_arity(self, node_id: str, count: int) -> MutationResult:
        """Set the number of input ports of an add or multiply node.

        Shrinking is refused while any disappearing port is connected.
        """
        return self._change_arity(node_id, count, f"Input count set to {count}")

    def add_input_port(self, node_id: str) -> MutationResult:
        node = self.registry.get(node_id)
        if node is None:
            return self._reject_mutation(RejectReason.UNKNOWN_NODE, "Node not found!", node_id)
        return self._change_arity(
            node_id, node.arity.current + 1, "Input added successfully"
        )

    def remove_input_port(self, node_id: str) -> MutationResult:
        node = self.registry.get(node_id)
        if node is None:
            return self._reject_mutation(RejectReason.UNKNOWN_NODE, "Node not found!", node_id)
        return self._change_arity(
            node_id, node.arity.current - 1, "Input removed successfully"
        )

    def _change_arity(self, node_id: str, count: int, success_message: str) -> MutationResult:
        node = self.registry.get(node_id)
        if node is None:
            return self._reject_mutation(RejectReason.UNKNOWN_NODE, "Node not found!", node_id)

        arity = node.arity
        if arity.configurable and arity.allows(count) and count < arity.current:
            for port in range(count, arity.current):
                if self.store.has_connection_to_port(node_id, port, "input"):
                    return self._reject_mutation(
                        RejectReason.PORT_OCCUPIED, "Cannot remove connected input", node_id
                    )

        try:
            self.registry.set_arity(node_id, count)
        except ArityNotConfigurableError:
            return self._reject_mutation(
                RejectReason.NOT_CONFIGURABLE, "Node does not support dynamic inputs", node_id
            )
        except ArityOutOfBoundsError as e:
            if count > e.maximum:
                message = f"Maximum {e.maximum} inputs reached"
            else:
                message = f"Minimum {e.minimum} inputs required"
            self.notifier.warning(message, node=node_id)
            return MutationResult(
                success=False, reason=RejectReason.ARITY_OUT_OF_BOUNDS, message=message
            )

        self.store.revalidate_all(self.registry.as_mapping())
        self.notifier.success(success_message, node=node_id)
        self._refresh()
        return MutationResult(success=True, message=success_message)

    def _reject_mutation(
        self, reason: RejectReason, message: str, node_id: str | None = None
    ) -> MutationResult:
        self.notifier.error(message, node=node_id)
        return MutationResult(success=False, reason=reason, message=message)

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    def connect(
        self, from_node: str, to_node: str, from_port: int = 0, to_port: int = 0
    ) -> ConnectResult:
        """Connect an output port to an input port, replacing any occupant."""
        result = self.store.connect(
            from_node, to_node, from_port, to_port, nodes=self.registry.as_mapping()
        )
        if result.success:
            self.notifier.success(result.message, node=to_node)
            self._refresh()
        else:
            self.notifier.error(result.message, node=to_node)
        return result

    def disconnect(self, connection_id: str) -> bool:
        if not self.store.disconnect(connection_id):
            self.notifier.error(f"Connection not found: {connection_id}")
            return False
        self.notifier.success("Connection deleted!")
        self._refresh()
        return True

    def disconnect_node(self, node_id: str) -> int:
        """Remove every connection touching a node."""
        count = self.store.disconnect_all(node_id)
        if count:
            self.notifier.info(f"{count} connection(s) removed!", node=node_id)
            self._refresh()
        return count

    def clear_connections(self) -> None:
        self.store.clear()
        self.notifier.info("All connections cleared!")
        self._refresh()

    @property
    def connections(self) -> list[Connection]:
        return self.store.all_connections()

    def _on_connection_dropped(self, connection: Connection, errors: list[str]) -> None:
        self.notifier.warning(
            "Connection removed due to port reconfiguration", node=connection.to_node
        )

    # -------------------------------------------------------------------------
    # Constraints
    # -------------------------------------------------------------------------

    def add_constraint(
        self,
        node_id: str,
        constraint_type: ConstraintType | str,
        data: Mapping[str, Any] | None = None,
    ) -> AddConstraintResult:
        """Attach a constraint to an existing node and re-check the node."""
        if node_id not in self.registry:
            self.notifier.error("Node not found!", node=node_id)
            return AddConstraintResult(success=False, error="Node not found")

        result = self.constraints.add(node_id, constraint_type, data)
        if result.error:
            self.notifier.error(result.error, node=node_id)
            return result

        if result.conflicts:
            self.notifier.warning("Warning: Constraint conflicts detected for node", node=node_id)
        else:
            self.notifier.success("Constraint added successfully", node=node_id)

        self._recheck(node_id)
        return result

    def remove_constraint(self, node_id: str, constraint_id: str) -> bool:
        if not self.constraints.remove(node_id, constraint_id):
            self.notifier.error(f"Constraint not found: {constraint_id}", node=node_id)
            return False
        self.notifier.success("Constraint removed", node=node_id)
        self._recheck(node_id)
        return True

    def clear_constraints(self, node_id: str) -> int:
        count = self.constraints.clear(node_id)
        self.notifier.success("All constraints cleared for node", node=node_id)
        self._recheck(node_id)
        return count

    def export_constraints(self) -> dict[str, Any]:
        return self.constraints.export_constraints()

    def import_constraints(self, snapshot: Mapping[str, Any]) -> int:
        """Replace every constraint and re-check every node.

        Constraints for node ids that do not exist are kept, matching the
        engine's id-only view of the graph.

        Returns:
            The number of constraints imported.

        Raises:
            SnapshotError: If the envelope is malformed. Nothing changes then.
        """
        count = self.constraints.import_constraints(snapshot)
        report = self.validate_all_constraints()
        self.notifier.success(f"Imported {count} constraint(s)")
        if report.has_violations:
            self.notifier.warning(
                f"{report.total_violations} constraint violation(s) after import"
            )
        return count

    def validate_all_constraints(self) -> ConstraintReport:
        """Re-check every node against its constraints."""
        report = ConstraintReport()
        for node in self.registry:
            if not node.has_value:
                continue
            if self.constraints.has_constraints(node.id):
                check = self.constraints.validate_value(node.id, node.content)
                node.apply_check(check)
            else:
                node.reset_check()

        self.validate_operator_constraints()

        for node in self.registry:
            if node.check_status == CheckStatus.INVALID:
                report.total_violations += len(node.violations or [])
                report.violating_nodes.append(node)
        return report

    def validate_operator_constraints(self) -> list[str]:
        """Re-check the computed results of operator, function and output nodes.

        Returns:
            Ids of nodes that went from valid to invalid in this pass.
        """
        newly_invalid = []
        for node in self.registry:
            if node.has_value:
                continue
            was_valid = node.is_valid
            check = self.constraints.validate_operator_result(node.id, self.generator)
            node.apply_check(check)
            if was_valid and not check.is_valid:
                newly_invalid.append(node.id)
                self.notifier.error(
                    f"Result of '{node.content}' violates constraints: "
                    f"{self._violation_text(node)}",
                    node=node.id,
                )
        return newly_invalid

    def nodes_with_violations(self) -> list[Node]:
        return [node for node in self.registry if node.check_status == CheckStatus.INVALID]

    def check_value(self, node_id: str, value: Any) -> ConstraintCheck:
        """Check a candidate value against a node's constraints without storing it."""
        return self.constraints.validate_value(node_id, value)

    def _recheck(self, node_id: str) -> None:
        node = self.registry.get(node_id)
        if node is None:
            return
        if node.has_value:
            if self.constraints.has_constraints(node_id):
                node.apply_check(self.constraints.validate_value(node_id, node.content))
            else:
                node.reset_check()
        else:
            node.apply_check(self.constraints.validate_operator_result(node_id, self.generator))

    def _violation_text(self, node: Node) -> str:
        return ", ".join(
            f"Constraint violation: {self.constraints.describe_violation(v)}"
            for v in node.violations or []
        )

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self, node_id: str) -> str:
        return self.generator.render(node_id)

    def render_outputs(self) -> dict[str, str]:
        return self.generator.render_outputs()

    def subscribe_render(self, listener: RenderListener) -> Callable[[], None]:
        """Register a listener for output renderings.

        Returns:
            A function that removes the listener again.
        """
        self._render_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._render_listeners:
                self._render_listeners.remove(listener)

        return unsubscribe

    def equation_text(self) -> str:
        """Combined display text for every output equation."""
        equations = [text or "undefined" for text in self.render_outputs().values()]
        if not equations:
            if len(self.registry) == 0:
                return "Add nodes to begin..."
            return "Add an OUTPUT node (=) to generate equations..."
        if len(equations) == 1:
            return f"Generated Equation: {equations[0]}"
        numbered = "\n".join(f"{i}. {eq}" for i, eq in enumerate(equations, start=1))
        return f"Generated Equations:\n{numbered}"

    def stats(self) -> dict[str, Any]:
        """Equation and connection statistics."""
        stats = self.generator.stats().to_dict()
        stats["connections"] = self.store.stats(len(self.registry))
        return stats

    def _refresh(self) -> None:
        rendering = self.render_outputs()
        for listener in list(self._render_listeners):
            listener(dict(rendering))
        self.validate_operator_constraints()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def snapshot(self) -> GraphSnapshot:
        """Capture nodes, connections and constraints."""
        nodes = [
            NodeRecord(
                id=node.id,
                content=node.content,
                kind=node.kind,
                op=node.op.value if node.op is not None else None,
                position=(
                    Position(x=node.position[0], y=node.position[1])
                    if node.position is not None
                    else None
                ),
                inputs=node.arity.current,
            )
            for node in self.registry
        ]
        connections = [
            ConnectionRecord(
                id=c.id,
                from_node=c.from_node,
                to_node=c.to_node,
                from_port=c.from_port,
                to_port=c.to_port,
            )
            for c in self.store.all_connections()
        ]
        return GraphSnapshot(
            nodes=nodes,
            connections=connections,
            constraints=self.constraints.export_constraints(),
        )

    def restore(self, snapshot: GraphSnapshot) -> ValidationResult:
        """Replace the workspace contents with a snapshot.

        Nodes are restored first, then connections through the same checks
        as :meth:`connect`, then constraints. Connections that fail those
        checks are skipped and reported.

        Returns:
            ValidationResult listing everything that could not be restored.

        Raises:
            SnapshotError: If the constraint envelope is malformed. The
                workspace is left unchanged in that case.
        """
        staged = ConstraintEngine()
        if snapshot.constraints:
            staged.import_constraints(snapshot.constraints)

        result = ValidationResult()
        self.store.clear()
        self.registry.clear()

        for record in snapshot.nodes:
            position = record.position.as_tuple() if record.position else None
            node = self.registry.restore_node(
                record.id, record.content, record.kind, record.op, position
            )
            self.store.add_node(node.id)
            if record.inputs is not None and record.inputs != node.arity.current:
                try:
                    self.registry.set_arity(node.id, record.inputs)
                except ArityError as e:
                    result.add_error("INVALID_INPUT_COUNT", str(e), node=node.id)

        nodes = self.registry.as_mapping()
        for record in snapshot.connections:
            outcome = self.store.connect(
                record.from_node,
                record.to_node,
                record.from_port,
                record.to_port,
                nodes=nodes,
                connection_id=record.id,
            )
            if outcome.success and outcome.replaced is not None:
                result.add_warning(
                    "REPLACED_CONNECTION",
                    f"Input port {record.to_port} of {record.to_node} was connected twice; "
                    f"kept the later connection",
                    node=record.to_node,
                    connection=outcome.replaced.id,
                )
            elif not outcome.success:
                result.add_error(
                    "REJECTED_CONNECTION",
                    f"{record.from_node} -> {record.to_node}: {', '.join(outcome.errors)}",
                    node=record.to_node,
                    connection=record.id,
                    reason=outcome.reason.value,
                )

        for node_id in staged.node_ids():
            if node_id not in self.registry:
                result.add_warning(
                    "UNKNOWN_CONSTRAINT_NODE",
                    f"Constraints reference unknown node '{node_id}' and were dropped",
                    node=node_id,
                )
                staged.clear(node_id)
        self.constraints = staged

        self.validate_all_constraints()
        rendering = self.render_outputs()
        for listener in list(self._render_listeners):
            listener(dict(rendering))

        self.notifier.info(
            f"Restored {len(self.registry)} node(s) and {len(self.store)} connection(s)"
        )
        self.restore_result = result
        return result

    @classmethod
    def from_snapshot(cls, snapshot: GraphSnapshot, **kwargs: Any) -> "EquationWorkspace":
        """Build a workspace from a snapshot; see :meth:`restore`."""
        workspace = cls(**kwargs)
        workspace.restore(snapshot)
        return workspace
