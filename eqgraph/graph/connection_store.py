"""Connection store wrapping networkx for equation graphs."""

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import networkx as nx

from .models import Connection, ConnectResult, Node, RejectReason

if TYPE_CHECKING:
    from ..validators.structural import StructuralValidator

logger = logging.getLogger(__name__)


class ConnectionStore:
    """Directed edges between node ports.

    Wraps a networkx MultiDiGraph whose edges are keyed by connection id.
    Nodes are referenced by id only; the store is told explicitly when a
    node disappears via :meth:`remove_node`.

    Invariants:
        - at most one connection terminates at any ``(to_node, to_port)``
        - no self-loops
        - the graph stays acyclic
    """

    def __init__(
        self,
        validator: "StructuralValidator | None" = None,
        on_drop: Callable[[Connection, list[str]], None] | None = None,
    ):
        """Initialize an empty store.

        Args:
            validator: External structural validator for port compatibility.
            on_drop: Called for each edge dropped by :meth:`revalidate_all`.
        """
        self._graph = nx.MultiDiGraph()
        self._connections: dict[str, Connection] = {}
        self._validator = validator
        self._on_drop = on_drop
        self._next_id = 0

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Get the underlying networkx graph."""
        return self._graph

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def connect(
        self,
        from_node: str,
        to_node: str,
        from_port: int = 0,
        to_port: int = 0,
        nodes: Mapping[str, Node] | None = None,
        connection_id: str | None = None,
    ) -> ConnectResult:
        """Connect an output port to an input port.

        Checks run in order: both nodes exist, no self-connection, the
        source has the requested output port, an occupied input port is
        scheduled for replacement, no cycle, and finally the structural
        validator. Nothing is mutated unless every check passes; the
        replaced edge and the new edge are then swapped together.

        Args:
            from_node: The source node id.
            to_node: The target node id.
            from_port: The source output port.
            to_port: The target input port.
            nodes: Current node records keyed by id.
            connection_id: Explicit id, used when restoring a snapshot.

        Returns:
            ConnectResult describing the outcome.
        """
        nodes = nodes or {}

        missing = [node_id for node_id in (from_node, to_node) if node_id not in nodes]
        if missing:
            return self._reject(
                RejectReason.UNKNOWN_NODE,
                [f"Node does not exist: {node_id}" for node_id in missing],
            )

        if from_node == to_node:
            return self._reject(
                RejectReason.SELF_CONNECTION, ["Cannot connect node to itself"]
            )

        source = nodes[from_node]
        if source.output_count == 0:
            return self._reject(
                RejectReason.STRUCTURALLY_INVALID,
                [f"Node '{source.content}' ({source.label}) has no output port"],
            )
        if not 0 <= from_port < source.output_count:
            return self._reject(
                RejectReason.STRUCTURALLY_INVALID,
                [f"Output port {from_port} does not exist on '{source.content}'"],
            )

        replaced = self.input_at(to_node, to_port)

        if self.would_create_cycle(from_node, to_node):
            return self._reject(
                RejectReason.WOULD_CREATE_CYCLE,
                ["Connection would create circular dependency"],
            )

        if self._validator is not None:
            remaining = [c for c in self._connections.values() if c is not replaced]
            validation = self._validator.validate_connection(
                from_node, to_node, from_port, to_port, nodes, remaining
            )
            if not validation.is_valid:
                return self._reject(
                    RejectReason.STRUCTURALLY_INVALID, validation.error_messages
                )

        if replaced is not None:
            self._remove(replaced)

        connection = Connection(
            id=connection_id or self._generate_id(),
            from_node=from_node,
            to_node=to_node,
            from_port=from_port,
            to_port=to_port,
        )
        self._add(connection)
        logger.debug(
            "Connected %s:%d -> %s:%d as %s",
            from_node, from_port, to_node, to_port, connection.id,
        )
        return ConnectResult(success=True, connection=connection, replaced=replaced)

    def disconnect(self, connection_id: str) -> bool:
        """Remove a connection by id.

        Returns:
            True if a connection was removed.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            return False
        self._remove(connection)
        return True

    def disconnect_all(self, node_id: str) -> int:
        """Remove every connection touching a node.

        Returns:
            The number of connections removed.
        """
        touching = self.connections_for_node(node_id)
        for connection in touching:
            self._remove(connection)
        return len(touching)

    def add_node(self, node_id: str) -> None:
        """Register a node id so cycle checks and queries can see it."""
        self._graph.add_node(node_id)

    def remove_node(self, node_id: str) -> int:
        """Forget a node that no longer exists, dropping its connections.

        Returns:
            The number of connections removed.
        """
        removed = self.disconnect_all(node_id)
        if self._graph.has_node(node_id):
            self._graph.remove_node(node_id)
        return removed

    def revalidate_all(self, nodes: Mapping[str, Node]) -> list[Connection]:
        """Re-run the structural validator over every stored edge.

        Edges that are no longer valid (e.g. after a port was removed) are
        dropped, and each drop is reported through ``on_drop``.

        Returns:
            The dropped connections.
        """
        dropped: list[Connection] = []

        for connection in list(self._connections.values()):
            errors: list[str] = []
            if connection.from_node not in nodes or connection.to_node not in nodes:
                errors.append("Connection references a removed node")
            elif self._validator is not None:
                others = [c for c in self._connections.values() if c is not connection]
                validation = self._validator.validate_connection(
                    connection.from_node,
                    connection.to_node,
                    connection.from_port,
                    connection.to_port,
                    nodes,
                    others,
                )
                errors.extend(validation.error_messages)

            if errors:
                self._remove(connection)
                dropped.append(connection)
                logger.info("Dropped connection %s: %s", connection.id, "; ".join(errors))
                if self._on_drop is not None:
                    self._on_drop(connection, errors)

        return dropped

    def clear(self) -> None:
        """Remove every connection."""
        self._graph.clear()
        self._connections.clear()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def would_create_cycle(self, from_node: str, to_node: str) -> bool:
        """Check whether adding ``from_node -> to_node`` would close a cycle.

        Searches outgoing edges from the proposed destination; the edge
        closes a cycle exactly when the source is reachable from there.
        """
        if from_node == to_node:
            return True
        if not (self._graph.has_node(from_node) and self._graph.has_node(to_node)):
            return False
        return nx.has_path(self._graph, to_node, from_node)

    def get(self, connection_id: str) -> Connection | None:
        """Get a connection by id."""
        return self._connections.get(connection_id)

    def all_connections(self) -> list[Connection]:
        """Get a copy of every connection, in insertion order."""
        return list(self._connections.values())

    def connections_for_node(self, node_id: str) -> list[Connection]:
        """Get connections where the node is either endpoint."""
        return [c for c in self._connections.values() if c.touches(node_id)]

    def inputs_for(self, node_id: str) -> list[Connection]:
        """Get connections terminating at the node, ordered by input port."""
        inputs = [c for c in self._connections.values() if c.to_node == node_id]
        return sorted(inputs, key=lambda c: c.to_port)

    def outputs_for(self, node_id: str) -> list[Connection]:
        """Get connections leaving the node."""
        return [c for c in self._connections.values() if c.from_node == node_id]

    def input_at(self, node_id: str, port: int) -> Connection | None:
        """Get the connection occupying an input port, if any."""
        for connection in self._connections.values():
            if connection.to_node == node_id and connection.to_port == port:
                return connection
        return None

    def has_connection_to_port(
        self, node_id: str, port: int, direction: str = "input"
    ) -> bool:
        """Check whether a port of a node is connected.

        Args:
            node_id: The node id.
            port: The port index.
            direction: "input" or "output".
        """
        if direction == "input":
            return self.input_at(node_id, port) is not None
        if direction == "output":
            return any(
                c.from_node == node_id and c.from_port == port
                for c in self._connections.values()
            )
        return False

    def upstream_of(self, node_id: str) -> set[str]:
        """Get every node that feeds into the given node, directly or not."""
        if not self._graph.has_node(node_id):
            return set()
        return set(nx.ancestors(self._graph, node_id))

    def stats(self, node_count: int) -> dict[str, Any]:
        """Get connection statistics.

        Args:
            node_count: Number of nodes in the graph.
        """
        per_node: dict[str, int] = {}
        for connection in self._connections.values():
            per_node[connection.from_node] = per_node.get(connection.from_node, 0) + 1
            per_node[connection.to_node] = per_node.get(connection.to_node, 0) + 1

        average = (len(self._connections) * 2) / node_count if node_count else 0
        return {
            "total_connections": len(self._connections),
            "node_connections": per_node,
            "avg_connections_per_node": average,
        }

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _generate_id(self) -> str:
        while True:
            connection_id = f"conn-{self._next_id}"
            self._next_id += 1
            if connection_id not in self._connections:
                return connection_id

    def _add(self, connection: Connection) -> None:
        self._connections[connection.id] = connection
        self._graph.add_edge(
            connection.from_node,
            connection.to_node,
            key=connection.id,
            from_port=connection.from_port,
            to_port=connection.to_port,
        )

    def _remove(self, connection: Connection) -> None:
        del self._connections[connection.id]
        self._graph.remove_edge(connection.from_node, connection.to_node, key=connection.id)

    @staticmethod
    def _reject(reason: RejectReason, errors: list[str]) -> ConnectResult:
        logger.info("Rejected connection (%s): %s", reason.value, "; ".join(errors))
        return ConnectResult(success=False, reason=reason, errors=errors)
