"""Registry owning the node records of an equation graph."""

import logging
import re
from typing import TYPE_CHECKING, Iterator

from .errors import ArityNotConfigurableError, ArityOutOfBoundsError, UnknownNodeError
from .models import Node
from .node_types import (
    NodeKind,
    coerce_op,
    default_arity,
    default_content,
    infer_kind,
)

if TYPE_CHECKING:
    from ..constraints.engine import ConstraintEngine

logger = logging.getLogger(__name__)

_GENERATED_ID = re.compile(r"^node-(\d+)$")


class NodeRegistry:
    """Arena of nodes keyed by their opaque id.

    The registry knows nothing about connections; callers that delete a
    node are responsible for cascading to edges and constraints.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._nodes: dict[str, Node] = {}
        self._next_id = 0

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_node(
        self, content: str, position: tuple[float, float] | None = None
    ) -> str:
        """Create a node, inferring its kind from the content.

        Args:
            content: The textual payload (number, symbol, operator, function).
            position: Opaque canvas position, kept for persistence only.

        Returns:
            The new node ID.
        """
        node_id = f"node-{self._next_id}"
        self._next_id += 1

        kind, op = infer_kind(content)
        self._nodes[node_id] = Node(
            id=node_id,
            kind=kind,
            op=op,
            content=content,
            arity=default_arity(kind, op),
            position=position,
        )
        logger.debug("Created %s node %s with content %r", kind.value, node_id, content)
        return node_id

    def restore_node(
        self,
        node_id: str,
        content: str,
        kind: NodeKind | None = None,
        op: str | None = None,
        position: tuple[float, float] | None = None,
    ) -> Node:
        """Re-create a node under a known id, e.g. from a snapshot.

        Args:
            node_id: The id to store the node under.
            content: The textual payload.
            kind: The stored kind; inferred from content when omitted.
            op: The stored operator/function name.
            position: Opaque canvas position.

        Returns:
            The restored node.
        """
        if kind is None:
            kind, node_op = infer_kind(content)
        else:
            kind = NodeKind(kind)
            node_op = coerce_op(kind, op)
            if node_op is None and kind in (NodeKind.OPERATOR, NodeKind.FUNCTION):
                _, node_op = infer_kind(content)

        node = Node(
            id=node_id,
            kind=kind,
            op=node_op,
            content=content,
            arity=default_arity(kind, node_op),
            position=position,
        )
        self._nodes[node_id] = node

        # Keep generated ids unique after restoring
        match = _GENERATED_ID.match(node_id)
        if match:
            self._next_id = max(self._next_id, int(match.group(1)) + 1)

        return node

    def update_content(
        self,
        node_id: str,
        content: str,
        constraints: "ConstraintEngine | None" = None,
    ) -> Node | None:
        """Change a node's content, checking value nodes against constraints.

        The content is always stored. For constants and variables the new
        value is checked first; a violation marks the node invalid instead
        of rejecting the edit.

        Args:
            node_id: The node to update.
            content: The new content.
            constraints: Engine holding the node's constraints, if any.

        Returns:
            The updated node, or None if the id is unknown.
        """
        node = self._nodes.get(node_id)
        if node is None:
            return None

        node.content = content

        if node.has_value:
            if constraints is not None and constraints.has_constraints(node_id):
                node.apply_check(constraints.validate_value(node_id, content))
            else:
                node.reset_check()

        return node

    def delete_node(self, node_id: str) -> bool:
        """Remove a node record.

        Returns:
            True if a node was removed.
        """
        if node_id not in self._nodes:
            return False
        del self._nodes[node_id]
        logger.debug("Deleted node %s", node_id)
        return True

    def set_arity(self, node_id: str, current: int) -> Node:
        """Change the number of input ports of a configurable node.

        Args:
            node_id: The node to reconfigure.
            current: The new input count.

        Returns:
            The updated node.

        Raises:
            UnknownNodeError: If the node does not exist.
            ArityNotConfigurableError: If the node has a fixed input count.
            ArityOutOfBoundsError: If the count is outside the node's bounds.
        """
        node = self.require(node_id)
        arity = node.arity

        if not arity.configurable:
            raise ArityNotConfigurableError(
                f"Node '{node.content}' ({node.label}) does not support dynamic inputs",
                node_id,
            )
        if not arity.allows(current):
            raise ArityOutOfBoundsError(
                f"Input count {current} is outside [{arity.min}, {arity.max}]",
                node_id,
                arity.min,
                arity.max,
            )

        arity.current = current
        return node

    def clear(self) -> None:
        """Remove every node."""
        self._nodes.clear()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, node_id: str) -> Node | None:
        """Get a node by id."""
        return self._nodes.get(node_id)

    def require(self, node_id: str) -> Node:
        """Get a node by id, raising if it does not exist."""
        node = self._nodes.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    def as_mapping(self) -> dict[str, Node]:
        """Get a shallow copy of the id -> node mapping."""
        return dict(self._nodes)

    def nodes_by_kind(self, kind: NodeKind) -> list[Node]:
        """Get all nodes of one kind, in creation order."""
        return [node for node in self._nodes.values() if node.kind == kind]

    def output_ids(self) -> list[str]:
        """Get the ids of every output node."""
        return [node.id for node in self.nodes_by_kind(NodeKind.OUTPUT)]

    def default_content_for(self, node_id: str) -> str:
        """Get the content a node resets to."""
        node = self.require(node_id)
        return default_content(node.kind, node.op)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))
