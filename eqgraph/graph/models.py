"""Data records for nodes, connections and mutation outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .node_types import (
    FUNCTION_GLYPHS,
    OPERATORS,
    Arity,
    Function,
    NodeKind,
    NodeOp,
    Operator,
)

if TYPE_CHECKING:
    from ..constraints.results import ConstraintCheck, ConstraintViolation


class CheckStatus(str, Enum):
    """Outcome of the last constraint evaluation on a node."""

    VALID = "valid"
    INVALID = "invalid"
    UNCHECKED = "unchecked"  # constraints exist but the value could not be computed


class RejectReason(str, Enum):
    """Why a structural mutation was refused."""

    UNKNOWN_NODE = "unknown_node"
    UNKNOWN_CONNECTION = "unknown_connection"
    SELF_CONNECTION = "self_connection"
    WOULD_CREATE_CYCLE = "would_create_cycle"
    STRUCTURALLY_INVALID = "structurally_invalid"
    ARITY_OUT_OF_BOUNDS = "arity_out_of_bounds"
    NOT_CONFIGURABLE = "not_configurable"
    PORT_OCCUPIED = "port_occupied"


@dataclass
class Node:
    """A vertex in the equation graph."""

    id: str
    kind: NodeKind
    content: str
    arity: Arity
    op: NodeOp = None
    position: tuple[float, float] | None = None
    is_valid: bool = True
    check_status: CheckStatus = CheckStatus.VALID
    violations: list["ConstraintViolation"] | None = None
    note: str | None = None

    @property
    def output_count(self) -> int:
        """Number of output ports; the output sink has none."""
        return 0 if self.kind == NodeKind.OUTPUT else 1

    @property
    def label(self) -> str:
        """Human-readable kind label, e.g. 'add' or 'variable'."""
        if self.op is not None:
            return self.op.value
        return self.kind.value

    @property
    def symbol(self) -> str | None:
        """Display glyph for operators and functions."""
        if isinstance(self.op, Operator):
            return OPERATORS[self.op].symbol
        if isinstance(self.op, Function):
            return FUNCTION_GLYPHS[self.op]
        return None

    @property
    def has_value(self) -> bool:
        """Whether the content itself is the node's value."""
        return self.kind in (NodeKind.CONSTANT, NodeKind.VARIABLE)

    def apply_check(self, check: "ConstraintCheck") -> None:
        """Record a constraint evaluation outcome."""
        self.check_status = check.status
        self.is_valid = check.is_valid
        self.violations = list(check.violations) if check.violations else None
        self.note = check.note

    def reset_check(self) -> None:
        """Forget any previous constraint evaluation."""
        self.check_status = CheckStatus.VALID
        self.is_valid = True
        self.violations = None
        self.note = None


@dataclass(frozen=True)
class Connection:
    """A directed edge from an output port to an input port."""

    id: str
    from_node: str
    to_node: str
    from_port: int = 0
    to_port: int = 0

    def touches(self, node_id: str) -> bool:
        """Check whether either endpoint is the given node."""
        return self.from_node == node_id or self.to_node == node_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from": self.from_node,
            "to": self.to_node,
            "from_port": self.from_port,
            "to_port": self.to_port,
        }


@dataclass
class ConnectResult:
    """Outcome of a connect attempt."""

    success: bool
    reason: RejectReason | None = None
    connection: Connection | None = None
    replaced: Connection | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        """Explanation suitable for a notification."""
        if self.success:
            if self.replaced is not None:
                return "Connection replaced existing input!"
            return "Connection created!"
        detail = ", ".join(self.errors) if self.errors else self.reason.value
        return f"Connection invalid: {detail}"


@dataclass
class MutationResult:
    """Outcome of a node or constraint mutation."""

    success: bool
    reason: RejectReason | None = None
    message: str = ""
