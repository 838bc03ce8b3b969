"""Graph layer: node records, the node registry and the connection store."""

from .node_types import Arity, Function, NodeKind, Operator, infer_kind, parse_number
from .errors import (
    ArityError,
    ArityNotConfigurableError,
    ArityOutOfBoundsError,
    CircularReferenceError,
    GraphError,
    UnknownNodeError,
)
from .models import CheckStatus, Connection, ConnectResult, MutationResult, Node, RejectReason
from .node_registry import NodeRegistry
from .connection_store import ConnectionStore

__all__ = [
    "Arity",
    "Function",
    "NodeKind",
    "Operator",
    "infer_kind",
    "parse_number",
    "ArityError",
    "ArityNotConfigurableError",
    "ArityOutOfBoundsError",
    "CircularReferenceError",
    "GraphError",
    "UnknownNodeError",
    "CheckStatus",
    "Connection",
    "ConnectResult",
    "MutationResult",
    "Node",
    "RejectReason",
    "NodeRegistry",
    "ConnectionStore",
]
