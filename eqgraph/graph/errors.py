"""Graph-related exceptions."""


class GraphError(Exception):
    """Base exception for equation graph errors."""

    def __init__(self, message: str, node_id: str | None = None):
        self.node_id = node_id
        super().__init__(message)


class UnknownNodeError(GraphError):
    """Raised when a node id is not in the registry."""

    def __init__(self, node_id: str):
        super().__init__(f"Unknown node: {node_id}", node_id)


class ArityError(GraphError):
    """Raised when a node's input count cannot be changed."""


class ArityNotConfigurableError(ArityError):
    """Raised when the node kind has a fixed input count."""


class ArityOutOfBoundsError(ArityError):
    """Raised when the requested input count falls outside the bounds."""

    def __init__(self, message: str, node_id: str, minimum: int, maximum: int):
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(message, node_id)


class CircularReferenceError(GraphError):
    """Raised when a walk over node inputs revisits a node on its own path."""

    def __init__(self, node_id: str):
        super().__init__(f"Circular reference through node {node_id}", node_id)
