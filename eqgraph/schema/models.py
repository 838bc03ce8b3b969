"""Pydantic models for equation graph snapshots."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, model_validator

from ..graph.node_types import NodeKind, coerce_op, infer_kind

_CONSTRAINT_FIELDS = ("id", "type", "data", "active", "created_at", "createdAt")


class Position(BaseModel):
    """Opaque canvas position, carried for persistence only."""

    x: float = 0.0
    y: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def normalize_position(cls, data: Any) -> Any:
        """Accept ``[x, y]`` pairs as well as mappings."""
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"x": data[0], "y": data[1]}
        return data

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


class NodeRecord(BaseModel):
    """A stored node."""

    id: str
    content: str
    kind: NodeKind | None = None
    op: str | None = None
    position: Position | None = None
    inputs: int | None = Field(
        default=None, validation_alias=AliasChoices("inputs", "input_count", "inputCount")
    )

    @model_validator(mode="before")
    @classmethod
    def normalize_content(cls, data: Any) -> Any:
        """Coerce numeric YAML scalars like ``2`` or ``3.5`` into content text."""
        if isinstance(data, dict) and isinstance(data.get("content"), (int, float)):
            data = {**data, "content": str(data["content"])}
        return data

    @model_validator(mode="after")
    def check_op(self) -> "NodeRecord":
        """Require a resolvable operator or function for those kinds."""
        if self.kind not in (NodeKind.OPERATOR, NodeKind.FUNCTION):
            return self
        if self.op is not None:
            try:
                coerce_op(self.kind, self.op)
            except ValueError:
                raise ValueError(f"Unknown {self.kind.value} '{self.op}' for node {self.id}")
            return self
        inferred_kind, _ = infer_kind(self.content)
        if inferred_kind != self.kind:
            raise ValueError(
                f"Cannot determine the {self.kind.value} of node {self.id} from '{self.content}'"
            )
        return self


class ConnectionRecord(BaseModel):
    """A stored connection."""

    id: str | None = None
    from_node: str = Field(validation_alias=AliasChoices("from_node", "from"))
    to_node: str = Field(validation_alias=AliasChoices("to_node", "to"))
    from_port: int = Field(
        default=0, validation_alias=AliasChoices("from_port", "fromPortIndex")
    )
    to_port: int = Field(default=0, validation_alias=AliasChoices("to_port", "toPortIndex"))


class GraphSnapshot(BaseModel):
    """Root model for a saved equation graph.

    ``constraints`` holds the constraint engine's export envelope and is
    validated by the engine when the snapshot is restored.
    """

    version: str = "1.0"
    nodes: list[NodeRecord] = Field(default_factory=list)
    connections: list[ConnectionRecord] = Field(default_factory=list)
    constraints: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_snapshot(cls, data: Any) -> Any:
        """Normalize the shorthand forms used in hand-written files.

        - ``nodes`` may be a mapping of id to content string or to a record
        - ``constraints`` may be a bare ``{node_id: [...]}`` mapping
        - a constraint entry may list its parameters next to ``type``
          instead of under ``data``
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)

        version = data.get("version")
        if isinstance(version, (int, float)) and not isinstance(version, bool):
            data["version"] = str(float(version))

        nodes = data.get("nodes")
        if isinstance(nodes, dict):
            normalized_nodes = []
            for node_id, record in nodes.items():
                if isinstance(record, dict):
                    normalized_nodes.append({"id": node_id, **record})
                else:
                    normalized_nodes.append({"id": node_id, "content": record})
            data["nodes"] = normalized_nodes

        constraints = data.get("constraints")
        if isinstance(constraints, dict):
            if "constraints" not in constraints:
                constraints = {"version": "1.0", "constraints": constraints}
            entries = constraints.get("constraints")
            if isinstance(entries, dict):
                constraints = {
                    **constraints,
                    "constraints": {
                        node_id: _normalize_constraint_entries(items)
                        for node_id, items in entries.items()
                    },
                }
            data["constraints"] = constraints

        return data

    @model_validator(mode="after")
    def check_unique_ids(self) -> "GraphSnapshot":
        """Require node ids and connection ids to be unique."""
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"Duplicate node id: {node.id}")
            seen.add(node.id)

        seen_connections: set[str] = set()
        for connection in self.connections:
            if connection.id is None:
                continue
            if connection.id in seen_connections:
                raise ValueError(f"Duplicate connection id: {connection.id}")
            seen_connections.add(connection.id)
        return self


def _normalize_constraint_entries(items: Any) -> Any:
    if not isinstance(items, list):
        return items
    normalized = []
    for item in items:
        if isinstance(item, str):
            normalized.append({"type": item, "data": {}})
        elif isinstance(item, dict) and "data" not in item:
            params = {k: v for k, v in item.items() if k not in _CONSTRAINT_FIELDS}
            base = {k: v for k, v in item.items() if k in _CONSTRAINT_FIELDS}
            normalized.append({**base, "data": params})
        else:
            normalized.append(item)
    return normalized
