# edge.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple


class InvalidReferenceError(ValueError):
    """An edge endpoint does not name a node of the graph."""


class SelfLoopError(InvalidReferenceError):
    pass


@dataclass(frozen=True)
class EdgeData:
    id: str
    source: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "source": self.source, "target": self.target}


class Edge:
    __slots__ = ("_id", "_source", "_target")

    def __init__(self, edge_id: str, sourceNode, targetNode, allow_loop: bool = False):
        if sourceNode is None or targetNode is None:
            raise InvalidReferenceError(f"Edge {edge_id}: endpoint node is missing.")
        # Prevent loops unless the caller opted in
        if not allow_loop and sourceNode.getId() == targetNode.getId():
            raise SelfLoopError(f"Edge {edge_id}: endpoints must be distinct (no loops).")
        self._id = str(edge_id)
        # Endpoints are stored by id
        self._source = sourceNode.getId()
        self._target = targetNode.getId()

    # --- Getters ---
    def getId(self) -> str: return self._id
    def getSource(self) -> str: return self._source
    def getTarget(self) -> str: return self._target

    def touches(self, node_id: str) -> bool:
        return self._source == node_id or self._target == node_id

    # Convenience: tuple key by endpoint ids (direction matters)
    def key(self) -> Tuple[str, str]:
        return (self._source, self._target)

    def freeze(self) -> EdgeData:
        return EdgeData(self._id, self._source, self._target)

    def __eq__(self, other) -> bool:
        return isinstance(other, Edge) and self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self):
        return f"E({self._id}: {self._source} -> {self._target})"
