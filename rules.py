# rules.py
from typing import Iterable, Mapping, Optional, Set
import logging

from edge import Edge, InvalidReferenceError

logger = logging.getLogger(__name__)


class DuplicateEdgeError(ValueError):
    """A parallel edge between the same (source, target) pair already exists."""


class ConnectionRules:
    """
    Decides whether a proposed edge is legal and gives it an id.
    - issued: every edge id handed out since the last reset; ids are never reissued
    """

    def __init__(self, allow_self_loops: bool = False, allow_parallel_edges: bool = False):
        self.allow_self_loops = bool(allow_self_loops)
        self.allow_parallel_edges = bool(allow_parallel_edges)
        self._issued: Set[str] = set()

    # -------- id bookkeeping --------
    def clear(self):
        self._issued.clear()

    def remember(self, edge_ids: Iterable[str]):
        self._issued.update(edge_ids)

    def isIssued(self, edge_id: str) -> bool:
        return edge_id in self._issued

    def synthesizeId(self, base: str) -> str:
        """
        Return `base` if it was never issued, else the first free `base-k` (k >= 2).
        """
        if base not in self._issued:
            return base
        k = 2
        while f"{base}-{k}" in self._issued:
            k += 1
        return f"{base}-{k}"

    @staticmethod
    def connectBase(source: str, target: str) -> str:
        return f"e{source}-{target}"

    @staticmethod
    def autoConnectBase(count_before: int, new_id: str) -> str:
        return f"e{count_before}-{new_id}"

    # -------- legality --------
    def proposeEdge(self, source: str, target: str, nodes: Mapping[str, object],
                    edges: Iterable[Edge], edge_id: Optional[str] = None) -> Edge:
        """
        Build a legal edge source -> target, or raise.
        Raises InvalidReferenceError (missing endpoint, self loop) or DuplicateEdgeError.
        The returned edge's id is reserved; the caller must append it.
        """
        src = nodes.get(source)
        dst = nodes.get(target)
        if src is None or dst is None:
            missing = source if src is None else target
            raise InvalidReferenceError(f"Unknown node id {missing!r}.")

        if not self.allow_parallel_edges:
            for e in edges:
                if e.key() == (source, target):
                    raise DuplicateEdgeError(f"Edge {source} -> {target} already exists as {e.getId()}.")

        new_id = self.synthesizeId(edge_id if edge_id is not None else self.connectBase(source, target))
        edge = Edge(new_id, src, dst, allow_loop=self.allow_self_loops)
        self._issued.add(new_id)
        logger.debug("Proposed edge %s (%s -> %s)", new_id, source, target)
        return edge
