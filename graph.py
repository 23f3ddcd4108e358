# graph.py

from node import Node, NodeData, TEXT_KIND
from edge import Edge, EdgeData, InvalidReferenceError
from rules import ConnectionRules, DuplicateEdgeError
from placement import PlacementService, to_point
from PyQt5.QtCore import QPointF
from typing import Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import json
import logging

logger = logging.getLogger(__name__)


@dataclass
class FlowConfig:
    # Random spawn region for "Add Node"
    spawn_width: float = 250.0
    spawn_height: float = 250.0

    # Seeded welcome node
    seed_id: str = "1"
    seed_text: str = "Welcome to the Chatbot"
    seed_position: Tuple[float, float] = (250.0, 5.0)

    # Drag-and-drop
    drop_text: str = "New Text Node"
    drag_mime_type: str = "application/reactflow"
    node_type_tag: str = "textNode"
    node_kinds: Dict[str, str] = field(default_factory=lambda: {"textNode": TEXT_KIND})

    # Connection rules
    allow_self_loops: bool = False
    allow_parallel_edges: bool = False

    # Save-time validation
    max_terminal_nodes: int = 1


@dataclass(frozen=True)
class GraphSnapshot:
    nodes: Tuple[NodeData, ...] = ()
    edges: Tuple[EdgeData, ...] = ()
    selected: Optional[NodeData] = None

    def node(self, node_id: str) -> Optional[NodeData]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes)

    def to_dict(self):
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


class FlowGraph:
    def __init__(self, config: Optional[FlowConfig] = None, placement: Optional[PlacementService] = None):
        self.config = config or FlowConfig()
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self._index: Dict[str, Node] = {}
        self._next_id = 1
        self.rules = ConnectionRules(
            allow_self_loops=self.config.allow_self_loops,
            allow_parallel_edges=self.config.allow_parallel_edges,
        )
        self.placement = placement or PlacementService(self.config.spawn_width, self.config.spawn_height)

        # Listener hooks (selection, UI)
        self.on_node_deleted: List[Callable[[str], None]] = []
        self.on_reset: List[Callable[[], None]] = []

        self.startBasicGraph()

    # --------------------------
    # Base graph ops
    # --------------------------
    def clear(self):
        self.nodes.clear()
        self.edges.clear()
        self._index.clear()
        self.rules.clear()
        self._next_id = 1

    def _notify_reset(self):
        for cb in list(self.on_reset):
            cb()

    def startBasicGraph(self):
        """Single welcome node, no edges."""
        self.clear()
        cfg = self.config
        self._append_node(Node(cfg.seed_id, cfg.seed_position, cfg.seed_text))
        self._bump_counter(cfg.seed_id)
        self._notify_reset()

    reset = startBasicGraph

    def _bump_counter(self, node_id: str):
        try:
            n = int(node_id)
        except (TypeError, ValueError):
            return
        self._next_id = max(self._next_id, n + 1)

    def _fresh_id(self) -> str:
        # Monotonic; never reissues an id, even after deletes
        while str(self._next_id) in self._index:
            self._next_id += 1
        new_id = str(self._next_id)
        self._next_id += 1
        return new_id

    def _append_node(self, node: Node):
        self.nodes.append(node)
        self._index[node.getId()] = node

    # --------------------------
    # Mutations
    # --------------------------
    def addNode(self, text: str) -> str:
        """
        Append a text node at a random spawn position.
        If the graph was non-empty, auto-connect previous last node -> new node.
        """
        count_before = len(self.nodes)
        last = self.nodes[-1] if self.nodes else None
        node = Node(self._fresh_id(), self.placement.randomSpawnPosition(), text)

        edge = None
        if last is not None:
            # Build the edge before touching the sequences so the add stays atomic
            base = ConnectionRules.autoConnectBase(count_before, node.getId())
            edge = Edge(self.rules.synthesizeId(base), last, node)
            self.rules.remember([edge.getId()])

        self._append_node(node)
        if edge is not None:
            self.edges.append(edge)
        logger.debug("Added node %s (auto-edge=%s)", node.getId(), edge.getId() if edge else None)
        return node.getId()

    def addNodeAt(self, kind: str, position: Optional[QPointF], text: Optional[str] = None) -> Optional[str]:
        """Explicit placement (drop). No auto-connect. Returns None if position is unresolved."""
        if position is None:
            logger.info("addNodeAt ignored: no position.")
            return None
        node = Node(self._fresh_id(), to_point(position),
                    self.config.drop_text if text is None else text, kind=kind)
        self._append_node(node)
        logger.debug("Placed %s node %s at (%.1f, %.1f)", kind, node.getId(), *node.pos_tuple())
        return node.getId()

    def deleteNode(self, node_id: str) -> bool:
        node = self._index.pop(node_id, None)
        if node is None:
            return False
        self.nodes = [n for n in self.nodes if n.getId() != node_id]
        self.edges = [e for e in self.edges if not e.touches(node_id)]
        for cb in list(self.on_node_deleted):
            cb(node_id)
        logger.debug("Deleted node %s", node_id)
        return True

    def connect(self, source: str, target: str) -> Optional[str]:
        try:
            edge = self.rules.proposeEdge(source, target, self._index, self.edges)
        except (InvalidReferenceError, DuplicateEdgeError) as e:
            logger.info("Connection %s -> %s rejected: %s", source, target, e)
            return None
        self.edges.append(edge)
        return edge.getId()

    def updateNodeText(self, node_id: str, text: str) -> bool:
        node = self._index.get(node_id)
        if node is None:
            return False
        node.setText(text)
        return True

    def moveNode(self, node_id: str, position) -> bool:
        node = self._index.get(node_id)
        if node is None or position is None:
            return False
        node.setPosition(to_point(position))
        return True

    # --------------------------
    # Queries
    # --------------------------
    def getNode(self, node_id: str) -> Optional[Node]:
        return self._index.get(node_id)

    def hasNode(self, node_id: str) -> bool:
        return node_id in self._index

    def getNodes(self):
        return self.nodes

    def getEdges(self):
        return self.edges

    def lastNode(self) -> Optional[Node]:
        return self.nodes[-1] if self.nodes else None

    def outgoing(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.getSource() == node_id]

    def terminalNodes(self) -> List[str]:
        sources = {e.getSource() for e in self.edges}
        return [n.getId() for n in self.nodes if n.getId() not in sources]

    def snapshot(self, selected_id: Optional[str] = None) -> GraphSnapshot:
        selected = self._index.get(selected_id) if selected_id is not None else None
        return GraphSnapshot(
            nodes=tuple(n.freeze() for n in self.nodes),
            edges=tuple(e.freeze() for e in self.edges),
            selected=selected.freeze() if selected is not None else None,
        )

    def get_stats(self):
        return {
            "nodes": len(self.nodes),
            "edges": len(self.edges),
            "terminal": len(self.terminalNodes()),
        }

    # --------------------------
    # Persistence
    # --------------------------
    def save_to_json(self, filepath) -> bool:
        try:
            with open(filepath, 'w') as f:
                json.dump(self.snapshot().to_dict(), f, indent=4)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving flow to %s: %s", filepath, e)
            return False

    @staticmethod
    def _as_dict(value, what) -> dict:
        if not isinstance(value, dict):
            raise ValueError(f"{what} must be an object, got {type(value).__name__}")
        return value

    def _parse_flow(self, data):
        """Build (nodes, edges, issued edge ids) from a decoded flow; raises ValueError/KeyError."""
        data = self._as_dict(data, "flow")
        nodes: List[Node] = []
        index: Dict[str, Node] = {}
        for n_data in data["nodes"]:
            n_data = self._as_dict(n_data, "node")
            pos = self._as_dict(n_data.get("position", {}), "node position")
            payload = self._as_dict(n_data.get("data", {}), "node data")
            kind = self.config.node_kinds.get(n_data.get("type"), n_data.get("type") or TEXT_KIND)
            node = Node(n_data["id"], (pos.get("x", 0.0), pos.get("y", 0.0)),
                        payload.get("text", ""), kind=kind)
            if node.getId() in index:
                raise ValueError(f"duplicate node id {node.getId()!r}")
            nodes.append(node)
            index[node.getId()] = node

        rules = ConnectionRules(self.config.allow_self_loops, self.config.allow_parallel_edges)
        edges: List[Edge] = []
        for e_data in data["edges"]:
            e_data = self._as_dict(e_data, "edge")
            src = index.get(str(e_data["source"]))
            dst = index.get(str(e_data["target"]))
            if src is None or dst is None:
                logger.warning("Dropping dangling edge %s on load.", e_data.get("id"))
                continue
            try:
                edge = rules.proposeEdge(src.getId(), dst.getId(), index, edges,
                                         edge_id=str(e_data.get("id") or rules.connectBase(src.getId(), dst.getId())))
            except (InvalidReferenceError, DuplicateEdgeError) as e:
                logger.warning("Dropping edge %s on load: %s", e_data.get("id"), e)
                continue
            edges.append(edge)
        return nodes, edges, [e.getId() for e in edges]

    def load_from_json(self, filepath) -> bool:
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
            nodes, edges, edge_ids = self._parse_flow(data)
        except (OSError, KeyError, TypeError, ValueError) as e:
            logger.error("Error loading flow from %s: %s", filepath, e)
            self.startBasicGraph()
            return False

        # Commit only a fully parsed flow
        self.clear()
        for node in nodes:
            self._append_node(node)
            self._bump_counter(node.getId())
        self.edges.extend(edges)
        self.rules.remember(edge_ids)
        self._notify_reset()
        return True

    # --------------------------
    # Integrity check
    # --------------------------
    def validate_invariants(self, verbose=False) -> bool:
        ids = [n.getId() for n in self.nodes]
        if len(set(ids)) != len(ids) or set(ids) != set(self._index):
            if verbose: logger.warning("Node ids duplicated or index inconsistent.")
            return False
        edge_ids = [e.getId() for e in self.edges]
        if len(set(edge_ids)) != len(edge_ids):
            if verbose: logger.warning("Edge ids duplicated.")
            return False
        for e in self.edges:
            if e.getSource() not in self._index or e.getTarget() not in self._index:
                if verbose: logger.warning("Dangling edge %r.", e)
                return False
        return True
