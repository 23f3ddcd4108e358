# selection.py
from typing import Optional, Union
import logging

from node import Node, NodeData

logger = logging.getLogger(__name__)


class SelectionController:
    """
    Tracks at most one active node by id.
    The selected node is always resolved from the graph on read, so the
    edit panel and the canvas can never disagree about its text.
    """

    def __init__(self, graph):
        self.graph = graph
        self._selected_id: Optional[str] = None
        graph.on_node_deleted.append(self.clearIfDeleted)
        graph.on_reset.append(self.clear)

    def select(self, node: Union[Node, NodeData, str, None]) -> bool:
        if node is None:
            self.clear()
            return False
        if isinstance(node, Node):
            node_id = node.getId()
        elif isinstance(node, NodeData):
            node_id = node.id
        else:
            node_id = str(node)
        if not self.graph.hasNode(node_id):
            logger.debug("select ignored: unknown node %s", node_id)
            return False
        self._selected_id = node_id
        return True

    def detach(self):
        """Stop following the graph; a detached controller keeps no selection."""
        if self.clearIfDeleted in self.graph.on_node_deleted:
            self.graph.on_node_deleted.remove(self.clearIfDeleted)
        if self.clear in self.graph.on_reset:
            self.graph.on_reset.remove(self.clear)
        self._selected_id = None

    def clear(self):
        self._selected_id = None

    def clearIfDeleted(self, node_id: str):
        if self._selected_id == node_id:
            self._selected_id = None

    def selectedId(self) -> Optional[str]:
        # Drop a stale id rather than hand it out
        if self._selected_id is not None and not self.graph.hasNode(self._selected_id):
            self._selected_id = None
        return self._selected_id

    def selectedNode(self) -> Optional[Node]:
        node_id = self.selectedId()
        return self.graph.getNode(node_id) if node_id is not None else None

    def selectedView(self) -> Optional[NodeData]:
        node = self.selectedNode()
        return node.freeze() if node is not None else None

    def hasSelection(self) -> bool:
        return self.selectedId() is not None

    def updateSelectedText(self, text: str) -> bool:
        node_id = self.selectedId()
        if node_id is None:
            return False
        return self.graph.updateNodeText(node_id, text)
