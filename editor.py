# editor.py
"""
Command layer between UI gestures and the flow graph.

Every gesture (click, type, drag, drop, connect, delete, save) becomes one
command value. FlowEditor.dispatch applies it against an explicit EditorState
and returns the resulting GraphSnapshot for the renderer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple
import logging

from PyQt5.QtCore import QPointF

from graph import FlowConfig, FlowGraph, GraphSnapshot
from placement import PlacementService, Projector
from selection import SelectionController
from validator import SaveValidator, ValidationResult

logger = logging.getLogger(__name__)

# Persistence collaborator: receives (nodes, edges) of a validated flow
Persist = Callable[[tuple, tuple], None]
# User-facing failure channel (blocking in the desktop UI)
Notify = Callable[[str], None]


# --------------------------
# Commands
# --------------------------
@dataclass(frozen=True)
class SetNewNodeText:
    text: str


@dataclass(frozen=True)
class AddNode:
    # None: use (and clear) the pending new-node text
    text: Optional[str] = None


@dataclass(frozen=True)
class DropNode:
    type_tag: str
    client_x: float
    client_y: float


@dataclass(frozen=True)
class ConnectNodes:
    source: str
    target: str


@dataclass(frozen=True)
class SelectNode:
    node_id: str


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class UpdateSelectedText:
    text: str


@dataclass(frozen=True)
class DeleteSelected:
    pass


@dataclass(frozen=True)
class MoveNode:
    node_id: str
    x: float
    y: float


@dataclass(frozen=True)
class SaveFlow:
    pass


@dataclass(frozen=True)
class ResetFlow:
    pass


@dataclass
class Canvas:
    origin: Tuple[float, float]
    projector: Projector


@dataclass
class EditorState:
    graph: FlowGraph
    selection: SelectionController
    new_node_text: str = ""
    canvas: Optional[Canvas] = None
    last_save: Optional[ValidationResult] = None
    last_node_id: Optional[str] = None
    last_edge_id: Optional[str] = None

    @classmethod
    def create(cls, config: Optional[FlowConfig] = None,
               placement: Optional[PlacementService] = None) -> "EditorState":
        graph = FlowGraph(config, placement)
        return cls(graph=graph, selection=SelectionController(graph))


class FlowEditor:
    def __init__(self, state: Optional[EditorState] = None,
                 persist: Optional[Persist] = None,
                 notify: Optional[Notify] = None):
        self.state = state or EditorState.create()
        self.validator = SaveValidator(self.state.graph.config.max_terminal_nodes)
        self.persist = persist
        self.notify = notify
        self._handlers = {
            SetNewNodeText: self._set_new_node_text,
            AddNode: self._add_node,
            DropNode: self._drop_node,
            ConnectNodes: self._connect,
            SelectNode: self._select,
            ClearSelection: self._clear_selection,
            UpdateSelectedText: self._update_selected_text,
            DeleteSelected: self._delete_selected,
            MoveNode: self._move_node,
            SaveFlow: self._save,
            ResetFlow: self._reset,
        }

    @property
    def graph(self) -> FlowGraph:
        return self.state.graph

    @property
    def selection(self) -> SelectionController:
        return self.state.selection

    def attachCanvas(self, origin, projector: Projector):
        """Renderer finished initializing; drops are accepted from now on."""
        self.state.canvas = Canvas(tuple(origin), projector)

    def detachCanvas(self):
        self.state.canvas = None

    def snapshot(self) -> GraphSnapshot:
        return self.graph.snapshot(self.selection.selectedId())

    def dispatch(self, command) -> GraphSnapshot:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command {command!r}")
        handler(command)
        return self.snapshot()

    # --------------------------
    # Handlers
    # --------------------------
    def _set_new_node_text(self, cmd: SetNewNodeText):
        self.state.new_node_text = cmd.text

    def _add_node(self, cmd: AddNode):
        if cmd.text is None:
            text = self.state.new_node_text
            self.state.new_node_text = ""
        else:
            text = cmd.text
        self.state.last_node_id = self.graph.addNode(text)

    def _drop_node(self, cmd: DropNode):
        self.state.last_node_id = None
        kind = self.graph.config.node_kinds.get(cmd.type_tag)
        if kind is None:
            logger.info("Drop ignored: unknown node type %r", cmd.type_tag)
            return
        canvas = self.state.canvas
        position = self.graph.placement.dropPosition(
            QPointF(cmd.client_x, cmd.client_y),
            canvas.origin if canvas else None,
            canvas.projector if canvas else None,
        )
        self.state.last_node_id = self.graph.addNodeAt(kind, position)

    def _connect(self, cmd: ConnectNodes):
        self.state.last_edge_id = self.graph.connect(cmd.source, cmd.target)

    def _select(self, cmd: SelectNode):
        self.selection.select(cmd.node_id)

    def _clear_selection(self, cmd: ClearSelection):
        self.selection.clear()

    def _update_selected_text(self, cmd: UpdateSelectedText):
        self.selection.updateSelectedText(cmd.text)

    def _delete_selected(self, cmd: DeleteSelected):
        node_id = self.selection.selectedId()
        if node_id is None:
            return
        self.graph.deleteNode(node_id)
        self.selection.clear()

    def _move_node(self, cmd: MoveNode):
        self.graph.moveNode(cmd.node_id, QPointF(cmd.x, cmd.y))

    def _save(self, cmd: SaveFlow):
        self.save()

    def _reset(self, cmd: ResetFlow):
        self.graph.reset()
        self.state.new_node_text = ""

    # --------------------------
    # Save
    # --------------------------
    def save(self) -> ValidationResult:
        snap = self.graph.snapshot()
        result = self.validator.validate(snap)
        self.state.last_save = result
        if not result.ok:
            if self.notify is not None:
                self.notify(result.message)
            return result
        if self.persist is not None:
            self.persist(snap.nodes, snap.edges)
        else:
            logger.info("Flow saved: %d nodes, %d edges", len(snap.nodes), len(snap.edges))
        return result
