"""
FlowEditor tests: each command is applied atomically and yields a snapshot.
"""

import pytest
from PyQt5.QtCore import QPointF

from editor import (
    AddNode, ClearSelection, ConnectNodes, DeleteSelected, DropNode, FlowEditor,
    MoveNode, ResetFlow, SaveFlow, SelectNode, SetNewNodeText, UpdateSelectedText,
)
from graph import GraphSnapshot


def edge_pairs(snap):
    return [(e.source, e.target) for e in snap.edges]


def identity(p):
    return QPointF(p.x(), p.y())


class TestDispatch:

    def test_returns_snapshot(self, editor):
        snap = editor.dispatch(AddNode("hi"))
        assert isinstance(snap, GraphSnapshot)
        assert snap.node_ids() == ("1", "2")
        assert edge_pairs(snap) == [("1", "2")]

    def test_unknown_command(self, editor):
        with pytest.raises(TypeError):
            editor.dispatch(object())

    def test_pending_text_is_used_and_cleared(self, editor):
        editor.dispatch(SetNewNodeText("pending"))
        snap = editor.dispatch(AddNode())
        assert snap.node(editor.state.last_node_id).text == "pending"
        assert editor.state.new_node_text == ""

    def test_explicit_text_keeps_pending(self, editor):
        editor.dispatch(SetNewNodeText("pending"))
        editor.dispatch(AddNode("explicit"))
        assert editor.state.new_node_text == "pending"


class TestSelectionCommands:

    def test_select_then_edit(self, editor):
        editor.dispatch(AddNode("b"))
        editor.dispatch(SelectNode("2"))
        snap = editor.dispatch(UpdateSelectedText("hello"))
        assert editor.graph.getNode("2").getText() == "hello"
        assert snap.selected.text == "hello"
        assert snap.node("2").text == "hello"

    def test_clear_selection(self, editor):
        editor.dispatch(SelectNode("1"))
        assert editor.dispatch(ClearSelection()).selected is None

    def test_delete_selected_cascades_and_clears(self, editor):
        editor.dispatch(AddNode("b"))
        editor.dispatch(AddNode("c"))
        editor.dispatch(SelectNode("2"))
        snap = editor.dispatch(DeleteSelected())
        assert snap.node_ids() == ("1", "3")
        assert snap.edges == ()
        assert snap.selected is None

    def test_delete_without_selection_is_noop(self, editor):
        before = editor.snapshot()
        assert editor.dispatch(DeleteSelected()) == before


class TestDrop:

    def test_drop_before_canvas_init_is_noop(self, editor):
        before = editor.snapshot()
        after = editor.dispatch(DropNode("textNode", 100.0, 100.0))
        assert after == before
        assert editor.state.last_node_id is None

    def test_drop_places_node_without_edge(self, editor):
        editor.attachCanvas((10.0, 20.0), identity)
        snap = editor.dispatch(DropNode("textNode", 110.0, 70.0))
        node = snap.node(editor.state.last_node_id)
        assert (node.x, node.y) == (100.0, 50.0)
        assert node.kind == "text"
        assert node.text == "New Text Node"
        assert snap.edges == ()

    def test_drop_unknown_type_is_ignored(self, editor):
        editor.attachCanvas((0.0, 0.0), identity)
        before = editor.snapshot()
        assert editor.dispatch(DropNode("imageNode", 1.0, 1.0)) == before

    def test_detached_canvas_rejects_drops(self, editor):
        editor.attachCanvas((0.0, 0.0), identity)
        editor.detachCanvas()
        before = editor.snapshot()
        assert editor.dispatch(DropNode("textNode", 1.0, 1.0)) == before


class TestConnectAndMove:

    def test_connect_dropped_node(self, editor):
        editor.attachCanvas((0.0, 0.0), identity)
        editor.dispatch(DropNode("textNode", 5.0, 5.0))
        snap = editor.dispatch(ConnectNodes("1", "2"))
        assert edge_pairs(snap) == [("1", "2")]
        assert editor.state.last_edge_id == "e1-2"

    def test_rejected_connect_leaves_graph(self, editor):
        before = editor.snapshot()
        assert editor.dispatch(ConnectNodes("1", "1")) == before
        assert editor.state.last_edge_id is None

    def test_move_node(self, editor):
        snap = editor.dispatch(MoveNode("1", 3.0, 4.0))
        assert (snap.node("1").x, snap.node("1").y) == (3.0, 4.0)


class TestSave:

    def test_valid_flow_is_persisted(self, editor):
        saved = []
        editor.persist = lambda nodes, edges: saved.append((nodes, edges))
        editor.dispatch(AddNode("b"))
        editor.dispatch(SaveFlow())
        assert editor.state.last_save.ok
        assert len(saved) == 1
        nodes, edges = saved[0]
        assert [n.id for n in nodes] == ["1", "2"]
        assert [(e.source, e.target) for e in edges] == [("1", "2")]

    def test_invalid_flow_notifies_and_is_not_persisted(self, editor):
        saved, messages = [], []
        editor.persist = lambda nodes, edges: saved.append(nodes)
        editor.notify = messages.append
        editor.attachCanvas((0.0, 0.0), identity)
        editor.dispatch(DropNode("textNode", 1.0, 1.0))
        before = editor.snapshot()

        result = editor.save()
        assert not result.ok
        assert result.reason == "multiple-terminal-nodes"
        assert messages == ["More than one node has empty target handles."]
        assert saved == []
        assert editor.snapshot() == before

    def test_save_without_persistence_collaborator(self, editor):
        assert editor.save().ok


class TestReset:

    def test_reset_restores_seed_and_clears_state(self, editor):
        editor.dispatch(AddNode("b"))
        editor.dispatch(SelectNode("2"))
        editor.dispatch(SetNewNodeText("pending"))
        snap = editor.dispatch(ResetFlow())
        assert snap.node_ids() == ("1",)
        assert snap.selected is None
        assert editor.state.new_node_text == ""
