"""SaveValidator: at most one terminal node."""

from edge import EdgeData
from graph import GraphSnapshot
from node import NodeData
from validator import MULTIPLE_TERMINAL_NODES, SaveValidator


def snap(node_ids, edges):
    return GraphSnapshot(
        nodes=tuple(NodeData(i, "text", 0.0, 0.0, "") for i in node_ids),
        edges=tuple(EdgeData(f"e{s}-{t}", s, t) for s, t in edges),
    )


class TestSaveValidator:

    def test_fan_out_has_two_terminals(self):
        """1 -> 2, 1 -> 3: terminals {2, 3}, rejected."""
        result = SaveValidator().validate(snap(["1", "2", "3"], [("1", "2"), ("1", "3")]))
        assert not result.ok
        assert result.reason == MULTIPLE_TERMINAL_NODES
        assert result.terminal_ids == ("2", "3")
        assert result.message == "More than one node has empty target handles."

    def test_chain_has_one_terminal(self):
        """1 -> 2 -> 3: terminal {3}, accepted."""
        result = SaveValidator().validate(snap(["1", "2", "3"], [("1", "2"), ("2", "3")]))
        assert result.ok
        assert result.reason is None
        assert result.terminal_ids == ("3",)
        assert result.message == ""

    def test_single_node_passes(self):
        assert SaveValidator().validate(snap(["1"], [])).ok

    def test_empty_graph_passes(self):
        result = SaveValidator().validate(snap([], []))
        assert result.ok
        assert result.terminal_ids == ()

    def test_cycle_has_no_terminal(self):
        assert SaveValidator().validate(snap(["1", "2"], [("1", "2"), ("2", "1")])).ok

    def test_disconnected_nodes_rejected(self):
        assert not SaveValidator().validate(snap(["1", "2"], [])).ok

    def test_custom_limit(self):
        assert SaveValidator(max_terminal=2).validate(snap(["1", "2"], [])).ok
