"""ConnectionRules: legality checks and edge id synthesis."""

import pytest

from edge import Edge, InvalidReferenceError, SelfLoopError
from node import Node
from rules import ConnectionRules, DuplicateEdgeError


@pytest.fixture
def nodes():
    return {i: Node(i, (0, 0), f"n{i}") for i in ("1", "2", "3")}


class TestProposeEdge:

    def test_legal_edge(self, nodes):
        rules = ConnectionRules()
        edge = rules.proposeEdge("1", "2", nodes, [])
        assert edge.key() == ("1", "2")
        assert edge.getId() == "e1-2"
        assert rules.isIssued("e1-2")

    def test_missing_endpoint(self, nodes):
        rules = ConnectionRules()
        with pytest.raises(InvalidReferenceError):
            rules.proposeEdge("1", "9", nodes, [])
        with pytest.raises(InvalidReferenceError):
            rules.proposeEdge("9", "1", nodes, [])

    def test_self_loop_rejected_by_default(self, nodes):
        with pytest.raises(SelfLoopError):
            ConnectionRules().proposeEdge("2", "2", nodes, [])

    def test_rejected_edge_does_not_reserve_id(self, nodes):
        rules = ConnectionRules()
        with pytest.raises(SelfLoopError):
            rules.proposeEdge("2", "2", nodes, [])
        assert not rules.isIssued("e2-2")

    def test_self_loop_allowed_when_configured(self, nodes):
        edge = ConnectionRules(allow_self_loops=True).proposeEdge("2", "2", nodes, [])
        assert edge.key() == ("2", "2")

    def test_duplicate_rejected(self, nodes):
        rules = ConnectionRules()
        existing = [rules.proposeEdge("1", "2", nodes, [])]
        with pytest.raises(DuplicateEdgeError):
            rules.proposeEdge("1", "2", nodes, existing)

    def test_parallel_edges_get_distinct_ids(self, nodes):
        rules = ConnectionRules(allow_parallel_edges=True)
        edges = []
        for _ in range(3):
            edges.append(rules.proposeEdge("1", "2", nodes, edges))
        assert [e.getId() for e in edges] == ["e1-2", "e1-2-2", "e1-2-3"]


class TestIds:

    def test_synthesize_skips_issued(self):
        rules = ConnectionRules()
        rules.remember(["e1-2", "e1-2-2"])
        assert rules.synthesizeId("e1-2") == "e1-2-3"
        assert rules.synthesizeId("e4-5") == "e4-5"

    def test_clear_forgets_ids(self):
        rules = ConnectionRules()
        rules.remember(["e1-2"])
        rules.clear()
        assert rules.synthesizeId("e1-2") == "e1-2"

    def test_bases(self):
        assert ConnectionRules.connectBase("3", "7") == "e3-7"
        assert ConnectionRules.autoConnectBase(2, "5") == "e2-5"


class TestEdge:

    def test_edge_needs_both_nodes(self, nodes):
        with pytest.raises(InvalidReferenceError):
            Edge("e", nodes["1"], None)

    def test_edge_touches(self, nodes):
        e = Edge("e1-2", nodes["1"], nodes["2"])
        assert e.touches("1") and e.touches("2")
        assert not e.touches("3")
