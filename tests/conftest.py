import pytest

from graph import FlowConfig, FlowGraph
from placement import PlacementService
from editor import EditorState, FlowEditor


@pytest.fixture
def graph():
    return FlowGraph(FlowConfig(), PlacementService(seed=7))


@pytest.fixture
def editor():
    state = EditorState.create(placement=PlacementService(seed=7))
    return FlowEditor(state)


@pytest.fixture
def chain(graph):
    """Nodes 1 -> 2 -> 3 built through the auto-connect path."""
    graph.addNode("second")
    graph.addNode("third")
    return graph
