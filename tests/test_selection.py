"""SelectionController: single active node resolved from the graph."""

from selection import SelectionController


class TestSelection:

    def test_select_and_update_text(self, chain):
        """Edits land on the canonical node and show up in the live view."""
        sel = SelectionController(chain)
        assert sel.select(chain.getNode("2"))
        assert sel.updateSelectedText("hello")
        assert chain.getNode("2").getText() == "hello"
        assert sel.selectedView().text == "hello"
        assert sel.selectedNode() is chain.getNode("2")

    def test_select_by_snapshot_or_id(self, chain):
        sel = SelectionController(chain)
        assert sel.select(chain.snapshot().node("3"))
        assert sel.selectedId() == "3"
        assert sel.select("1")
        assert sel.selectedId() == "1"

    def test_unknown_node_is_not_selected(self, chain):
        sel = SelectionController(chain)
        sel.select("2")
        assert sel.select("99") is False
        assert sel.selectedId() == "2"

    def test_update_without_selection_is_noop(self, chain):
        sel = SelectionController(chain)
        before = chain.snapshot()
        assert sel.updateSelectedText("x") is False
        assert chain.snapshot() == before

    def test_cleared_when_selected_node_deleted(self, chain):
        sel = SelectionController(chain)
        sel.select("2")
        chain.deleteNode("2")
        assert sel.selectedId() is None
        assert not sel.hasSelection()

    def test_kept_when_other_node_deleted(self, chain):
        sel = SelectionController(chain)
        sel.select("2")
        chain.deleteNode("3")
        assert sel.selectedId() == "2"

    def test_cleared_on_reset(self, chain):
        sel = SelectionController(chain)
        sel.select("1")
        chain.reset()
        assert sel.selectedId() is None

    def test_cleared_on_load(self, chain, tmp_path):
        path = tmp_path / "flow.json"
        chain.save_to_json(str(path))
        sel = SelectionController(chain)
        sel.select("3")
        assert chain.load_from_json(str(path))
        assert sel.selectedId() is None

    def test_select_none_clears(self, chain):
        sel = SelectionController(chain)
        sel.select("1")
        assert sel.select(None) is False
        assert sel.selectedId() is None

    def test_detach_unregisters_listeners(self, chain):
        deleted_before = len(chain.on_node_deleted)
        reset_before = len(chain.on_reset)
        sel = SelectionController(chain)
        assert len(chain.on_node_deleted) == deleted_before + 1
        sel.select("2")
        sel.detach()
        assert len(chain.on_node_deleted) == deleted_before
        assert len(chain.on_reset) == reset_before
        assert sel.selectedId() is None
        sel.detach()
        assert len(chain.on_node_deleted) == deleted_before
