# validator.py
from dataclasses import dataclass
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

MULTIPLE_TERMINAL_NODES = "multiple-terminal-nodes"

MESSAGES = {
    MULTIPLE_TERMINAL_NODES: "More than one node has empty target handles.",
}


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None
    terminal_ids: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        return MESSAGES.get(self.reason, "") if self.reason else ""


class SaveValidator:
    """
    A node is terminal if no edge leaves it. A flow may be committed only
    while it has at most `max_terminal` terminal nodes (an empty flow passes).
    """

    def __init__(self, max_terminal: int = 1):
        self.max_terminal = int(max_terminal)

    @staticmethod
    def terminal_ids(graph) -> Tuple[str, ...]:
        sources = {e.source for e in graph.edges}
        return tuple(n.id for n in graph.nodes if n.id not in sources)

    def validate(self, graph) -> ValidationResult:
        """`graph` is a GraphSnapshot (anything with .nodes/.edges of NodeData/EdgeData)."""
        terminal = self.terminal_ids(graph)
        if len(terminal) > self.max_terminal:
            logger.info("Save rejected: %d terminal nodes %s", len(terminal), list(terminal))
            return ValidationResult(False, MULTIPLE_TERMINAL_NODES, terminal)
        return ValidationResult(True, None, terminal)
