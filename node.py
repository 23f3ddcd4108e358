# node.py

from PyQt5.QtCore import QPointF
from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

TEXT_KIND = "text"


@dataclass(frozen=True)
class NodeData:
    """Read-only copy of a node handed to renderers."""
    id: str
    kind: str
    x: float
    y: float
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "position": {"x": self.x, "y": self.y},
            "data": {"text": self.text},
        }


class Node:
    __slots__ = ("_id", "_kind", "_position", "_text")

    def __init__(self, node_id: str, position: Union[QPointF, Tuple[float, float]],
                 text: str = "", kind: str = TEXT_KIND):
        self._id = str(node_id)
        self._kind = kind
        self._position = self._coerce(position)
        self._text = str(text)

    @staticmethod
    def _coerce(pos) -> QPointF:
        if isinstance(pos, QPointF):
            return QPointF(pos.x(), pos.y())
        x, y = pos  # type: ignore[misc]
        return QPointF(float(x), float(y))

    # --- Getters and Setters ---
    def getId(self) -> str:
        return self._id

    def getKind(self) -> str:
        return self._kind

    def getPosition(self) -> QPointF:
        return QPointF(self._position.x(), self._position.y())

    def setPosition(self, pos: Union[QPointF, Tuple[float, float]]) -> None:
        self._position = self._coerce(pos)

    def pos_tuple(self) -> Tuple[float, float]:
        return (self._position.x(), self._position.y())

    def getText(self) -> str:
        return self._text

    def setText(self, text: str) -> None:
        self._text = str(text)

    def freeze(self) -> NodeData:
        x, y = self.pos_tuple()
        return NodeData(self._id, self._kind, x, y, self._text)

    def __repr__(self) -> str:
        return f"N({self._id}: {self._text!r})"
