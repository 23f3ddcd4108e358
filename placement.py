# placement.py

from PyQt5.QtCore import QPointF
from typing import Callable, Optional, Tuple, Union
import logging
import random
import secrets

logger = logging.getLogger(__name__)

PointLike = Union[QPointF, Tuple[float, float]]
# Maps a canvas-relative point to graph coordinates (QGraphicsView.mapToScene, zoom/pan aware)
Projector = Callable[[QPointF], QPointF]


def to_point(p: PointLike) -> QPointF:
    if isinstance(p, QPointF):
        return QPointF(p.x(), p.y())
    x, y = p
    return QPointF(float(x), float(y))


def v_sub(a: QPointF, b: QPointF) -> QPointF:
    return QPointF(a.x() - b.x(), a.y() - b.y())


class PlacementService:
    """Spawn and drop coordinates for new nodes."""

    def __init__(self, width: float = 250.0, height: float = 250.0, seed: Optional[int] = None):
        self.width = float(width)
        self.height = float(height)
        # Robust randomness unless a seed is pinned (tests)
        self._rng = random.Random(secrets.randbits(64) if seed is None else seed)

    def randomSpawnPosition(self, bounds: Optional[Tuple[float, float]] = None) -> QPointF:
        """Uniform point in [0, w) x [0, h). No collision avoidance."""
        w, h = bounds if bounds is not None else (self.width, self.height)
        return QPointF(self._rng.random() * float(w), self._rng.random() * float(h))

    def dropPosition(self, pointerClient: PointLike, canvasOrigin: Optional[PointLike],
                     projector: Optional[Projector]) -> Optional[QPointF]:
        """
        Translate a client pointer coordinate into graph space.
        Returns None while the canvas has not reported its origin/projector.
        """
        if pointerClient is None or canvasOrigin is None or projector is None:
            logger.info("Drop ignored: canvas not initialized.")
            return None
        local = v_sub(to_point(pointerClient), to_point(canvasOrigin))
        projected = projector(local)
        if projected is None:
            logger.info("Drop ignored: projector returned no position.")
            return None
        return to_point(projected)
