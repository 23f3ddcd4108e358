# flowwidget.py

from PyQt5.QtWidgets import QGraphicsView, QGraphicsScene, QGraphicsSimpleTextItem, QMenu
from PyQt5.QtCore import Qt, QPointF, QRectF, pyqtSignal
from PyQt5.QtGui import QPen, QColor, QPainter, QPainterPath, QBrush
from PyQt5.QtWidgets import QGraphicsScene as QGS
from typing import Optional
from editor import (
    FlowEditor, SelectNode, ClearSelection, MoveNode, ConnectNodes, DropNode
)
import math

# Zoom behavior constants
ZOOM_FACTOR = 1.15
ZOOM_MIN = 0.1
ZOOM_MAX = 8.0

# Node box geometry (scene units)
NODE_W = 160.0
NODE_H = 48.0
ARROW_LEN = 10.0


class FlowWidget(QGraphicsView):
    """Draws editor snapshots and turns mouse/drop gestures into commands."""

    snapshotChanged = pyqtSignal(object)

    def __init__(self, editor: FlowEditor, parent=None):
        super().__init__(parent)
        self.editor = editor
        scene = QGraphicsScene(self)
        scene.setItemIndexMethod(QGS.NoIndex)
        self.setScene(scene)

        self.setRenderHint(QPainter.Antialiasing)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setAcceptDrops(True)

        self.currentZoom = 1.0
        self.panning = False
        self.lastPanPoint = None
        self._dragNodeId: Optional[str] = None
        self._dragOffset = QPointF(0.0, 0.0)
        self._connectFrom: Optional[str] = None
        self._rubberLine = None
        self._in_update_scene = False

        self.node_pen = QPen(QColor("#3498db"), 2)
        self.node_pen.setCosmetic(True)
        self.selected_pen = QPen(QColor("#e74c3c"), 3)
        self.selected_pen.setCosmetic(True)
        self.node_fill = QColor("#ffffff")
        self.gridBackground = QColor(250, 250, 250)
        self.dotColor = QColor(200, 200, 200)

    # --------------------------
    # Lifecycle
    # --------------------------
    def showEvent(self, event):
        super().showEvent(event)
        # Canvas is usable once shown: report origin + projector to the editor
        if self.editor.state.canvas is None:
            self.editor.attachCanvas((0.0, 0.0), lambda p: self.mapToScene(p.toPoint()))
        self.updateGraphScene()

    def apply(self, command):
        snap = self.editor.dispatch(command)
        self.updateGraphScene()
        self.snapshotChanged.emit(snap)
        return snap

    # ---------- Background (dots) ----------
    def drawBackground(self, painter, rect):
        painter.fillRect(rect, self.gridBackground)
        step = 20
        left = int(math.floor(rect.left() / step)) * step
        top = int(math.floor(rect.top() / step)) * step
        painter.setPen(QPen(self.dotColor, 2))
        x = left
        while x < rect.right():
            y = top
            while y < rect.bottom():
                painter.drawPoint(QPointF(x, y))
                y += step
            x += step

    # ---------- Geometry ----------
    @staticmethod
    def _nodeRect(n) -> QRectF:
        return QRectF(n.x, n.y, NODE_W, NODE_H)

    @staticmethod
    def _border_point(rect: QRectF, toward: QPointF) -> QPointF:
        c = rect.center()
        dx, dy = toward.x() - c.x(), toward.y() - c.y()
        if abs(dx) < 1e-9 and abs(dy) < 1e-9:
            return c
        sx = (rect.width() / 2) / abs(dx) if abs(dx) > 1e-9 else math.inf
        sy = (rect.height() / 2) / abs(dy) if abs(dy) > 1e-9 else math.inf
        s = min(sx, sy)
        return QPointF(c.x() + dx * s, c.y() + dy * s)

    def updateGraphScene(self):
        if self._in_update_scene:
            return
        self._in_update_scene = True
        try:
            self.scene().clear()
            self._rubberLine = None
            snap = self.editor.snapshot()
            rects = {n.id: self._nodeRect(n) for n in snap.nodes}
            selected_id = snap.selected.id if snap.selected else None

            edge_pen = QPen(QColor(60, 60, 60))
            edge_pen.setWidthF(1.5)
            edge_pen.setCosmetic(True)
            for e in snap.edges:
                r1, r2 = rects.get(e.source), rects.get(e.target)
                if r1 is None or r2 is None:
                    continue
                p1 = self._border_point(r1, r2.center())
                p2 = self._border_point(r2, r1.center())
                path = QPainterPath(p1)
                path.lineTo(p2)
                ang = math.atan2(p2.y() - p1.y(), p2.x() - p1.x())
                for da in (math.radians(150), -math.radians(150)):
                    path.moveTo(p2)
                    path.lineTo(p2.x() + ARROW_LEN * math.cos(ang + da), p2.y() + ARROW_LEN * math.sin(ang + da))
                item = self.scene().addPath(path, edge_pen)
                item.setZValue(-10)

            for n in snap.nodes:
                pen = self.selected_pen if n.id == selected_id else self.node_pen
                box = self.scene().addRect(rects[n.id], pen, QBrush(self.node_fill))
                box.setZValue(10)
                text = QGraphicsSimpleTextItem(n.text or " ")
                text_rect = text.boundingRect()
                scale = min(1.0, (NODE_W - 12) / max(1.0, text_rect.width()))
                text.setScale(scale)
                text.setPos(n.x + (NODE_W - text_rect.width() * scale) / 2,
                            n.y + (NODE_H - text_rect.height() * scale) / 2)
                text.setBrush(Qt.black)
                text.setZValue(20)
                self.scene().addItem(text)

            br = self.scene().itemsBoundingRect()
            if not br.isEmpty():
                self.scene().setSceneRect(br.adjusted(-400, -400, 400, 400))
            self.viewport().update()
        finally:
            self._in_update_scene = False

    def findNodeAtPosition(self, scenePos) -> Optional[str]:
        for n in reversed(self.editor.snapshot().nodes):
            if self._nodeRect(n).contains(scenePos):
                return n.id
        return None

    # ---------- Zoom ----------
    def _zoomBy(self, factor):
        target = self.transform().m11() * factor
        if target < ZOOM_MIN or target > ZOOM_MAX:
            return
        self.scale(factor, factor)
        self.currentZoom = self.transform().m11()

    def zoomIn(self):
        self._zoomBy(ZOOM_FACTOR)

    def zoomOut(self):
        self._zoomBy(1.0 / ZOOM_FACTOR)

    def centerGraph(self):
        if self.scene().items():
            rect = self.scene().itemsBoundingRect().adjusted(-50, -50, 50, 50)
            self.fitInView(rect, Qt.KeepAspectRatio)
            self.currentZoom = self.transform().m11()

    def wheelEvent(self, event):
        if event.angleDelta().y() > 0:
            self.zoomIn()
        else:
            self.zoomOut()
        event.accept()

    # ---------- Mouse ----------
    def mousePressEvent(self, event):
        scenePos = self.mapToScene(event.pos())
        nodeId = self.findNodeAtPosition(scenePos)

        if event.button() == Qt.LeftButton and nodeId is not None:
            if event.modifiers() & Qt.ShiftModifier:
                # Shift-drag from a node draws a connection
                self._connectFrom = nodeId
                self.setCursor(Qt.CrossCursor)
            else:
                self.apply(SelectNode(nodeId))
                node = self.editor.graph.getNode(nodeId)
                self._dragNodeId = nodeId
                self._dragOffset = scenePos - node.getPosition()
                self.setCursor(Qt.SizeAllCursor)
            return

        if event.button() == Qt.LeftButton:
            self.apply(ClearSelection())
            self.panning = True
            self.lastPanPoint = event.pos()
            self.setCursor(Qt.ClosedHandCursor)
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        scenePos = self.mapToScene(event.pos())
        if self._dragNodeId is not None:
            p = scenePos - self._dragOffset
            self.apply(MoveNode(self._dragNodeId, p.x(), p.y()))
            return
        if self._connectFrom is not None:
            node = self.editor.graph.getNode(self._connectFrom)
            if node is not None:
                start = QRectF(node.getPosition().x(), node.getPosition().y(), NODE_W, NODE_H).center()
                if self._rubberLine is None:
                    pen = QPen(QColor("#95a5a6"), 1, Qt.DashLine)
                    pen.setCosmetic(True)
                    self._rubberLine = self.scene().addLine(start.x(), start.y(), scenePos.x(), scenePos.y(), pen)
                else:
                    self._rubberLine.setLine(start.x(), start.y(), scenePos.x(), scenePos.y())
            return
        if self.panning:
            delta = self.mapToScene(self.lastPanPoint) - scenePos
            self.lastPanPoint = event.pos()
            self.translate(delta.x(), delta.y())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            if self._connectFrom is not None:
                target = self.findNodeAtPosition(self.mapToScene(event.pos()))
                source, self._connectFrom = self._connectFrom, None
                if target is not None:
                    self.apply(ConnectNodes(source, target))
                else:
                    self.updateGraphScene()
            self._dragNodeId = None
            self.panning = False
            self.setCursor(Qt.ArrowCursor)
        super().mouseReleaseEvent(event)

    def contextMenuEvent(self, event):
        menu = QMenu(self)
        menu.addAction("Zoom In (+)", self.zoomIn)
        menu.addAction("Zoom Out (-)", self.zoomOut)
        menu.addAction("Center Graph (C)", self.centerGraph)
        menu.exec_(event.globalPos())

    # ---------- Drag and drop ----------
    def _acceptsMime(self, event) -> bool:
        return event.mimeData().hasFormat(self.editor.graph.config.drag_mime_type)

    def dragEnterEvent(self, event):
        if self._acceptsMime(event):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if self._acceptsMime(event):
            event.setDropAction(Qt.MoveAction)
            event.accept()
        else:
            event.ignore()

    def dropEvent(self, event):
        if not self._acceptsMime(event):
            event.ignore()
            return
        mime = self.editor.graph.config.drag_mime_type
        tag = bytes(event.mimeData().data(mime)).decode("utf-8")
        pos = event.pos()
        event.acceptProposedAction()
        self.apply(DropNode(tag, float(pos.x()), float(pos.y())))
