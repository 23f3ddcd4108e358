# mainwindow.py
from PyQt5.QtWidgets import (
    QMainWindow, QStatusBar, QAction, QFileDialog,
    QMessageBox, QDockWidget, QWidget, QVBoxLayout,
    QPushButton, QLabel, QGroupBox, QShortcut, QLineEdit
)
from PyQt5.QtCore import Qt, QMimeData
from PyQt5.QtGui import QKeySequence, QDrag
import logging
from editor import (
    FlowEditor, AddNode, SetNewNodeText, UpdateSelectedText,
    DeleteSelected, SaveFlow, ResetFlow
)
from flowwidget import FlowWidget

logger = logging.getLogger(__name__)


class NodePanelItem(QLabel):
    """Draggable "Text Node" entry; carries the node type tag in its MIME data."""

    def __init__(self, text, mime_type, type_tag, parent=None):
        super().__init__(text, parent)
        self.mime_type = mime_type
        self.type_tag = type_tag
        self.setAlignment(Qt.AlignCenter)
        self.setStyleSheet("border: 1px solid #3498db; border-radius: 4px; padding: 10px;")

    def mouseMoveEvent(self, event):
        if not (event.buttons() & Qt.LeftButton):
            return
        mime = QMimeData()
        mime.setData(self.mime_type, self.type_tag.encode("utf-8"))
        drag = QDrag(self)
        drag.setMimeData(mime)
        drag.exec_(Qt.MoveAction)


class MainWindow(QMainWindow):
    def __init__(self, editor: FlowEditor = None):
        super().__init__()
        self.setWindowTitle("Chatbot Flow Builder")

        self.editor = editor or FlowEditor()
        self.editor.notify = self.showValidationError
        self.editor.persist = self.persistFlow
        self._savePath = None

        self.flowWidget = FlowWidget(self.editor, self)
        self.setCentralWidget(self.flowWidget)
        self.flowWidget.snapshotChanged.connect(self.refreshSettings)

        self.setStatusBar(QStatusBar(self))

        self.createActions()
        self.createMenuBar()
        self.createNodesDock()
        self.createSettingsDock()
        self.createShortcuts()
        self.refreshSettings(self.editor.snapshot())

    def createActions(self):
        self.newAction = QAction("&New Flow", self, triggered=self.confirmNewFlow)
        self.saveAction = QAction("&Save Flow", self, triggered=self.saveFlow)
        self.loadAction = QAction("&Load Flow", self, triggered=self.loadFlow)
        self.deleteAction = QAction("&Delete Node", self, triggered=self.deleteSelected)
        self.zoomInAction = QAction("Zoom &In", self, triggered=self.flowWidget.zoomIn)
        self.zoomOutAction = QAction("Zoom &Out", self, triggered=self.flowWidget.zoomOut)
        self.centerAction = QAction("&Center Graph", self, triggered=self.flowWidget.centerGraph)

    def createMenuBar(self):
        menuBar = self.menuBar()

        fileMenu = menuBar.addMenu("&File")
        fileMenu.addAction(self.newAction)
        fileMenu.addAction(self.saveAction)
        fileMenu.addAction(self.loadAction)

        editMenu = menuBar.addMenu("&Edit")
        editMenu.addAction(self.deleteAction)

        viewMenu = menuBar.addMenu("&View")
        viewMenu.addAction(self.zoomInAction)
        viewMenu.addAction(self.zoomOutAction)
        viewMenu.addAction(self.centerAction)

    def createNodesDock(self):
        dock = QDockWidget("Nodes", self)
        dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        panel = QWidget()
        layout = QVBoxLayout(panel)
        layout.setAlignment(Qt.AlignTop)
        cfg = self.editor.graph.config
        layout.addWidget(NodePanelItem("Text Node", cfg.drag_mime_type, cfg.node_type_tag))
        dock.setWidget(panel)
        self.addDockWidget(Qt.LeftDockWidgetArea, dock)

    def createSettingsDock(self):
        dock = QDockWidget("Settings", self)
        dock.setAllowedAreas(Qt.RightDockWidgetArea)

        mainSettingsWidget = QWidget()
        mainLayout = QVBoxLayout(mainSettingsWidget)
        mainLayout.setAlignment(Qt.AlignTop)

        self.selectedGroup = QGroupBox("Selected Node")
        selLayout = QVBoxLayout()
        selLayout.addWidget(QLabel("Text:"))
        self.selectedText = QLineEdit()
        self.selectedText.textEdited.connect(
            lambda text: self.flowWidget.apply(UpdateSelectedText(text))
        )
        btn_delete = QPushButton("Delete Node (Del)")
        selLayout.addWidget(self.selectedText)
        selLayout.addWidget(btn_delete)
        self.selectedGroup.setLayout(selLayout)

        addGroup = QGroupBox("Add New Node")
        addLayout = QVBoxLayout()
        self.newNodeText = QLineEdit()
        self.newNodeText.textEdited.connect(lambda text: self.editor.dispatch(SetNewNodeText(text)))
        btn_add = QPushButton("Add Node")
        addLayout.addWidget(self.newNodeText)
        addLayout.addWidget(btn_add)
        addGroup.setLayout(addLayout)

        btn_save = QPushButton("Save Flow (Ctrl+S)")

        mainLayout.addWidget(self.selectedGroup)
        mainLayout.addWidget(addGroup)
        mainLayout.addSpacing(15)
        mainLayout.addWidget(btn_save)

        dock.setWidget(mainSettingsWidget)
        self.addDockWidget(Qt.RightDockWidgetArea, dock)

        btn_delete.clicked.connect(self.deleteAction.trigger)
        btn_add.clicked.connect(self.addNode)
        btn_save.clicked.connect(self.saveAction.trigger)

    def createShortcuts(self):
        QShortcut(QKeySequence("Ctrl+N"), self, self.newAction.trigger)
        QShortcut(QKeySequence("Ctrl+S"), self, self.saveAction.trigger)
        QShortcut(QKeySequence("Ctrl+O"), self, self.loadAction.trigger)
        QShortcut(QKeySequence(Qt.Key_Delete), self, self.deleteAction.trigger)
        QShortcut(QKeySequence("C"), self, self.centerAction.trigger)
        QShortcut(QKeySequence(Qt.Key_Plus), self, self.zoomInAction.trigger)
        QShortcut(QKeySequence(Qt.Key_Minus), self, self.zoomOutAction.trigger)

    # --------------------------
    # Panels
    # --------------------------
    def refreshSettings(self, snap):
        selected = snap.selected
        self.selectedGroup.setVisible(selected is not None)
        # Read back from the canonical node; only rewrite when it differs to keep the cursor
        if selected is not None and self.selectedText.text() != selected.text:
            self.selectedText.setText(selected.text)
        if self.newNodeText.text() != self.editor.state.new_node_text:
            self.newNodeText.setText(self.editor.state.new_node_text)

    def addNode(self):
        self.flowWidget.apply(AddNode())
        self.statusBar().showMessage(f"Node {self.editor.state.last_node_id} added.", 3000)

    def deleteSelected(self):
        if not self.editor.selection.hasSelection():
            return
        self.flowWidget.apply(DeleteSelected())

    def confirmNewFlow(self):
        reply = QMessageBox.question(
            self, "Confirm Reset",
            "This will reset the current flow. Are you sure?",
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No
        )
        if reply == QMessageBox.Yes:
            self._savePath = None
            self.flowWidget.apply(ResetFlow())

    # --------------------------
    # Save / load
    # --------------------------
    def showValidationError(self, message):
        QMessageBox.warning(self, "Cannot Save Flow", message)

    def persistFlow(self, nodes, edges):
        path = self._savePath
        if not path:
            path, _ = QFileDialog.getSaveFileName(self, "Save Flow", "", "JSON Files (*.json)")
        if not path:
            return
        if self.editor.graph.save_to_json(path):
            self._savePath = path
            self.statusBar().showMessage(f"Flow saved to {path} ({len(nodes)} nodes, {len(edges)} edges)", 5000)
        else:
            QMessageBox.warning(self, "Error", "Could not save the flow.")

    def saveFlow(self):
        self.flowWidget.apply(SaveFlow())

    def loadFlow(self):
        path, _ = QFileDialog.getOpenFileName(self, "Load Flow", "", "JSON Files (*.json)")
        if not path:
            return
        ok = self.editor.graph.load_from_json(path)
        self.flowWidget.updateGraphScene()
        self.flowWidget.centerGraph()
        self.refreshSettings(self.editor.snapshot())
        if ok:
            self._savePath = path
            self.statusBar().showMessage(f"Flow loaded from {path}", 5000)
        else:
            QMessageBox.warning(self, "Error", "Could not load the flow.")
