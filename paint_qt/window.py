# paint_qt/window.py
from __future__ import annotations
import logging
from typing import Optional

from PySide6 import QtCore, QtWidgets
from PySide6.QtGui import QKeySequence, QShortcut

from paint_qt.core.canvas_widget import CanvasWidget
from paint_qt.core.settings import (
    DEFAULT_BACKGROUND, DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH, ToolSettings,
)
from paint_qt.io.file_io import IMAGE_FILTER, save_bytes
from paint_qt.state.board_state import BoardState
from paint_qt.ui.toolbar import TOOL_ORDER, PaintToolbar

logger = logging.getLogger(__name__)

STATUS_TIMEOUT_MS = 3000


class PaintWindowQt(QtWidgets.QMainWindow):
    """Cửa sổ chính – điều phối state/ui/canvas, giữ QSettings & phím tắt."""

    def __init__(self, parent=None, settings: Optional[QtCore.QSettings] = None):
        super().__init__(parent)
        self.setWindowTitle("🎨 Bảng vẽ (Qt)")
        self.resize(1280, 900)

        # ---- settings ----
        self._settings = settings or QtCore.QSettings()
        width = int(self._settings.value("canvas/width", DEFAULT_CANVAS_WIDTH))
        height = int(self._settings.value("canvas/height", DEFAULT_CANVAS_HEIGHT))
        background = str(self._settings.value("canvas/background", DEFAULT_BACKGROUND))
        self.tool_settings = ToolSettings(parent=self)
        self.tool_settings.load(self._settings)

        # ---- state ----
        self.state = BoardState(width, height, background, self.tool_settings,
                                notify=self.notify, parent=self)

        # ---- UI ----
        self._build_ui()
        self._install_shortcuts()

    # ========== UI ==========
    def _build_ui(self):
        self.toolbar = PaintToolbar(self.tool_settings, self)
        self.addToolBar(self.toolbar)

        tb = self.toolbar
        tb.toolChanged.connect(self.state.set_tool)
        tb.settingChanged.connect(self._on_setting)
        tb.backgroundPicked.connect(self._on_background)
        tb.layerValueChanged.connect(lambda field, v: self.state.update_layer(**{field: v}))
        tb.requestUndo.connect(self.state.undo)
        tb.requestRedo.connect(self.state.redo)
        tb.requestInsertImage.connect(self.insert_image_from_file)
        tb.requestDeleteImage.connect(self.state.remove_selected_layer)
        tb.requestFlipH.connect(self.state.flip_horizontal)
        tb.requestFlipV.connect(self.state.flip_vertical)
        tb.requestResetTransform.connect(self.state.reset_transform)
        tb.requestToggleGrid.connect(self.state.toggle_grid)
        tb.requestClear.connect(self.state.clear_canvas)
        tb.requestClearLayers.connect(self.state.clear_all_layers)
        tb.requestExport.connect(self.export_dialog)

        self.state.history.changed.connect(tb.set_history_state)
        self.state.tool_changed.connect(tb.reflect_tool)
        self.state.changed.connect(self._sync_layer_controls)
        tb.set_history_state(self.state.history.can_undo(), self.state.history.can_redo())

        self.canvas = CanvasWidget(self.state, self)
        self.setCentralWidget(self.canvas)
        self.statusBar()

    def _install_shortcuts(self):
        # Phím số 1–8 chọn công cụ
        self._tool_shortcuts = []
        for i, kind in enumerate(TOOL_ORDER, start=1):
            sc = QShortcut(QKeySequence(str(i)), self)
            sc.activated.connect(lambda k=kind: self.state.set_tool(k))
            self._tool_shortcuts.append(sc)

    def _sync_layer_controls(self):
        self.toolbar.reflect_layer(self.state.layers.selected)

    # ========== settings ==========
    def _on_setting(self, group: str, field: str, value):
        self.tool_settings.update(group, **{field: value})
        self.tool_settings.save(self._settings)

    def _on_background(self, color: str):
        self.state.set_background_color(color)
        self._settings.setValue("canvas/background", color)

    # ========== notifications ==========
    def notify(self, kind: str, message: str):
        if kind == "error":
            QtWidgets.QMessageBox.critical(self, "Bảng vẽ", message)
        elif kind == "warning":
            logger.warning(message)
            QtWidgets.QMessageBox.warning(self, "Bảng vẽ", message)
        else:
            self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)

    # ========== images ==========
    def insert_image_from_file(self):
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Chọn ảnh", "", IMAGE_FILTER)
        if not path:
            return
        self.state.insert_image_file(path)

    # ========== export ==========
    def export_dialog(self):
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Xuất PNG", "drawing.png", "PNG (*.png)")
        if not path:
            return
        if not path.lower().endswith(".png"):
            path += ".png"
        try:
            save_bytes(path, self.state.export_png())
        except OSError as e:
            logger.exception("Export failed")
            self.notify("error", f"Không lưu được ảnh: {e}")
            return
        self.notify("info", f"Đã xuất {path}")

    def closeEvent(self, e):
        self.state.history.flush()
        self.tool_settings.save(self._settings)
        super().closeEvent(e)
