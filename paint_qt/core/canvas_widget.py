# paint_qt/core/canvas_widget.py
from __future__ import annotations
import logging

from PySide6 import QtCore, QtGui, QtWidgets
from PySide6.QtCore import QPointF, QRectF, QSize, QSizeF, Qt
from PySide6.QtGui import QPainter

from paint_qt.core.coordinate_mapper import CoordinateMapper

logger = logging.getLogger(__name__)

ARROW_KEYS = {
    Qt.Key_Left: (-1, 0),
    Qt.Key_Right: (1, 0),
    Qt.Key_Up: (0, -1),
    Qt.Key_Down: (0, 1),
}


class CanvasWidget(QtWidgets.QWidget):
    """Canvas: vẽ raster + lớp ảnh + preview, đổi toạ độ sự kiện rồi chuyển cho BoardState."""

    def __init__(self, state, parent=None):
        super().__init__(parent)
        self.state = state
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.setMinimumSize(200, 150)

        # Gộp các lần update khi kéo chuột (~60 FPS)
        self._paint_throttle_ms = 16
        self._paint_timer = QtCore.QTimer(self)
        self._paint_timer.setSingleShot(True)
        self._paint_timer.timeout.connect(self.update)

        self.state.changed.connect(self.optimized_update)

    # ---- geometry ----
    def sizeHint(self) -> QSize:
        return QSize(self.state.surface.width, self.state.surface.height)

    def display_rect(self) -> QRectF:
        """Where the raster is shown: scaled to fit, aspect kept, centered."""
        sw, sh = self.state.surface.width, self.state.surface.height
        ww, wh = max(1, self.width()), max(1, self.height())
        ratio = min(ww / sw, wh / sh)
        dw, dh = sw * ratio, sh * ratio
        return QRectF((ww - dw) / 2.0, (wh - dh) / 2.0, dw, dh)

    def map_event(self, e) -> QPointF:
        return CoordinateMapper.map(e, self.display_rect(), self.state.surface.size())

    def resizeEvent(self, e: QtGui.QResizeEvent):
        r = self.display_rect()
        self.state.display_size = QSizeF(r.width(), r.height())
        super().resizeEvent(e)

    # ---- paint ----
    def paintEvent(self, e: QtGui.QPaintEvent):
        p = QPainter(self)
        p.fillRect(self.rect(), QtGui.QColor("#2B2B2B"))
        r = self.display_rect()
        p.translate(r.topLeft())
        p.scale(r.width() / self.state.surface.width, r.height() / self.state.surface.height)
        p.setRenderHint(QPainter.Antialiasing, True)
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)
        p.setClipRect(self.state.surface.rect())
        try:
            self.state.render(p)
        except Exception:
            logger.exception("Lỗi khi vẽ canvas (tool %s)", self.state.tool.value)
        p.end()

    def optimized_update(self):
        if not self._paint_timer.isActive():
            self._paint_timer.start(self._paint_throttle_ms)

    # ---- mouse / tablet ----
    def mousePressEvent(self, e: QtGui.QMouseEvent):
        if e.button() != Qt.LeftButton:
            return super().mousePressEvent(e)
        self.setFocus()
        self.state.pointer_down(self.map_event(e))
        self._apply_cursor(self.map_event(e))

    def mouseMoveEvent(self, e: QtGui.QMouseEvent):
        point = self.map_event(e)
        self.state.pointer_move(point)
        self._apply_cursor(point)

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent):
        if e.button() != Qt.LeftButton:
            return super().mouseReleaseEvent(e)
        point = self.map_event(e)
        self.state.pointer_up(point)
        self._apply_cursor(point)

    def leaveEvent(self, e: QtCore.QEvent):
        self.state.pointer_leave()
        self.unsetCursor()
        super().leaveEvent(e)

    # ---- touch: chỉ dùng điểm chạm đầu tiên ----
    def event(self, e: QtCore.QEvent) -> bool:
        t = e.type()
        if t == QtCore.QEvent.TouchBegin:
            self.state.pointer_down(self.map_event(e))
            e.accept()
            return True
        if t == QtCore.QEvent.TouchUpdate:
            self.state.pointer_move(self.map_event(e))
            e.accept()
            return True
        if t in (QtCore.QEvent.TouchEnd, QtCore.QEvent.TouchCancel):
            self.state.pointer_up(self.map_event(e) if t == QtCore.QEvent.TouchEnd else None)
            e.accept()
            return True
        return super().event(e)

    def _apply_cursor(self, point: QPointF):
        self.setCursor(self.state.cursor_for(point))

    # ---- keyboard ----
    def keyPressEvent(self, e: QtGui.QKeyEvent):
        key = e.key()
        if self.state.is_image_mode and key in ARROW_KEYS:
            dx, dy = ARROW_KEYS[key]
            self.state.nudge(dx, dy)
            return
        if self.state.is_image_mode and key in (Qt.Key_Delete, Qt.Key_Backspace):
            self.state.remove_selected_layer()
            return
        super().keyPressEvent(e)
