# paint_qt/tools/shape_tool.py
from __future__ import annotations
from typing import List, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QImage, QPainter, QPen, QPolygonF

from paint_qt.core.colors import to_qcolor
from paint_qt.core.data_models import ToolKind
from paint_qt.core.tool_api import Tool


class ShapeTool(Tool):
    """Công cụ hình: begin ghim điểm neo, continue vẽ preview lên lớp phủ riêng,
    end vẽ hình cuối cùng lên raster bằng cùng hàm vẽ rồi bỏ lớp phủ."""

    kind: ToolKind

    def __init__(self, surface, settings):
        super().__init__(surface, settings)
        self._anchor: Optional[QPointF] = None
        self._preview: Optional[QImage] = None

    @property
    def anchor(self) -> Optional[QPointF]:
        return self._anchor

    @property
    def preview(self) -> Optional[QImage]:
        return self._preview

    def _reset(self):
        super()._reset()
        self._anchor = None
        self._preview = None

    # ---- lifecycle ----
    def _on_begin(self, point: QPointF):
        self._anchor = QPointF(point)
        self._preview = QImage(self.surface.size(), QImage.Format_ARGB32_Premultiplied)
        self._preview.fill(Qt.transparent)

    def _on_continue(self, point: QPointF):
        if self._preview is None:
            return
        self._preview.fill(Qt.transparent)
        p = QPainter(self._preview)
        p.setRenderHint(QPainter.Antialiasing, True)
        self.draw_shape(p, self._anchor, point)
        p.end()

    def _on_end(self, point: QPointF):
        p = self.surface.painter()
        p.setCompositionMode(QPainter.CompositionMode_SourceOver)
        self.draw_shape(p, self._anchor, point)
        p.end()

    def paint_overlay(self, p: QPainter):
        if self._preview is not None:
            p.drawImage(0, 0, self._preview)

    # ---- drawing ----
    def _stroke_pen(self) -> QPen:
        s = self.settings.shape
        pen = QPen(to_qcolor(s.stroke_color), s.stroke_width)
        pen.setJoinStyle(Qt.MiterJoin)
        return pen

    def _fill_brush(self):
        s = self.settings.shape
        return to_qcolor(s.fill_color) if s.fill_enabled else Qt.NoBrush

    def draw_shape(self, p: QPainter, start: QPointF, end: QPointF):
        raise NotImplementedError


class LineTool(ShapeTool):
    kind = ToolKind.LINE

    def draw_shape(self, p: QPainter, start: QPointF, end: QPointF):
        s = self.settings.shape
        p.setPen(QPen(to_qcolor(s.stroke_color), s.stroke_width, Qt.SolidLine, Qt.RoundCap, Qt.RoundJoin))
        p.setBrush(Qt.NoBrush)
        p.drawLine(start, end)


class RectangleTool(ShapeTool):
    kind = ToolKind.RECTANGLE

    def draw_shape(self, p: QPainter, start: QPointF, end: QPointF):
        p.setPen(self._stroke_pen())
        p.setBrush(self._fill_brush())
        p.drawRect(QRectF(start, end).normalized())


class EllipseTool(ShapeTool):
    kind = ToolKind.ELLIPSE

    def draw_shape(self, p: QPainter, start: QPointF, end: QPointF):
        p.setPen(self._stroke_pen())
        p.setBrush(self._fill_brush())
        p.drawEllipse(QRectF(start, end).normalized())


def triangle_points(start: QPointF, end: QPointF) -> List[QPointF]:
    """Apex at the top-middle of the drag box, base along the pointer's row."""
    return [
        QPointF(start.x() + (end.x() - start.x()) / 2.0, start.y()),
        QPointF(start.x(), end.y()),
        QPointF(end.x(), end.y()),
    ]


class TriangleTool(ShapeTool):
    kind = ToolKind.TRIANGLE

    def draw_shape(self, p: QPainter, start: QPointF, end: QPointF):
        p.setPen(self._stroke_pen())
        p.setBrush(self._fill_brush())
        p.drawPolygon(QPolygonF(triangle_points(start, end)))
