# paint_qt/tools/brush_tool.py
from __future__ import annotations
import logging

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QPainter

from paint_qt.core.colors import normalize_opacity, to_qcolor
from paint_qt.core.data_models import ToolKind
from paint_qt.core.tool_api import Tool
from paint_qt.tools.brush_effects import BrushEffects, SoftStroke, hardness_profile

logger = logging.getLogger(__name__)


class BrushTool(Tool):
    """Bút vẽ tự do: nối đoạn thẳng từ điểm trước tới điểm hiện tại, đầu/khớp tròn."""

    kind = ToolKind.BRUSH

    def _profile(self) -> SoftStroke:
        b = self.settings.brush
        return hardness_profile(b.size, normalize_opacity(b.opacity), b.hardness)

    def _color(self) -> QColor:
        return to_qcolor(self.settings.brush.color, 1.0)

    def _on_begin(self, point: QPointF):
        self._stroke(point, point)

    def _on_continue(self, point: QPointF):
        self._stroke(self._last, point)

    def _stroke(self, start: QPointF, end: QPointF):
        profile = self._profile()
        p = self.surface.painter()
        p.setCompositionMode(QPainter.CompositionMode_SourceOver)
        BrushEffects.draw_segment(p, start, end, self._color(), profile)
        p.end()


class EraserTool(BrushTool):
    """Tẩy: cùng đường đi như bút nhưng trừ độ phủ (destination-out), rồi tô lại nền."""

    kind = ToolKind.ERASER

    def _color(self) -> QColor:
        return QColor(Qt.black)

    def _stroke(self, start: QPointF, end: QPointF):
        profile = self._profile()
        p = self.surface.painter()
        p.setCompositionMode(QPainter.CompositionMode_DestinationOut)
        BrushEffects.draw_segment(p, start, end, self._color(), profile)
        p.end()
        self.surface.repaint_background(BrushEffects.segment_bounds(start, end, profile))
