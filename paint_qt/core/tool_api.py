# paint_qt/core/tool_api.py
from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QPointF
from PySide6.QtGui import QPainter

from paint_qt.core.data_models import ToolKind


class Tool:
    """Stroke lifecycle shared by every drawing tool: begin → continue* → end.

    continue/end without a begin are ignored. Subclasses implement the _on_* hooks.
    """

    kind: ToolKind

    def __init__(self, surface, settings):
        self.surface = surface          # DrawingSurface
        self.settings = settings        # ToolSettings, đọc lúc vẽ
        self._active = False
        self._last: Optional[QPointF] = None

    @property
    def stroke_active(self) -> bool:
        return self._active

    @property
    def last_point(self) -> Optional[QPointF]:
        return self._last

    # ---- activation ----
    def on_activate(self): ...

    def on_deactivate(self):
        self._reset()

    # ---- stroke ----
    def begin_stroke(self, point: QPointF) -> None:
        if self._active:
            self.end_stroke(self._last or point)
        self._active = True
        self._last = QPointF(point)
        self._on_begin(QPointF(point))

    def continue_stroke(self, point: QPointF) -> None:
        if not self._active:
            return
        self._on_continue(QPointF(point))
        self._last = QPointF(point)

    def end_stroke(self, point: Optional[QPointF] = None) -> bool:
        """Finish the stroke. Returns False if no stroke was in progress."""
        if not self._active:
            return False
        end = QPointF(point) if point is not None else QPointF(self._last)
        try:
            self._on_end(end)
        finally:
            self._reset()
        return True

    def _reset(self):
        self._active = False
        self._last = None

    # ---- hooks ----
    def _on_begin(self, point: QPointF): ...
    def _on_continue(self, point: QPointF): ...
    def _on_end(self, point: QPointF): ...

    def paint_overlay(self, p: QPainter):
        """Preview drawn above the raster (canvas coordinates)."""
