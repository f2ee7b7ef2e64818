# paint_qt/tools/dispatcher.py
from __future__ import annotations
import logging
from typing import Dict, Optional

from PySide6.QtCore import QPointF
from PySide6.QtGui import QPainter

from paint_qt.core.data_models import ToolKind
from paint_qt.core.settings import ToolSettings
from paint_qt.core.tool_api import Tool
from paint_qt.tools.brush_tool import BrushTool, EraserTool
from paint_qt.tools.bucket_tool import BucketTool
from paint_qt.tools.shape_tool import EllipseTool, LineTool, RectangleTool, TriangleTool

logger = logging.getLogger(__name__)

TOOL_CLASSES = {
    ToolKind.BRUSH: BrushTool,
    ToolKind.ERASER: EraserTool,
    ToolKind.BUCKET: BucketTool,
    ToolKind.LINE: LineTool,
    ToolKind.RECTANGLE: RectangleTool,
    ToolKind.ELLIPSE: EllipseTool,
    ToolKind.TRIANGLE: TriangleTool,
}


class ToolDispatcher:
    """Giữ đúng một công cụ đang hoạt động và chuyển tiếp begin/continue/end cho nó.

    In IMAGE mode there is no drawing tool; pointer input belongs to the layer manager.
    """

    def __init__(self, surface, settings: ToolSettings, history=None,
                 initial: ToolKind = ToolKind.BRUSH):
        self.surface = surface
        self.settings = settings
        self.history = history
        self._tools: Dict[ToolKind, Tool] = {k: cls(surface, settings) for k, cls in TOOL_CLASSES.items()}
        self._kind: ToolKind = ToolKind.IMAGE
        self.set_tool(initial)

    # ---- selection ----
    @property
    def kind(self) -> ToolKind:
        return self._kind

    @property
    def current(self) -> Optional[Tool]:
        return self._tools.get(self._kind)

    @property
    def is_image_mode(self) -> bool:
        return self._kind is ToolKind.IMAGE

    def tool(self, kind: ToolKind) -> Tool:
        return self._tools[kind]

    def set_tool(self, kind) -> bool:
        """Activate `kind`; an in-flight stroke of the previous tool is committed first."""
        kind = ToolKind(kind)
        if kind is self._kind and (self.current is not None or kind is ToolKind.IMAGE):
            return False
        previous = self.current
        if previous is not None:
            if previous.stroke_active:
                self.end_stroke(previous.last_point)
            previous.on_deactivate()
        self._kind = kind
        if self.current is not None:
            self.current.on_activate()
        logger.debug("Tool switched to %s", kind.value)
        return True

    # ---- stroke ----
    @property
    def stroke_active(self) -> bool:
        tool = self.current
        return bool(tool and tool.stroke_active)

    def begin_stroke(self, point: QPointF) -> bool:
        tool = self.current
        if tool is None:
            return False
        tool.begin_stroke(point)
        return True

    def continue_stroke(self, point: QPointF) -> bool:
        tool = self.current
        if tool is None or not tool.stroke_active:
            return False
        tool.continue_stroke(point)
        return True

    def end_stroke(self, point: Optional[QPointF] = None) -> bool:
        tool = self.current
        if tool is None or not tool.end_stroke(point):
            return False
        if self.history is not None:
            self.history.snapshot()
        return True

    def paint_overlay(self, p: QPainter):
        tool = self.current
        if tool is not None:
            tool.paint_overlay(p)
