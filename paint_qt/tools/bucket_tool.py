# paint_qt/tools/bucket_tool.py
from __future__ import annotations
import logging

from PySide6.QtCore import QPointF

from paint_qt.core.data_models import ToolKind
from paint_qt.core.flood_fill import flood_fill
from paint_qt.core.tool_api import Tool

logger = logging.getLogger(__name__)


class BucketTool(Tool):
    """Đổ màu: chỉ tác động ở begin, dùng màu bút và dung sai (tolerance) hiện tại."""

    kind = ToolKind.BUCKET

    def __init__(self, surface, settings):
        super().__init__(surface, settings)
        self.last_fill_changed = False

    def _on_begin(self, point: QPointF):
        self.last_fill_changed = flood_fill(self.surface.image, point,
                                            self.settings.brush.color,
                                            self.settings.bucket.tolerance)
        if not self.last_fill_changed:
            logger.debug("Bucket at (%.1f, %.1f): nothing to fill", point.x(), point.y())
