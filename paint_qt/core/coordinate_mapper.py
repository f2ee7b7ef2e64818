# paint_qt/core/coordinate_mapper.py
"""Screen → canvas pixel coordinates (mouse, tablet and touch)."""
from __future__ import annotations
from typing import Optional, Union

from PySide6.QtCore import QPointF, QRectF, QSize, QSizeF

SizeLike = Union[QSize, QSizeF, tuple]


def _event_position(event) -> Optional[QPointF]:
    """Widget-relative position of the primary contact, or None."""
    if event is None:
        return None
    if isinstance(event, QPointF):
        return QPointF(event)
    if isinstance(event, (tuple, list)) and len(event) >= 2:
        return QPointF(float(event[0]), float(event[1]))

    # Touch: chọn điểm chạm đầu tiên
    points = getattr(event, "points", None)
    if callable(points):
        try:
            pts = points()
        except (RuntimeError, TypeError):
            pts = []
        if pts:
            return QPointF(pts[0].position())
        if not hasattr(event, "position"):
            return None

    position = getattr(event, "position", None)
    if callable(position):
        try:
            return QPointF(position())
        except (RuntimeError, TypeError):
            return None
    pos = getattr(event, "pos", None)
    if callable(pos):
        try:
            return QPointF(pos())
        except (RuntimeError, TypeError):
            return None
    return None


def _size_wh(size: SizeLike) -> tuple:
    if isinstance(size, (tuple, list)):
        return float(size[0]), float(size[1])
    return float(size.width()), float(size.height())


class CoordinateMapper:
    """Maps pointer events to backing-store pixels.

    `display_rect` is where the raster is drawn inside the widget;
    `backing_size` is the raster resolution. Never raises.
    """

    @staticmethod
    def map(event, display_rect: QRectF, backing_size: SizeLike) -> QPointF:
        pos = _event_position(event)
        if pos is None:
            return QPointF(0.0, 0.0)
        try:
            bw, bh = _size_wh(backing_size)
            rect = QRectF(display_rect)
        except (TypeError, ValueError, AttributeError, IndexError):
            return QPointF(pos)
        scale_x = bw / rect.width() if rect.width() > 0 and bw > 0 else 1.0
        scale_y = bh / rect.height() if rect.height() > 0 and bh > 0 else 1.0
        return QPointF((pos.x() - rect.left()) * scale_x,
                       (pos.y() - rect.top()) * scale_y)

    @staticmethod
    def to_display(point: QPointF, display_rect: QRectF, backing_size: SizeLike) -> QPointF:
        """Inverse mapping, canvas pixel → widget position."""
        bw, bh = _size_wh(backing_size)
        rect = QRectF(display_rect)
        sx = rect.width() / bw if bw > 0 else 1.0
        sy = rect.height() / bh if bh > 0 else 1.0
        return QPointF(rect.left() + point.x() * sx, rect.top() + point.y() * sy)
