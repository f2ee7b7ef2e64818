# paint_qt/core/layer_manager.py
"""
Image Layer Manager - quản lý các ảnh đặt trên canvas
Thêm / chọn / di chuyển / đổi kích thước / xoay / lật, hit-test theo khung toạ độ cục bộ
"""
from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, QSizeF, Qt
from PySide6.QtGui import QBrush, QColor, QFont, QImage, QPainter, QPen

from paint_qt.core.data_models import (
    GestureMode, Handle, ImageLayer, TransformSession,
)

logger = logging.getLogger(__name__)


# ========== CONSTANTS ==========

HANDLE_SIZE = 8
HANDLE_SLACK = 8            # vùng bắt điểm rộng hơn handle để dễ click
ROTATE_DISTANCE = 25
MIN_LAYER_SIZE = 20.0
SELECTION_COLOR = "#007ACC"
ROTATE_HANDLE_COLOR = "#FF6B35"

ROTATE_HANDLES = (Handle.ROTATE_NW, Handle.ROTATE_NE, Handle.ROTATE_SW, Handle.ROTATE_SE)
CORNER_HANDLES = (Handle.NW, Handle.NE, Handle.SW, Handle.SE)
EDGE_HANDLES = (Handle.N, Handle.S, Handle.W, Handle.E)

_CURSORS = {
    Handle.NW: Qt.SizeFDiagCursor, Handle.SE: Qt.SizeFDiagCursor,
    Handle.NE: Qt.SizeBDiagCursor, Handle.SW: Qt.SizeBDiagCursor,
    Handle.N: Qt.SizeVerCursor, Handle.S: Qt.SizeVerCursor,
    Handle.W: Qt.SizeHorCursor, Handle.E: Qt.SizeHorCursor,
}


def normalize_degrees(value: float) -> float:
    r = math.fmod(float(value), 360.0)
    if r < 0:
        r += 360.0
    return 0.0 if r >= 360.0 else r


def handle_positions(width: float, height: float,
                     rotate_distance: float = ROTATE_DISTANCE) -> Dict[Handle, QPointF]:
    """Handle centers in the layer's local frame (origin at the layer center)."""
    l, r = -width / 2.0, width / 2.0
    t, b = -height / 2.0, height / 2.0
    d = rotate_distance
    return {
        Handle.ROTATE_NW: QPointF(l - d, t - d),
        Handle.ROTATE_NE: QPointF(r + d, t - d),
        Handle.ROTATE_SW: QPointF(l - d, b + d),
        Handle.ROTATE_SE: QPointF(r + d, b + d),
        Handle.NW: QPointF(l, t),
        Handle.NE: QPointF(r, t),
        Handle.SW: QPointF(l, b),
        Handle.SE: QPointF(r, b),
        Handle.N: QPointF(0.0, t),
        Handle.S: QPointF(0.0, b),
        Handle.W: QPointF(l, 0.0),
        Handle.E: QPointF(r, 0.0),
    }


class ImageLayerManager:
    """Owns the ordered image layers (later = on top) and the pointer gesture session."""

    def __init__(self, canvas_size: QSizeF, min_size: float = MIN_LAYER_SIZE,
                 handle_size: float = HANDLE_SIZE, handle_slack: float = HANDLE_SLACK,
                 rotate_distance: float = ROTATE_DISTANCE):
        self.canvas_size = QSizeF(canvas_size)
        self.min_size = float(min_size)
        self.handle_size = float(handle_size)
        self.handle_slack = float(handle_slack)
        self.rotate_distance = float(rotate_distance)
        self.layers: List[ImageLayer] = []
        self.session: Optional[TransformSession] = None

    # ---- lookup ----
    def __len__(self) -> int:
        return len(self.layers)

    @property
    def selected(self) -> Optional[ImageLayer]:
        for layer in self.layers:
            if layer.selected:
                return layer
        return None

    def layer_by_id(self, layer_id: int) -> Optional[ImageLayer]:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    # ========== PLACEMENT ==========

    def add_layer(self, source: QImage, natural_size: Optional[QSizeF] = None,
                  display_size: Optional[QSizeF] = None, name: str = "") -> ImageLayer:
        """Fit inside half the displayed canvas (keeping aspect), center, put on top, select."""
        if natural_size is None:
            natural_size = QSizeF(source.size())
        w, h = float(natural_size.width()), float(natural_size.height())
        shown = QSizeF(display_size) if display_size is not None else self.canvas_size
        max_w, max_h = shown.width() * 0.5, shown.height() * 0.5
        if w > 0 and h > 0 and (w > max_w or h > max_h):
            ratio = min(max_w / w, max_h / h)
            w, h = w * ratio, h * ratio
        layer = ImageLayer(
            source=source,
            x=(self.canvas_size.width() - w) / 2.0,
            y=(self.canvas_size.height() - h) / 2.0,
            width=w, height=h,
            original_width=w, original_height=h,
            name=name,
        )
        self.layers.append(layer)
        self.select(layer)
        logger.info("Image layer %d added (%s, %.0fx%.0f)", layer.id, name or "untitled", w, h)
        return layer

    def select(self, layer: Optional[ImageLayer]) -> None:
        for other in self.layers:
            other.selected = other is layer

    def deselect_all(self) -> None:
        self.select(None)

    def remove_selected(self) -> bool:
        layer = self.selected
        if layer is None:
            return False
        self.layers.remove(layer)
        self.session = None
        logger.info("Image layer %d removed", layer.id)
        return True

    def clear_all(self) -> None:
        self.layers.clear()
        self.session = None

    # ========== HIT TESTING ==========

    def select_at(self, point: QPointF) -> Optional[ImageLayer]:
        """Topmost layer containing `point` (tested in each layer's local frame)."""
        for layer in reversed(self.layers):
            if layer.contains(point):
                return layer
        return None

    def handle_at(self, point: QPointF, layer: ImageLayer) -> Optional[Handle]:
        """Rotate handles win over corner handles, corners over edge midpoints."""
        local = layer.to_local(point)
        radius = self.handle_size + self.handle_slack
        positions = handle_positions(layer.width, layer.height, self.rotate_distance)
        for group in (ROTATE_HANDLES, CORNER_HANDLES, EDGE_HANDLES):
            for handle in group:
                c = positions[handle]
                if math.hypot(local.x() - c.x(), local.y() - c.y()) <= radius:
                    return handle
        return None

    def cursor_for(self, point: QPointF) -> Qt.CursorShape:
        selected = self.selected
        if self.session is not None:
            if self.session.mode is GestureMode.ROTATE:
                return Qt.ClosedHandCursor
            if self.session.mode is GestureMode.MOVE:
                return Qt.SizeAllCursor
            return _CURSORS.get(self.session.handle, Qt.ArrowCursor)
        if selected is not None:
            handle = self.handle_at(point, selected)
            if handle is not None:
                return Qt.OpenHandCursor if handle.is_rotate else _CURSORS[handle]
            if self.select_at(point) is selected:
                return Qt.SizeAllCursor
            return Qt.ArrowCursor
        return Qt.PointingHandCursor if self.select_at(point) is not None else Qt.ArrowCursor

    # ========== GESTURES ==========

    def _start_session(self, layer: ImageLayer, point: QPointF, handle: Optional[Handle]) -> TransformSession:
        if handle is None:
            mode = GestureMode.MOVE
        else:
            mode = GestureMode.ROTATE if handle.is_rotate else GestureMode.RESIZE
        self.session = TransformSession(
            mode=mode,
            layer_id=layer.id,
            start=QPointF(point),
            original=layer.geometry(),
            handle=handle,
            drag_offset=QPointF(point.x() - layer.x, point.y() - layer.y),
        )
        logger.debug("Gesture %s on layer %d (handle %s)", mode.value, layer.id,
                     handle.value if handle else "-")
        return self.session

    def pointer_down(self, point: QPointF) -> Optional[GestureMode]:
        """Start a rotate/resize/move session, or deselect everything on empty canvas."""
        self.session = None
        current = self.selected
        if current is not None:
            handle = self.handle_at(point, current)
            if handle is not None:
                return self._start_session(current, point, handle).mode

        hit = self.select_at(point)
        if hit is None:
            self.deselect_all()
            return None
        self.select(hit)
        return self._start_session(hit, point, self.handle_at(point, hit)).mode

    def pointer_move(self, point: QPointF) -> bool:
        session = self.session
        if session is None:
            return False
        layer = self.layer_by_id(session.layer_id)
        if layer is None:
            self.session = None
            return False
        if session.mode is GestureMode.ROTATE:
            layer.rotation = self._rotated(session, point)
        elif session.mode is GestureMode.RESIZE:
            x, y, w, h = self._resized(layer, session, point)
            layer.x, layer.y, layer.width, layer.height = x, y, w, h
            if layer.original_width > 0:
                layer.scale = round(w / layer.original_width * 100.0, 1)
        else:
            layer.x, layer.y = self._moved(layer, session, point)
        return True

    def pointer_up(self, point: Optional[QPointF] = None) -> bool:
        ended = self.session is not None
        self.session = None
        return ended

    # ---- gesture math ----
    @staticmethod
    def _rotated(session: TransformSession, point: QPointF) -> float:
        c = session.original.center
        start = math.atan2(session.start.y() - c.y(), session.start.x() - c.x())
        current = math.atan2(point.y() - c.y(), point.x() - c.x())
        return normalize_degrees(session.original.rotation + math.degrees(current - start))

    def _resized(self, layer: ImageLayer, session: TransformSession,
                 point: QPointF) -> Tuple[float, float, float, float]:
        """New x, y, width, height; the edge/corner opposite the handle stays put."""
        o = session.original
        # delta in the layer's local frame
        dx = point.x() - session.start.x()
        dy = point.y() - session.start.y()
        a = -math.radians(o.rotation)
        ldx = dx * math.cos(a) - dy * math.sin(a)
        ldy = dx * math.sin(a) + dy * math.cos(a)
        if layer.flip_horizontal:
            ldx = -ldx
        if layer.flip_vertical:
            ldy = -ldy

        left, right = -o.width / 2.0, o.width / 2.0
        top, bottom = -o.height / 2.0, o.height / 2.0
        edges = session.handle.edges if session.handle else ""
        if "w" in edges:
            left = min(left + ldx, right - self.min_size)
        if "e" in edges:
            right = max(right + ldx, left + self.min_size)
        if "n" in edges:
            top = min(top + ldy, bottom - self.min_size)
        if "s" in edges:
            bottom = max(bottom + ldy, top + self.min_size)

        w = max(self.min_size, right - left)
        h = max(self.min_size, bottom - top)
        ox, oy = layer.local_vector_to_canvas((left + right) / 2.0, (top + bottom) / 2.0)
        c = o.center
        cx, cy = c.x() + ox, c.y() + oy
        return cx - w / 2.0, cy - h / 2.0, w, h

    def _moved(self, layer: ImageLayer, session: TransformSession, point: QPointF) -> Tuple[float, float]:
        x = point.x() - session.drag_offset.x()
        y = point.y() - session.drag_offset.y()
        x = max(0.0, min(x, self.canvas_size.width() - layer.width))
        y = max(0.0, min(y, self.canvas_size.height() - layer.height))
        return x, y

    # ========== PROGRAMMATIC TRANSFORM ==========

    def update_transform(self, layer: Optional[ImageLayer] = None, **fields) -> bool:
        """Apply scale / rotation / opacity / flips / position to a layer (default: selected).

        scale (percent) resizes from the original size around the current center.
        """
        layer = layer or self.selected
        if layer is None:
            return False
        unknown = set(fields) - {"scale", "rotation", "opacity", "flip_horizontal",
                                 "flip_vertical", "x", "y", "width", "height"}
        if unknown:
            logger.warning("Ignoring unknown layer fields: %s", ", ".join(sorted(unknown)))
            return False

        if "scale" in fields:
            scale = max(1.0, float(fields["scale"]))
            c = layer.center
            w = max(self.min_size, layer.original_width * scale / 100.0)
            h = max(self.min_size, layer.original_height * scale / 100.0)
            layer.scale, layer.width, layer.height = scale, w, h
            layer.x, layer.y = c.x() - w / 2.0, c.y() - h / 2.0
        if "width" in fields:
            layer.width = max(self.min_size, float(fields["width"]))
        if "height" in fields:
            layer.height = max(self.min_size, float(fields["height"]))
        if "x" in fields:
            layer.x = float(fields["x"])
        if "y" in fields:
            layer.y = float(fields["y"])
        if "rotation" in fields:
            layer.rotation = normalize_degrees(fields["rotation"])
        if "opacity" in fields:
            layer.opacity = max(0.0, min(100.0, float(fields["opacity"])))
        if "flip_horizontal" in fields:
            layer.flip_horizontal = bool(fields["flip_horizontal"])
        if "flip_vertical" in fields:
            layer.flip_vertical = bool(fields["flip_vertical"])
        return True

    def flip_horizontal(self) -> bool:
        layer = self.selected
        return layer is not None and self.update_transform(layer, flip_horizontal=not layer.flip_horizontal)

    def flip_vertical(self) -> bool:
        layer = self.selected
        return layer is not None and self.update_transform(layer, flip_vertical=not layer.flip_vertical)

    def reset_transform(self) -> bool:
        return self.update_transform(scale=100, rotation=0, opacity=100,
                                     flip_horizontal=False, flip_vertical=False)

    def nudge_selected(self, dx: float, dy: float) -> bool:
        """Arrow-key move, clamped to the canvas."""
        layer = self.selected
        if layer is None:
            return False
        layer.x = max(0.0, min(layer.x + dx, self.canvas_size.width() - layer.width))
        layer.y = max(0.0, min(layer.y + dy, self.canvas_size.height() - layer.height))
        return True

    # ========== RENDER ==========

    def draw(self, p: QPainter, with_handles: bool = True) -> None:
        for layer in self.layers:
            self.draw_layer(p, layer)
            if with_handles and layer.selected:
                self.draw_selection(p, layer)

    def draw_layer(self, p: QPainter, layer: ImageLayer) -> None:
        p.save()
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)
        p.setOpacity(layer.opacity / 100.0)
        p.setTransform(layer.transform(), True)
        p.drawImage(layer.local_rect(), layer.source)
        p.restore()

    def draw_selection(self, p: QPainter, layer: ImageLayer) -> None:
        """Dashed outline + handles, in the same local frame as the image."""
        p.save()
        p.setRenderHint(QPainter.Antialiasing, True)
        p.setTransform(layer.transform(), True)

        outline = QPen(QColor(SELECTION_COLOR), 2, Qt.DashLine)
        outline.setDashPattern([2.5, 2.5])   # 5px dash with a 2px pen
        p.setPen(outline)
        p.setBrush(Qt.NoBrush)
        p.drawRect(layer.local_rect())

        s = self.handle_size
        positions = handle_positions(layer.width, layer.height, self.rotate_distance)
        p.setPen(QPen(Qt.white, 2))
        p.setBrush(QBrush(QColor(SELECTION_COLOR)))
        for handle in CORNER_HANDLES + EDGE_HANDLES:
            c = positions[handle]
            p.drawRect(QRectF(c.x() - s / 2.0, c.y() - s / 2.0, s, s))

        p.setBrush(QBrush(QColor(ROTATE_HANDLE_COLOR)))
        font = QFont()
        font.setPixelSize(12)
        p.setFont(font)
        for handle in ROTATE_HANDLES:
            c = positions[handle]
            radius = s / 2.0 + 2.0
            p.setPen(QPen(Qt.white, 2))
            p.drawEllipse(c, radius, radius)
            p.setPen(Qt.white)
            p.drawText(QRectF(c.x() - radius * 2, c.y() - radius * 2, radius * 4, radius * 4),
                       Qt.AlignCenter, "↻")
        p.restore()
