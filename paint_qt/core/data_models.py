from __future__ import annotations
import itertools
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QImage, QTransform


class ToolKind(str, Enum):
    """Closed set of tools. IMAGE is the image-layer interaction mode, not a drawing tool."""
    BRUSH = "brush"
    ERASER = "eraser"
    BUCKET = "bucket"
    LINE = "line"
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    TRIANGLE = "triangle"
    IMAGE = "image"

    @property
    def is_drawing(self) -> bool:
        return self is not ToolKind.IMAGE

    @property
    def is_shape(self) -> bool:
        return self in (ToolKind.LINE, ToolKind.RECTANGLE, ToolKind.ELLIPSE, ToolKind.TRIANGLE)


TOOL_DISPLAY_NAMES = {
    ToolKind.BRUSH: "🖌️ Brush",
    ToolKind.ERASER: "🧽 Eraser",
    ToolKind.BUCKET: "🪣 Bucket",
    ToolKind.LINE: "📏 Line",
    ToolKind.RECTANGLE: "⬜ Rectangle",
    ToolKind.ELLIPSE: "⭕ Ellipse",
    ToolKind.TRIANGLE: "🔺 Triangle",
    ToolKind.IMAGE: "🖼️ Image",
}


class GestureMode(str, Enum):
    MOVE = "move"
    RESIZE = "resize"
    ROTATE = "rotate"


class Handle(str, Enum):
    """Handles of a selected layer, named in the layer's local (unrotated, unflipped) frame."""
    ROTATE_NW = "rotate-nw"
    ROTATE_NE = "rotate-ne"
    ROTATE_SW = "rotate-sw"
    ROTATE_SE = "rotate-se"
    NW = "nw-resize"
    NE = "ne-resize"
    SW = "sw-resize"
    SE = "se-resize"
    N = "n-resize"
    S = "s-resize"
    W = "w-resize"
    E = "e-resize"

    @property
    def is_rotate(self) -> bool:
        return self.value.startswith("rotate")

    @property
    def edges(self) -> str:
        """Edges moved by a resize handle, as a subset of 'nswe'."""
        if self.is_rotate:
            return ""
        return self.value.split("-")[0]


_layer_ids = itertools.count(1)


@dataclass(eq=False)
class ImageLayer:
    """Ảnh đặt trên canvas, biến đổi không phá huỷ (non-destructive)."""
    source: QImage
    x: float
    y: float
    width: float
    height: float
    original_width: float
    original_height: float
    name: str = ""
    scale: float = 100.0            # percent of original size
    rotation: float = 0.0           # degrees, [0, 360)
    opacity: float = 100.0          # percent
    flip_horizontal: bool = False
    flip_vertical: bool = False
    selected: bool = False
    id: int = field(default_factory=lambda: next(_layer_ids))

    # ---- geometry ----
    @property
    def center(self) -> QPointF:
        return QPointF(self.x + self.width / 2.0, self.y + self.height / 2.0)

    def local_rect(self) -> QRectF:
        return QRectF(-self.width / 2.0, -self.height / 2.0, self.width, self.height)

    def transform(self) -> QTransform:
        """Local frame → canvas: translate to center, rotate, then flip.

        Drawing and hit-testing both go through this convention.
        """
        t = QTransform()
        t.translate(self.x + self.width / 2.0, self.y + self.height / 2.0)
        t.rotate(self.rotation)
        t.scale(-1.0 if self.flip_horizontal else 1.0, -1.0 if self.flip_vertical else 1.0)
        return t

    def to_local(self, point: QPointF) -> QPointF:
        """Inverse of transform(): subtract center, rotate by -rotation, undo flips."""
        c = self.center
        lx = point.x() - c.x()
        ly = point.y() - c.y()
        if self.rotation:
            a = -math.radians(self.rotation)
            cos_a, sin_a = math.cos(a), math.sin(a)
            lx, ly = lx * cos_a - ly * sin_a, lx * sin_a + ly * cos_a
        if self.flip_horizontal:
            lx = -lx
        if self.flip_vertical:
            ly = -ly
        return QPointF(lx, ly)

    def local_vector_to_canvas(self, dx: float, dy: float) -> Tuple[float, float]:
        """Map a local-frame offset to a canvas offset (flip, then rotate)."""
        if self.flip_horizontal:
            dx = -dx
        if self.flip_vertical:
            dy = -dy
        a = math.radians(self.rotation)
        cos_a, sin_a = math.cos(a), math.sin(a)
        return dx * cos_a - dy * sin_a, dx * sin_a + dy * cos_a

    def contains(self, point: QPointF) -> bool:
        p = self.to_local(point)
        hw, hh = self.width / 2.0, self.height / 2.0
        return -hw <= p.x() <= hw and -hh <= p.y() <= hh

    def geometry(self) -> "LayerGeometry":
        return LayerGeometry(self.x, self.y, self.width, self.height, self.rotation)


@dataclass(frozen=True)
class LayerGeometry:
    """Snapshot of the mutable transform fields, taken at gesture start."""
    x: float
    y: float
    width: float
    height: float
    rotation: float

    @property
    def center(self) -> QPointF:
        return QPointF(self.x + self.width / 2.0, self.y + self.height / 2.0)


@dataclass(frozen=True)
class TransformSession:
    """Exists only while a pointer is down on a layer; cleared on release."""
    mode: GestureMode
    layer_id: int
    start: QPointF
    original: LayerGeometry
    handle: Optional[Handle] = None
    drag_offset: QPointF = field(default_factory=QPointF)
