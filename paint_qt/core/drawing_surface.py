# paint_qt/core/drawing_surface.py
from __future__ import annotations
import logging
from typing import Optional

from PySide6 import QtCore
from PySide6.QtCore import QRectF, QSize, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen

from paint_qt.core.colors import ColorLike, to_qcolor
from paint_qt.core.errors import SurfaceError

logger = logging.getLogger(__name__)

GRID_SIZE = 20
GRID_COLOR = "#FFE4E1"


class DrawingSurface:
    """Lớp raster duy nhất của bảng vẽ: luôn đục (opaque), nền tô lại ngay khi bị xoá."""

    def __init__(self, width: int, height: int, background: ColorLike = "#8B0000",
                 image: Optional[QImage] = None):
        if image is None:
            if int(width) <= 0 or int(height) <= 0:
                raise SurfaceError(f"Invalid canvas size {width}x{height}")
            image = QImage(int(width), int(height), QImage.Format_ARGB32_Premultiplied)
        if image.isNull():
            raise SurfaceError("Raster surface is missing")
        if image.format() != QImage.Format_ARGB32_Premultiplied:
            image = image.convertToFormat(QImage.Format_ARGB32_Premultiplied)
        self.image: QImage = image
        self.background: QColor = to_qcolor(background, 1.0)
        self.show_grid = False
        self.clear()

    # ---- size ----
    @property
    def width(self) -> int: return self.image.width()

    @property
    def height(self) -> int: return self.image.height()

    def size(self) -> QSize: return self.image.size()

    def rect(self) -> QRectF: return QRectF(0, 0, self.width, self.height)

    # ---- background ----
    def clear(self) -> None:
        self.image.fill(self.background)

    def set_background_color(self, color: ColorLike) -> None:
        self.background = to_qcolor(color, 1.0)
        self.clear()

    def repaint_background(self, rect: Optional[QRectF] = None) -> None:
        """Put the background under any pixel that lost coverage (after an erase)."""
        p = QPainter(self.image)
        p.setCompositionMode(QPainter.CompositionMode_DestinationOver)
        p.fillRect(rect if rect is not None else self.rect(), self.background)
        p.end()

    def toggle_grid(self) -> bool:
        self.show_grid = not self.show_grid
        return self.show_grid

    def draw_grid(self, p: QPainter) -> None:
        """Grid is a view overlay only; it is never written into the raster."""
        color = QColor(GRID_COLOR)
        color.setAlphaF(0.5)
        p.save()
        p.setPen(QPen(color, 1))
        for x in range(0, self.width + 1, GRID_SIZE):
            p.drawLine(x, 0, x, self.height)
        for y in range(0, self.height + 1, GRID_SIZE):
            p.drawLine(0, y, self.width, y)
        p.restore()

    # ---- pixels ----
    def pixel(self, x: int, y: int) -> QColor:
        return self.image.pixelColor(int(x), int(y))

    def painter(self) -> QPainter:
        p = QPainter(self.image)
        p.setRenderHint(QPainter.Antialiasing, True)
        return p

    # ---- snapshots ----
    def encode(self) -> bytes:
        """PNG bytes of the base raster (history entry / export payload)."""
        return qimage_to_png(self.image)

    def restore(self, data: bytes) -> bool:
        """Full overwrite from an encoded snapshot. Returns False if it cannot be decoded."""
        img = QImage.fromData(data, "PNG")
        if img.isNull():
            logger.warning("Snapshot could not be decoded; surface left unchanged")
            return False
        self.clear()
        p = QPainter(self.image)
        p.setCompositionMode(QPainter.CompositionMode_Source)
        p.drawImage(0, 0, img)
        p.end()
        return True

    # ---- composite ----
    def composite(self, layers=None, with_handles: bool = False, with_grid: bool = False) -> QImage:
        """Base raster + image layers on top, as a new image."""
        out = self.image.copy()
        p = QPainter(out)
        p.setRenderHint(QPainter.Antialiasing, True)
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)
        if with_grid and self.show_grid:
            self.draw_grid(p)
        if layers is not None:
            layers.draw(p, with_handles=with_handles)
        p.end()
        return out

    def export_png(self, layers=None) -> bytes:
        return qimage_to_png(self.composite(layers, with_handles=False, with_grid=False))


def qimage_to_png(image: QImage) -> bytes:
    if image.isNull():
        return b""
    buffer = QtCore.QBuffer()
    buffer.open(QtCore.QIODevice.WriteOnly)
    image.save(buffer, "PNG")
    return bytes(buffer.data())
