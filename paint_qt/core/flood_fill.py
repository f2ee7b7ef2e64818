# paint_qt/core/flood_fill.py
"""Flood fill (đổ màu vùng) bằng stack tường minh, không đệ quy."""
from __future__ import annotations
import logging
import math

from PySide6.QtCore import QPointF
from PySide6.QtGui import QImage, QPainter

from paint_qt.core.colors import ColorLike, colors_match, rgb_tuple

logger = logging.getLogger(__name__)


def flood_fill(image, seed: QPointF, fill_color: ColorLike, tolerance: int = 0) -> bool:
    """Recolor the 4-connected region around `seed` that matches the seed color.

    Matching is per-channel absolute difference <= tolerance with alpha ignored.
    Filled pixels get `fill_color` at full opacity. The raster is read once into
    a byte buffer and written back once. Returns False when nothing changed.
    """
    image = getattr(image, "image", image)   # DrawingSurface or QImage
    if image is None or image.isNull():
        return False
    tolerance = max(0, int(tolerance))
    w, h = image.width(), image.height()
    x0, y0 = int(math.floor(seed.x())), int(math.floor(seed.y()))
    if not (0 <= x0 < w and 0 <= y0 < h):
        return False

    rgba = image.convertToFormat(QImage.Format_RGBA8888)
    bpl = rgba.bytesPerLine()
    data = bytearray(rgba.constBits())

    i0 = y0 * bpl + x0 * 4
    seed_rgb = (data[i0], data[i0 + 1], data[i0 + 2])
    fr, fg, fb = rgb_tuple(fill_color)
    if colors_match(seed_rgb, (fr, fg, fb), tolerance):
        return False

    sr, sg, sb = seed_rgb
    visited = bytearray(w * h)
    stack = [(x0, y0)]
    count = 0
    while stack:
        x, y = stack.pop()
        if x < 0 or x >= w or y < 0 or y >= h:
            continue
        k = y * w + x
        if visited[k]:
            continue
        i = y * bpl + x * 4
        if (abs(data[i] - sr) > tolerance or abs(data[i + 1] - sg) > tolerance
                or abs(data[i + 2] - sb) > tolerance):
            continue
        visited[k] = 1
        data[i] = fr
        data[i + 1] = fg
        data[i + 2] = fb
        data[i + 3] = 255
        count += 1
        stack.append((x + 1, y))
        stack.append((x - 1, y))
        stack.append((x, y + 1))
        stack.append((x, y - 1))

    filled = QImage(bytes(data), w, h, bpl, QImage.Format_RGBA8888).copy()
    p = QPainter(image)
    p.setCompositionMode(QPainter.CompositionMode_Source)
    p.drawImage(0, 0, filled)
    p.end()
    logger.debug("Flood fill at (%d, %d): %d px, tolerance %d", x0, y0, count, tolerance)
    return True
