# paint_qt/core/colors.py
"""Chuẩn hoá màu: hex / tuple / QColor  +  opacity 0..1 hoặc 0..100."""
from __future__ import annotations
from typing import Tuple, Union

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor

ColorLike = Union[str, QColor, Tuple[int, int, int], Tuple[int, int, int, int]]


def normalize_opacity(value: float) -> float:
    """Return opacity in [0, 1]. Values above 1 are read as percentages."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 1.0
    if v > 1.0:
        v = v / 100.0
    return max(0.0, min(1.0, v))


def to_qcolor(color: ColorLike, opacity: float | None = None) -> QColor:
    """Build a QColor from any accepted color spelling.

    Unknown spellings fall back to black so a bad setting never breaks a stroke.
    """
    if isinstance(color, QColor):
        c = QColor(color)
    elif isinstance(color, str):
        c = QColor(color.strip())
    elif isinstance(color, (tuple, list)) and len(color) in (3, 4):
        r, g, b = (max(0, min(255, int(v))) for v in color[:3])
        a = max(0, min(255, int(color[3]))) if len(color) == 4 else 255
        c = QColor(r, g, b, a)
    else:
        c = QColor(Qt.black)
    if not c.isValid():
        c = QColor(Qt.black)
    if opacity is not None:
        c.setAlphaF(normalize_opacity(opacity))
    return c


def rgb_tuple(color: ColorLike) -> Tuple[int, int, int]:
    c = to_qcolor(color)
    return c.red(), c.green(), c.blue()


def to_hex(color: ColorLike) -> str:
    return to_qcolor(color).name()   # "#rrggbb"


def colors_match(a: Tuple[int, int, int], b: Tuple[int, int, int], tolerance: int) -> bool:
    """Per-channel absolute difference within tolerance; alpha never participates."""
    return (abs(a[0] - b[0]) <= tolerance and
            abs(a[1] - b[1]) <= tolerance and
            abs(a[2] - b[2]) <= tolerance)
