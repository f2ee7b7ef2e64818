# paint_qt/tools/brush_effects.py
"""Độ cứng nét (hardness): làm mềm mép nét bằng quầng mờ quanh đường vẽ."""
from __future__ import annotations
from dataclasses import dataclass

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QPainter, QPen

HALO_STEPS = 4


@dataclass(frozen=True)
class SoftStroke:
    width: float
    opacity: float   # 0..1, after hardness adjustment
    blur: float      # halo radius in px, 0 = hard edge


def hardness_profile(width: float, opacity: float, hardness: int) -> SoftStroke:
    """Effective blur and opacity for a stroke.

    hardness 100 → no softening; 1..99 → blur (100-h)% of width and an opacity
    floor of 0.5; 0 → blur 0.8 × width and an opacity floor of 0.3.
    """
    width = max(1.0, float(width))
    opacity = max(0.0, min(1.0, float(opacity)))
    hardness = max(0, min(100, int(hardness)))
    if hardness >= 100:
        return SoftStroke(width, opacity, 0.0)
    if hardness == 0:
        return SoftStroke(width, max(0.3, opacity * 0.7), width * 0.8)
    return SoftStroke(width, max(0.5, opacity * (hardness / 100.0 + 0.3)),
                      (100 - hardness) * width * 0.01)


class BrushEffects:

    @staticmethod
    def round_pen(color: QColor, width: float) -> QPen:
        return QPen(color, width, Qt.SolidLine, Qt.RoundCap, Qt.RoundJoin)

    @staticmethod
    def draw_segment(painter: QPainter, start: QPointF, end: QPointF, color: QColor, profile: SoftStroke):
        """Round-capped segment; a zero-length segment leaves a round dot."""
        if profile.blur > 0:
            BrushEffects._draw_halo(painter, start, end, color, profile)
        painter.setOpacity(profile.opacity)
        if start == end:
            painter.setPen(Qt.NoPen)
            painter.setBrush(color)
            painter.drawEllipse(start, profile.width / 2.0, profile.width / 2.0)
            painter.setBrush(Qt.NoBrush)
        else:
            painter.setPen(BrushEffects.round_pen(color, profile.width))
            painter.drawLine(start, end)
        painter.setOpacity(1.0)

    @staticmethod
    def _draw_halo(painter: QPainter, start: QPointF, end: QPointF, color: QColor, profile: SoftStroke):
        # Các vòng rộng dần, mờ dần ra ngoài
        for i in range(HALO_STEPS, 0, -1):
            t = i / float(HALO_STEPS)
            width = profile.width + 2.0 * profile.blur * t
            painter.setOpacity(profile.opacity * 0.35 * (1.0 - t + 1.0 / HALO_STEPS))
            painter.setPen(BrushEffects.round_pen(color, width))
            if start == end:
                painter.drawPoint(start)
            else:
                painter.drawLine(start, end)

    @staticmethod
    def segment_bounds(start: QPointF, end: QPointF, profile: SoftStroke):
        """Bounding rect touched by a segment, including caps and halo."""
        pad = profile.width / 2.0 + profile.blur + 2.0
        return QRectF(start, end).normalized().adjusted(-pad, -pad, pad, pad)
