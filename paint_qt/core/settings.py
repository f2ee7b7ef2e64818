# paint_qt/core/settings.py
"""
Tool option groups - nhóm cấu hình cho công cụ vẽ
Brush / Shape / Bucket, đọc tại thời điểm vẽ, lưu bằng QSettings
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict

from PySide6 import QtCore
from PySide6.QtCore import Signal

from paint_qt.core.colors import to_hex

logger = logging.getLogger(__name__)


# ========== DEFAULTS ==========

DEFAULT_CANVAS_WIDTH = 1200
DEFAULT_CANVAS_HEIGHT = 800
DEFAULT_BACKGROUND = "#8B0000"


# ========== OPTION GROUPS ==========

@dataclass
class BrushSettings:
    """Brush and eraser options"""
    color: str = "#FF69B4"
    size: int = 5
    opacity: int = 100      # percent
    hardness: int = 100     # 0 = softest, 100 = hard edge


@dataclass
class ShapeSettings:
    """Line / rectangle / ellipse / triangle options"""
    stroke_color: str = "#FF69B4"
    fill_color: str = "#FFB6C1"
    stroke_width: int = 2
    fill_enabled: bool = False


@dataclass
class BucketSettings:
    tolerance: int = 10


_LIMITS: Dict[str, tuple] = {
    "size": (1, 100),
    "opacity": (1, 100),
    "hardness": (0, 100),
    "stroke_width": (1, 50),
    "tolerance": (0, 255),
}


def _coerce(name: str, current: Any, value: Any) -> Any:
    if isinstance(current, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(current, int):
        lo, hi = _LIMITS.get(name, (None, None))
        v = int(float(value))
        if lo is not None:
            v = max(lo, min(hi, v))
        return v
    if name.endswith("color"):
        return to_hex(value)
    return value


class ToolSettings(QtCore.QObject):
    """Mutable option groups shared by the tools.

    Tools keep a reference and read the current values at stroke time;
    everything else changes them through update().
    """

    changed = Signal(str)   # group name: "brush" | "shape" | "bucket"

    GROUPS = ("brush", "shape", "bucket")

    def __init__(self, brush: BrushSettings | None = None, shape: ShapeSettings | None = None,
                 bucket: BucketSettings | None = None, parent=None):
        super().__init__(parent)
        self.brush = brush or BrushSettings()
        self.shape = shape or ShapeSettings()
        self.bucket = bucket or BucketSettings()

    def group(self, name: str):
        if name not in self.GROUPS:
            raise KeyError(f"Unknown settings group: {name}")
        return getattr(self, name)

    def update(self, group: str, **values) -> None:
        """Set fields of one group; values are coerced and clamped to their valid range."""
        target = self.group(group)
        known = {f.name for f in fields(target)}
        touched = False
        for name, value in values.items():
            if name not in known:
                raise AttributeError(f"{group} settings have no field '{name}'")
            try:
                setattr(target, name, _coerce(name, getattr(target, name), value))
                touched = True
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid %s.%s = %r", group, name, value)
        if touched:
            self.changed.emit(group)

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {g: asdict(self.group(g)) for g in self.GROUPS}

    # ---- QSettings ----
    def load(self, qsettings: QtCore.QSettings) -> None:
        for g in self.GROUPS:
            target = self.group(g)
            values = {}
            for f in fields(target):
                key = f"{g}/{f.name}"
                if qsettings.contains(key):
                    values[f.name] = qsettings.value(key)
            if values:
                self.update(g, **values)
        logger.debug("Tool settings loaded: %s", self.as_dict())

    def save(self, qsettings: QtCore.QSettings) -> None:
        for g, values in self.as_dict().items():
            for name, value in values.items():
                qsettings.setValue(f"{g}/{name}", value)
