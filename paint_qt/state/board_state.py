# paint_qt/state/board_state.py
"""
Board State - điều phối bảng vẽ
Nhận điểm (đã đổi sang toạ độ canvas), chuyển cho công cụ vẽ hoặc lớp ảnh,
giữ lịch sử undo/redo, chuyển lỗi thành thông báo cho cửa sổ.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional

from PySide6 import QtCore
from PySide6.QtCore import QPointF, QSizeF, Qt, Signal
from PySide6.QtGui import QImage, QPainter

from paint_qt.core.colors import ColorLike
from paint_qt.core.data_models import TOOL_DISPLAY_NAMES, ImageLayer, ToolKind
from paint_qt.core.drawing_surface import DrawingSurface
from paint_qt.core.errors import ImageDecodeError, UploadRejected
from paint_qt.core.layer_manager import ImageLayerManager
from paint_qt.core.settings import DEFAULT_BACKGROUND, ToolSettings
from paint_qt.io.file_io import decode_image, read_image_file, validate_upload
from paint_qt.state.history import DEFAULT_CAPACITY, DEFAULT_DEBOUNCE_MS, HistoryManager
from paint_qt.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]   # (kind, message); kind: "info" | "warning" | "error"


def _log_notify(kind: str, message: str) -> None:
    level = {"warning": logging.WARNING, "error": logging.ERROR}.get(kind, logging.INFO)
    logger.log(level, "%s", message)


class BoardState(QtCore.QObject):
    """Quản lý dữ liệu bảng vẽ: raster, lớp ảnh, công cụ, lịch sử."""

    changed = Signal()              # cần vẽ lại
    tool_changed = Signal(str)      # ToolKind value

    def __init__(self, width: int, height: int, background: ColorLike = DEFAULT_BACKGROUND,
                 settings: Optional[ToolSettings] = None, notify: Optional[Notify] = None,
                 capacity: int = DEFAULT_CAPACITY, debounce_ms: int = DEFAULT_DEBOUNCE_MS,
                 parent=None):
        super().__init__(parent)
        self.surface = DrawingSurface(width, height, background)
        self.settings = settings or ToolSettings()
        self.history = HistoryManager(self.surface, capacity, debounce_ms, parent=self)
        self.layers = ImageLayerManager(QSizeF(self.surface.width, self.surface.height))
        self.dispatcher = ToolDispatcher(self.surface, self.settings, self.history)
        self.notify: Notify = notify or _log_notify
        self.display_size: Optional[QSizeF] = None   # kích thước canvas đang hiển thị
        self._owner: Optional[str] = None            # "tool" | "layers" khi đang nhấn

        self.history.snapshot_now()

    # --------- tools ----------
    @property
    def tool(self) -> ToolKind:
        return self.dispatcher.kind

    @property
    def is_image_mode(self) -> bool:
        return self.dispatcher.is_image_mode

    def set_tool(self, kind, announce: bool = True) -> bool:
        kind = ToolKind(kind)
        if kind is self.dispatcher.kind:
            return False
        if self._owner == "layers":
            self.layers.pointer_up()
        self._owner = None
        if not self.dispatcher.set_tool(kind):
            return False
        self.tool_changed.emit(kind.value)
        if announce:
            self.notify("info", f"Đã chọn {TOOL_DISPLAY_NAMES[kind]}")
        self.changed.emit()
        return True

    # --------- pointer routing ----------
    def pointer_down(self, point: QPointF) -> bool:
        """A pointer session belongs to either the image layers or the active tool."""
        if self._owner is not None:
            self.pointer_up(point)
        if self.is_image_mode:
            self._owner = "layers"
            self.layers.pointer_down(point)
        else:
            self._owner = "tool"
            self.dispatcher.begin_stroke(point)
        self.changed.emit()
        return True

    def pointer_move(self, point: QPointF) -> bool:
        if self._owner == "layers":
            moved = self.layers.pointer_move(point)
        elif self._owner == "tool":
            moved = self.dispatcher.continue_stroke(point)
        else:
            return False
        if moved:
            self.changed.emit()
        return moved

    def pointer_up(self, point: Optional[QPointF] = None) -> bool:
        owner, self._owner = self._owner, None
        if owner == "layers":
            ended = self.layers.pointer_up(point)
        elif owner == "tool":
            ended = self.dispatcher.end_stroke(point)
        else:
            return False
        self.changed.emit()
        return ended

    def pointer_leave(self, point: Optional[QPointF] = None) -> bool:
        """Leaving the canvas ends whatever the pointer was doing."""
        return self.pointer_up(point)

    def cursor_for(self, point: QPointF) -> Qt.CursorShape:
        if self.is_image_mode:
            return self.layers.cursor_for(point)
        return Qt.CrossCursor

    # --------- history ----------
    def undo(self) -> bool:
        if self.dispatcher.stroke_active:
            return False
        ok = self.history.undo()
        if ok:
            self.changed.emit()
        return ok

    def redo(self) -> bool:
        if self.dispatcher.stroke_active:
            return False
        ok = self.history.redo()
        if ok:
            self.changed.emit()
        return ok

    # --------- canvas ----------
    def clear_canvas(self) -> None:
        """Tô lại nền; lớp ảnh giữ nguyên."""
        self.surface.clear()
        self.history.snapshot()
        self.changed.emit()

    def set_background_color(self, color: ColorLike) -> None:
        self.surface.set_background_color(color)
        self.history.snapshot()
        self.changed.emit()

    def toggle_grid(self) -> bool:
        shown = self.surface.toggle_grid()
        self.changed.emit()
        return shown

    def render(self, p: QPainter) -> None:
        """Draw the current view (raster, grid, layers, tool preview) in canvas coordinates."""
        p.drawImage(0, 0, self.surface.image)
        if self.surface.show_grid:
            self.surface.draw_grid(p)
        self.layers.draw(p, with_handles=self.is_image_mode)
        self.dispatcher.paint_overlay(p)

    def composite(self, with_handles: bool = False) -> QImage:
        return self.surface.composite(self.layers, with_handles=with_handles)

    def export_png(self) -> bytes:
        return self.surface.export_png(self.layers)

    # --------- image layers ----------
    def _add_image(self, img: QImage, name: str) -> ImageLayer:
        layer = self.layers.add_layer(img, QSizeF(img.size()), self.display_size, name)
        self.set_tool(ToolKind.IMAGE, announce=False)
        self.changed.emit()
        return layer

    def insert_image_file(self, path: str) -> Optional[ImageLayer]:
        try:
            img, name = read_image_file(path)
        except (UploadRejected, ImageDecodeError) as e:
            self.notify("warning", str(e))
            return None
        return self._add_image(img, name)

    def insert_image_bytes(self, data: bytes, name: str, mime: Optional[str] = None) -> Optional[ImageLayer]:
        """Same checks as a file upload: type and 5 MB limit before decoding."""
        try:
            validate_upload(name, len(data), mime)
            img = decode_image(data)
        except (UploadRejected, ImageDecodeError) as e:
            self.notify("warning", str(e))
            return None
        return self._add_image(img, name)

    def _layers_changed(self, ok: bool) -> bool:
        if ok:
            self.changed.emit()
        return ok

    def remove_selected_layer(self) -> bool:
        return self._layers_changed(self.layers.remove_selected())

    def clear_all_layers(self) -> None:
        self.layers.clear_all()
        self.changed.emit()

    def update_layer(self, **fields) -> bool:
        return self._layers_changed(self.layers.update_transform(**fields))

    def flip_horizontal(self) -> bool:
        return self._layers_changed(self.layers.flip_horizontal())

    def flip_vertical(self) -> bool:
        return self._layers_changed(self.layers.flip_vertical())

    def reset_transform(self) -> bool:
        return self._layers_changed(self.layers.reset_transform())

    def nudge(self, dx: float, dy: float) -> bool:
        if not self.is_image_mode:
            return False
        return self._layers_changed(self.layers.nudge_selected(dx, dy))
