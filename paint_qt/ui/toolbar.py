# paint_qt/ui/toolbar.py
from __future__ import annotations
from typing import Optional
from PySide6 import QtWidgets
from PySide6.QtCore import Signal
from PySide6.QtGui import QAction, QActionGroup, QColor, QKeySequence

from paint_qt.core.data_models import TOOL_DISPLAY_NAMES, ImageLayer, ToolKind
from paint_qt.core.settings import ToolSettings
from .width_menu import create_slider_menu

TOOL_ORDER = (ToolKind.BRUSH, ToolKind.ERASER, ToolKind.BUCKET, ToolKind.LINE,
              ToolKind.RECTANGLE, ToolKind.ELLIPSE, ToolKind.TRIANGLE, ToolKind.IMAGE)


class PaintToolbar(QtWidgets.QToolBar):
    # ==== Signals (Window sẽ connect) ====
    toolChanged = Signal(str)                   # ToolKind value
    settingChanged = Signal(str, str, object)   # group, field, value
    backgroundPicked = Signal(str)
    layerValueChanged = Signal(str, int)        # "scale" | "rotation" | "opacity"

    requestUndo = Signal()
    requestRedo = Signal()
    requestInsertImage = Signal()
    requestDeleteImage = Signal()
    requestFlipH = Signal()
    requestFlipV = Signal()
    requestResetTransform = Signal()
    requestToggleGrid = Signal()
    requestClear = Signal()
    requestClearLayers = Signal()
    requestExport = Signal()

    def __init__(self, settings: ToolSettings, parent=None):
        super().__init__("Tools", parent)
        self.setMovable(False)
        self.settings = settings
        self._slider_text = {}

        # Tools (loại trừ nhau)
        self._tool_group = QActionGroup(self)
        self._tool_group.setExclusive(True)
        self.tool_actions = {}
        for kind in TOOL_ORDER:
            act = QAction(TOOL_DISPLAY_NAMES[kind], self, checkable=True)
            act.triggered.connect(lambda _=False, k=kind.value: self.toolChanged.emit(k))
            self._tool_group.addAction(act)
            self.addAction(act)
            self.tool_actions[kind] = act
        self.tool_actions[ToolKind.BRUSH].setChecked(True)

        self.addSeparator()

        # Undo / Redo
        self.act_undo = self._act("↶ Hoàn tác", self.requestUndo.emit)
        self.act_undo.setShortcut(QKeySequence("Ctrl+Z"))
        self.act_redo = self._act("↷ Làm lại", self.requestRedo.emit)
        self.act_redo.setShortcuts([QKeySequence("Ctrl+Y"), QKeySequence("Ctrl+Shift+Z")])
        self.addAction(self.act_undo)
        self.addAction(self.act_redo)
        self.set_history_state(False, False)

        self.addSeparator()

        # Colors
        b, s = settings.brush, settings.shape
        self.btn_color = self._color_button("🎨 Màu bút", b.color,
                                            lambda c: self.settingChanged.emit("brush", "color", c))
        self.btn_stroke = self._color_button("✒️ Viền", s.stroke_color,
                                             lambda c: self.settingChanged.emit("shape", "stroke_color", c))
        self.btn_fill = self._color_button("🪣 Màu tô", s.fill_color,
                                           lambda c: self.settingChanged.emit("shape", "fill_color", c))
        self.act_fill = QAction("Tô hình", self, checkable=True)
        self.act_fill.setChecked(s.fill_enabled)
        self.act_fill.toggled.connect(lambda on: self.settingChanged.emit("shape", "fill_enabled", on))
        self.addAction(self.act_fill)
        self.btn_background = self._color_button("🖼 Nền", "#8B0000", self.backgroundPicked.emit)

        # Sliders
        self.addWidget(QtWidgets.QLabel("｜"))
        self.btn_size, self._size_slider = self._slider_button(
            "Cỡ bút", "px", 1, 100, b.size, [1, 2, 5, 10, 20, 50],
            lambda v: self.settingChanged.emit("brush", "size", v))
        self.btn_opacity, self._opacity_slider = self._slider_button(
            "Độ mờ", "%", 1, 100, b.opacity, [10, 25, 50, 75, 100],
            lambda v: self.settingChanged.emit("brush", "opacity", v))
        self.btn_hardness, self._hardness_slider = self._slider_button(
            "Độ cứng", "%", 0, 100, b.hardness, [0, 25, 50, 75, 100],
            lambda v: self.settingChanged.emit("brush", "hardness", v))
        self.btn_stroke_w, self._stroke_slider = self._slider_button(
            "Nét hình", "px", 1, 50, s.stroke_width, [1, 2, 4, 8, 16],
            lambda v: self.settingChanged.emit("shape", "stroke_width", v))
        self.btn_tolerance, self._tolerance_slider = self._slider_button(
            "Dung sai", "", 0, 255, settings.bucket.tolerance, [0, 10, 32, 64, 128],
            lambda v: self.settingChanged.emit("bucket", "tolerance", v))

        self.addSeparator()

        # Image layer
        self.addAction(self._act("📂 Chèn ảnh…", self.requestInsertImage.emit))
        self.act_delete_image = self._act("🗑 Xóa ảnh", self.requestDeleteImage.emit)
        self.act_flip_h = self._act("↔ Lật ngang", self.requestFlipH.emit)
        self.act_flip_v = self._act("↕ Lật dọc", self.requestFlipV.emit)
        self.act_reset = self._act("⟲ Đặt lại", self.requestResetTransform.emit)
        for a in (self.act_delete_image, self.act_flip_h, self.act_flip_v, self.act_reset):
            self.addAction(a)
        self.btn_scale, self._scale_slider = self._slider_button(
            "Tỉ lệ", "%", 10, 300, 100, [50, 100, 150, 200],
            lambda v: self.layerValueChanged.emit("scale", v))
        self.btn_rotation, self._rotation_slider = self._slider_button(
            "Xoay", "°", 0, 359, 0, [0, 90, 180, 270],
            lambda v: self.layerValueChanged.emit("rotation", v))
        self.btn_layer_opacity, self._layer_opacity_slider = self._slider_button(
            "Độ mờ ảnh", "%", 0, 100, 100, [25, 50, 75, 100],
            lambda v: self.layerValueChanged.emit("opacity", v))
        self.reflect_layer(None)

        self.addSeparator()

        # Canvas
        a_grid = self._act("▦ Lưới", self.requestToggleGrid.emit)
        a_grid.setShortcut(QKeySequence("G"))
        self.addAction(a_grid)
        self.addAction(self._act("🧹 Xóa bảng", self.requestClear.emit))
        self.addAction(self._act("🧹 Xóa mọi ảnh", self.requestClearLayers.emit))
        a_export = self._act("💾 Xuất PNG…", self.requestExport.emit)
        a_export.setShortcut(QKeySequence("Ctrl+S"))
        self.addAction(a_export)

    # ---- helpers ----
    def _act(self, text, slot):
        a = QAction(text, self); a.triggered.connect(slot); return a

    def _color_button(self, text: str, init: str, emit) -> QtWidgets.QToolButton:
        btn = QtWidgets.QToolButton(self)
        btn.setText(text)
        btn.setToolTip(init)

        def pick():
            c = QtWidgets.QColorDialog.getColor(QColor(btn.toolTip()), self)
            if c.isValid():
                btn.setToolTip(c.name())
                emit(c.name())
        btn.clicked.connect(pick)
        self.addWidget(btn)
        return btn

    def _slider_button(self, title, unit, lo, hi, init, presets, emit):
        btn = QtWidgets.QToolButton(self)
        btn.setPopupMode(QtWidgets.QToolButton.InstantPopup)
        menu, slider, label = create_slider_menu(self, title, unit, lo, hi, init, presets, emit)
        btn.setMenu(menu)
        btn.setText(f"{title}: {slider.value()}{unit}")
        slider.valueChanged.connect(lambda v: btn.setText(f"{title}: {v}{unit}"))
        self._slider_text[slider] = (btn, label, title, unit)
        self.addWidget(btn)
        return btn, slider

    def _set_slider_quietly(self, slider: QtWidgets.QSlider, value: int):
        # không phát signal, chỉ cập nhật chữ trên nút + nhãn
        slider.blockSignals(True)
        slider.setValue(value)
        slider.blockSignals(False)
        btn, label, title, unit = self._slider_text[slider]
        btn.setText(f"{title}: {slider.value()}{unit}")
        label.setText(f"{title}: {slider.value()}{unit}")

    # Cho Window đồng bộ lại trạng thái nút khi đổi từ ngoài (phím tắt, chèn ảnh):
    def reflect_tool(self, kind: str):
        act = self.tool_actions.get(ToolKind(kind))
        if act is not None:
            act.setChecked(True)

    def set_history_state(self, can_undo: bool, can_redo: bool):
        self.act_undo.setEnabled(can_undo)
        self.act_redo.setEnabled(can_redo)

    def reflect_layer(self, layer: Optional[ImageLayer]):
        has = layer is not None
        for w in (self.act_delete_image, self.act_flip_h, self.act_flip_v, self.act_reset):
            w.setEnabled(has)
        for btn in (self.btn_scale, self.btn_rotation, self.btn_layer_opacity):
            btn.setEnabled(has)
        if not has:
            return
        self._set_slider_quietly(self._scale_slider, int(round(layer.scale)))
        self._set_slider_quietly(self._rotation_slider, int(round(layer.rotation)) % 360)
        self._set_slider_quietly(self._layer_opacity_slider, int(round(layer.opacity)))
