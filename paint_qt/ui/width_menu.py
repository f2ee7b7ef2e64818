# paint_qt/ui/width_menu.py
from __future__ import annotations
from typing import Callable, Sequence, Tuple
from PySide6 import QtWidgets
from PySide6.QtCore import Qt


def create_slider_menu(parent, title: str, unit: str, lo: int, hi: int, init_value: int,
                       presets: Sequence[int], callback: Callable[[int], None]) -> Tuple[
    QtWidgets.QMenu, QtWidgets.QSlider, QtWidgets.QLabel]:
    """
    Tạo menu popup có slider để chỉnh một giá trị số (độ dày, độ mờ, độ cứng, ...)

    Returns:
        Tuple[QMenu, QSlider, QLabel] - Menu, slider, và label để parent có thể tham chiếu
    """
    menu = QtWidgets.QMenu(parent)

    widget = QtWidgets.QWidget()
    layout = QtWidgets.QVBoxLayout(widget)
    layout.setContentsMargins(10, 10, 10, 10)
    layout.setSpacing(8)

    # Label hiển thị giá trị
    label = QtWidgets.QLabel(f"{title}: {init_value}{unit}")
    label.setAlignment(Qt.AlignCenter)
    layout.addWidget(label)

    slider = QtWidgets.QSlider(Qt.Horizontal)
    slider.setMinimum(lo)
    slider.setMaximum(hi)
    slider.setValue(max(lo, min(hi, int(init_value))))
    slider.setFixedWidth(220)
    layout.addWidget(slider)

    # Buttons cho các giá trị thường dùng
    buttons_layout = QtWidgets.QHBoxLayout()
    for value in presets:
        btn = QtWidgets.QPushButton(str(value))
        btn.setFixedSize(34, 25)
        btn.clicked.connect(lambda checked=False, v=value: slider.setValue(v))
        buttons_layout.addWidget(btn)
    layout.addLayout(buttons_layout)

    slider.valueChanged.connect(lambda v: label.setText(f"{title}: {v}{unit}"))
    slider.valueChanged.connect(callback)

    action = QtWidgets.QWidgetAction(parent)
    action.setDefaultWidget(widget)
    menu.addAction(action)

    return menu, slider, label
