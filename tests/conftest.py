# tests/conftest.py
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor, QImage
from PySide6.QtWidgets import QApplication

from paint_qt.core.drawing_surface import DrawingSurface
from paint_qt.core.settings import ToolSettings


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    app.setOrganizationName("PaintQtTests")
    app.setApplicationName("PaintQtTests")
    yield app


@pytest.fixture
def surface(qapp):
    return DrawingSurface(60, 40, "#FFFFFF")


@pytest.fixture
def settings(qapp):
    return ToolSettings()


def solid_image(w, h, color="#FFFFFF"):
    img = QImage(w, h, QImage.Format_ARGB32_Premultiplied)
    img.fill(QColor(color))
    return img


def rgb_at(image, x, y):
    c = image.pixelColor(int(x), int(y))
    return c.red(), c.green(), c.blue()


def pt(x, y):
    return QPointF(float(x), float(y))
