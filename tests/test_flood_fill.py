# tests/test_flood_fill.py
from PySide6.QtCore import QRect
from PySide6.QtGui import QColor, QPainter

from conftest import pt, rgb_at, solid_image
from paint_qt.core.flood_fill import flood_fill


def _bytes(img):
    return bytes(img.constBits())


def test_fills_whole_uniform_raster(qapp):
    img = solid_image(10, 10, "#FFFFFF")
    assert flood_fill(img, pt(5, 5), "#000000", 0) is True
    for y in range(10):
        for x in range(10):
            assert rgb_at(img, x, y) == (0, 0, 0)


def test_stops_at_region_border(qapp):
    img = solid_image(20, 20, "#FFFFFF")
    p = QPainter(img)
    p.fillRect(QRect(10, 0, 1, 20), QColor("#0000FF"))   # vertical wall
    p.end()

    assert flood_fill(img, pt(2, 2), "#FF0000", 0)
    assert rgb_at(img, 0, 0) == (255, 0, 0)
    assert rgb_at(img, 9, 19) == (255, 0, 0)
    assert rgb_at(img, 10, 5) == (0, 0, 255)
    assert rgb_at(img, 11, 5) == (255, 255, 255)
    assert rgb_at(img, 19, 19) == (255, 255, 255)


def test_diagonal_gap_does_not_leak(qapp):
    img = solid_image(4, 4, "#FFFFFF")
    # diagonal line of black pixels separates the top-left corner
    for x, y in ((1, 0), (0, 1)):
        img.setPixelColor(x, y, QColor("#000000"))
    assert flood_fill(img, pt(0, 0), "#00FF00", 0)
    assert rgb_at(img, 0, 0) == (0, 255, 0)
    assert rgb_at(img, 1, 1) == (255, 255, 255)


def test_tolerance_includes_near_colors(qapp):
    img = solid_image(6, 1, "#FFFFFF")
    img.setPixelColor(3, 0, QColor(250, 250, 250))
    strict = img.copy()

    assert flood_fill(strict, pt(0, 0), "#000000", 0)
    assert rgb_at(strict, 3, 0) == (250, 250, 250)
    assert rgb_at(strict, 5, 0) == (255, 255, 255)

    assert flood_fill(img, pt(0, 0), "#000000", 10)
    assert rgb_at(img, 3, 0) == (0, 0, 0)
    assert rgb_at(img, 5, 0) == (0, 0, 0)


def test_same_color_is_byte_identical_noop(qapp):
    img = solid_image(8, 8, "#123456")
    before = _bytes(img)
    assert flood_fill(img, pt(3, 3), "#123456", 0) is False
    assert _bytes(img) == before


def test_near_color_within_tolerance_is_noop(qapp):
    img = solid_image(8, 8, "#808080")
    before = _bytes(img)
    assert flood_fill(img, pt(1, 1), "#848484", 5) is False
    assert _bytes(img) == before


def test_out_of_bounds_seed_is_noop(qapp):
    img = solid_image(5, 5, "#FFFFFF")
    before = _bytes(img)
    assert flood_fill(img, pt(-1, 2), "#000000") is False
    assert flood_fill(img, pt(5, 0), "#000000") is False
    assert _bytes(img) == before


def test_large_region_does_not_recurse(qapp):
    img = solid_image(400, 300, "#FFFFFF")
    assert flood_fill(img, pt(0, 0), "#00AA00", 0)
    assert rgb_at(img, 399, 299) == (0, 170, 0)


def test_accepts_drawing_surface(surface):
    assert flood_fill(surface, pt(1, 1), "#00FF00", 0)
    assert rgb_at(surface.image, 59, 39) == (0, 255, 0)
