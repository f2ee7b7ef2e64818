# tests/test_layer_manager.py
import math

import pytest
from PySide6.QtCore import QPointF, QSizeF, Qt
from PySide6.QtGui import QImage

from conftest import pt, rgb_at, solid_image
from paint_qt.core.data_models import GestureMode, Handle
from paint_qt.core.drawing_surface import DrawingSurface
from paint_qt.core.layer_manager import ImageLayerManager, handle_positions, normalize_degrees

CANVAS = QSizeF(800, 600)


@pytest.fixture
def manager(qapp):
    return ImageLayerManager(CANVAS)


@pytest.fixture
def layer(manager):
    # 200x100 fits in half the canvas, so it keeps its size: top-left (300, 250)
    return manager.add_layer(solid_image(200, 100, "#FF0000"), name="red")


def canvas_point(layer, lx, ly):
    return layer.transform().map(QPointF(lx, ly))


def rotate_about(p, c, deg):
    a = math.radians(deg)
    dx, dy = p.x() - c.x(), p.y() - c.y()
    return QPointF(c.x() + dx * math.cos(a) - dy * math.sin(a),
                   c.y() + dx * math.sin(a) + dy * math.cos(a))


# ---- placement ----
def test_add_layer_keeps_small_images_centered_and_selected(manager, layer):
    assert (layer.x, layer.y, layer.width, layer.height) == (300, 250, 200, 100)
    assert manager.selected is layer
    assert layer.scale == 100 and layer.rotation == 0


def test_add_layer_fits_half_the_canvas(manager):
    big = manager.add_layer(QImage(1000, 500, QImage.Format_ARGB32_Premultiplied))
    assert (big.width, big.height) == pytest.approx((400, 200))
    assert (big.x, big.y) == pytest.approx((200, 200))
    assert (big.original_width, big.original_height) == pytest.approx((400, 200))


def test_add_layer_fits_the_displayed_size(manager):
    img = QImage(1000, 500, QImage.Format_ARGB32_Premultiplied)
    fitted = manager.add_layer(img, display_size=QSizeF(400, 300))
    assert (fitted.width, fitted.height) == pytest.approx((200, 100))


def test_new_layer_takes_selection(manager, layer):
    other = manager.add_layer(solid_image(50, 50))
    assert manager.selected is other
    assert not layer.selected


# ---- hit testing ----
@pytest.mark.parametrize("rotation", [0, 45, 90, 180, 270])
@pytest.mark.parametrize("flip_h", [False, True])
def test_hit_test_follows_drawn_transform(manager, layer, rotation, flip_h):
    manager.update_transform(rotation=rotation, flip_horizontal=flip_h)
    inside = canvas_point(layer, 60, 20)
    local = layer.to_local(inside)
    assert (local.x(), local.y()) == pytest.approx((60, 20), abs=1e-6)
    assert manager.select_at(inside) is layer
    assert manager.select_at(canvas_point(layer, 120, 0)) is None
    assert manager.select_at(canvas_point(layer, 0, 60)) is None


def test_select_at_returns_topmost(manager, layer):
    top = manager.add_layer(solid_image(200, 100), name="top")
    assert manager.select_at(pt(400, 300)) is top
    manager.update_transform(top, x=0, y=0)
    assert manager.select_at(pt(400, 300)) is layer


@pytest.mark.parametrize("rotation", [0, 90, 200])
def test_handles_found_in_rotated_frame(manager, layer, rotation):
    manager.update_transform(rotation=rotation, flip_vertical=True)
    for handle, local in handle_positions(layer.width, layer.height).items():
        assert manager.handle_at(canvas_point(layer, local.x(), local.y()), layer) is handle


def test_corner_beats_edge_when_both_are_in_reach(manager):
    small = manager.add_layer(solid_image(20, 20))
    # local (-8, -10): 2 px from the NW corner, 8 px from the N midpoint
    assert manager.handle_at(canvas_point(small, -8, -10), small) is Handle.NW
    assert manager.handle_at(canvas_point(small, 8, 10), small) is Handle.SE


def test_rotate_beats_corner_when_both_are_in_reach(qapp):
    near = ImageLayerManager(CANVAS, rotate_distance=4)
    l = near.add_layer(solid_image(200, 100))
    # local (-102, -52): ROTATE_NW (-104, -54) và NW (-100, -50) đều trong 16 px
    assert near.handle_at(canvas_point(l, -102, -52), l) is Handle.ROTATE_NW


def test_rotate_handle_is_offset_outside_the_corner(manager, layer):
    nw = canvas_point(layer, -100, -50)
    assert manager.handle_at(QPointF(nw.x() - 25, nw.y() - 25), layer) is Handle.ROTATE_NW
    assert manager.handle_at(QPointF(nw.x() - 20, nw.y() - 20), layer) is Handle.ROTATE_NW
    assert manager.handle_at(pt(400, 300), layer) is None


# ---- gestures ----
def test_pointer_down_on_empty_canvas_deselects(manager, layer):
    assert manager.pointer_down(pt(10, 10)) is None
    assert manager.selected is None
    assert manager.session is None


def test_pointer_down_selects_and_moves(manager, layer):
    manager.deselect_all()
    assert manager.pointer_down(pt(400, 300)) is GestureMode.MOVE
    assert manager.selected is layer
    manager.pointer_move(pt(420, 310))
    assert (layer.x, layer.y) == (320, 260)
    assert manager.pointer_up(pt(420, 310))
    assert manager.session is None
    assert manager.pointer_move(pt(500, 500)) is False


def test_move_is_clamped_to_canvas(manager, layer):
    manager.pointer_down(pt(400, 300))
    manager.pointer_move(pt(50, 20))
    assert (layer.x, layer.y) == (0, 0)
    manager.pointer_move(pt(790, 590))
    assert (layer.x, layer.y) == (600, 500)


def test_rotation_wraps_into_range(manager, layer):
    manager.update_transform(rotation=350)
    c = layer.center
    start = canvas_point(layer, -125, -75)          # rotate-nw handle
    assert manager.pointer_down(start) is GestureMode.ROTATE
    manager.pointer_move(rotate_about(start, c, 30))
    assert layer.rotation == pytest.approx(20)
    manager.pointer_move(rotate_about(start, c, -5))
    assert layer.rotation == pytest.approx(345)
    manager.pointer_up()


def test_resize_keeps_opposite_corner(manager, layer):
    assert manager.pointer_down(pt(500, 350)) is GestureMode.RESIZE   # se corner
    manager.pointer_move(pt(550, 400))
    assert (layer.x, layer.y, layer.width, layer.height) == pytest.approx((300, 250, 250, 150))
    assert layer.scale == pytest.approx(125)


def test_resize_edge_changes_one_axis(manager, layer):
    manager.pointer_down(pt(300, 300))   # w edge
    manager.pointer_move(pt(250, 320))
    assert (layer.x, layer.y, layer.width, layer.height) == pytest.approx((250, 250, 250, 100))


def test_resize_clamps_to_minimum(manager, layer):
    manager.pointer_down(pt(500, 350))
    manager.pointer_move(pt(305, 255))
    assert (layer.width, layer.height) == pytest.approx((20, 20))
    assert (layer.x, layer.y) == pytest.approx((300, 250))


def test_rotated_resize_anchors_the_opposite_corner(manager, layer):
    manager.update_transform(rotation=90)
    anchor = canvas_point(layer, -100, -50)
    se = canvas_point(layer, 100, 50)
    assert manager.pointer_down(se) is GestureMode.RESIZE
    manager.pointer_move(QPointF(se.x() - 30, se.y() + 40))
    after = canvas_point(layer, -layer.width / 2, -layer.height / 2)
    assert (after.x(), after.y()) == pytest.approx((anchor.x(), anchor.y()), abs=1e-6)
    assert (layer.width, layer.height) == pytest.approx((240, 130))


# ---- transform commands ----
def test_update_transform_normalizes_and_clamps(manager, layer):
    manager.update_transform(rotation=-30, opacity=150)
    assert layer.rotation == pytest.approx(330)
    assert layer.opacity == 100
    manager.update_transform(scale=50)
    assert (layer.width, layer.height) == pytest.approx((100, 50))
    assert (layer.center.x(), layer.center.y()) == pytest.approx((400, 300))
    assert manager.update_transform(skew=3) is False


def test_flip_and_reset(manager, layer):
    assert manager.flip_horizontal()
    assert manager.flip_vertical()
    assert layer.flip_horizontal and layer.flip_vertical
    manager.update_transform(rotation=45, scale=150, opacity=40)
    assert manager.reset_transform()
    assert (layer.rotation, layer.scale, layer.opacity) == (0, 100, 100)
    assert not layer.flip_horizontal and not layer.flip_vertical
    assert (layer.width, layer.height) == pytest.approx((200, 100))


def test_commands_without_selection_are_noops(manager, layer):
    manager.deselect_all()
    assert manager.flip_horizontal() is False
    assert manager.update_transform(rotation=10) is False
    assert manager.nudge_selected(1, 0) is False
    assert manager.remove_selected() is False
    assert layer.rotation == 0


def test_nudge_is_clamped(manager, layer):
    manager.nudge_selected(1, -1)
    assert (layer.x, layer.y) == (301, 249)
    manager.update_transform(x=0, y=0)
    manager.nudge_selected(-1, -1)
    assert (layer.x, layer.y) == (0, 0)


def test_remove_and_clear(manager, layer):
    manager.add_layer(solid_image(10, 10))
    assert manager.remove_selected()
    assert len(manager) == 1 and manager.selected is None
    manager.clear_all()
    assert len(manager) == 0


def test_normalize_degrees():
    assert normalize_degrees(360) == 0
    assert normalize_degrees(-90) == 270
    assert normalize_degrees(725) == pytest.approx(5)


# ---- cursor ----
def test_cursor_feedback(manager, layer):
    assert manager.cursor_for(pt(400, 300)) == Qt.SizeAllCursor
    assert manager.cursor_for(pt(500, 350)) == Qt.SizeFDiagCursor
    assert manager.cursor_for(pt(275, 225)) == Qt.OpenHandCursor
    assert manager.cursor_for(pt(10, 10)) == Qt.ArrowCursor
    manager.deselect_all()
    assert manager.cursor_for(pt(400, 300)) == Qt.PointingHandCursor


# ---- rendering ----
def test_composite_draws_layers_over_raster(manager, layer):
    surface = DrawingSurface(800, 600, "#FFFFFF")
    out = surface.composite(manager)
    assert rgb_at(out, 400, 300) == (255, 0, 0)
    assert rgb_at(out, 100, 100) == (255, 255, 255)
    assert rgb_at(surface.image, 400, 300) == (255, 255, 255)

    manager.update_transform(rotation=90)
    out = surface.composite(manager)
    assert rgb_at(out, 400, 380) == (255, 0, 0)
    assert rgb_at(out, 480, 300) == (255, 255, 255)

    manager.update_transform(opacity=0)
    assert rgb_at(surface.composite(manager), 400, 300) == (255, 255, 255)


def test_handles_only_with_selection_chrome(manager, layer):
    surface = DrawingSurface(800, 600, "#FFFFFF")
    with_chrome = surface.composite(manager, with_handles=True)
    assert rgb_at(with_chrome, 400, 248) != (255, 255, 255)

    exported = QImage.fromData(surface.export_png(manager), "PNG")
    assert rgb_at(exported, 400, 248) == (255, 255, 255)
    assert rgb_at(exported, 400, 300) == (255, 0, 0)
