# tests/test_board_state.py
import pytest
from PySide6.QtCore import QSettings, QSizeF
from PySide6.QtGui import QImage

from conftest import pt, rgb_at, solid_image
from paint_qt.core.data_models import GestureMode, ToolKind
from paint_qt.core.drawing_surface import qimage_to_png
from paint_qt.io.file_io import MAX_UPLOAD_BYTES

WHITE = (255, 255, 255)
RED = (255, 0, 0)


@pytest.fixture
def notes():
    return []


@pytest.fixture
def board(qapp, notes):
    from paint_qt.state.board_state import BoardState
    b = BoardState(200, 100, "#FFFFFF", notify=lambda kind, msg: notes.append((kind, msg)),
                   debounce_ms=10_000)
    b.settings.update("brush", color="#FF0000", size=6)
    return b


def png(w=40, h=20, color="#0000FF"):
    return qimage_to_png(solid_image(w, h, color))


def test_initial_snapshot(board):
    assert len(board.history) == 1
    assert board.tool is ToolKind.BRUSH
    assert not board.history.can_undo()


def test_brush_stroke_then_undo(board):
    board.pointer_down(pt(20, 50))
    board.pointer_move(pt(80, 50))
    board.pointer_up(pt(80, 50))
    assert rgb_at(board.surface.image, 50, 50) == RED
    assert board.history.pending()

    assert board.undo()
    assert rgb_at(board.surface.image, 50, 50) == WHITE
    assert board.redo()
    assert rgb_at(board.surface.image, 50, 50) == RED


def test_move_without_press_is_ignored(board):
    before = board.surface.encode()
    assert board.pointer_move(pt(10, 10)) is False
    assert board.pointer_up(pt(10, 10)) is False
    assert board.surface.encode() == before


def test_pointer_leave_commits_shape(board):
    board.set_tool(ToolKind.RECTANGLE)
    board.pointer_down(pt(10, 10))
    board.pointer_move(pt(60, 60))
    assert board.pointer_leave()
    assert not board.dispatcher.stroke_active
    assert board.history.pending()
    assert board.surface.pixel(10, 30).alpha() == 255
    assert rgb_at(board.surface.image, 10, 30) != WHITE


def test_set_tool_announces_display_name(board, notes):
    board.set_tool("eraser")
    assert notes[-1][0] == "info"
    assert "Eraser" in notes[-1][1]
    assert board.set_tool(ToolKind.ERASER) is False


def test_tool_switch_mid_stroke_ends_pointer_session(board):
    board.pointer_down(pt(20, 20))
    board.set_tool(ToolKind.IMAGE)
    assert board.history.pending()
    assert board.pointer_move(pt(90, 90)) is False


def test_insert_image_switches_to_image_mode(board):
    board.set_tool(ToolKind.BRUSH)
    layer = board.insert_image_bytes(png(), "blue.png")
    assert layer is not None
    assert board.is_image_mode
    assert board.layers.selected is layer
    assert (layer.width, layer.height) == (40, 20)


def test_insert_uses_display_size(board):
    board.display_size = QSizeF(100, 50)
    layer = board.insert_image_bytes(png(80, 40), "blue.png")
    assert (layer.width, layer.height) == pytest.approx((50, 25))


def test_image_mode_drags_layers_not_pixels(board):
    # 120x60 khớp vào 100x50, đặt giữa canvas
    layer = board.insert_image_bytes(png(120, 60), "blue.png")
    assert (layer.x, layer.y, layer.width, layer.height) == (50, 25, 100, 50)
    before = board.surface.encode()
    start = layer.center
    board.pointer_down(start)
    assert board.layers.session.mode is GestureMode.MOVE
    board.pointer_move(pt(start.x() + 10, start.y() + 5))
    board.pointer_up()
    assert (layer.x, layer.y) == (60, 30)
    assert board.surface.encode() == before
    assert board.layers.session is None


@pytest.mark.parametrize("data, name", [
    (b"hello", "notes.txt"),
    (b"\0" * (MAX_UPLOAD_BYTES + 1), "huge.png"),
    (b"not really a png", "broken.png"),
])
def test_bad_uploads_become_warnings(board, notes, data, name):
    assert board.insert_image_bytes(data, name) is None
    assert len(board.layers) == 0
    assert notes[-1][0] == "warning"


def test_insert_image_file(board, tmp_path):
    path = tmp_path / "pic.png"
    assert solid_image(30, 30, "#00FF00").save(str(path), "PNG")
    layer = board.insert_image_file(str(path))
    assert layer is not None and layer.name == "pic.png"


def test_missing_file_is_a_warning(board, notes, tmp_path):
    assert board.insert_image_file(str(tmp_path / "nope.png")) is None
    assert notes[-1][0] == "warning"


def test_nudge_and_delete_only_in_image_mode(board):
    layer = board.insert_image_bytes(png(), "blue.png")
    assert board.nudge(1, 0)
    assert layer.x == 81
    board.set_tool(ToolKind.BRUSH)
    assert board.nudge(1, 0) is False
    board.set_tool(ToolKind.IMAGE)
    assert board.remove_selected_layer()
    assert len(board.layers) == 0


def test_clear_canvas_keeps_layers(board):
    board.insert_image_bytes(png(), "blue.png")
    board.set_tool(ToolKind.BRUSH)
    board.pointer_down(pt(10, 10))
    board.pointer_up(pt(10, 10))
    board.clear_canvas()
    assert rgb_at(board.surface.image, 10, 10) == WHITE
    assert len(board.layers) == 1
    board.clear_all_layers()
    assert len(board.layers) == 0


def test_background_color_and_grid(board):
    board.set_background_color("#00FF00")
    assert rgb_at(board.surface.image, 5, 5) == (0, 255, 0)
    assert board.history.pending()
    before = board.surface.encode()
    assert board.toggle_grid() is True
    assert board.surface.encode() == before


def test_export_contains_layers_without_chrome(board):
    board.insert_image_bytes(png(), "blue.png")
    out = QImage.fromData(board.export_png(), "PNG")
    assert (out.width(), out.height()) == (200, 100)
    assert rgb_at(out, 100, 50) == (0, 0, 255)
    assert rgb_at(out, 5, 5) == WHITE


def test_changed_signal_on_input(board):
    hits = []
    board.changed.connect(lambda: hits.append(1))
    board.pointer_down(pt(5, 5))
    board.pointer_up(pt(5, 5))
    assert len(hits) >= 2


def test_window_smoke(qapp, tmp_path):
    from paint_qt.window import PaintWindowQt

    store = QSettings(str(tmp_path / "window.ini"), QSettings.IniFormat)
    store.setValue("canvas/width", 300)
    store.setValue("canvas/height", 200)
    win = PaintWindowQt(settings=store)
    try:
        assert (win.state.surface.width, win.state.surface.height) == (300, 200)
        assert not win.toolbar.act_undo.isEnabled()

        win.canvas.resize(600, 400)
        rect = win.canvas.display_rect()
        assert (rect.width(), rect.height()) == (600, 400)

        win.state.set_tool("ellipse")
        assert win.toolbar.tool_actions[ToolKind.ELLIPSE].isChecked()

        win.state.pointer_down(pt(10, 10))
        win.state.pointer_up(pt(60, 60))
        win.state.history.flush()
        assert win.toolbar.act_undo.isEnabled()
    finally:
        win.close()


class _Mouse:
    def __init__(self, x, y):
        self._p = pt(x, y)

    def position(self):
        return self._p


def test_canvas_maps_widget_to_raster(qapp, tmp_path):
    from paint_qt.window import PaintWindowQt

    win = PaintWindowQt(settings=QSettings(str(tmp_path / "w.ini"), QSettings.IniFormat))
    try:
        win.canvas.resize(600, 500)     # 1200x800 raster shown at half size, letterboxed
        rect = win.canvas.display_rect()
        assert (rect.top(), rect.height()) == (50, 400)
        p = win.canvas.map_event(_Mouse(300, 250))
        assert (p.x(), p.y()) == (600, 400)
    finally:
        win.close()


def test_reselecting_tool_mid_drag_keeps_the_stroke(board):
    board.set_tool(ToolKind.RECTANGLE)
    board.pointer_down(pt(10, 10))
    board.pointer_move(pt(60, 60))
    assert board.set_tool(ToolKind.RECTANGLE) is False
    assert board.pointer_move(pt(70, 70)) is True
    assert board.pointer_up(pt(70, 70)) is True
    assert not board.dispatcher.stroke_active
    assert board.history.pending()
