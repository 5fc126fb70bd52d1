import pytest

from core.enums import EditMode
from core.models import CellPosition
from grid.controller import GridController
from grid.store import CellStore


@pytest.fixture
def controller():
    return GridController(CellStore(), rows=10, cols=5)


def test_initial_state(controller):
    assert controller.mode == EditMode.IDLE
    assert controller.selection == CellPosition(row=0, col=0)
    assert controller.selected_address == "A1"
    assert controller.selected_cell() is None


def test_typing_seeds_buffer_and_enter_commits(controller):
    controller.key_down("4")
    assert controller.mode == EditMode.EDITING
    assert controller.buffer == "4"

    controller.set_buffer("42")
    controller.key_down("Enter")

    assert controller.mode == EditMode.IDLE
    assert controller.store.get("A1").value == "42"
    # Commit does not move the selection
    assert controller.selection == CellPosition(row=0, col=0)


def test_enter_when_idle_moves_down(controller):
    controller.key_down("Enter")
    assert controller.selection == CellPosition(row=1, col=0)


def test_tab_commits_and_moves_right(controller):
    controller.key_down("x")
    controller.key_down("Tab")

    assert controller.store.get("A1").value == "x"
    assert controller.selection == CellPosition(row=0, col=1)
    assert controller.mode == EditMode.IDLE


def test_escape_discards_buffer(controller):
    controller.store.set_cell_value(0, 0, "keep")
    controller.key_down("F2")
    controller.set_buffer("changed")
    controller.key_down("Escape")

    assert controller.mode == EditMode.IDLE
    assert controller.buffer == ""
    assert controller.store.get("A1").value == "keep"


def test_f2_seeds_formula_text(controller):
    controller.store.set_cell_value(0, 0, "=1+2")
    controller.key_down("F2")
    assert controller.buffer == "=1+2"


def test_arrows_move_and_clamp(controller):
    controller.key_down("ArrowUp")
    controller.key_down("ArrowLeft")
    assert controller.selection == CellPosition(row=0, col=0)

    for _ in range(20):
        controller.key_down("ArrowDown")
        controller.key_down("ArrowRight")
    assert controller.selection == CellPosition(row=9, col=4)


def test_arrows_ignored_while_editing(controller):
    controller.key_down("a")
    controller.key_down("ArrowDown")
    assert controller.selection == CellPosition(row=0, col=0)
    assert controller.is_editing


def test_modifier_keys_do_not_start_editing(controller):
    controller.key_down("c", ctrl=True)
    controller.key_down("v", meta=True)
    controller.key_down("Shift")
    assert controller.mode == EditMode.IDLE


def test_select_commits_open_edit(controller):
    controller.key_down("7")
    controller.select(3, 2)

    assert controller.store.get("A1").value == "7"
    assert controller.selection == CellPosition(row=3, col=2)
    assert controller.mode == EditMode.IDLE


def test_select_is_clamped(controller):
    assert controller.select(99, 99) == CellPosition(row=9, col=4)


def test_double_click_opens_editor_with_value(controller):
    controller.store.set_cell_value(2, 1, "hello")
    controller.double_click(2, 1)

    assert controller.is_editing
    assert controller.buffer == "hello"
    assert controller.selected_address == "B3"


def test_blur_commits(controller):
    controller.start_edit()
    controller.set_buffer("=2*21")
    cell = controller.blur()

    assert cell.value == "42"
    assert controller.mode == EditMode.IDLE


def test_set_buffer_ignored_when_idle(controller):
    controller.set_buffer("nope")
    assert controller.buffer == ""
    assert controller.confirm() is None


def test_grid_size_defaults_from_settings():
    from config import settings

    controller = GridController(CellStore())
    assert (controller.rows, controller.cols) == (settings.GRID_ROWS, settings.GRID_COLS)


def test_explicit_grid_size_is_respected():
    controller = GridController(CellStore(), rows=1, cols=1)
    controller.key_down("ArrowDown")
    controller.key_down("ArrowRight")
    assert controller.selection == CellPosition(row=0, col=0)


@pytest.mark.parametrize("rows,cols", [(0, 5), (5, 0), (-1, 3)])
def test_empty_grid_is_rejected(rows, cols):
    with pytest.raises(ValueError):
        GridController(CellStore(), rows=rows, cols=cols)
