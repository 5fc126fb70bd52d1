"""Grid interaction controller: selection and in-place editing"""

from typing import Optional

from config import settings
from core.enums import EditMode
from core.models import Cell, CellPosition
from grid.store import CellStore
from utils.addressing import address

ARROW_MOVES = {
    "ArrowUp": (-1, 0),
    "ArrowDown": (1, 0),
    "ArrowLeft": (0, -1),
    "ArrowRight": (0, 1),
}


class GridController:
    """Translate clicks and key presses into selection moves and store commits.

    The controller is either ``IDLE`` (selecting) or ``EDITING`` (a buffer
    is open for the selected cell). Buffers reach the store only on commit;
    cancelling discards them without touching the store.
    """

    def __init__(self, store: CellStore, rows: Optional[int] = None, cols: Optional[int] = None):
        self.store = store
        self.rows = settings.GRID_ROWS if rows is None else rows
        self.cols = settings.GRID_COLS if cols is None else cols
        if self.rows < 1 or self.cols < 1:
            raise ValueError(f"Grid must have at least one row and column, got {self.rows}x{self.cols}")
        self.mode = EditMode.IDLE
        self.selection: Optional[CellPosition] = CellPosition(row=0, col=0)
        self.buffer = ""

    @property
    def is_editing(self) -> bool:
        return self.mode == EditMode.EDITING

    @property
    def selected_address(self) -> Optional[str]:
        if self.selection is None:
            return None
        return address(self.selection.row, self.selection.col)

    def selected_cell(self) -> Optional[Cell]:
        if self.selection is None:
            return None
        return self.store.get_at(self.selection.row, self.selection.col)

    def _clamp(self, row: int, col: int) -> CellPosition:
        return CellPosition(
            row=min(max(row, 0), self.rows - 1),
            col=min(max(col, 0), self.cols - 1),
        )

    def _move(self, d_row: int, d_col: int) -> None:
        if self.selection is None:
            return
        self.selection = self._clamp(self.selection.row + d_row, self.selection.col + d_col)

    def _begin_edit(self, seed: Optional[str] = None) -> None:
        if self.selection is None:
            return
        if seed is None:
            cell = self.selected_cell()
            seed = (cell.formula or cell.value) if cell else ""
        self.buffer = seed
        self.mode = EditMode.EDITING

    def _commit(self) -> Optional[Cell]:
        if not self.is_editing or self.selection is None:
            return None
        cell = self.store.set_cell_value(self.selection.row, self.selection.col, self.buffer)
        self.buffer = ""
        self.mode = EditMode.IDLE
        return cell

    # ─────────────────────────────────────────────────────────
    # Pointer interaction
    # ─────────────────────────────────────────────────────────

    def select(self, row: int, col: int) -> CellPosition:
        """Move the selection, committing any open edit first."""
        self._commit()
        self.selection = self._clamp(row, col)
        return self.selection

    def double_click(self, row: int, col: int) -> None:
        self.select(row, col)
        self._begin_edit()

    # ─────────────────────────────────────────────────────────
    # Editing
    # ─────────────────────────────────────────────────────────

    def start_edit(self) -> None:
        """Open the selected cell for editing, seeded with its formula or value."""
        self._begin_edit()

    def set_buffer(self, text: str) -> None:
        if self.is_editing:
            self.buffer = text

    def confirm(self) -> Optional[Cell]:
        return self._commit()

    def blur(self) -> Optional[Cell]:
        return self._commit()

    def cancel(self) -> None:
        self.buffer = ""
        self.mode = EditMode.IDLE

    # ─────────────────────────────────────────────────────────
    # Keyboard
    # ─────────────────────────────────────────────────────────

    def key_down(self, key: str, ctrl: bool = False, meta: bool = False) -> None:
        """Handle a key press using browser key names ("Enter", "ArrowUp", "a")."""
        if self.selection is None:
            return

        if key == "Enter":
            if self.is_editing:
                self._commit()
            else:
                self._move(1, 0)
        elif key == "Tab":
            self._commit()
            self._move(0, 1)
        elif key == "Escape":
            if self.is_editing:
                self.cancel()
        elif key in ARROW_MOVES:
            if not self.is_editing:
                self._move(*ARROW_MOVES[key])
        elif key == "F2":
            self._begin_edit()
        elif len(key) == 1 and not ctrl and not meta and not self.is_editing:
            self._begin_edit(seed=key)
