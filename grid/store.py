"""Cell store: the single source of truth for grid state"""

from typing import Callable, Dict, Iterator, List, Mapping, Optional

from core.enums import CellType
from core.models import Cell, CellChange
from grid.detector import detect_type
from grid.evaluator import evaluate_formula
from utils.addressing import address
from utils.logging import get_logger

logger = get_logger(__name__)

ChangeListener = Callable[[CellChange], None]


class CellStore:
    """Mapping from address to :class:`Cell`.

    All writes go through :meth:`set_cell_value`, which always builds a
    complete new record and replaces whatever was stored at that address.
    """

    def __init__(self):
        self._cells: Dict[str, Cell] = {}
        self._listeners: List[ChangeListener] = []

    @property
    def cells(self) -> Mapping[str, Cell]:
        """Read-only view of the current cells"""
        return self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self._cells

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def values(self) -> List[Cell]:
        return list(self._cells.values())

    def get(self, cell_id: str) -> Optional[Cell]:
        return self._cells.get(cell_id)

    def get_at(self, row: int, col: int) -> Optional[Cell]:
        return self._cells.get(address(row, col))

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_cell_value(self, row: int, col: int, raw: str, notify: bool = True) -> Cell:
        """Commit raw input at (row, col).

        Formula input is evaluated against the cells as they are right now;
        the stored ``value`` is the result and ``formula`` keeps the input.
        Bounds are not checked here.
        """
        cell_id = address(row, col)
        cell_type = detect_type(raw)

        if cell_type == CellType.FORMULA:
            stored_value = evaluate_formula(raw, self._cells)
        else:
            stored_value = raw

        cell = Cell(
            id=cell_id,
            row=row,
            col=col,
            value=stored_value,
            formula=raw if cell_type == CellType.FORMULA else None,
            type=cell_type,
        )
        self._cells[cell_id] = cell
        logger.debug("Cell updated", address=cell_id, type=cell_type.value)

        if notify:
            change = CellChange(address=cell_id, value=stored_value)
            for listener in list(self._listeners):
                listener(change)

        return cell
