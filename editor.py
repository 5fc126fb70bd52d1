"""Spreadsheet editor: owns grid state and coordinates the AI bridges"""

import asyncio
from typing import Callable, Mapping, Optional

from assistant import ChatAssistant, FormulaBridge, InsightBridge
from auth.models import AuthState
from auth.session import AuthSession
from core.interfaces import TextGenerator
from core.models import AIAnalysis, Cell, ChatMessage, FormulaRequest, FormulaResult
from grid import CellStore, GridController, format_cell_value
from ui.notifications import AI_MESSAGE_DURATION_MS, Notification, Notifier
from utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_DATA = [
    (0, 0, "Product"), (0, 1, "Sales Q1"), (0, 2, "Sales Q2"),
    (1, 0, "Laptops"), (1, 1, "15000"), (1, 2, "18000"),
    (2, 0, "Phones"), (2, 1, "25000"), (2, 2, "28000"),
    (3, 0, "Tablets"), (3, 1, "8000"), (3, 2, "9500"),
]


class SpreadsheetEditor:
    """Top-level application state for one user session.

    The store is the only place cells live; every write, whether typed by
    the user or proposed by the assistant, goes through
    ``CellStore.set_cell_value`` and is acknowledged through the notifier.
    """

    def __init__(
        self,
        llm: TextGenerator,
        notifier: Notifier,
        auth: Optional[AuthSession] = None,
        rows: Optional[int] = None,
        cols: Optional[int] = None
    ):
        self.notifier = notifier
        self.store = CellStore()
        self.controller = GridController(self.store, rows=rows, cols=cols)
        self.formula_bridge = FormulaBridge(llm)
        self.insight_bridge = InsightBridge(llm)
        self.chat_assistant = ChatAssistant(llm)

        self.store.subscribe(notifier.cell_updated)
        self.auth = auth or AuthSession()
        self.auth.on_auth_state_changed(self._on_auth_state)

    def _on_auth_state(self, state: AuthState) -> None:
        if state.is_authenticated:
            self.seed_sample_data()

    # ─────────────────────────────────────────────────────────
    # Grid state
    # ─────────────────────────────────────────────────────────

    @property
    def cells(self) -> Mapping[str, Cell]:
        return self.store.cells

    def current_cell(self) -> Optional[Cell]:
        return self.controller.selected_cell()

    def display_value(self, cell_id: str) -> str:
        cell = self.store.get(cell_id)
        return format_cell_value(cell) if cell else ""

    def seed_sample_data(self) -> bool:
        """Load the demo sales table for a signed-in user with an empty sheet"""
        if not self.auth.is_authenticated or len(self.store) > 0:
            return False
        for row, col, value in SAMPLE_DATA:
            self.store.set_cell_value(row, col, value, notify=False)
        logger.info("Seeded sample data", cells=len(SAMPLE_DATA))
        return True

    def set_cell_value(self, row: int, col: int, raw: str) -> Cell:
        return self.store.set_cell_value(row, col, raw)

    # ─────────────────────────────────────────────────────────
    # Assistant
    # ─────────────────────────────────────────────────────────

    def apply_formula_result(self, result: FormulaResult) -> Optional[Cell]:
        """Write an AI formula into the selected cell"""
        selection = self.controller.selection
        if selection is None:
            return None
        cell = self.store.set_cell_value(selection.row, selection.col, result.formula)
        self.notifier.notify(Notification(
            title="AI Formula Applied",
            description=result.explanation,
            duration_ms=AI_MESSAGE_DURATION_MS,
        ))
        return cell

    def apply_suggestion(self, suggestion: str) -> Optional[Cell]:
        """Formulas go into the selected cell; prose is only shown"""
        selection = self.controller.selection
        if selection is None:
            return None
        if suggestion.startswith("="):
            return self.store.set_cell_value(selection.row, selection.col, suggestion)
        self.notifier.notify(Notification(
            title="AI Suggestion",
            description=suggestion,
            duration_ms=AI_MESSAGE_DURATION_MS,
        ))
        return None

    async def generate_formula(self, query: str) -> Optional[FormulaResult]:
        """Ask for a formula and apply it to the selected cell"""
        result = await self.formula_bridge.execute(FormulaRequest(
            query=query,
            selected_cell=self.controller.selected_address,
        ))
        if result is not None:
            self.apply_formula_result(result)
        return result

    async def refresh_insights(self) -> Optional[AIAnalysis]:
        return await self.insight_bridge.execute(self.store.cells)

    async def chat(
        self,
        text: str,
        cancel: Optional[asyncio.Event] = None,
        on_chunk: Optional[Callable[[str], None]] = None
    ) -> Optional[ChatMessage]:
        return await self.chat_assistant.send(
            text,
            self.store.cells,
            self.controller.selection,
            cancel=cancel,
            on_chunk=on_chunk,
        )

    def apply_chat_formula(self, formula: str) -> Optional[Cell]:
        result = self.chat_assistant.apply_formula(formula, self.controller.selection)
        if result is None:
            return None
        return self.apply_formula_result(result)
