"""Grid engine: type detection, formatting, evaluation, state and interaction"""

from .detector import detect_type
from .formatter import format_cell_value
from .evaluator import ERROR_VALUE, evaluate_formula, extract_references
from .store import CellStore
from .controller import GridController

__all__ = [
    "detect_type",
    "format_cell_value",
    "ERROR_VALUE",
    "evaluate_formula",
    "extract_references",
    "CellStore",
    "GridController",
]
