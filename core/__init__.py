"""Core abstractions for Gridmind"""

from .models import *
from .enums import *
from .exceptions import *
from .interfaces import *

__all__ = [
    # Models
    "CellStyle",
    "CellPosition",
    "Cell",
    "CellChange",
    "FormulaRequest",
    "FormulaResult",
    "ChartRecommendation",
    "AIAnalysis",
    "ChatMessage",
    # Enums
    "CellType",
    "FontWeight",
    "TextAlign",
    "EditMode",
    "ChartType",
    "MessageRole",
    "LLMProvider",
    # Exceptions
    "GridmindError",
    "AddressParseError",
    "FormulaEvaluationError",
    "LLMError",
    "AIResponseParseError",
    "AuthError",
    # Interfaces
    "TextGenerator",
    "Bridge",
    "LLMTask",
]
