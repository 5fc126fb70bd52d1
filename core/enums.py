"""Core enumerations for Gridmind"""

from enum import Enum


class CellType(str, Enum):
    """Cell content type, derived from the committed input"""
    TEXT = "text"
    NUMBER = "number"
    FORMULA = "formula"
    DATE = "date"
    BOOLEAN = "boolean"


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class EditMode(str, Enum):
    """Grid interaction state"""
    IDLE = "idle"
    EDITING = "editing"


class ChartType(str, Enum):
    """Chart kinds the insight bridge may recommend"""
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    SCATTER = "scatter"


class MessageRole(str, Enum):
    """Chat transcript roles"""
    USER = "user"
    ASSISTANT = "assistant"


class LLMProvider(str, Enum):
    """Supported LLM providers"""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"
