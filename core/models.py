"""Core data models for Gridmind"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
from .enums import CellType, ChartType, FontWeight, MessageRole, TextAlign


# ─────────────────────────────────────────────────────────────
# Grid
# ─────────────────────────────────────────────────────────────

class CellStyle(BaseModel):
    """Presentational attributes, passed through untouched"""
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    font_weight: Optional[FontWeight] = None
    text_align: Optional[TextAlign] = None
    font_size: Optional[float] = None


class CellPosition(BaseModel):
    """Zero-based grid coordinate"""
    model_config = ConfigDict(frozen=True)

    row: int = Field(ge=0)
    col: int = Field(ge=0)


class Cell(BaseModel):
    """One addressed unit of the grid.

    For formula cells ``value`` holds the computed result (or ``#ERROR``)
    and ``formula`` the literal ``=`` input.
    """
    id: str
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    value: str = ""
    formula: Optional[str] = None
    type: CellType = CellType.TEXT
    style: Optional[CellStyle] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "Cell":
        from utils.addressing import address

        expected = address(self.row, self.col)
        if self.id != expected:
            raise ValueError(f"Cell id {self.id!r} does not match position {expected!r}")
        if self.type == CellType.FORMULA:
            if not self.formula or not self.formula.startswith("="):
                raise ValueError("Formula cells must carry their '=' source text")
        elif self.formula is not None:
            raise ValueError(f"{self.type.value} cells cannot carry a formula")
        return self

    @property
    def position(self) -> CellPosition:
        return CellPosition(row=self.row, col=self.col)


class CellChange(BaseModel):
    """Notification emitted after every store update"""
    address: str
    value: str


# ─────────────────────────────────────────────────────────────
# Assistant
# ─────────────────────────────────────────────────────────────

class FormulaRequest(BaseModel):
    """Natural-language formula request"""
    query: str
    selected_cell: Optional[str] = None


class FormulaResult(BaseModel):
    """Structured formula answer from the model"""
    formula: str
    explanation: str = ""
    confidence: float = Field(ge=0, le=100)

    @field_validator("formula")
    @classmethod
    def _must_be_formula(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("="):
            raise ValueError("formula must start with '='")
        return value


class ChartRecommendation(BaseModel):
    """Suggested visualization over a cell range"""
    model_config = ConfigDict(populate_by_name=True)

    type: ChartType
    title: str
    description: str = ""
    data_range: str = Field(default="", alias="dataRange")


class AIAnalysis(BaseModel):
    """Insights, suggestions and chart ideas derived from cell values"""
    model_config = ConfigDict(populate_by_name=True)

    insights: list[str] = []
    suggestions: list[str] = []
    chart_recommendations: list[ChartRecommendation] = Field(
        default=[], alias="chartRecommendations"
    )


class ChatMessage(BaseModel):
    """Single chat transcript entry"""
    id: str
    role: MessageRole
    content: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    formula: Optional[str] = None
    is_streaming: bool = False
