"""AI insight bridge: cell values to insights, suggestions and charts"""

import json
from typing import Mapping, Optional

from config import settings
from core.enums import ChartType
from core.exceptions import AIResponseParseError, LLMError
from core.interfaces import Bridge, TextGenerator
from core.models import AIAnalysis, Cell, ChartRecommendation
from llm.prompts import InsightsPrompt
from utils.logging import get_logger

logger = get_logger(__name__)


def fallback_analysis() -> AIAnalysis:
    """Generic analysis shown when the model reply cannot be parsed"""
    return AIAnalysis(
        insights=[
            "Data contains numeric values suitable for calculations",
            "Consider using SUM, AVERAGE, or COUNT functions",
        ],
        suggestions=[
            "Calculate totals with SUM function",
            "Find averages with AVERAGE function",
            "Count entries with COUNT function",
        ],
        chart_recommendations=[
            ChartRecommendation(
                type=ChartType.BAR,
                title="Data Overview",
                description="Visualize your data with a bar chart",
                data_range="A1:B10",
            )
        ],
    )


class InsightBridge(Bridge[Mapping[str, Cell], Optional[AIAnalysis]]):
    """Analyze a sample of the non-empty cell values.

    ``analysis`` keeps the latest result. Data identical to the last
    successfully analyzed values is not sent again, and a failed request
    leaves the previous analysis in place.
    """

    def __init__(self, llm: TextGenerator):
        self.llm = llm
        self.prompt = InsightsPrompt()
        self.analysis: Optional[AIAnalysis] = None
        self.is_busy = False
        self._last_analyzed: Optional[str] = None

    @property
    def name(self) -> str:
        return "AI Insights"

    def validate_input(self, input_data: Mapping[str, Cell]) -> bool:
        return any(cell.value for cell in input_data.values())

    async def execute(self, input_data: Mapping[str, Cell]) -> Optional[AIAnalysis]:
        values = [cell.value for cell in input_data.values() if cell.value]
        if not values:
            return None

        data_string = json.dumps(values)
        if data_string == self._last_analyzed or self.is_busy:
            return self.analysis

        self.is_busy = True
        try:
            prompt = self.prompt.build_prompt({
                "values": values[:settings.INSIGHT_SAMPLE_SIZE]
            })
            try:
                response = await self.llm.complete(
                    prompt,
                    max_tokens=settings.INSIGHT_MAX_TOKENS,
                )
            except LLMError as e:
                logger.warning("Insight analysis failed", error=str(e))
                return self.analysis

            try:
                self.analysis = self.prompt.parse_response(response)
                self._last_analyzed = data_string
            except AIResponseParseError as e:
                logger.warning("Unstructured insight response", error=str(e))
                self.analysis = fallback_analysis()
            return self.analysis
        finally:
            self.is_busy = False
