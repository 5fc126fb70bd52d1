"""AI formula bridge: natural-language request to formula"""

from typing import Optional

from config import settings
from core.exceptions import AIResponseParseError, LLMError
from core.interfaces import Bridge, TextGenerator
from core.models import FormulaRequest, FormulaResult
from llm.prompts import FormulaPrompt
from utils.logging import get_logger

logger = get_logger(__name__)

PARSE_FALLBACK_EXPLANATION = "AI-generated formula based on your request"
PARSE_FALLBACK_CONFIDENCE = 80
UNAVAILABLE_EXPLANATION = "Default sum formula (AI service unavailable)"
UNAVAILABLE_CONFIDENCE = 50


class FormulaBridge(Bridge[FormulaRequest, Optional[FormulaResult]]):
    """Ask the model for a formula; never fails, always yields something usable.

    Returns None only when the request is blank or another request is
    still in flight.
    """

    def __init__(self, llm: TextGenerator):
        self.llm = llm
        self.prompt = FormulaPrompt()
        self.is_busy = False

    @property
    def name(self) -> str:
        return "AI Formula"

    def validate_input(self, input_data: FormulaRequest) -> bool:
        return bool(input_data.query and input_data.query.strip())

    async def execute(self, input_data: FormulaRequest) -> Optional[FormulaResult]:
        if not self.validate_input(input_data) or self.is_busy:
            return None

        self.is_busy = True
        try:
            prompt = self.prompt.build_prompt({
                "query": input_data.query.strip(),
                "selected_cell": input_data.selected_cell,
            })
            try:
                response = await self.llm.complete(
                    prompt,
                    max_tokens=settings.FORMULA_MAX_TOKENS,
                )
            except LLMError as e:
                logger.warning("Formula generation failed", error=str(e))
                return FormulaResult(
                    formula=FormulaPrompt.DEFAULT_FORMULA,
                    explanation=UNAVAILABLE_EXPLANATION,
                    confidence=UNAVAILABLE_CONFIDENCE,
                )

            try:
                return self.prompt.parse_response(response)
            except AIResponseParseError as e:
                logger.warning("Unstructured formula response", error=str(e))
                return FormulaResult(
                    formula=self.prompt.recover_formula(response),
                    explanation=PARSE_FALLBACK_EXPLANATION,
                    confidence=PARSE_FALLBACK_CONFIDENCE,
                )
        finally:
            self.is_busy = False
