"""LLM prompt templates for spreadsheet assistant tasks"""

import json
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from core.exceptions import AIResponseParseError
from core.interfaces import LLMTask
from core.models import AIAnalysis, ChartRecommendation, FormulaResult
from utils.logging import get_logger

logger = get_logger(__name__)

FORMULA_IN_TEXT = re.compile(r"=[A-Za-z0-9():,\s+\-*/]+")
# A formula quoted inside prose or JSON ends at the closing quote or backtick
FORMULA_IN_LINE = re.compile(r"=[^\"`]*")

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def _unfence(text: str) -> str:
    match = _CODE_FENCE.search(text)
    return match.group(1) if match else text


def _escape_string_newlines(text: str) -> str:
    """Escape raw line breaks that models put inside JSON string values"""
    out = []
    in_string = escaped = False
    for ch in text:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            in_string = not in_string
        elif in_string and ch in "\r\n":
            ch = "\\n"
        out.append(ch)
    return "".join(out)


def _first_object(text: str) -> Optional[Dict[str, Any]]:
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            parsed, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
        start = text.find("{", start + 1)
    return None


class JSONPromptTask(LLMTask):
    """LLM task whose response is expected to carry a JSON object"""

    def _load(self, response: str) -> Dict[str, Any]:
        """First JSON object in the response, tolerating code fences,
        surrounding prose, trailing commas and raw newlines in strings.

        Raises:
            AIResponseParseError: If no object can be recovered
        """
        body = _unfence(response.strip())
        no_commas = _TRAILING_COMMA.sub(r"\1", body)
        for candidate in (body, no_commas, _escape_string_newlines(no_commas)):
            parsed = _first_object(candidate)
            if parsed is not None:
                return parsed
        raise AIResponseParseError("Response does not contain a JSON object", response=response)


class FormulaPrompt(JSONPromptTask):
    """Natural-language request to spreadsheet formula"""

    DEFAULT_FORMULA = "=SUM(A1:A10)"

    @property
    def prompt_template(self) -> str:
        return """Convert this natural language request into an Excel formula: "{query}"

Context: {selection}

Please respond with:
1. The Excel formula (starting with =)
2. A brief explanation of what it does
3. A confidence score (0-100)

Format your response as JSON:
{{
    "formula": "=SUM(A1:A10)",
    "explanation": "This formula calculates the sum of values in cells A1 through A10",
    "confidence": 95
}}"""

    def build_prompt(self, context: Dict[str, Any]) -> str:
        selected = context.get("selected_cell")
        return self.prompt_template.format(
            query=context.get("query", ""),
            selection=f"Currently selected cell: {selected}" if selected else "No cell selected"
        )

    def parse_response(self, response: str) -> FormulaResult:
        """Parse formula response

        Raises:
            AIResponseParseError: If the text is not a formula object
        """
        data = self._load(response)
        try:
            return FormulaResult.model_validate(data)
        except ValidationError as e:
            raise AIResponseParseError(f"Invalid formula payload: {e}", response=response) from e

    def recover_formula(self, response: str) -> str:
        """Best formula from a reply that did not validate as a FormulaResult.

        A ``formula`` string in a recoverable JSON object wins over
        scanning the text line by line.
        """
        try:
            formula = self._load(response).get("formula")
        except AIResponseParseError:
            formula = None
        if isinstance(formula, str):
            formula = formula.strip()
            if formula.startswith("=") and len(formula) > 1:
                return formula
        return self.extract_formula_line(response)

    def extract_formula_line(self, response: str) -> str:
        """First formula found line by line, or the default formula"""
        for line in response.splitlines():
            match = FORMULA_IN_LINE.search(line)
            if not match:
                continue
            candidate = match.group(0).rstrip(" \t',;")
            if len(candidate) > 1:
                return candidate
        return self.DEFAULT_FORMULA


class InsightsPrompt(JSONPromptTask):
    """Insights, formula ideas and chart recommendations for cell values"""

    @property
    def prompt_template(self) -> str:
        return """Analyze this spreadsheet data and provide insights: {values}

Please provide:
1. Key insights about the data
2. Suggestions for formulas or calculations
3. Chart recommendations

Format as JSON:
{{
    "insights": ["insight1", "insight2"],
    "suggestions": ["suggestion1", "suggestion2"],
    "chartRecommendations": [
        {{
            "type": "bar|line|pie|scatter",
            "title": "Chart Title",
            "description": "Why this chart would be useful",
            "dataRange": "A1:B10"
        }}
    ]
}}"""

    def build_prompt(self, context: Dict[str, Any]) -> str:
        return self.prompt_template.format(values=json.dumps(context.get("values", [])))

    def parse_response(self, response: str) -> AIAnalysis:
        """Parse insights response

        Chart entries that do not validate are dropped individually.

        Raises:
            AIResponseParseError: If no analysis object can be recovered
        """
        data = self._load(response)
        if not any(key in data for key in ("insights", "suggestions", "chartRecommendations")):
            raise AIResponseParseError("Analysis payload has none of the expected keys", response=response)

        insights = data.get("insights") or []
        suggestions = data.get("suggestions") or []
        if not isinstance(insights, list) or not isinstance(suggestions, list):
            raise AIResponseParseError("insights and suggestions must be lists", response=response)

        charts = []
        for raw_chart in data.get("chartRecommendations") or []:
            try:
                charts.append(ChartRecommendation.model_validate(raw_chart))
            except ValidationError as e:
                logger.debug("Dropping chart recommendation", error=str(e))

        return AIAnalysis(
            insights=[str(item) for item in insights],
            suggestions=[str(item) for item in suggestions],
            chart_recommendations=charts,
        )


class ChatPrompt(LLMTask):
    """Free-form assistant turn with spreadsheet context"""

    SYSTEM = (
        "You are an AI spreadsheet assistant. You help users create Excel "
        "formulas, analyze data and explain results concisely."
    )

    @property
    def prompt_template(self) -> str:
        return """
Current spreadsheet context:
- Selected cell: {selection}
- Sample data: {cells}

User request: {request}

Please provide helpful assistance for this spreadsheet task. If the user is asking for a formula, provide the Excel formula and explain how it works. If they're asking for analysis, provide insights about their data."""

    def build_prompt(self, context: Dict[str, Any]) -> str:
        return self.prompt_template.format(
            selection=context.get("selected_cell") or "None",
            cells=json.dumps(context.get("cells", [])),
            request=context.get("request", "")
        )

    def parse_response(self, response: str) -> Optional[str]:
        """First formula-looking fragment in the reply, if any"""
        match = FORMULA_IN_TEXT.search(response)
        if not match:
            return None
        formula = match.group(0).strip()
        return formula if len(formula) > 1 else None
