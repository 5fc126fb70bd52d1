"""LLM integration module"""

from .client import LLMClient
from .prompts import ChatPrompt, FormulaPrompt, InsightsPrompt

__all__ = [
    "LLMClient",
    "FormulaPrompt",
    "InsightsPrompt",
    "ChatPrompt",
]
