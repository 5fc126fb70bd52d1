"""AI assistant bridges"""

from .formula import FormulaBridge
from .insights import InsightBridge, fallback_analysis
from .chat import ChatAssistant
from .suggestions import COMMON_REQUESTS, QUICK_FORMULAS, filter_command_suggestions

__all__ = [
    "FormulaBridge",
    "InsightBridge",
    "fallback_analysis",
    "ChatAssistant",
    "COMMON_REQUESTS",
    "QUICK_FORMULAS",
    "filter_command_suggestions",
]
