"""Canned formula shortcuts and command-bar request suggestions"""

from typing import List, NamedTuple


class QuickFormula(NamedTuple):
    label: str
    formula: str


QUICK_FORMULAS: List[QuickFormula] = [
    QuickFormula("Sum Column", "=SUM(A:A)"),
    QuickFormula("Average", "=AVERAGE(A:A)"),
    QuickFormula("Count Values", "=COUNT(A:A)"),
    QuickFormula("Today's Date", "=TODAY()"),
]

COMMON_REQUESTS: List[str] = [
    "Calculate the sum of column A",
    "Find the average of selected cells",
    "Count non-empty cells in range",
    "Create a formula to calculate percentage",
    "Generate a date formula for today",
    "Calculate compound interest",
    "Find the maximum value in range",
    "Create a conditional formula",
]

MIN_QUERY_LENGTH = 3
MAX_SUGGESTIONS = 4


def filter_command_suggestions(query: str) -> List[str]:
    """Common requests containing ``query`` (case-insensitive), at most four."""
    if len(query) < MIN_QUERY_LENGTH:
        return []
    needle = query.lower()
    return [s for s in COMMON_REQUESTS if needle in s.lower()][:MAX_SUGGESTIONS]
