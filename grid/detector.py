"""Cell type detection for raw user input"""

import re

from core.enums import CellType
from utils.numbers import is_numeric_literal

DATE_PATTERN = re.compile(r"[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}|[0-9]{4}-[0-9]{2}-[0-9]{2}")


def detect_type(raw: str) -> CellType:
    """Classify raw input; the first matching rule wins.

    Blank input is checked before the numeric rule so that an empty
    string never becomes a number.
    """
    if not raw or not raw.strip():
        return CellType.TEXT
    if raw.startswith("="):
        return CellType.FORMULA
    if is_numeric_literal(raw):
        return CellType.NUMBER
    if DATE_PATTERN.fullmatch(raw):
        return CellType.DATE
    if raw.lower() in ("true", "false"):
        return CellType.BOOLEAN
    return CellType.TEXT
