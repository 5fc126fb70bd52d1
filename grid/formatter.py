"""Display formatting for typed cells"""

from datetime import date, datetime
from typing import Optional

from config import settings
from core.enums import CellType
from core.models import Cell
from utils.numbers import format_grouped, parse_float_prefix

DATE_INPUT_FORMATS = ("%m/%d/%Y", "%Y-%m-%d")


def parse_calendar_date(value: str) -> Optional[date]:
    """Parse ``M/D/YYYY`` or ``YYYY-MM-DD``; None for anything else or impossible dates."""
    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def format_cell_value(cell: Cell) -> str:
    """Render a cell's stored value for display.

    Formula cells show their cached result, never the formula text.
    """
    if not cell.value:
        return ""

    if cell.type == CellType.NUMBER:
        number = parse_float_prefix(cell.value)
        if number is None:
            return cell.value
        return format_grouped(
            number,
            group_separator=settings.NUMBER_GROUP_SEPARATOR,
            decimal_separator=settings.NUMBER_DECIMAL_SEPARATOR,
            max_fraction_digits=settings.NUMBER_MAX_FRACTION_DIGITS,
        )

    if cell.type == CellType.DATE:
        parsed = parse_calendar_date(cell.value)
        if parsed is None:
            return cell.value
        return settings.DATE_DISPLAY_FORMAT.format(
            month=parsed.month, day=parsed.day, year=parsed.year
        )

    if cell.type == CellType.BOOLEAN:
        return "TRUE" if cell.value.lower() == "true" else "FALSE"

    return cell.value
