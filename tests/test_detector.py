import pytest

from core.enums import CellType
from grid.detector import detect_type


@pytest.mark.parametrize("raw,expected", [
    ("", CellType.TEXT),
    ("   ", CellType.TEXT),
    ("=A1+1", CellType.FORMULA),
    ("=", CellType.FORMULA),
    ("=hello", CellType.FORMULA),
    ("42", CellType.NUMBER),
    ("-3.5", CellType.NUMBER),
    (" 7 ", CellType.NUMBER),
    ("1e3", CellType.NUMBER),
    (".5", CellType.NUMBER),
    ("12/25/2024", CellType.DATE),
    ("1/5/2024", CellType.DATE),
    ("2024-01-15", CellType.DATE),
    ("TRUE", CellType.BOOLEAN),
    ("false", CellType.BOOLEAN),
    ("True", CellType.BOOLEAN),
    ("Laptops", CellType.TEXT),
    ("12px", CellType.TEXT),
    ("inf", CellType.TEXT),
    ("nan", CellType.TEXT),
    ("1_000", CellType.TEXT),
    ("0x1F", CellType.TEXT),
    ("2024-1-15", CellType.TEXT),
    ("yes", CellType.TEXT),
])
def test_detect_type(raw, expected):
    assert detect_type(raw) == expected


def test_formula_wins_over_everything_else():
    assert detect_type("=42") == CellType.FORMULA
    assert detect_type("=TRUE") == CellType.FORMULA


def test_impossible_calendar_date_still_detected_as_date():
    # Detection is purely lexical
    assert detect_type("13/45/2024") == CellType.DATE
