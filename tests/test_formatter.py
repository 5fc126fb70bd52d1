from datetime import date

import pytest

from core.enums import CellType
from core.models import Cell
from grid.formatter import format_cell_value, parse_calendar_date
from utils.numbers import format_grouped, parse_float_prefix, to_number_string


def _cell(value, cell_type, formula=None):
    return Cell(id="A1", row=0, col=0, value=value, type=cell_type, formula=formula)


@pytest.mark.parametrize("value,expected", [
    ("1234567", "1,234,567"),
    ("1234.5678", "1,234.568"),
    ("-9876.5", "-9,876.5"),
    ("0.1", "0.1"),
    ("15000", "15,000"),
    ("1.0005", "1.001"),
])
def test_number_display(value, expected):
    assert format_cell_value(_cell(value, CellType.NUMBER)) == expected


def test_date_display():
    assert format_cell_value(_cell("2024-01-15", CellType.DATE)) == "1/15/2024"
    assert format_cell_value(_cell("12/25/2024", CellType.DATE)) == "12/25/2024"


def test_unparseable_date_shows_raw_value():
    assert format_cell_value(_cell("13/45/2024", CellType.DATE)) == "13/45/2024"


def test_boolean_display():
    assert format_cell_value(_cell("true", CellType.BOOLEAN)) == "TRUE"
    assert format_cell_value(_cell("False", CellType.BOOLEAN)) == "FALSE"


def test_formula_shows_cached_value():
    cell = _cell("30", CellType.FORMULA, formula="=A2+A3")
    assert format_cell_value(cell) == "30"


def test_empty_and_text():
    assert format_cell_value(_cell("", CellType.TEXT)) == ""
    assert format_cell_value(_cell("Laptops", CellType.TEXT)) == "Laptops"


def test_parse_calendar_date():
    assert parse_calendar_date("2/29/2024") == date(2024, 2, 29)
    assert parse_calendar_date("2/29/2023") is None
    assert parse_calendar_date("hello") is None


def test_parse_float_prefix():
    assert parse_float_prefix("12px") == 12.0
    assert parse_float_prefix("  -3.5e2abc") == -350.0
    assert parse_float_prefix("2024-01-15") == 2024.0
    assert parse_float_prefix("Infinity") == float("inf")
    assert parse_float_prefix("abc") is None
    assert parse_float_prefix("") is None


@pytest.mark.parametrize("value,expected", [
    (15.0, "15"),
    (1.5, "1.5"),
    (-0.25, "-0.25"),
    (0.1 + 0.2, "0.30000000000000004"),
    (1e21, "1e+21"),
    (1.5e-7, "1.5e-7"),
    (0.000001, "0.000001"),
    (123456789012345680000.0, "123456789012345680000"),
    (float("inf"), "Infinity"),
    (float("-inf"), "-Infinity"),
    (float("nan"), "NaN"),
])
def test_to_number_string(value, expected):
    assert to_number_string(value) == expected


def test_format_grouped_custom_separators():
    assert format_grouped(1234567.891, ".", ",", 2) == "1.234.567,89"
    assert format_grouped(float("inf")) == "∞"
