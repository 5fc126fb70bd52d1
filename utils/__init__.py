"""Utility modules"""

from .addressing import address, column_to_letter, letter_to_column, parse_address
from .numbers import format_grouped, is_numeric_literal, parse_float_prefix, to_number_string

__all__ = [
    "address",
    "column_to_letter",
    "letter_to_column",
    "parse_address",
    "format_grouped",
    "is_numeric_literal",
    "parse_float_prefix",
    "to_number_string",
]
