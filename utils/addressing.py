"""A1-style cell addressing"""

import re

from core.exceptions import AddressParseError
from core.models import CellPosition

ADDRESS_PATTERN = re.compile(r"[A-Z]+[0-9]+")
_FULL_ADDRESS = re.compile(r"([A-Z]+)([0-9]+)")


def column_to_letter(col: int) -> str:
    """Convert a zero-based column index to bijective base-26 letters.

    0 -> "A", 25 -> "Z", 26 -> "AA", 701 -> "ZZ", 702 -> "AAA".
    """
    if col < 0:
        raise ValueError(f"Column index must be non-negative, got {col}")
    letters = []
    while col >= 0:
        letters.append(chr(ord("A") + col % 26))
        col = col // 26 - 1
    return "".join(reversed(letters))


def letter_to_column(letters: str) -> int:
    """Inverse of :func:`column_to_letter`; expects uppercase A-Z only."""
    result = 0
    for char in letters:
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def address(row: int, col: int) -> str:
    """Address of a zero-based (row, col) pair, e.g. (2, 1) -> "B3"."""
    return f"{column_to_letter(col)}{row + 1}"


def parse_address(value: str) -> CellPosition:
    """Parse an address such as "B3" into a zero-based position.

    Raises:
        AddressParseError: If the string is not letters followed by a
            1-based row number.
    """
    match = _FULL_ADDRESS.fullmatch(value)
    if not match:
        raise AddressParseError(value)
    row = int(match.group(2)) - 1
    if row < 0:
        raise AddressParseError(value)
    return CellPosition(row=row, col=letter_to_column(match.group(1)))
