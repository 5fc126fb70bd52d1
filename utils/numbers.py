"""Numeric parsing and rendering helpers shared by the grid modules"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

NUMERIC_LITERAL = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_INFINITY_PREFIX = re.compile(r"[+-]?Infinity")


def is_numeric_literal(text: str) -> bool:
    """True when the whole trimmed string is a finite decimal number.

    Empty strings are never numeric, and neither are ``inf``/``nan`` or
    Python-only spellings such as ``1_000``.
    """
    stripped = text.strip()
    if not stripped or not NUMERIC_LITERAL.fullmatch(stripped):
        return False
    return math.isfinite(float(stripped))


def parse_float_prefix(text: str) -> Optional[float]:
    """Parse the leading numeric portion of ``text``.

    Mirrors browser ``parseFloat``: leading whitespace is skipped and any
    trailing garbage is ignored, so ``"12px"`` gives 12.0 and
    ``"2024-01-15"`` gives 2024.0. Returns None when no number leads.
    """
    stripped = text.lstrip()
    match = NUMERIC_LITERAL.match(stripped)
    if match:
        return float(match.group(0))
    match = _INFINITY_PREFIX.match(stripped)
    if match:
        return float(match.group(0).replace("Infinity", "inf"))
    return None


def to_number_string(value: float) -> str:
    """Canonical string form of a number.

    Integral values print without a fraction, the exponent form is only
    used outside ``1e-7 < |x| < 1e21``, and non-finite values print as
    ``Infinity``, ``-Infinity`` and ``NaN``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    if value.is_integer() and abs(value) < 2 ** 53:
        return str(int(value))

    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len("".join(str(d) for d in digit_tuple)) - len(digits)
    # value == 0.<digits> * 10 ** point
    point = len(digits) + exponent
    prefix = "-" if sign else ""

    if 0 < point <= 21:
        if point >= len(digits):
            return prefix + digits + "0" * (point - len(digits))
        return prefix + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return prefix + "0." + "0" * (-point) + digits

    power = point - 1
    mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
    return f"{prefix}{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def format_grouped(
    value: float,
    group_separator: str = ",",
    decimal_separator: str = ".",
    max_fraction_digits: int = 3,
) -> str:
    """Digit-grouped display form, rounded half-up to ``max_fraction_digits``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"

    number = Decimal(repr(value))
    if number.as_tuple().exponent < -max_fraction_digits:
        number = number.quantize(Decimal(1).scaleb(-max_fraction_digits), rounding=ROUND_HALF_UP)
    text = f"{number.normalize():,f}"
    return (
        text.replace(",", "\0")
        .replace(".", decimal_separator)
        .replace("\0", group_separator)
    )
