"""Formula evaluation: reference substitution followed by arithmetic parsing.

A formula such as ``=A1*(B2+3)`` is evaluated in two steps:

1. every ``[A-Z]+[0-9]+`` reference is replaced by the number currently
   cached in that cell (``0`` for missing, empty or non-numeric cells);
2. the remaining text is parsed by a recursive-descent parser that only
   understands numeric literals, ``+ - * /``, unary signs and parentheses.

There is no dependency tracking: a referenced formula cell contributes its
cached result, and nothing is recomputed when a referenced cell changes.
"""

import math
import re
from typing import Mapping, Optional

from core.exceptions import FormulaEvaluationError
from core.models import Cell
from utils.addressing import ADDRESS_PATTERN
from utils.logging import get_logger
from utils.numbers import parse_float_prefix, to_number_string

logger = get_logger(__name__)

ERROR_VALUE = "#ERROR"

_TOKEN = re.compile(
    r"\s*(?:"
    r"(?P<number>(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|Infinity)"
    r"|(?P<op>[-+*/()])"
    r")"
)
_TRAILING_SPACE = re.compile(r"\s*\Z")


def extract_references(formula_text: str) -> list[str]:
    """Addresses referenced by a formula, in first-occurrence order."""
    if not formula_text.startswith("="):
        return []
    return list(dict.fromkeys(ADDRESS_PATTERN.findall(formula_text[1:])))


def substitute_references(expression: str, cells: Mapping[str, Cell]) -> str:
    """Replace each cell reference with its cached numeric value."""

    def _replace(match: re.Match) -> str:
        cell = cells.get(match.group(0))
        if cell is None or not cell.value:
            return "0"
        number = parse_float_prefix(cell.value)
        if number is None:
            return "0"
        return to_number_string(number)

    return ADDRESS_PATTERN.sub(_replace, expression)


def tokenize(expression: str) -> list[str]:
    tokens = []
    position = 0
    length = len(expression)
    while position < length:
        if _TRAILING_SPACE.match(expression, position):
            break
        match = _TOKEN.match(expression, position)
        if not match:
            raise FormulaEvaluationError(
                f"Unexpected character {expression[position:].lstrip()[:1]!r}",
                expression=expression,
                position=position,
            )
        tokens.append(match.group("number") or match.group("op"))
        position = match.end()
    return tokens


def _divide(left: float, right: float) -> float:
    # IEEE 754 division: x/0 is a signed infinity, 0/0 is NaN
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


class ArithmeticParser:
    """Recursive-descent evaluator for ``+ - * / ( )`` over float literals.

    Grammar::

        expr    := term (("+" | "-") term)*
        term    := unary (("*" | "/") unary)*
        unary   := ("+" | "-") unary | primary
        primary := NUMBER | "(" expr ")"
    """

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0

    def parse(self) -> float:
        if not self.tokens:
            raise FormulaEvaluationError("Empty expression", expression=self.expression)
        value = self._expr()
        if self._peek() is not None:
            raise FormulaEvaluationError(
                f"Unexpected token {self._peek()!r}", expression=self.expression
            )
        return value

    def _peek(self) -> Optional[str]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _advance(self) -> str:
        token = self._peek()
        if token is None:
            raise FormulaEvaluationError("Unexpected end of expression", expression=self.expression)
        self.index += 1
        return token

    def _expr(self) -> float:
        value = self._term()
        while self._peek() in ("+", "-"):
            if self._advance() == "+":
                value = value + self._term()
            else:
                value = value - self._term()
        return value

    def _term(self) -> float:
        value = self._unary()
        while self._peek() in ("*", "/"):
            if self._advance() == "*":
                value = value * self._unary()
            else:
                value = _divide(value, self._unary())
        return value

    def _unary(self) -> float:
        if self._peek() == "-":
            self._advance()
            return -self._unary()
        if self._peek() == "+":
            self._advance()
            return self._unary()
        return self._primary()

    def _primary(self) -> float:
        token = self._advance()
        if token == "(":
            value = self._expr()
            if self._advance() != ")":
                raise FormulaEvaluationError("Expected ')'", expression=self.expression)
            return value
        if token in ("+", "-", "*", "/", ")"):
            raise FormulaEvaluationError(
                f"Unexpected token {token!r}", expression=self.expression
            )
        return float(token.replace("Infinity", "inf"))


def evaluate_expression(expression: str) -> float:
    """Evaluate a reference-free arithmetic expression.

    Raises:
        FormulaEvaluationError: On any syntax problem.
    """
    try:
        return ArithmeticParser(expression).parse()
    except RecursionError as e:
        raise FormulaEvaluationError("Expression nested too deeply", expression=expression) from e


def evaluate_formula(formula_text: str, cells: Mapping[str, Cell]) -> str:
    """Evaluate ``formula_text`` against the current cells.

    Text not starting with ``=`` is returned unchanged. Evaluation failures
    never raise; they produce ``"#ERROR"``.
    """
    if not formula_text.startswith("="):
        return formula_text

    expression = substitute_references(formula_text[1:], cells)
    try:
        result = evaluate_expression(expression)
    except FormulaEvaluationError as e:
        logger.debug("Formula evaluation failed", formula=formula_text, error=str(e))
        return ERROR_VALUE
    return to_number_string(result)
