from __future__ import annotations

import logging
from typing import Iterator

from calc_app.core.exceptions import AppError
from calc_app.services.engine import ExpressionEngine, parse_number

logger = logging.getLogger("calc_app.keypad")

OPERATOR_ALIASES: dict[str, str] = {
    "+": "+",
    "-": "-",
    "−": "-",
    "*": "*",
    "x": "*",
    "×": "*",
    "/": "/",
    "÷": "/",
    "mais": "+",
    "menos": "-",
    "mult": "*",
    "div": "/",
    "plus": "+",
    "minus": "-",
    "times": "*",
    "divide": "/",
}

_DECIMAL_SEPARATORS = (".", ",")


class InputRejectedError(AppError):
    status_code = 400
    error_type = "INPUT_REJECTED"


def normalize_operator(text: str) -> str | None:
    return OPERATOR_ALIASES.get(text.strip().lower())


class KeypadInput:
    """
    Translates raw typed input into engine editing calls.

    A piece of input is either an operator (canonical symbol or alias) or a
    standalone number literal, which is typed into the engine one character
    at a time.
    """

    def __init__(self, engine: ExpressionEngine) -> None:
        self._engine = engine

    @property
    def engine(self) -> ExpressionEngine:
        return self._engine

    def submit(self, text: str) -> None:
        entry = (text or "").strip()
        if not entry:
            return

        symbol = normalize_operator(entry)
        if symbol is not None:
            self._engine.append_operator(symbol)
            return

        if parse_number(entry) is None:
            logger.info("keypad.input_rejected", extra={"input": entry})
            raise InputRejectedError(
                "Enter a number or an operator (+, -, *, /).",
                details={"input": entry},
            )

        self._type_number(entry)

    def feed_expression(self, expression: str) -> None:
        """Submit every piece of a whole typed expression, left to right."""
        previous_is_number = False
        for piece in split_expression(expression):
            is_number = normalize_operator(piece) is None
            if is_number and previous_is_number:
                logger.info("keypad.input_rejected", extra={"input": piece})
                raise InputRejectedError(
                    "Numbers must be separated by an operator.",
                    details={"input": piece},
                )
            self.submit(piece)
            previous_is_number = is_number

    def _type_number(self, literal: str) -> None:
        leading_minus = literal.find("-") == 0
        for char in literal:
            if char.isdecimal():
                self._engine.append_digit(char)
            elif char in _DECIMAL_SEPARATORS:
                self._engine.append_decimal_point()
            elif char == "-" and leading_minus:
                self._engine.append_digit("-")


def split_expression(expression: str) -> Iterator[str]:
    """
    Split ``12.5*-3 div 2`` into ``["12.5", "*", "-3", "div", "2"]``.

    A minus sign belongs to the following number when it starts the
    expression or directly follows an operator.
    """
    length = len(expression)
    index = 0
    previous: str | None = None

    while index < length:
        char = expression[index]
        if char.isspace():
            index += 1
            continue

        starts_number = _is_number_char(char)
        if char in ("-", "−") and index + 1 < length and _is_number_char(expression[index + 1]):
            starts_number = previous is None or normalize_operator(previous) is not None

        if starts_number:
            end = index + 1
            while end < length and _is_number_char(expression[end]):
                end += 1
            piece = expression[index:end]
            if piece[0] == "−":
                piece = "-" + piece[1:]
        elif char.isalpha():
            end = index + 1
            while end < length and expression[end].isalpha():
                end += 1
            piece = expression[index:end]
        else:
            end = index + 1
            piece = char

        yield piece
        previous = piece
        index = end


def _is_number_char(char: str) -> bool:
    return char.isdecimal() or char in _DECIMAL_SEPARATORS

