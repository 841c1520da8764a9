from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

CANONICAL_DECIMAL_SEPARATOR = "."
SUPPORTED_DECIMAL_SEPARATORS = (".", ",")

OPERATORS = ("+", "-", "*", "/")

_PRECEDENCE: dict[str, int] = {
    "*": 2,
    "/": 2,
    "+": 1,
    "-": 1,
}


@dataclass(frozen=True)
class NumberFormat:
    decimal_separator: str = CANONICAL_DECIMAL_SEPARATOR

    def __post_init__(self) -> None:
        if self.decimal_separator not in SUPPORTED_DECIMAL_SEPARATORS:
            raise ValueError(f"Unsupported decimal separator: {self.decimal_separator!r}")

    def format(self, value: float) -> str:
        """Render a value the way results are shown and stored as tokens."""
        value = float(value)
        if math.isfinite(value) and value.is_integer():
            text = str(int(value))
        else:
            text = repr(value)
        return text.replace(CANONICAL_DECIMAL_SEPARATOR, self.decimal_separator)


def normalize_number_text(text: str) -> str:
    return text.replace(",", CANONICAL_DECIMAL_SEPARATOR)


def parse_number(text: str) -> Optional[float]:
    """Parse a number literal in either separator, or return None."""
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(normalize_number_text(text))
    except ValueError:
        return None


@dataclass
class Number:
    text: str


@dataclass
class Operator:
    symbol: str


Token = Union[Number, Operator]


class EvaluationError(str, Enum):
    empty = "empty"
    incomplete_expression = "incomplete_expression"
    division_by_zero = "division_by_zero"
    invalid_expression = "invalid_expression"

    @property
    def message(self) -> str:
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES: dict[EvaluationError, str] = {
    EvaluationError.empty: "Nothing to calculate.",
    EvaluationError.incomplete_expression: "Expression is incomplete.",
    EvaluationError.division_by_zero: "Division by zero is not allowed.",
    EvaluationError.invalid_expression: "Invalid arithmetic expression.",
}


@dataclass(frozen=True)
class EvaluationResult:
    value: float | None = None
    error: EvaluationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: float) -> "EvaluationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: EvaluationError) -> "EvaluationResult":
        return cls(error=error)


class ExpressionEngine:
    """
    Accumulates keypad input into a token sequence and evaluates it with
    standard precedence (``*`` and ``/`` before ``+`` and ``-``).

    Numbers are kept as text while they are being typed and only parsed when
    the expression is evaluated.
    """

    def __init__(self, number_format: NumberFormat | None = None) -> None:
        self._number_format = number_format or NumberFormat()
        self._tokens: List[Token] = []

    @property
    def number_format(self) -> NumberFormat:
        return self._number_format

    @property
    def expression(self) -> str:
        return " ".join(_token_text(token) for token in self._tokens)

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(_token_text(token) for token in self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def reset(self) -> None:
        self._tokens.clear()

    def load_result_as_state(self, value: float) -> None:
        self._tokens.clear()
        self._tokens.append(Number(self._number_format.format(value)))

    def append_digit(self, digit: str) -> None:
        if self._expects_new_number():
            self._tokens.append(Number(digit))
            return
        self._tokens[-1].text += digit

    def append_decimal_point(self) -> None:
        separator = self._number_format.decimal_separator
        if self._expects_new_number():
            self._tokens.append(Number("0" + separator))
            return

        last = self._tokens[-1]
        if separator not in last.text:
            last.text += separator

    def append_operator(self, symbol: str) -> None:
        if symbol not in OPERATORS:
            return

        if not self._tokens:
            # A leading minus is kept so the user can start with a negative.
            if symbol == "-":
                self._tokens.append(Operator(symbol))
            return

        if isinstance(self._tokens[-1], Operator):
            self._tokens[-1] = Operator(symbol)
        else:
            self._tokens.append(Operator(symbol))

    def evaluate(self) -> EvaluationResult:
        if not self._tokens:
            return EvaluationResult.failure(EvaluationError.empty)
        if isinstance(self._tokens[-1], Operator):
            return EvaluationResult.failure(EvaluationError.incomplete_expression)

        postfix = _to_postfix(self._tokens)
        if postfix is None:
            return EvaluationResult.failure(EvaluationError.invalid_expression)
        return _reduce_postfix(postfix)

    def _expects_new_number(self) -> bool:
        return not self._tokens or isinstance(self._tokens[-1], Operator)


def _token_text(token: Token) -> str:
    if isinstance(token, Number):
        return token.text
    return token.symbol


def _to_postfix(tokens: List[Token]) -> Optional[list[float | str]]:
    output: list[float | str] = []
    stack: list[str] = []

    for token in tokens:
        if isinstance(token, Number):
            value = parse_number(token.text)
            if value is None:
                return None
            output.append(value)
            continue

        precedence = _PRECEDENCE[token.symbol]
        while stack and _PRECEDENCE[stack[-1]] >= precedence:
            output.append(stack.pop())
        stack.append(token.symbol)

    while stack:
        output.append(stack.pop())
    return output


def _reduce_postfix(postfix: list[float | str]) -> EvaluationResult:
    stack: list[float] = []

    for item in postfix:
        if isinstance(item, float):
            stack.append(item)
            continue

        if len(stack) < 2:
            return EvaluationResult.failure(EvaluationError.invalid_expression)
        b = stack.pop()
        a = stack.pop()

        if item == "+":
            stack.append(a + b)
        elif item == "-":
            stack.append(a - b)
        elif item == "*":
            stack.append(a * b)
        elif item == "/":
            if b == 0:
                return EvaluationResult.failure(EvaluationError.division_by_zero)
            stack.append(a / b)
        else:
            return EvaluationResult.failure(EvaluationError.invalid_expression)

    if len(stack) != 1:
        return EvaluationResult.failure(EvaluationError.invalid_expression)
    return EvaluationResult.success(stack[0])
