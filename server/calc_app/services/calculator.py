from __future__ import annotations

import math
from functools import cached_property

from langchain_core.tools import tool

from calc_app.core.exceptions import AppError
from calc_app.models.calculator import CalculatorResult
from calc_app.services.engine import EvaluationResult, ExpressionEngine, NumberFormat
from calc_app.services.keypad import KeypadInput


class CalculatorError(AppError):
    status_code = 400
    error_type = "CALCULATOR_ERROR"

    @classmethod
    def from_result(cls, result: EvaluationResult) -> "CalculatorError":
        return cls(result.error.message, details={"reason": result.error.value})


def as_number(value: float) -> int | float:
    value = float(value)
    if not math.isfinite(value):
        raise CalculatorError("Result is out of range.", details={"reason": "out_of_range"})
    if value.is_integer():
        return int(value)
    return value


class CalculatorService:
    MAX_EXPRESSION_LENGTH = 200

    def __init__(self, number_format: NumberFormat | None = None) -> None:
        self._number_format = number_format or NumberFormat()

    def evaluate(self, expression: str) -> CalculatorResult:
        cleaned = expression.strip()
        if not cleaned:
            raise CalculatorError("Expression cannot be empty.")

        if len(cleaned) > self.MAX_EXPRESSION_LENGTH:
            raise CalculatorError(f"Expression exceeds {self.MAX_EXPRESSION_LENGTH} characters.")

        engine = ExpressionEngine(self._number_format)
        KeypadInput(engine).feed_expression(cleaned)

        result = engine.evaluate()
        if not result.ok:
            raise CalculatorError.from_result(result)

        return CalculatorResult(
            expression=expression,
            result=as_number(result.value),
        )

    @cached_property
    def langchain_tool(self):
        service = self

        @tool("calculator", return_direct=True)
        def _calculator(expression: str) -> int | float:
            """Evaluate an arithmetic expression using + - * / and return the numeric result."""
            return service.evaluate(expression).result

        return _calculator
