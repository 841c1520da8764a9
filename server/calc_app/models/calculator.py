from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


class CalculatorResult(BaseModel):
    expression: str = Field(..., description="The arithmetic expression that was evaluated.")
    result: float | int = Field(..., description="The evaluated numerical result.")


class DigitRequest(BaseModel):
    digit: str = Field(..., min_length=1, max_length=1, description="Single decimal digit to type.")

    @field_validator("digit")
    @classmethod
    def validate_digit(cls, value: str) -> str:
        if not value.isdecimal():
            raise ValueError("Digit must be a decimal character.")
        return value


class OperatorRequest(BaseModel):
    symbol: str = Field(..., min_length=1, description="Operator symbol: one of + - * /.")


class InputRequest(BaseModel):
    text: str = Field(..., description="Raw typed input: a number literal or an operator alias.")


class ExpressionState(BaseModel):
    sessionId: str = Field(..., description="Calculator session identifier.")
    expression: str = Field(..., description="Current expression, tokens joined by spaces.")
    tokens: List[str] = Field(default_factory=list, description="Token texts in expression order.")


class EvaluationResponse(BaseModel):
    sessionId: str = Field(..., description="Calculator session identifier.")
    expression: str = Field(..., description="The expression that was evaluated.")
    result: float | int = Field(..., description="The evaluated numerical result.")
    display: str = Field(..., description="Result formatted with the configured decimal separator.")
    state: ExpressionState = Field(..., description="Session state after loading the result.")
