from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from calc_app.core.config import get_settings
from calc_app.models.calculator import (
    DigitRequest,
    EvaluationResponse,
    ExpressionState,
    InputRequest,
    OperatorRequest,
)
from calc_app.services.calculator import CalculatorError, as_number
from calc_app.services.engine import ExpressionEngine
from calc_app.services.keypad import KeypadInput
from calc_app.services.sessions import engine_store

router = APIRouter(prefix="/sessions", tags=["sessions"])

logger = logging.getLogger("calc_app.sessions")


def get_session_engine(session_id: str) -> ExpressionEngine:
    return engine_store.get_or_create(session_id, get_settings().number_format)


def _state(session_id: str, engine: ExpressionEngine) -> ExpressionState:
    return ExpressionState(
        sessionId=session_id,
        expression=engine.expression,
        tokens=list(engine.tokens),
    )


@router.get("/{session_id}", response_model=ExpressionState)
async def get_session_state(session_id: str) -> ExpressionState:
    engine = engine_store.get(session_id)
    if engine is None:
        return ExpressionState(sessionId=session_id, expression="", tokens=[])
    return _state(session_id, engine)


@router.post("/{session_id}/digits", response_model=ExpressionState)
async def append_digit(
    request: DigitRequest,
    session_id: str,
    engine: ExpressionEngine = Depends(get_session_engine),
) -> ExpressionState:
    engine.append_digit(request.digit)
    return _state(session_id, engine)


@router.post("/{session_id}/decimal", response_model=ExpressionState)
async def append_decimal_point(
    session_id: str,
    engine: ExpressionEngine = Depends(get_session_engine),
) -> ExpressionState:
    engine.append_decimal_point()
    return _state(session_id, engine)


@router.post("/{session_id}/operators", response_model=ExpressionState)
async def append_operator(
    request: OperatorRequest,
    session_id: str,
    engine: ExpressionEngine = Depends(get_session_engine),
) -> ExpressionState:
    engine.append_operator(request.symbol)
    return _state(session_id, engine)


@router.post("/{session_id}/input", response_model=ExpressionState)
async def submit_input(
    request: InputRequest,
    session_id: str,
    engine: ExpressionEngine = Depends(get_session_engine),
) -> ExpressionState:
    KeypadInput(engine).submit(request.text)
    return _state(session_id, engine)


@router.post("/{session_id}/evaluate", response_model=EvaluationResponse)
async def evaluate_session(
    session_id: str,
    engine: ExpressionEngine = Depends(get_session_engine),
) -> EvaluationResponse:
    expression = engine.expression
    token_count = len(engine)
    result = engine.evaluate()
    if not result.ok:
        logger.info(
            "session.evaluate_failed",
            extra={"session_id": session_id, "reason": result.error.value},
        )
        raise CalculatorError.from_result(result)

    value = as_number(result.value)
    engine.load_result_as_state(result.value)
    logger.info("session.evaluate", extra={"session_id": session_id, "token_count": token_count})
    return EvaluationResponse(
        sessionId=session_id,
        expression=expression,
        result=value,
        display=engine.number_format.format(result.value),
        state=_state(session_id, engine),
    )


@router.delete("/{session_id}", status_code=204)
async def reset_session(session_id: str) -> Response:
    engine_store.clear(session_id)
    return Response(status_code=204)
