from fastapi import APIRouter, Depends, Query

from calc_app.core.config import get_settings
from calc_app.models.calculator import CalculatorResult
from calc_app.services.calculator import CalculatorService
from calc_app.services.calculator_http import CalculatorHttpService

router = APIRouter(tags=["calculator"])


def get_calculator_service() -> CalculatorService | CalculatorHttpService:
    settings = get_settings()
    if settings.calc_tool_mode.lower() == "http":
        return CalculatorHttpService.from_settings()
    return CalculatorService(settings.number_format)


@router.get("/calc", response_model=CalculatorResult)
async def evaluate_calculator_expression(
    query: str = Query(..., description="Arithmetic expression to evaluate."),
    service: CalculatorService | CalculatorHttpService = Depends(get_calculator_service),
) -> CalculatorResult:
    return service.evaluate(query)
