from fastapi import APIRouter, Depends

from pay_engine.dependencies import get_pay_engine
from pay_engine.models.schemas import (
    CalculationResult,
    ShiftCalculationRequest,
    TimesheetCalculationResponse,
)
from pay_engine.services.engine import PayEngine

router = APIRouter(prefix="/api/v1", tags=["calculate"])


@router.post("/timesheets/{timesheet_id}/calculate", response_model=TimesheetCalculationResponse)
def calculate_timesheet(timesheet_id: int, engine: PayEngine = Depends(get_pay_engine)):
    """Recalculate and store the timesheet's pay; repeated calls replace the stored result."""
    return engine.aggregator.calculate_timesheet(timesheet_id)


@router.get("/timesheets/{timesheet_id}/calculation", response_model=TimesheetCalculationResponse)
async def get_timesheet_calculation(timesheet_id: int, engine: PayEngine = Depends(get_pay_engine)):
    return engine.aggregator.get_calculation(timesheet_id)


@router.post("/calculate/shift", response_model=CalculationResult)
async def calculate_single_shift(request: ShiftCalculationRequest, engine: PayEngine = Depends(get_pay_engine)):
    """Ad-hoc calculation for one shift; nothing is persisted."""
    return engine.calculator.calculate(
        request.award_id,
        request.classification_id,
        request.shift,
        apprenticeship_year=request.apprenticeship_year,
        jurisdiction=request.jurisdiction,
    )
