from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from pay_engine.dependencies import get_pay_engine
from pay_engine.models.schemas import (
    ComplianceCheckLogResponse,
    ComplianceResult,
    ComplianceValidationRequest,
)
from pay_engine.services.engine import PayEngine

router = APIRouter(prefix="/api/v1/compliance", tags=["compliance"])


@router.post("/validate-rate", response_model=ComplianceResult)
def validate_rate(request: ComplianceValidationRequest, engine: PayEngine = Depends(get_pay_engine)):
    return engine.compliance.validate(
        request.award_code,
        request.classification_code,
        request.hourly_rate,
        request.date,
    )


@router.get("/checks", response_model=list[ComplianceCheckLogResponse])
async def list_compliance_checks(
    award_code: Optional[str] = None,
    classification_code: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    engine: PayEngine = Depends(get_pay_engine),
):
    return engine.compliance.list_checks(award_code, classification_code, date_from, date_to)
