from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from pay_engine.dependencies import get_pay_engine
from pay_engine.errors import AwardNotFound
from pay_engine.models.db_models import Award
from pay_engine.models.schemas import (
    AllowanceRuleOut,
    AwardOut,
    ClassificationOut,
    PenaltyRuleOut,
    PublicHolidayOut,
)
from pay_engine.services.engine import PayEngine

router = APIRouter(prefix="/api/v1/reference-data", tags=["reference-data"])


def _award_or_404(engine: PayEngine, award_code: str) -> Award:
    award = engine.catalog.get_award_by_code(award_code)
    if award is None:
        raise AwardNotFound(award_code.upper())
    return award


@router.get("/awards", response_model=list[AwardOut])
async def get_awards(
    include_inactive: bool = Query(default=False),
    engine: PayEngine = Depends(get_pay_engine),
):
    return engine.catalog.list_awards(active_only=not include_inactive)


@router.get("/awards/{award_code}/classifications", response_model=list[ClassificationOut])
async def get_classifications(award_code: str, engine: PayEngine = Depends(get_pay_engine)):
    award = _award_or_404(engine, award_code)
    return engine.catalog.list_classifications(award.id)


@router.get("/awards/{award_code}/penalties", response_model=list[PenaltyRuleOut])
async def get_penalties(
    award_code: str,
    as_of: Optional[date] = None,
    engine: PayEngine = Depends(get_pay_engine),
):
    award = _award_or_404(engine, award_code)
    return engine.catalog.list_penalty_rules(award.id, as_of)


@router.get("/awards/{award_code}/allowances", response_model=list[AllowanceRuleOut])
async def get_allowances(
    award_code: str,
    as_of: Optional[date] = None,
    engine: PayEngine = Depends(get_pay_engine),
):
    award = _award_or_404(engine, award_code)
    return engine.catalog.list_allowance_rules(award.id, as_of)


@router.get("/public-holidays", response_model=list[PublicHolidayOut])
async def get_public_holidays(
    jurisdiction: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    engine: PayEngine = Depends(get_pay_engine),
):
    """Holidays for a state include the national (NAT) ones."""
    return engine.catalog.list_public_holidays(jurisdiction, date_from, date_to)
