import datetime as dt
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DayType = Literal["weekday", "saturday", "sunday", "public_holiday"]
AllowanceType = Literal["per_hour", "per_shift", "fixed"]


# --- Shift calculation ---

class Shift(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: Optional[dt.date] = None
    start_time: Optional[str] = None         # HH:MM 24h
    end_time: Optional[str] = None           # HH:MM 24h
    break_duration: Decimal = Field(default=Decimal("0"), ge=0)  # hours
    day_type: Optional[DayType] = None       # explicit override wins


class AllowanceLine(BaseModel):
    name: str
    amount: Decimal
    type: AllowanceType


class CalculationResult(BaseModel):
    shift_date: Optional[dt.date] = None
    day_type: DayType
    base_rate: Decimal
    hours_worked: Decimal
    base_amount: Decimal
    penalty_rate: Optional[Decimal] = None
    penalty_multiplier: Optional[Decimal] = None
    penalty_amount: Decimal = Decimal("0.00")
    allowances: list[AllowanceLine] = []
    total_amount: Decimal
    applied_rules: list[str]


class ShiftCalculationRequest(BaseModel):
    award_id: int
    classification_id: int
    apprenticeship_year: int = Field(default=1, ge=1, le=4)
    jurisdiction: Optional[str] = None
    shift: Shift


class TimesheetCalculationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    timesheet_id: int
    award_id: Optional[int]
    classification_id: Optional[int]
    award_code: Optional[str]
    award_name: Optional[str]
    classification_name: Optional[str]
    apprenticeship_year: Optional[int]
    mapping_version: Optional[str]
    total_hours: Decimal
    base_pay: Decimal
    penalty_pay: Decimal
    allowances_total: Decimal
    gross_pay: Decimal
    shift_count: int
    skipped_shifts: int
    shift_results: list[CalculationResult]
    revision: int
    calculated_at: dt.datetime


# --- Compliance ---

class ComplianceValidationRequest(BaseModel):
    award_code: str
    classification_code: str
    hourly_rate: Decimal = Field(gt=0)
    date: dt.date


class ComplianceResult(BaseModel):
    is_valid: Optional[bool]                 # None = unknown (no authority configured)
    minimum_rate: Optional[Decimal] = None
    message: str


class ComplianceCheckLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    award_code: str
    classification_code: str
    check_date: dt.date
    requested_rate: Decimal
    minimum_rate: Optional[Decimal]
    is_valid: Optional[bool]
    status: str
    message: Optional[str]
    request_payload: dict
    response_payload: Optional[dict]
    created_at: dt.datetime


# --- Catalog sync upsert contract (camelCase on the wire) ---

class _SyncModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AwardUpsert(_SyncModel):
    code: str
    name: str
    fair_work_reference: Optional[str] = None
    effective_date: Optional[dt.date] = None
    industry: Optional[str] = None


class ClassificationUpsert(_SyncModel):
    award_code: str
    name: str
    level: str
    fair_work_level_code: Optional[str] = None
    aqf_level: Optional[str] = None


class _ClassificationRef(_SyncModel):
    """Either a classification id or its (award code, name, level) natural key."""

    classification_id: Optional[int] = None
    award_code: Optional[str] = None
    classification_name: Optional[str] = None
    classification_level: Optional[str] = None

    def has_natural_key(self) -> bool:
        return bool(self.award_code and self.classification_name and self.classification_level)


class PayRateUpsert(_ClassificationRef):
    hourly_rate: Decimal = Field(gt=0)
    effective_from: dt.date
    effective_to: Optional[dt.date] = None
    is_apprentice_rate: bool = False
    apprenticeship_year: Optional[int] = Field(default=None, ge=1, le=4)

    @model_validator(mode="after")
    def _check_reference_and_window(self):
        if self.classification_id is None and not self.has_natural_key():
            raise ValueError("classificationId or awardCode/classificationName/classificationLevel is required")
        if self.effective_to is not None and self.effective_to <= self.effective_from:
            raise ValueError("effectiveTo must be after effectiveFrom")
        return self


class PenaltyRuleUpsert(_SyncModel):
    award_code: str
    classification_name: Optional[str] = None
    classification_level: Optional[str] = None
    penalty_type: Literal["weekday_overtime", "saturday", "sunday", "public_holiday"]
    multiplier: Decimal = Field(gt=1)
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    effective_from: dt.date
    effective_to: Optional[dt.date] = None


class AllowanceRuleUpsert(_SyncModel):
    award_code: str
    classification_name: Optional[str] = None
    classification_level: Optional[str] = None
    name: str
    allowance_type: AllowanceType
    amount: Decimal = Field(ge=0)
    effective_from: dt.date
    effective_to: Optional[dt.date] = None


class PublicHolidayUpsert(_SyncModel):
    jurisdiction: str
    date: dt.date
    name: str


class CatalogSyncPayload(_SyncModel):
    awards: list[AwardUpsert] = []
    classifications: list[ClassificationUpsert] = []
    pay_rates: list[PayRateUpsert] = []
    penalty_rules: list[PenaltyRuleUpsert] = []
    allowance_rules: list[AllowanceRuleUpsert] = []
    public_holidays: list[PublicHolidayUpsert] = []


class CatalogSyncResult(BaseModel):
    awards: int = 0
    classifications: int = 0
    pay_rates: int = 0
    penalty_rules: int = 0
    allowance_rules: int = 0
    public_holidays: int = 0


# --- Reference data ---

class AwardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    industry: Optional[str]
    fair_work_reference: Optional[str]
    effective_from: Optional[dt.date]
    effective_to: Optional[dt.date]
    is_active: bool


class ClassificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    award_id: int
    name: str
    level: str
    aqf_level: Optional[str]
    fair_work_level_code: Optional[str]


class PenaltyRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    classification_id: Optional[int]
    penalty_type: str
    multiplier: Decimal
    day_of_week: Optional[int]
    start_time: Optional[str]
    end_time: Optional[str]
    effective_from: dt.date
    effective_to: Optional[dt.date]


class AllowanceRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    classification_id: Optional[int]
    name: str
    allowance_type: str
    amount: Decimal
    effective_from: dt.date
    effective_to: Optional[dt.date]


class PublicHolidayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    jurisdiction: str
    date: dt.date
    name: str


class HealthResponse(BaseModel):
    status: str
    environment: str
    compliance_authority_configured: bool
