import logging
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import relationship

from pay_engine.database import Base
from pay_engine.errors import ImmutableRecordError

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Rate catalog (owned by the catalog sync process) ---

class Award(Base):
    __tablename__ = "awards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    industry = Column(String(100), nullable=True)
    fair_work_reference = Column(String(100), nullable=True)
    effective_from = Column(Date, nullable=True)
    effective_to = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    classifications = relationship("Classification", back_populates="award")


class Classification(Base):
    __tablename__ = "classifications"
    __table_args__ = (
        UniqueConstraint("award_id", "name", "level", name="uq_classification_award_name_level"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    award_id = Column(Integer, ForeignKey("awards.id"), index=True, nullable=False)
    name = Column(String(200), nullable=False)
    level = Column(String(100), nullable=False)
    aqf_level = Column(String(20), nullable=True)
    fair_work_level_code = Column(String(50), nullable=True)

    award = relationship("Award", back_populates="classifications")


class PayRate(Base):
    __tablename__ = "pay_rates"
    __table_args__ = (
        CheckConstraint(
            "apprenticeship_year IS NULL OR apprenticeship_year BETWEEN 1 AND 4",
            name="ck_pay_rate_apprenticeship_year",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    classification_id = Column(Integer, ForeignKey("classifications.id"), index=True, nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)  # open-ended when null
    is_apprentice_rate = Column(Boolean, default=False, nullable=False)
    apprenticeship_year = Column(Integer, nullable=True)


class PenaltyRule(Base):
    __tablename__ = "penalty_rules"
    __table_args__ = (
        CheckConstraint("multiplier > 1", name="ck_penalty_rule_multiplier"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    award_id = Column(Integer, ForeignKey("awards.id"), index=True, nullable=False)
    classification_id = Column(Integer, ForeignKey("classifications.id"), nullable=True)
    penalty_type = Column(String(50), nullable=False)
    multiplier = Column(Numeric(6, 4), nullable=False)
    day_of_week = Column(Integer, nullable=True)  # Sunday=0
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_time = Column(String(5), nullable=True)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)


class AllowanceRule(Base):
    __tablename__ = "allowance_rules"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_allowance_rule_amount"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    award_id = Column(Integer, ForeignKey("awards.id"), index=True, nullable=False)
    classification_id = Column(Integer, ForeignKey("classifications.id"), nullable=True)
    name = Column(String(200), nullable=False)
    allowance_type = Column(String(20), nullable=False)  # per_hour | per_shift | fixed
    amount = Column(Numeric(10, 2), nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)


class PublicHoliday(Base):
    __tablename__ = "public_holidays"
    __table_args__ = (
        UniqueConstraint("jurisdiction", "date", name="uq_public_holiday_jurisdiction_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    jurisdiction = Column(String(10), index=True, nullable=False)
    date = Column(Date, index=True, nullable=False)
    name = Column(String(200), nullable=False)


class TradeAwardMapping(Base):
    __tablename__ = "trade_award_mappings"
    __table_args__ = (
        UniqueConstraint("keyword", "version", name="uq_trade_mapping_keyword_version"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    keyword = Column(String(100), nullable=False)
    award_code = Column(String(20), nullable=False)
    priority = Column(Integer, default=100, nullable=False)
    version = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


# --- Read-only mirrors of the CRUD system's records ---

class Apprentice(Base):
    __tablename__ = "apprentices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    trade = Column(String(200), nullable=True)
    apprenticeship_year = Column(Integer, nullable=True)
    state = Column(String(10), nullable=True)


class Placement(Base):
    __tablename__ = "placements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    apprentice_id = Column(Integer, ForeignKey("apprentices.id"), index=True, nullable=False)
    host_employer_id = Column(Integer, nullable=True)
    state = Column(String(10), nullable=True)


class Timesheet(Base):
    __tablename__ = "timesheets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    apprentice_id = Column(Integer, ForeignKey("apprentices.id"), index=True, nullable=False)
    placement_id = Column(Integer, ForeignKey("placements.id"), nullable=True)
    week_starting = Column(Date, nullable=True)
    status = Column(String(20), default="draft", nullable=False)

    apprentice = relationship("Apprentice")
    placement = relationship("Placement")
    shifts = relationship(
        "TimesheetShift",
        back_populates="timesheet",
        order_by="TimesheetShift.id",
    )


class TimesheetShift(Base):
    __tablename__ = "timesheet_shifts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timesheet_id = Column(Integer, ForeignKey("timesheets.id"), index=True, nullable=False)
    date = Column(Date, nullable=True)
    start_time = Column(String(10), nullable=True)  # HH:MM 24h
    end_time = Column(String(10), nullable=True)
    break_duration = Column(Numeric(5, 2), default=0, nullable=False)  # hours
    day_type = Column(String(20), nullable=True)  # explicit override

    timesheet = relationship("Timesheet", back_populates="shifts")


# --- Engine outputs ---

class TimesheetCalculation(Base):
    __tablename__ = "timesheet_calculations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timesheet_id = Column(
        Integer, ForeignKey("timesheets.id"), unique=True, index=True, nullable=False
    )
    award_id = Column(Integer, nullable=True)
    classification_id = Column(Integer, nullable=True)
    # Snapshot so history survives catalog changes
    award_code = Column(String(20), nullable=True)
    award_name = Column(String(200), nullable=True)
    classification_name = Column(String(200), nullable=True)
    apprenticeship_year = Column(Integer, nullable=True)
    mapping_version = Column(String(20), nullable=True)

    total_hours = Column(Numeric(10, 2), nullable=False)
    base_pay = Column(Numeric(12, 2), nullable=False)
    penalty_pay = Column(Numeric(12, 2), nullable=False)
    allowances_total = Column(Numeric(12, 2), nullable=False)
    gross_pay = Column(Numeric(12, 2), nullable=False)
    shift_count = Column(Integer, nullable=False, default=0)
    skipped_shifts = Column(Integer, nullable=False, default=0)
    shift_results = Column(JSON, nullable=False, default=list)

    revision = Column(Integer, nullable=False, default=1)
    calculated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ComplianceCheckLog(Base):
    """Write-once audit record of one authority validation attempt."""

    __tablename__ = "compliance_check_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    award_code = Column(String(20), index=True, nullable=False)
    classification_code = Column(String(50), index=True, nullable=False)
    check_date = Column(Date, index=True, nullable=False)
    requested_rate = Column(Numeric(12, 4), nullable=False)
    minimum_rate = Column(Numeric(10, 2), nullable=True)
    is_valid = Column(Boolean, nullable=True)
    status = Column(String(20), nullable=False)  # valid | invalid | error
    message = Column(Text, nullable=True)
    request_payload = Column(JSON, nullable=False)
    response_payload = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


def _reject_compliance_log_update(mapper, connection, target):
    logger.error("immutability_violation_blocked", extra={"entity_id": target.id, "operation": "UPDATE"})
    raise ImmutableRecordError(
        f"Compliance check log {target.id} is write-once and cannot be modified",
        entity_id=target.id,
    )


def _reject_compliance_log_delete(mapper, connection, target):
    logger.error("immutability_violation_blocked", extra={"entity_id": target.id, "operation": "DELETE"})
    raise ImmutableRecordError(
        f"Compliance check log {target.id} is write-once and cannot be deleted",
        entity_id=target.id,
    )


event.listen(ComplianceCheckLog, "before_update", _reject_compliance_log_update)
event.listen(ComplianceCheckLog, "before_delete", _reject_compliance_log_delete)
