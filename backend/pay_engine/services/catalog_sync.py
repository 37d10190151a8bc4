"""
Consumer side of the catalog sync upsert contract.

The upstream sync process pushes awards, classifications and rates; each
record is matched on its natural key and updated in place or inserted. Pay
rates are never deleted: a newer open-ended rate closes its predecessor at
its own effective_from, and any other overlap is rejected so the catalog
never holds two rates for the same date.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from pay_engine.errors import AwardNotFound, CatalogIntegrityError, NotFoundError
from pay_engine.models.db_models import (
    AllowanceRule,
    Award,
    Classification,
    PayRate,
    PenaltyRule,
    PublicHoliday,
)
from pay_engine.models.schemas import (
    AllowanceRuleUpsert,
    AwardUpsert,
    CatalogSyncPayload,
    CatalogSyncResult,
    ClassificationUpsert,
    PayRateUpsert,
    PenaltyRuleUpsert,
    PublicHolidayUpsert,
)
from pay_engine.services.award_rules import round_half_up, to_decimal

logger = logging.getLogger(__name__)


def _eq(column, value):
    return column.is_(None) if value is None else column == value


def _overlaps(row, start: date, end: Optional[date]) -> bool:
    """Half-open [start, end) against the row's window; None is open-ended."""
    starts_before_end = end is None or row.effective_from < end
    ends_after_start = row.effective_to is None or row.effective_to > start
    return starts_before_end and ends_after_start


def _award(session: Session, award_code: str) -> Award:
    code = award_code.strip().upper()
    award = session.query(Award).filter(Award.code == code).one_or_none()
    if award is None:
        raise AwardNotFound(code)
    return award


def _classification_by_key(session: Session, award: Award, name: str, level: str) -> Classification:
    classification = (
        session.query(Classification)
        .filter(
            Classification.award_id == award.id,
            Classification.name == name,
            Classification.level == level,
        )
        .one_or_none()
    )
    if classification is None:
        raise NotFoundError(
            f"No classification {name!r} at level {level!r} on award {award.code}",
            award_code=award.code,
            classification_name=name,
            classification_level=level,
        )
    return classification


def _scope(session: Session, award: Award, name: Optional[str], level: Optional[str]) -> Optional[int]:
    """Classification id for a scoped rule, None for an award-wide one."""
    if not name and not level:
        return None
    return _classification_by_key(session, award, name or "", level or "").id


def upsert_award(session: Session, record: AwardUpsert) -> Award:
    code = record.code.strip().upper()
    award = session.query(Award).filter(Award.code == code).one_or_none()
    if award is None:
        award = Award(code=code)
        session.add(award)
    award.name = record.name
    award.fair_work_reference = record.fair_work_reference
    award.effective_from = record.effective_date
    if record.industry is not None:
        award.industry = record.industry
    award.is_active = True
    session.flush()
    return award


def upsert_classification(session: Session, record: ClassificationUpsert) -> Classification:
    award = _award(session, record.award_code)
    classification = (
        session.query(Classification)
        .filter(
            Classification.award_id == award.id,
            Classification.name == record.name,
            Classification.level == record.level,
        )
        .one_or_none()
    )
    if classification is None:
        classification = Classification(award_id=award.id, name=record.name, level=record.level)
        session.add(classification)
    classification.fair_work_level_code = record.fair_work_level_code
    if record.aqf_level is not None:
        classification.aqf_level = record.aqf_level
    session.flush()
    return classification


def upsert_pay_rate(session: Session, record: PayRateUpsert) -> PayRate:
    if record.classification_id is not None:
        classification = session.get(Classification, record.classification_id)
        if classification is None:
            raise NotFoundError(
                f"No classification with id {record.classification_id}",
                classification_id=record.classification_id,
            )
    else:
        award = _award(session, record.award_code)
        classification = _classification_by_key(
            session, award, record.classification_name, record.classification_level
        )

    year = record.apprenticeship_year if record.is_apprentice_rate else None
    hourly_rate = round_half_up(to_decimal(record.hourly_rate))

    siblings = (
        session.query(PayRate)
        .filter(
            PayRate.classification_id == classification.id,
            PayRate.is_apprentice_rate == record.is_apprentice_rate,
            _eq(PayRate.apprenticeship_year, year),
        )
        .order_by(PayRate.effective_from, PayRate.id)
        .all()
    )
    existing = next((r for r in siblings if r.effective_from == record.effective_from), None)
    others = [r for r in siblings if r is not existing]

    for other in others:
        if not _overlaps(other, record.effective_from, record.effective_to):
            continue
        if existing is None and other.effective_to is None and other.effective_from < record.effective_from:
            logger.info(
                "pay_rate_superseded",
                extra={"pay_rate_id": other.id, "closed_at": record.effective_from.isoformat()},
            )
            other.effective_to = record.effective_from
            continue
        raise CatalogIntegrityError(
            f"Pay rate for classification {classification.id} from {record.effective_from.isoformat()} "
            f"overlaps existing rate {other.id} ({other.effective_from.isoformat()} to "
            f"{other.effective_to.isoformat() if other.effective_to else 'open'})",
            classification_id=classification.id,
            apprenticeship_year=year,
            conflicting_id=other.id,
        )

    if existing is None:
        existing = PayRate(
            classification_id=classification.id,
            is_apprentice_rate=record.is_apprentice_rate,
            apprenticeship_year=year,
            effective_from=record.effective_from,
        )
        session.add(existing)
    existing.hourly_rate = hourly_rate
    existing.effective_to = record.effective_to
    session.flush()
    return existing


def upsert_penalty_rule(session: Session, record: PenaltyRuleUpsert) -> PenaltyRule:
    award = _award(session, record.award_code)
    classification_id = _scope(session, award, record.classification_name, record.classification_level)
    rule = (
        session.query(PenaltyRule)
        .filter(
            PenaltyRule.award_id == award.id,
            _eq(PenaltyRule.classification_id, classification_id),
            PenaltyRule.penalty_type == record.penalty_type,
            _eq(PenaltyRule.day_of_week, record.day_of_week),
            _eq(PenaltyRule.start_time, record.start_time),
            _eq(PenaltyRule.end_time, record.end_time),
            PenaltyRule.effective_from == record.effective_from,
        )
        .one_or_none()
    )
    if rule is None:
        rule = PenaltyRule(
            award_id=award.id,
            classification_id=classification_id,
            penalty_type=record.penalty_type,
            day_of_week=record.day_of_week,
            start_time=record.start_time,
            end_time=record.end_time,
            effective_from=record.effective_from,
        )
        session.add(rule)
    rule.multiplier = record.multiplier
    rule.effective_to = record.effective_to
    session.flush()
    return rule


def upsert_allowance_rule(session: Session, record: AllowanceRuleUpsert) -> AllowanceRule:
    award = _award(session, record.award_code)
    classification_id = _scope(session, award, record.classification_name, record.classification_level)
    rule = (
        session.query(AllowanceRule)
        .filter(
            AllowanceRule.award_id == award.id,
            _eq(AllowanceRule.classification_id, classification_id),
            func.lower(AllowanceRule.name) == record.name.lower(),
            AllowanceRule.effective_from == record.effective_from,
        )
        .one_or_none()
    )
    if rule is None:
        rule = AllowanceRule(
            award_id=award.id,
            classification_id=classification_id,
            name=record.name,
            effective_from=record.effective_from,
        )
        session.add(rule)
    rule.allowance_type = record.allowance_type
    rule.amount = round_half_up(to_decimal(record.amount))
    rule.effective_to = record.effective_to
    session.flush()
    return rule


def upsert_public_holiday(session: Session, record: PublicHolidayUpsert) -> PublicHoliday:
    jurisdiction = record.jurisdiction.strip().upper()
    holiday = (
        session.query(PublicHoliday)
        .filter(PublicHoliday.jurisdiction == jurisdiction, PublicHoliday.date == record.date)
        .one_or_none()
    )
    if holiday is None:
        holiday = PublicHoliday(jurisdiction=jurisdiction, date=record.date)
        session.add(holiday)
    holiday.name = record.name
    session.flush()
    return holiday


def apply_catalog_payload(session: Session, payload: CatalogSyncPayload) -> CatalogSyncResult:
    """Apply one sync batch atomically; any failure rolls the whole batch back."""
    result = CatalogSyncResult()
    try:
        for award in payload.awards:
            upsert_award(session, award)
            result.awards += 1
        for classification in payload.classifications:
            upsert_classification(session, classification)
            result.classifications += 1
        for pay_rate in sorted(payload.pay_rates, key=lambda r: r.effective_from):
            upsert_pay_rate(session, pay_rate)
            result.pay_rates += 1
        for penalty in payload.penalty_rules:
            upsert_penalty_rule(session, penalty)
            result.penalty_rules += 1
        for allowance in payload.allowance_rules:
            upsert_allowance_rule(session, allowance)
            result.allowance_rules += 1
        for holiday in payload.public_holidays:
            upsert_public_holiday(session, holiday)
            result.public_holidays += 1
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("catalog_sync_failed")
        raise

    logger.info("catalog_synced", extra=result.model_dump())
    return result
