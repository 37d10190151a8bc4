"""
As-of lookups over the rate catalog.
All rates, penalties, allowances and holidays come from the catalog tables;
this module only filters them by effective window and scope.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pay_engine.errors import AmbiguousRate, RateNotFound
from pay_engine.models.db_models import (
    AllowanceRule,
    Award,
    Classification,
    PayRate,
    PenaltyRule,
    PublicHoliday,
)
from pay_engine.services.award_rules import NATIONAL_JURISDICTION

logger = logging.getLogger(__name__)


def _in_force(model, as_of: date):
    """Half-open [effective_from, effective_to) window filter."""
    return (
        model.effective_from <= as_of,
        or_(model.effective_to.is_(None), model.effective_to > as_of),
    )


def _minutes(hhmm: Optional[str]) -> Optional[int]:
    if not hhmm:
        return None
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def _rule_covers(rule: PenaltyRule, day_of_week: Optional[int], start: Optional[str], end: Optional[str]) -> bool:
    """A rule with day or time restrictions only covers shifts that fall inside them."""
    if rule.day_of_week is not None and day_of_week is not None and rule.day_of_week != day_of_week:
        return False
    window_start = _minutes(rule.start_time)
    window_end = _minutes(rule.end_time)
    if window_start is not None and start is not None and _minutes(start) < window_start:
        return False
    if window_end is not None and end is not None and _minutes(end) > window_end:
        return False
    return True


class RateCatalog:
    """Read model over awards, pay rates, penalty/allowance rules and holidays."""

    def __init__(self, db: Session):
        self.db = db

    # --- Pay rates ---

    def get_pay_rate(
        self,
        classification_id: int,
        apprenticeship_year: Optional[int],
        is_apprentice_rate: bool,
        as_of: date,
    ) -> PayRate:
        """Return the single pay rate in force on as_of; never tie-breaks."""
        year_filter = (
            PayRate.apprenticeship_year.is_(None)
            if apprenticeship_year is None
            else PayRate.apprenticeship_year == apprenticeship_year
        )
        rows = (
            self.db.query(PayRate)
            .filter(
                PayRate.classification_id == classification_id,
                PayRate.is_apprentice_rate == is_apprentice_rate,
                year_filter,
                *_in_force(PayRate, as_of),
            )
            .order_by(PayRate.id)
            .all()
        )
        if not rows:
            raise RateNotFound(classification_id, apprenticeship_year, is_apprentice_rate, as_of)
        if len(rows) > 1:
            row_ids = [r.id for r in rows]
            logger.error(
                "catalog_overlapping_pay_rates",
                extra={
                    "classification_id": classification_id,
                    "apprenticeship_year": apprenticeship_year,
                    "as_of": as_of.isoformat(),
                    "row_ids": row_ids,
                },
            )
            raise AmbiguousRate(
                "pay rate",
                as_of,
                row_ids,
                classification_id=classification_id,
                apprenticeship_year=apprenticeship_year,
            )
        return rows[0]

    # --- Penalty rules ---

    def get_penalty_rule(
        self,
        award_id: int,
        classification_id: Optional[int],
        penalty_type: str,
        as_of: date,
        *,
        day_of_week: Optional[int] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Optional[PenaltyRule]:
        """
        Classification-scoped rules take precedence over award-wide rules.
        Returns None when no rule applies; two rules at the winning scope is an
        integrity error.
        """
        rows = (
            self.db.query(PenaltyRule)
            .filter(
                PenaltyRule.award_id == award_id,
                PenaltyRule.penalty_type == penalty_type,
                or_(
                    PenaltyRule.classification_id.is_(None),
                    PenaltyRule.classification_id == classification_id,
                ),
                *_in_force(PenaltyRule, as_of),
            )
            .order_by(PenaltyRule.id)
            .all()
        )
        rows = [r for r in rows if _rule_covers(r, day_of_week, start, end)]
        scoped = [r for r in rows if classification_id is not None and r.classification_id == classification_id]
        candidates = scoped or [r for r in rows if r.classification_id is None]
        if not candidates:
            return None
        if len(candidates) > 1:
            row_ids = [r.id for r in candidates]
            logger.error(
                "catalog_overlapping_penalty_rules",
                extra={
                    "award_id": award_id,
                    "classification_id": classification_id,
                    "penalty_type": penalty_type,
                    "as_of": as_of.isoformat(),
                    "row_ids": row_ids,
                },
            )
            raise AmbiguousRate(
                f"{penalty_type} penalty rule",
                as_of,
                row_ids,
                award_id=award_id,
                classification_id=classification_id,
            )
        return candidates[0]

    # --- Allowance rules ---

    def get_allowance_rules(
        self,
        award_id: int,
        classification_id: Optional[int],
        as_of: date,
    ) -> list[AllowanceRule]:
        """Applicable allowances; a classification-scoped rule replaces an award-wide one of the same name."""
        rows = (
            self.db.query(AllowanceRule)
            .filter(
                AllowanceRule.award_id == award_id,
                or_(
                    AllowanceRule.classification_id.is_(None),
                    AllowanceRule.classification_id == classification_id,
                ),
                *_in_force(AllowanceRule, as_of),
            )
            .order_by(AllowanceRule.name, AllowanceRule.id)
            .all()
        )
        by_name: dict[str, list[AllowanceRule]] = {}
        for row in rows:
            by_name.setdefault(row.name.strip().lower(), []).append(row)

        selected: list[AllowanceRule] = []
        for key, group in by_name.items():
            scoped = [r for r in group if r.classification_id is not None]
            winners = scoped or group
            if len(winners) > 1:
                row_ids = [r.id for r in winners]
                logger.error(
                    "catalog_overlapping_allowance_rules",
                    extra={"award_id": award_id, "allowance": key, "row_ids": row_ids},
                )
                raise AmbiguousRate(f"{winners[0].name} allowance rule", as_of, row_ids, award_id=award_id)
            selected.append(winners[0])
        return selected

    # --- Public holidays ---

    def public_holiday(self, on: date, jurisdiction: str) -> Optional[PublicHoliday]:
        return (
            self.db.query(PublicHoliday)
            .filter(
                PublicHoliday.date == on,
                PublicHoliday.jurisdiction.in_([jurisdiction.upper(), NATIONAL_JURISDICTION]),
            )
            .order_by(PublicHoliday.id)
            .first()
        )

    def is_public_holiday(self, on: date, jurisdiction: str) -> bool:
        return self.public_holiday(on, jurisdiction) is not None

    # --- Reference listings ---

    def get_award_by_code(self, code: str) -> Optional[Award]:
        return self.db.query(Award).filter(Award.code == code.strip().upper()).first()

    def list_awards(self, active_only: bool = True) -> list[Award]:
        query = self.db.query(Award)
        if active_only:
            query = query.filter(Award.is_active.is_(True))
        return query.order_by(Award.code).all()

    def list_classifications(self, award_id: int) -> list[Classification]:
        return (
            self.db.query(Classification)
            .filter(Classification.award_id == award_id)
            .order_by(Classification.level, Classification.name)
            .all()
        )

    def list_penalty_rules(self, award_id: int, as_of: Optional[date] = None) -> list[PenaltyRule]:
        query = self.db.query(PenaltyRule).filter(PenaltyRule.award_id == award_id)
        if as_of:
            query = query.filter(*_in_force(PenaltyRule, as_of))
        return query.order_by(PenaltyRule.penalty_type, PenaltyRule.effective_from).all()

    def list_allowance_rules(self, award_id: int, as_of: Optional[date] = None) -> list[AllowanceRule]:
        query = self.db.query(AllowanceRule).filter(AllowanceRule.award_id == award_id)
        if as_of:
            query = query.filter(*_in_force(AllowanceRule, as_of))
        return query.order_by(AllowanceRule.name, AllowanceRule.effective_from).all()

    def list_public_holidays(
        self,
        jurisdiction: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[PublicHoliday]:
        query = self.db.query(PublicHoliday)
        if jurisdiction:
            query = query.filter(
                PublicHoliday.jurisdiction.in_([jurisdiction.upper(), NATIONAL_JURISDICTION])
            )
        if date_from:
            query = query.filter(PublicHoliday.date >= date_from)
        if date_to:
            query = query.filter(PublicHoliday.date <= date_to)
        return query.order_by(PublicHoliday.date).all()
