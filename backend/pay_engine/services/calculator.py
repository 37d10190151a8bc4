"""
Shift pay calculation.

base pay + penalty uplift + allowances, each rounded half-up to the cent as it
is produced. The penalty amount is only the uplift over base pay
((base_rate x multiplier - base_rate) x hours), so base and penalty pay stay
separately reportable.
"""
import logging
import re
from datetime import date
from decimal import Decimal
from typing import Optional

from pay_engine.errors import InputValidationError, InvalidTimeRange
from pay_engine.models.schemas import AllowanceLine, CalculationResult, Shift
from pay_engine.services.award_rules import (
    ALLOWANCE_PER_HOUR,
    DAY_WEEKDAY,
    DEFAULT_APPRENTICESHIP_YEAR,
    RULE_ALLOWANCES,
    RULE_BASE_RATE,
    RULE_PENALTY,
    round_half_up,
    to_decimal,
)
from pay_engine.services.day_classifier import DayClassifier, day_of_week
from pay_engine.services.rate_catalog import RateCatalog

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"^([0-9]{2}):([0-9]{2})$")
_MINUTES_PER_HOUR = Decimal(60)


def _parse_time(hhmm: Optional[str]) -> tuple[int, int]:
    """Parse HH:MM 24h to (hour, minute); anything else is an InvalidTimeRange."""
    match = _TIME_PATTERN.match(hhmm.strip()) if isinstance(hhmm, str) else None
    if not match:
        raise InvalidTimeRange(f"Invalid time {hhmm!r}; expected HH:MM (24 hour)", value=hhmm)
    h, m = int(match.group(1)), int(match.group(2))
    if h > 23 or m > 59:
        raise InvalidTimeRange(f"Invalid time {hhmm!r}; hours must be 0-23 and minutes 0-59", value=hhmm)
    return h, m


def hours_worked(start_time: str, end_time: str, break_duration) -> Decimal:
    """(end - start) - break, in hours. Overnight shifts are not supported."""
    sh, sm = _parse_time(start_time)
    eh, em = _parse_time(end_time)
    span_minutes = (eh * 60 + em) - (sh * 60 + sm)
    hours = Decimal(span_minutes) / _MINUTES_PER_HOUR - to_decimal(break_duration or 0)
    if hours <= 0:
        raise InvalidTimeRange(
            f"Shift {start_time}-{end_time} with {break_duration}h break has no worked hours",
            start_time=start_time,
            end_time=end_time,
            break_duration=str(break_duration),
        )
    return hours


class ShiftCalculator:
    def __init__(self, catalog: RateCatalog, classifier: DayClassifier, default_jurisdiction: str):
        self.catalog = catalog
        self.classifier = classifier
        self.default_jurisdiction = default_jurisdiction

    def calculate(
        self,
        award_id: int,
        classification_id: int,
        shift: Shift,
        as_of: Optional[date] = None,
        *,
        apprenticeship_year: Optional[int] = DEFAULT_APPRENTICESHIP_YEAR,
        is_apprentice_rate: bool = True,
        jurisdiction: Optional[str] = None,
    ) -> CalculationResult:
        if shift.date is None:
            raise InputValidationError("Shift date is required")
        as_of = as_of or shift.date
        day_type = self.classifier.day_type_for(shift, jurisdiction or self.default_jurisdiction)

        if is_apprentice_rate:
            apprenticeship_year = apprenticeship_year or DEFAULT_APPRENTICESHIP_YEAR
        else:
            apprenticeship_year = None
        pay_rate = self.catalog.get_pay_rate(classification_id, apprenticeship_year, is_apprentice_rate, as_of)
        base_rate = to_decimal(pay_rate.hourly_rate)
        hours = hours_worked(shift.start_time, shift.end_time, shift.break_duration)
        applied_rules = [RULE_BASE_RATE]

        base_amount = round_half_up(base_rate * hours)

        penalty_rate = None
        penalty_multiplier = None
        penalty_amount = Decimal("0.00")
        if day_type != DAY_WEEKDAY:
            rule = self.catalog.get_penalty_rule(
                award_id,
                classification_id,
                day_type,
                as_of,
                day_of_week=day_of_week(shift.date),
                start=shift.start_time,
                end=shift.end_time,
            )
            if rule:
                penalty_multiplier = to_decimal(rule.multiplier)
                full_rate = base_rate * penalty_multiplier
                penalty_rate = round_half_up(full_rate, 4)
                penalty_amount = round_half_up((full_rate - base_rate) * hours)
                applied_rules.append(RULE_PENALTY)

        allowances: list[AllowanceLine] = []
        for rule in self.catalog.get_allowance_rules(award_id, classification_id, as_of):
            amount = to_decimal(rule.amount)
            if rule.allowance_type == ALLOWANCE_PER_HOUR:
                amount = amount * hours
            amount = round_half_up(amount)
            if amount <= 0:
                continue
            allowances.append(AllowanceLine(name=rule.name, amount=amount, type=rule.allowance_type))
        if allowances:
            applied_rules.append(RULE_ALLOWANCES)

        total_amount = base_amount + penalty_amount + sum((a.amount for a in allowances), Decimal("0.00"))

        logger.debug(
            "shift_calculated",
            extra={
                "shift_date": shift.date.isoformat(),
                "day_type": day_type,
                "classification_id": classification_id,
                "total_amount": str(total_amount),
            },
        )
        return CalculationResult(
            shift_date=shift.date,
            day_type=day_type,
            base_rate=base_rate,
            hours_worked=round_half_up(hours),
            base_amount=base_amount,
            penalty_rate=penalty_rate,
            penalty_multiplier=penalty_multiplier,
            penalty_amount=penalty_amount,
            allowances=allowances,
            total_amount=total_amount,
            applied_rules=applied_rules,
        )
