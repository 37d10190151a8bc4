"""
Pytest tests for the shift calculator.
Catalog from conftest: year 1 apprentice $25.00/hr, Saturday x1.5, Sunday x2.0,
public holiday x2.5. Assert exact dollar amounts to 2 decimal places.
"""
from datetime import date
from decimal import Decimal

import pytest

from pay_engine.errors import InvalidTimeRange, RateNotFound
from pay_engine.models.schemas import Shift
from pay_engine.services.calculator import hours_worked

WEDNESDAY = date(2025, 3, 5)
SATURDAY = date(2025, 3, 1)
SUNDAY = date(2025, 3, 2)
NEW_YEARS_DAY = date(2025, 1, 1)  # a Wednesday
LABOUR_DAY_NSW = date(2025, 10, 6)  # a Monday


def _calc(pay_engine, catalog, shift, **kwargs):
    return pay_engine.calculator.calculate(catalog.award.id, catalog.year1.id, shift, **kwargs)


# ---- Hours ----
def test_hours_worked_subtracts_break():
    """09:00-17:00 with a 1h break → 7 hours"""
    assert hours_worked("09:00", "17:00", Decimal("1")) == Decimal("7")


def test_hours_worked_half_hour_break():
    """08:00-16:00 with a 0.5h break → 7.5 hours"""
    assert hours_worked("08:00", "16:00", Decimal("0.5")) == Decimal("7.5")


@pytest.mark.parametrize("value", ["9am", "25:00", "12:60", "", None, "12:5", "9:00", "０９:００"])
def test_invalid_clock_time_rejected(value):
    with pytest.raises(InvalidTimeRange):
        hours_worked(value, "17:00", 0)


def test_overnight_shift_rejected():
    """16:00 → 08:00 is not an overnight shift; it is invalid"""
    with pytest.raises(InvalidTimeRange):
        hours_worked("16:00", "08:00", 0)


def test_break_longer_than_shift_rejected():
    with pytest.raises(InvalidTimeRange):
        hours_worked("09:00", "10:00", Decimal("1"))


# ---- Single-shift scenarios ----
def test_weekday_shift_base_pay_only(pay_engine, catalog):
    """Wednesday 09:00-17:00, 1h break: 7 × $25.00 = $175.00"""
    result = _calc(pay_engine, catalog, Shift(date=WEDNESDAY, start_time="09:00", end_time="17:00",
                                              break_duration=Decimal("1")))
    assert result.day_type == "weekday"
    assert result.hours_worked == Decimal("7.00")
    assert result.base_amount == Decimal("175.00")
    assert result.penalty_amount == Decimal("0.00")
    assert result.penalty_rate is None
    assert result.total_amount == Decimal("175.00")
    assert result.applied_rules == ["base_rate"]


def test_saturday_penalty_is_uplift_only(pay_engine, catalog):
    """Saturday 08:00-16:00, 0.5h break: base $187.50 + uplift (37.50-25.00) × 7.5 = $93.75 → $281.25"""
    result = _calc(pay_engine, catalog, Shift(date=SATURDAY, start_time="08:00", end_time="16:00",
                                              break_duration=Decimal("0.5")))
    assert result.day_type == "saturday"
    assert result.base_rate == Decimal("25.00")
    assert result.base_amount == Decimal("187.50")
    assert result.penalty_multiplier == Decimal("1.5")
    assert result.penalty_rate == Decimal("37.5000")
    assert result.penalty_amount == Decimal("93.75")
    assert result.total_amount == Decimal("281.25")
    assert result.applied_rules == ["base_rate", "penalty"]


def test_sunday_double_time(pay_engine, catalog):
    """Sunday 08:00-12:00: base $100.00 + uplift $100.00 → $200.00"""
    result = _calc(pay_engine, catalog, Shift(date=SUNDAY, start_time="08:00", end_time="12:00"))
    assert result.day_type == "sunday"
    assert result.penalty_amount == Decimal("100.00")
    assert result.total_amount == Decimal("200.00")


def test_national_public_holiday_on_weekday(pay_engine, catalog):
    """New Year's Day 09:00-13:00: base $100.00 + uplift (62.50-25.00) × 4 = $150.00 → $250.00"""
    result = _calc(pay_engine, catalog, Shift(date=NEW_YEARS_DAY, start_time="09:00", end_time="13:00"))
    assert result.day_type == "public_holiday"
    assert result.penalty_amount == Decimal("150.00")
    assert result.total_amount == Decimal("250.00")


def test_state_holiday_only_in_its_jurisdiction(pay_engine, catalog):
    shift = Shift(date=LABOUR_DAY_NSW, start_time="09:00", end_time="13:00")
    assert _calc(pay_engine, catalog, shift, jurisdiction="NSW").day_type == "public_holiday"
    assert _calc(pay_engine, catalog, shift, jurisdiction="VIC").day_type == "weekday"


def test_explicit_day_type_wins(pay_engine, catalog):
    """A weekday shift flagged as Sunday is paid as Sunday"""
    result = _calc(pay_engine, catalog, Shift(date=WEDNESDAY, start_time="08:00", end_time="12:00",
                                              day_type="sunday"))
    assert result.day_type == "sunday"
    assert result.total_amount == Decimal("200.00")


def test_weekend_without_penalty_rule_pays_base(pay_engine, catalog, db):
    from pay_engine.models.db_models import PenaltyRule
    db.query(PenaltyRule).filter(PenaltyRule.penalty_type == "saturday").update(
        {PenaltyRule.effective_to: date(2025, 1, 1)}
    )
    db.commit()
    result = _calc(pay_engine, catalog, Shift(date=SATURDAY, start_time="08:00", end_time="12:00"))
    assert result.day_type == "saturday"
    assert result.penalty_amount == Decimal("0.00")
    assert result.penalty_multiplier is None
    assert result.total_amount == Decimal("100.00")
    assert "penalty" not in result.applied_rules


# ---- Allowances ----
def test_per_hour_allowance(pay_engine, catalog, add_allowance):
    """Weekday 7h + $2.00/hr tool allowance: $175.00 + $14.00 = $189.00"""
    add_allowance(name="Tool allowance", allowance_type="per_hour", amount="2.00")
    result = _calc(pay_engine, catalog, Shift(date=WEDNESDAY, start_time="09:00", end_time="17:00",
                                              break_duration=Decimal("1")))
    assert [(a.name, a.amount, a.type) for a in result.allowances] == [
        ("Tool allowance", Decimal("14.00"), "per_hour")
    ]
    assert result.total_amount == Decimal("189.00")
    assert result.applied_rules == ["base_rate", "allowances"]


def test_per_shift_allowance_is_flat(pay_engine, catalog, add_allowance):
    add_allowance(name="Meal allowance", allowance_type="per_shift", amount="16.62")
    result = _calc(pay_engine, catalog, Shift(date=WEDNESDAY, start_time="09:00", end_time="13:00"))
    assert result.allowances[0].amount == Decimal("16.62")
    assert result.total_amount == Decimal("116.62")


def test_zero_allowance_omitted(pay_engine, catalog, add_allowance):
    add_allowance(name="Suspended allowance", allowance_type="per_shift", amount="0.00")
    result = _calc(pay_engine, catalog, Shift(date=WEDNESDAY, start_time="09:00", end_time="13:00"))
    assert result.allowances == []
    assert "allowances" not in result.applied_rules


def test_total_is_sum_of_rounded_parts(pay_engine, catalog, add_allowance):
    """Saturday 09:00-11:20 at $25.00: 2h20m; each amount rounds half-up before summing"""
    add_allowance(name="Tool allowance", allowance_type="per_hour", amount="1.15")
    result = _calc(pay_engine, catalog, Shift(date=SATURDAY, start_time="09:00", end_time="11:20"))
    assert result.base_amount == Decimal("58.33")
    assert result.penalty_amount == Decimal("29.17")
    assert result.allowances[0].amount == Decimal("2.68")
    assert result.total_amount == result.base_amount + result.penalty_amount + result.allowances[0].amount
    assert result.total_amount == Decimal("90.18")


# ---- Rate lookups ----
def test_year_two_rate(pay_engine, catalog):
    """Year 2 at $28.50 for 4h → $114.00"""
    result = pay_engine.calculator.calculate(
        catalog.award.id, catalog.year2.id,
        Shift(date=WEDNESDAY, start_time="09:00", end_time="13:00"),
        apprenticeship_year=2,
    )
    assert result.total_amount == Decimal("114.00")


def test_missing_rate_is_reported(pay_engine, catalog):
    with pytest.raises(RateNotFound) as exc:
        pay_engine.calculator.calculate(
            catalog.award.id, catalog.year1.id,
            Shift(date=WEDNESDAY, start_time="09:00", end_time="13:00"),
            apprenticeship_year=3,
        )
    assert exc.value.context["apprenticeship_year"] == 3
    assert "apprenticeship year 3" in exc.value.message


def test_shift_before_rates_in_force(pay_engine, catalog):
    with pytest.raises(RateNotFound):
        _calc(pay_engine, catalog, Shift(date=date(2024, 6, 28), start_time="09:00", end_time="13:00"))
