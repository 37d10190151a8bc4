from datetime import date
from decimal import Decimal

import pytest

from pay_engine.errors import AmbiguousRate, RateNotFound
from pay_engine.models.db_models import AllowanceRule, PayRate, PenaltyRule
from pay_engine.services.rate_catalog import RateCatalog


def test_rate_in_force_on_date(db, catalog):
    rate = RateCatalog(db).get_pay_rate(catalog.year1.id, 1, True, date(2025, 3, 5))
    assert rate.hourly_rate == Decimal("25.00")


def test_effective_window_is_half_open(db, catalog):
    """effective_to is exclusive: the new rate applies on the changeover date"""
    old = db.query(PayRate).filter(PayRate.classification_id == catalog.year1.id).one()
    old.effective_to = date(2025, 7, 1)
    db.add(PayRate(classification_id=catalog.year1.id, hourly_rate=Decimal("26.00"),
                   effective_from=date(2025, 7, 1), is_apprentice_rate=True, apprenticeship_year=1))
    db.commit()
    rc = RateCatalog(db)
    assert rc.get_pay_rate(catalog.year1.id, 1, True, date(2025, 6, 30)).hourly_rate == Decimal("25.00")
    assert rc.get_pay_rate(catalog.year1.id, 1, True, date(2025, 7, 1)).hourly_rate == Decimal("26.00")


def test_missing_year_raises_rate_not_found(db, catalog):
    with pytest.raises(RateNotFound) as exc:
        RateCatalog(db).get_pay_rate(catalog.year1.id, 3, True, date(2025, 3, 1))
    assert exc.value.code == "RATE_NOT_FOUND"
    assert exc.value.status_code == 404
    assert exc.value.message == (
        f"No apprentice pay rate for classification {catalog.year1.id} "
        "in apprenticeship year 3 as of 2025-03-01"
    )


def test_adult_rate_is_separate_from_apprentice_rate(db, catalog):
    with pytest.raises(RateNotFound):
        RateCatalog(db).get_pay_rate(catalog.year1.id, None, False, date(2025, 3, 1))


def test_overlapping_pay_rates_are_never_tie_broken(db, catalog, caplog):
    db.add(PayRate(classification_id=catalog.year1.id, hourly_rate=Decimal("24.00"),
                   effective_from=date(2025, 1, 1), is_apprentice_rate=True, apprenticeship_year=1))
    db.commit()
    with pytest.raises(AmbiguousRate) as exc:
        RateCatalog(db).get_pay_rate(catalog.year1.id, 1, True, date(2025, 3, 1))
    assert exc.value.status_code == 409
    assert len(exc.value.context["row_ids"]) == 2
    assert any(r.levelname == "ERROR" and r.getMessage() == "catalog_overlapping_pay_rates"
               for r in caplog.records)


def test_classification_penalty_rule_overrides_award_rule(db, catalog):
    db.add(PenaltyRule(award_id=catalog.award.id, classification_id=catalog.year1.id,
                       penalty_type="saturday", multiplier=Decimal("1.75"), effective_from=date(2024, 7, 1)))
    db.commit()
    rc = RateCatalog(db)
    scoped = rc.get_penalty_rule(catalog.award.id, catalog.year1.id, "saturday", date(2025, 3, 1))
    award_wide = rc.get_penalty_rule(catalog.award.id, catalog.year2.id, "saturday", date(2025, 3, 1))
    assert scoped.multiplier == Decimal("1.75")
    assert award_wide.multiplier == Decimal("1.5")


def test_no_penalty_rule_returns_none(db, catalog):
    assert RateCatalog(db).get_penalty_rule(
        catalog.award.id, catalog.year1.id, "weekday_overtime", date(2025, 3, 5)
    ) is None


def test_two_award_wide_penalty_rules_are_ambiguous(db, catalog):
    db.add(PenaltyRule(award_id=catalog.award.id, penalty_type="sunday", multiplier=Decimal("1.75"),
                       effective_from=date(2025, 1, 1)))
    db.commit()
    with pytest.raises(AmbiguousRate):
        RateCatalog(db).get_penalty_rule(catalog.award.id, catalog.year1.id, "sunday", date(2025, 3, 2))


def test_penalty_rule_day_restriction(db, catalog):
    """A rule restricted to Sunday (0) does not cover a Saturday (6) shift"""
    db.query(PenaltyRule).filter(PenaltyRule.penalty_type == "saturday").update({PenaltyRule.day_of_week: 0})
    db.commit()
    rc = RateCatalog(db)
    assert rc.get_penalty_rule(catalog.award.id, catalog.year1.id, "saturday", date(2025, 3, 1),
                               day_of_week=6) is None


def test_scoped_allowance_replaces_award_wide_by_name(db, catalog, add_allowance):
    add_allowance(name="Tool allowance", amount="2.00")
    add_allowance(name="tool allowance", amount="3.10", classification_id=catalog.year1.id)
    add_allowance(name="Meal allowance", allowance_type="per_shift", amount="16.62")
    rules = RateCatalog(db).get_allowance_rules(catalog.award.id, catalog.year1.id, date(2025, 3, 5))
    assert sorted((r.name, r.amount) for r in rules) == [
        ("Meal allowance", Decimal("16.62")),
        ("tool allowance", Decimal("3.10")),
    ]


def test_duplicate_award_wide_allowance_is_ambiguous(db, catalog, add_allowance):
    add_allowance(name="Tool allowance", amount="2.00")
    add_allowance(name="Tool allowance", amount="2.20", effective_from=date(2025, 1, 1))
    with pytest.raises(AmbiguousRate):
        RateCatalog(db).get_allowance_rules(catalog.award.id, catalog.year1.id, date(2025, 3, 5))


def test_expired_allowance_not_applied(db, catalog, add_allowance):
    add_allowance(name="Tool allowance", amount="2.00", effective_to=date(2025, 1, 1))
    assert RateCatalog(db).get_allowance_rules(catalog.award.id, catalog.year1.id, date(2025, 3, 5)) == []
    assert db.query(AllowanceRule).count() == 1


def test_national_holidays_apply_to_every_state(db, catalog):
    rc = RateCatalog(db)
    assert rc.is_public_holiday(date(2025, 1, 1), "WA")
    assert rc.is_public_holiday(date(2025, 10, 6), "nsw")
    assert not rc.is_public_holiday(date(2025, 10, 6), "QLD")


def test_list_public_holidays_for_state_includes_national(db, catalog):
    holidays = RateCatalog(db).list_public_holidays("NSW")
    assert [(h.jurisdiction, h.date) for h in holidays] == [
        ("NAT", date(2025, 1, 1)),
        ("NSW", date(2025, 10, 6)),
    ]
