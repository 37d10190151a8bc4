from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from pay_engine.errors import AwardNotFound, ClassificationNotFound, RateNotFound
from pay_engine.models.db_models import Award, Classification, TradeAwardMapping
from pay_engine.services.award_resolver import (
    AwardResolver,
    TradeMapping,
    award_code_for_trade,
    load_trade_mappings,
    resolve_jurisdiction,
)
from pay_engine.services.award_rules import TRADE_MAPPING_VERSION
from pay_engine.services.rate_catalog import RateCatalog

AS_OF = date(2025, 3, 5)


def _worker(trade="Electrical", year=1, state=None):
    return SimpleNamespace(trade=trade, apprenticeship_year=year, state=state)


def _resolver(db):
    return AwardResolver(db, RateCatalog(db), "MA000010")


@pytest.mark.parametrize(
    "trade, expected",
    [
        ("Electrical Fitter", "MA000025"),
        ("Building and Construction", "MA000020"),
        ("Construction carpenter", "MA000020"),
        ("Hospitality - Commercial Cookery", "MA000009"),
        ("Food Processing", "MA000009"),
        ("Plumbing", "MA000010"),
        (None, "MA000010"),
    ],
)
def test_packaged_trade_mapping(db, trade, expected):
    code, version = award_code_for_trade(trade, load_trade_mappings(db), "MA000010")
    assert code == expected
    assert version == (None if expected == "MA000010" else TRADE_MAPPING_VERSION)


def test_mapping_table_replaces_packaged_defaults(db):
    db.add(TradeAwardMapping(keyword="plumb", award_code="MA000036", priority=5, version="2025.2"))
    db.commit()
    mappings = load_trade_mappings(db)
    assert mappings == [TradeMapping("plumb", "MA000036", 5, "2025.2")]
    assert award_code_for_trade("Plumbing", mappings, "MA000010") == ("MA000036", "2025.2")
    assert award_code_for_trade("Electrical", mappings, "MA000010") == ("MA000010", None)


def test_inactive_mappings_ignored(db):
    db.add(TradeAwardMapping(keyword="electrical", award_code="MA000099", priority=1, version="old",
                             is_active=False))
    db.commit()
    assert award_code_for_trade("Electrical", load_trade_mappings(db), "MA000010")[0] == "MA000025"


def test_jurisdiction_prefers_placement_then_apprentice():
    assert resolve_jurisdiction(_worker(state="VIC"), SimpleNamespace(state="nsw"), "QLD") == "NSW"
    assert resolve_jurisdiction(_worker(state="VIC"), SimpleNamespace(state=None), "QLD") == "VIC"
    assert resolve_jurisdiction(_worker(), None, "qld") == "QLD"


def test_resolves_award_classification_and_rate(db, catalog):
    resolved = _resolver(db).resolve(_worker(year=2), SimpleNamespace(id=3, state="NSW"), AS_OF)
    assert resolved.award_code == "MA000025"
    assert resolved.classification_id == catalog.year2.id
    assert resolved.apprenticeship_year == 2
    assert resolved.hourly_rate == Decimal("28.50")
    assert resolved.mapping_version == TRADE_MAPPING_VERSION


def test_missing_year_defaults_to_first(db, catalog):
    resolved = _resolver(db).resolve(_worker(year=None), None, AS_OF)
    assert resolved.apprenticeship_year == 1
    assert resolved.classification_id == catalog.year1.id


def test_unmapped_trade_without_default_award(db, catalog):
    with pytest.raises(AwardNotFound) as exc:
        _resolver(db).resolve(_worker(trade="Plumbing"), None, AS_OF)
    assert exc.value.context["award_code"] == "MA000010"


def test_inactive_award_not_resolved(db, catalog):
    db.query(Award).update({Award.is_active: False})
    db.commit()
    with pytest.raises(AwardNotFound):
        _resolver(db).resolve(_worker(), None, AS_OF)


def test_falls_back_to_any_apprentice_classification(db, catalog):
    """No 'Apprentice Year 3' level: the first apprentice classification is used, then its rate is looked up"""
    with pytest.raises(RateNotFound) as exc:
        _resolver(db).resolve(_worker(year=3), None, AS_OF)
    assert exc.value.context["classification_id"] == catalog.year1.id
    assert exc.value.context["apprenticeship_year"] == 3


def test_no_apprentice_classification(db, catalog):
    db.query(Classification).update({Classification.name: "Electrician"})
    db.commit()
    with pytest.raises(ClassificationNotFound):
        _resolver(db).resolve(_worker(year=3), None, AS_OF)
