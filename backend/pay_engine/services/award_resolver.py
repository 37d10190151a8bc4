"""
Resolve a worker's award, classification and apprentice pay rate.

The trade -> award mapping is data: active rows of trade_award_mappings are
tried in priority order and the first keyword found in the worker's trade
wins. The packaged defaults in award_rules apply only while that table is
empty.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from pay_engine.errors import AwardNotFound, ClassificationNotFound
from pay_engine.models.db_models import Award, Classification, TradeAwardMapping
from pay_engine.services.award_rules import (
    APPRENTICE_LEVEL_LABEL,
    DEFAULT_APPRENTICESHIP_YEAR,
    DEFAULT_TRADE_AWARD_MAPPINGS,
    TRADE_MAPPING_VERSION,
)
from pay_engine.services.rate_catalog import RateCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeMapping:
    keyword: str
    award_code: str
    priority: int
    version: str


@dataclass(frozen=True)
class ResolvedAward:
    award_id: int
    classification_id: int
    apprenticeship_year: int
    award_code: str
    award_name: str
    classification_name: str
    hourly_rate: Decimal
    mapping_version: Optional[str]


def load_trade_mappings(db: Session) -> list[TradeMapping]:
    rows = (
        db.query(TradeAwardMapping)
        .filter(TradeAwardMapping.is_active.is_(True))
        .order_by(TradeAwardMapping.priority, TradeAwardMapping.keyword)
        .all()
    )
    if rows:
        return [TradeMapping(r.keyword.lower(), r.award_code, r.priority, r.version) for r in rows]
    return [
        TradeMapping(keyword, code, priority, TRADE_MAPPING_VERSION)
        for keyword, code, priority in sorted(DEFAULT_TRADE_AWARD_MAPPINGS, key=lambda m: (m[2], m[0]))
    ]


def award_code_for_trade(
    trade: Optional[str],
    mappings: list[TradeMapping],
    default_code: str,
) -> tuple[str, Optional[str]]:
    """Return (award_code, mapping_version); the default code has no mapping version."""
    text = (trade or "").lower()
    for mapping in mappings:
        if mapping.keyword and mapping.keyword in text:
            return mapping.award_code, mapping.version
    return default_code, None


def resolve_jurisdiction(worker: Any, assignment: Any, default: str) -> str:
    """Host placement's state, then the apprentice's own state, then the configured default."""
    for source in (assignment, worker):
        state = getattr(source, "state", None) if source is not None else None
        if state:
            return state.strip().upper()
    return default.upper()


class AwardResolver:
    def __init__(self, db: Session, catalog: RateCatalog, default_award_code: str):
        self.db = db
        self.catalog = catalog
        self.default_award_code = default_award_code

    def resolve(self, worker: Any, assignment: Any, as_of: date) -> ResolvedAward:
        """Read-only; raises AwardNotFound, ClassificationNotFound or the catalog's rate errors."""
        year = getattr(worker, "apprenticeship_year", None) or DEFAULT_APPRENTICESHIP_YEAR
        award_code, mapping_version = award_code_for_trade(
            getattr(worker, "trade", None),
            load_trade_mappings(self.db),
            self.default_award_code,
        )

        award = self._find_award(award_code, as_of)
        classification = self._find_classification(award, year)
        pay_rate = self.catalog.get_pay_rate(classification.id, year, True, as_of)

        logger.info(
            "award_resolved",
            extra={
                "award_code": award.code,
                "classification_id": classification.id,
                "apprenticeship_year": year,
                "placement_id": getattr(assignment, "id", None),
                "as_of": as_of.isoformat(),
            },
        )
        return ResolvedAward(
            award_id=award.id,
            classification_id=classification.id,
            apprenticeship_year=year,
            award_code=award.code,
            award_name=award.name,
            classification_name=classification.name,
            hourly_rate=pay_rate.hourly_rate,
            mapping_version=mapping_version,
        )

    def _find_award(self, award_code: str, as_of: date) -> Award:
        award = (
            self.db.query(Award)
            .filter(
                Award.code == award_code,
                Award.is_active.is_(True),
                or_(Award.effective_from.is_(None), Award.effective_from <= as_of),
                or_(Award.effective_to.is_(None), Award.effective_to > as_of),
            )
            .first()
        )
        if not award:
            raise AwardNotFound(award_code, as_of)
        return award

    def _find_classification(self, award: Award, year: int) -> Classification:
        label = APPRENTICE_LEVEL_LABEL.format(year=year)
        classification = (
            self.db.query(Classification)
            .filter(
                Classification.award_id == award.id,
                func.lower(Classification.level) == label.lower(),
            )
            .order_by(Classification.id)
            .first()
        )
        if classification:
            return classification

        classification = (
            self.db.query(Classification)
            .filter(
                Classification.award_id == award.id,
                Classification.name.ilike("%apprentice%"),
            )
            .order_by(Classification.id)
            .first()
        )
        if classification:
            logger.warning(
                "classification_fallback",
                extra={"award_code": award.code, "wanted_level": label, "classification_id": classification.id},
            )
            return classification
        raise ClassificationNotFound(award.code, year)
