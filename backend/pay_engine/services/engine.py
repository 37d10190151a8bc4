"""Wires the calculation services together around one database session."""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from pay_engine.config import Settings
from pay_engine.services.award_resolver import AwardResolver
from pay_engine.services.calculator import ShiftCalculator
from pay_engine.services.compliance import ComplianceValidator
from pay_engine.services.day_classifier import DayClassifier
from pay_engine.services.fair_work_client import FairWorkClient
from pay_engine.services.rate_catalog import RateCatalog
from pay_engine.services.timesheet_aggregator import TimesheetAggregator


@dataclass
class PayEngine:
    catalog: RateCatalog
    classifier: DayClassifier
    resolver: AwardResolver
    calculator: ShiftCalculator
    aggregator: TimesheetAggregator
    compliance: ComplianceValidator


def build_fair_work_client(config: Settings) -> Optional[FairWorkClient]:
    """None when no authority URL is configured; compliance then reports unknown."""
    if not config.fair_work_api_url:
        return None
    return FairWorkClient(
        config.fair_work_api_url,
        api_key=config.fair_work_api_key,
        timeout=config.fair_work_timeout_seconds,
    )


def build_engine(db: Session, config: Settings, client: Optional[FairWorkClient] = None) -> PayEngine:
    catalog = RateCatalog(db)
    classifier = DayClassifier(catalog)
    resolver = AwardResolver(db, catalog, config.default_award_code)
    calculator = ShiftCalculator(catalog, classifier, config.default_jurisdiction)
    return PayEngine(
        catalog=catalog,
        classifier=classifier,
        resolver=resolver,
        calculator=calculator,
        aggregator=TimesheetAggregator(db, resolver, calculator, config.default_jurisdiction),
        compliance=ComplianceValidator(db, client),
    )
