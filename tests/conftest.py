# Add backend to path so "from pay_engine...." works when running pytest from project root
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

_backend = Path(__file__).resolve().parent.parent / "backend"
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from pay_engine.config import Settings  # noqa: E402
from pay_engine.database import Base  # noqa: E402
from pay_engine.models import db_models  # noqa: E402,F401
from pay_engine.models.db_models import (  # noqa: E402
    AllowanceRule,
    Apprentice,
    Award,
    Classification,
    PayRate,
    PenaltyRule,
    Placement,
    PublicHoliday,
    Timesheet,
    TimesheetShift,
)
from pay_engine.services.engine import build_engine  # noqa: E402

RATES_FROM = date(2024, 7, 1)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        fair_work_api_url="",
        default_jurisdiction="NSW",
        default_award_code="MA000010",
    )


@pytest.fixture
def catalog(db):
    """
    Electrical award with apprentice years 1 and 2:
    year 1 $25.00/hr, year 2 $28.50/hr, Saturday x1.5, Sunday x2.0, public holiday x2.5.
    New Year's Day is a national holiday; Labour Day 2025 is NSW only.
    """
    award = Award(code="MA000025", name="Electrical, Electronic and Communications Contracting Award 2020",
                  industry="Electrical", effective_from=date(2020, 1, 1), is_active=True)
    db.add(award)
    db.flush()

    year1 = Classification(award_id=award.id, name="Electrical Apprentice", level="Apprentice Year 1")
    year2 = Classification(award_id=award.id, name="Electrical Apprentice", level="Apprentice Year 2")
    db.add_all([year1, year2])
    db.flush()

    db.add_all([
        PayRate(classification_id=year1.id, hourly_rate=Decimal("25.00"), effective_from=RATES_FROM,
                is_apprentice_rate=True, apprenticeship_year=1),
        PayRate(classification_id=year2.id, hourly_rate=Decimal("28.50"), effective_from=RATES_FROM,
                is_apprentice_rate=True, apprenticeship_year=2),
        PenaltyRule(award_id=award.id, penalty_type="saturday", multiplier=Decimal("1.5"),
                    effective_from=RATES_FROM),
        PenaltyRule(award_id=award.id, penalty_type="sunday", multiplier=Decimal("2.0"),
                    effective_from=RATES_FROM),
        PenaltyRule(award_id=award.id, penalty_type="public_holiday", multiplier=Decimal("2.5"),
                    effective_from=RATES_FROM),
        PublicHoliday(jurisdiction="NAT", date=date(2025, 1, 1), name="New Year's Day"),
        PublicHoliday(jurisdiction="NSW", date=date(2025, 10, 6), name="Labour Day"),
    ])
    db.commit()
    return SimpleNamespace(award=award, year1=year1, year2=year2)


@pytest.fixture
def add_allowance(db, catalog):
    def _add(name="Tool allowance", allowance_type="per_hour", amount="2.00", classification_id=None,
             effective_from=RATES_FROM, effective_to=None):
        rule = AllowanceRule(award_id=catalog.award.id, classification_id=classification_id, name=name,
                             allowance_type=allowance_type, amount=Decimal(amount),
                             effective_from=effective_from, effective_to=effective_to)
        db.add(rule)
        db.commit()
        return rule
    return _add


@pytest.fixture
def make_timesheet(db):
    """Apprentice + placement + timesheet; shifts are (date, start, end, break_hours) tuples."""
    def _make(shifts, trade="Electrical", apprenticeship_year=1, state=None, placement_state="NSW",
              timesheet_id=None):
        apprentice = Apprentice(first_name="Sam", last_name="Nguyen", trade=trade,
                                apprenticeship_year=apprenticeship_year, state=state)
        db.add(apprentice)
        db.flush()
        placement = Placement(apprentice_id=apprentice.id, host_employer_id=7, state=placement_state)
        db.add(placement)
        db.flush()
        timesheet = Timesheet(id=timesheet_id, apprentice_id=apprentice.id, placement_id=placement.id,
                              week_starting=date(2025, 3, 3), status="submitted")
        db.add(timesheet)
        db.flush()
        for shift_date, start, end, break_hours in shifts:
            db.add(TimesheetShift(timesheet_id=timesheet.id, date=shift_date, start_time=start,
                                  end_time=end, break_duration=Decimal(str(break_hours))))
        db.commit()
        return timesheet
    return _make


@pytest.fixture
def pay_engine(db, settings):
    return build_engine(db, settings)
