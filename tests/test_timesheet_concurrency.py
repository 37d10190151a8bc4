"""
Two recalculations of the same timesheet racing in separate sessions. Uses a
file-backed SQLite database so each session gets its own connection.
"""
import threading
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine

from pay_engine.database import Base
from pay_engine.models.db_models import TimesheetCalculation
from pay_engine.services.engine import build_engine

WEEK = [
    (date(2025, 3, 3), "09:00", "17:00", 1),
    (date(2025, 3, 1), "08:00", "16:00", 0.5),
]


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'pay_engine.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


def test_concurrent_recalculations_store_one_row(catalog, make_timesheet, session_factory, settings, db):
    timesheet_id = make_timesheet(WEEK).id
    start = threading.Barrier(2)
    errors = []

    def recalculate():
        session = session_factory()
        try:
            start.wait()
            build_engine(session, settings).aggregator.calculate_timesheet(timesheet_id)
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)
        finally:
            session.close()

    workers = [threading.Thread(target=recalculate) for _ in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=60)

    assert errors == []
    db.expire_all()
    rows = db.query(TimesheetCalculation).filter(TimesheetCalculation.timesheet_id == timesheet_id).all()
    assert len(rows) == 1
    assert rows[0].revision == 2
    assert rows[0].gross_pay == Decimal("456.25")
