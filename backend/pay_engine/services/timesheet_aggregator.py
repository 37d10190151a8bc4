"""
Timesheet pay aggregation.

Award resolution runs once per timesheet; each shift is then calculated
against the rates in force on its own date and the results are summed. The
aggregate is upserted: there is exactly one TimesheetCalculation per
timesheet, enforced by a unique constraint on timesheet_id and serialised
in-process by a per-timesheet lock.
"""
import logging
import threading
import weakref
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pay_engine.errors import InputValidationError, PayEngineError, TimesheetNotFound
from pay_engine.models.db_models import Timesheet, TimesheetCalculation, utcnow
from pay_engine.models.schemas import CalculationResult, Shift
from pay_engine.services.award_resolver import AwardResolver, resolve_jurisdiction
from pay_engine.services.award_rules import round_half_up
from pay_engine.services.calculator import ShiftCalculator, hours_worked

logger = logging.getLogger(__name__)

_ZERO = Decimal("0.00")

# Entries live only while some caller holds the lock object
_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _timesheet_lock(timesheet_id: int) -> threading.Lock:
    with _locks_guard:
        lock = _locks.get(timesheet_id)
        if lock is None:
            lock = _locks[timesheet_id] = threading.Lock()
        return lock


def _is_incomplete(row) -> bool:
    """Missing date or clock times; such shifts are skipped, not failed."""
    return row.date is None or not (row.start_time or "").strip() or not (row.end_time or "").strip()


class TimesheetAggregator:
    def __init__(
        self,
        db: Session,
        resolver: AwardResolver,
        calculator: ShiftCalculator,
        default_jurisdiction: str,
    ):
        self.db = db
        self.resolver = resolver
        self.calculator = calculator
        self.default_jurisdiction = default_jurisdiction

    def calculate_timesheet(self, timesheet_id: int) -> TimesheetCalculation:
        timesheet = self.db.get(Timesheet, timesheet_id)
        if timesheet is None:
            raise TimesheetNotFound(timesheet_id)
        worker = timesheet.apprentice
        if worker is None:
            raise TimesheetNotFound(timesheet_id, detail="Timesheet has no apprentice")
        assignment = timesheet.placement
        jurisdiction = resolve_jurisdiction(worker, assignment, self.default_jurisdiction)

        shifts: list[tuple[int, Shift]] = []
        skipped = 0
        for row in timesheet.shifts:
            if _is_incomplete(row):
                skipped += 1
                logger.warning(
                    "timesheet_shift_skipped",
                    extra={"timesheet_id": timesheet_id, "shift_id": row.id, "reason": "missing date/time"},
                )
                continue
            try:
                shift = Shift.model_validate(row)
            except ValidationError as exc:
                raise InputValidationError(
                    f"Shift {row.id} is invalid: {exc.errors()[0]['msg']}"
                ).with_context(timesheet_id=timesheet_id, shift_id=row.id) from exc
            shifts.append((row.id, shift))

        values = self._zero_totals()
        if shifts:
            as_of = min(shift.date for _, shift in shifts)
            try:
                resolved = self.resolver.resolve(worker, assignment, as_of)
            except PayEngineError as exc:
                exc.with_context(timesheet_id=timesheet_id)
                raise

            results: list[CalculationResult] = []
            total_hours = Decimal("0")
            for shift_id, shift in shifts:
                try:
                    result = self.calculator.calculate(
                        resolved.award_id,
                        resolved.classification_id,
                        shift,
                        shift.date,
                        apprenticeship_year=resolved.apprenticeship_year,
                        jurisdiction=jurisdiction,
                    )
                except PayEngineError as exc:
                    # No partial totals: one bad shift fails the timesheet
                    exc.with_context(timesheet_id=timesheet_id, shift_id=shift_id)
                    raise
                results.append(result)
                # Per-shift hours are reported rounded; the total is rounded once
                total_hours += hours_worked(shift.start_time, shift.end_time, shift.break_duration)

            values.update(
                award_id=resolved.award_id,
                classification_id=resolved.classification_id,
                award_code=resolved.award_code,
                award_name=resolved.award_name,
                classification_name=resolved.classification_name,
                apprenticeship_year=resolved.apprenticeship_year,
                mapping_version=resolved.mapping_version,
                **self._sum(results, total_hours),
            )

        values["skipped_shifts"] = skipped
        values["calculated_at"] = utcnow()

        with _timesheet_lock(timesheet_id):
            record = self._upsert(timesheet_id, values)

        logger.info(
            "timesheet_calculated",
            extra={
                "timesheet_id": timesheet_id,
                "shift_count": record.shift_count,
                "skipped_shifts": skipped,
                "gross_pay": str(record.gross_pay),
                "revision": record.revision,
            },
        )
        return record

    @staticmethod
    def _zero_totals() -> dict:
        return {
            "award_id": None,
            "classification_id": None,
            "award_code": None,
            "award_name": None,
            "classification_name": None,
            "apprenticeship_year": None,
            "mapping_version": None,
            "total_hours": _ZERO,
            "base_pay": _ZERO,
            "penalty_pay": _ZERO,
            "allowances_total": _ZERO,
            "gross_pay": _ZERO,
            "shift_count": 0,
            "shift_results": [],
        }

    @staticmethod
    def _sum(results: list[CalculationResult], total_hours: Decimal) -> dict:
        return {
            "total_hours": round_half_up(total_hours),
            "base_pay": sum((r.base_amount for r in results), _ZERO),
            "penalty_pay": sum((r.penalty_amount for r in results), _ZERO),
            "allowances_total": sum((a.amount for r in results for a in r.allowances), _ZERO),
            "gross_pay": sum((r.total_amount for r in results), _ZERO),
            "shift_count": len(results),
            "shift_results": [r.model_dump(mode="json") for r in results],
        }

    def _upsert(self, timesheet_id: int, values: dict) -> TimesheetCalculation:
        record = self._replace_existing(timesheet_id, values)
        if record is None:
            record = TimesheetCalculation(timesheet_id=timesheet_id, revision=1, **values)
            self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # Another process inserted first; the unique constraint makes this an update
            self.db.rollback()
            record = self._replace_existing(timesheet_id, values)
            self.db.commit()
        self.db.refresh(record)
        return record

    def _replace_existing(self, timesheet_id: int, values: dict):
        record = (
            self.db.query(TimesheetCalculation)
            .filter(TimesheetCalculation.timesheet_id == timesheet_id)
            .one_or_none()
        )
        if record is None:
            return None
        for key, value in values.items():
            setattr(record, key, value)
        record.revision = (record.revision or 0) + 1
        return record

    def get_calculation(self, timesheet_id: int) -> TimesheetCalculation:
        record = (
            self.db.query(TimesheetCalculation)
            .filter(TimesheetCalculation.timesheet_id == timesheet_id)
            .one_or_none()
        )
        if record is None:
            raise TimesheetNotFound(timesheet_id, detail="No calculation for timesheet")
        return record
