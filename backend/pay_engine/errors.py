"""
Typed errors raised by the pay engine.

Every error carries a machine-readable ``code``, the HTTP status the API layer
reports it with, and the structured context that produced it, so callers can
show "no pay rate for classification X in apprenticeship year Y as of Z"
instead of a generic failure.

    PayEngineError
    +-- NotFoundError
    |   +-- AwardNotFound
    |   +-- ClassificationNotFound
    |   +-- RateNotFound
    |   +-- TimesheetNotFound
    +-- CatalogIntegrityError
    |   +-- AmbiguousRate
    +-- InputValidationError
    |   +-- InvalidTimeRange
    +-- ComplianceServiceUnavailable
"""
from datetime import date
from typing import Any, Optional


class PayEngineError(Exception):
    code: str = "PAY_ENGINE_ERROR"
    status_code: int = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def with_context(self, **context: Any) -> "PayEngineError":
        """Attach caller context (timesheet, shift) without wrapping the error."""
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self


# --- Not found: actionable data gaps ---

class NotFoundError(PayEngineError):
    code = "NOT_FOUND"
    status_code = 404


class AwardNotFound(NotFoundError):
    code = "AWARD_NOT_FOUND"

    def __init__(self, award_code: str, as_of: Optional[date] = None):
        message = f"No active award with code {award_code}"
        if as_of:
            message += f" as of {as_of.isoformat()}"
        super().__init__(message, award_code=award_code, as_of=as_of)


class ClassificationNotFound(NotFoundError):
    code = "CLASSIFICATION_NOT_FOUND"

    def __init__(self, award_code: str, apprenticeship_year: int):
        super().__init__(
            f"No apprentice classification on award {award_code} "
            f"for apprenticeship year {apprenticeship_year}",
            award_code=award_code,
            apprenticeship_year=apprenticeship_year,
        )


class RateNotFound(NotFoundError):
    code = "RATE_NOT_FOUND"

    def __init__(
        self,
        classification_id: int,
        apprenticeship_year: Optional[int],
        is_apprentice_rate: bool,
        as_of: date,
    ):
        year = f"apprenticeship year {apprenticeship_year}" if apprenticeship_year else "no apprenticeship year"
        kind = "apprentice" if is_apprentice_rate else "adult"
        super().__init__(
            f"No {kind} pay rate for classification {classification_id} in {year} "
            f"as of {as_of.isoformat()}",
            classification_id=classification_id,
            apprenticeship_year=apprenticeship_year,
            is_apprentice_rate=is_apprentice_rate,
            as_of=as_of,
        )


class TimesheetNotFound(NotFoundError):
    code = "TIMESHEET_NOT_FOUND"

    def __init__(self, timesheet_id: int, detail: str = "Timesheet not found"):
        super().__init__(f"{detail}: {timesheet_id}", timesheet_id=timesheet_id)


# --- Catalog integrity: data-quality defects, never tie-broken ---

class CatalogIntegrityError(PayEngineError):
    code = "CATALOG_INTEGRITY_ERROR"
    status_code = 409


class AmbiguousRate(CatalogIntegrityError):
    code = "AMBIGUOUS_RATE"

    def __init__(self, kind: str, as_of: date, row_ids: list[int], **context: Any):
        super().__init__(
            f"{len(row_ids)} {kind} rows are in force on {as_of.isoformat()} "
            f"(ids {row_ids}); effective windows overlap",
            kind=kind,
            as_of=as_of,
            row_ids=row_ids,
            **context,
        )


# --- Input validation ---

class InputValidationError(PayEngineError):
    code = "INVALID_INPUT"
    status_code = 422


class InvalidTimeRange(InputValidationError):
    code = "INVALID_TIME_RANGE"


# --- Advisory ---

class ComplianceServiceUnavailable(PayEngineError):
    code = "COMPLIANCE_SERVICE_UNAVAILABLE"
    status_code = 503


class ImmutableRecordError(PayEngineError):
    code = "IMMUTABLE_RECORD"
    status_code = 409
