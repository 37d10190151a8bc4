"""
Advisory rate validation against the Fair Work authority.

Pay calculation never depends on this module. Every attempted call, successful
or not, is archived in compliance_check_logs with its raw request and
response.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx
from sqlalchemy.orm import Session

from pay_engine.errors import ComplianceServiceUnavailable, InputValidationError
from pay_engine.models.db_models import ComplianceCheckLog
from pay_engine.models.schemas import ComplianceResult
from pay_engine.services.award_rules import round_half_up, to_decimal
from pay_engine.services.fair_work_client import FairWorkClient

logger = logging.getLogger(__name__)

UNKNOWN_MESSAGE = "Compliance authority not configured; rate not checked"

# Widest precision compliance_check_logs.requested_rate can archive
RATE_PRECISION = Decimal("0.0001")


class ComplianceValidator:
    def __init__(self, db: Session, client: Optional[FairWorkClient] = None):
        self.db = db
        self.client = client

    def validate(
        self,
        award_code: str,
        classification_code: str,
        proposed_hourly_rate: Decimal,
        as_of: date,
    ) -> ComplianceResult:
        if self.client is None:
            return ComplianceResult(is_valid=None, minimum_rate=None, message=UNKNOWN_MESSAGE)

        # Sent and archived exactly as proposed, never rounded
        rate = to_decimal(proposed_hourly_rate)
        if not rate.is_finite() or rate != rate.quantize(RATE_PRECISION):
            raise InputValidationError(
                f"Hourly rate {proposed_hourly_rate} has more than 4 decimal places",
                hourly_rate=str(proposed_hourly_rate),
            )
        request_payload = {
            "awardCode": award_code,
            "classificationCode": classification_code,
            "hourlyRate": float(rate),
            "date": as_of.isoformat(),
        }

        response_payload = None
        try:
            response_payload = self.client.validate_rate(request_payload)
            result = self._parse(response_payload)
        except (httpx.HTTPError, InvalidOperation, ValueError, KeyError, TypeError) as exc:
            self._archive(
                award_code,
                classification_code,
                as_of,
                rate,
                request_payload,
                response_payload=response_payload if response_payload is not None else _error_body(exc),
                status="error",
                message=str(exc) or exc.__class__.__name__,
            )
            logger.warning(
                "compliance_check_failed",
                extra={"award_code": award_code, "classification_code": classification_code, "error": str(exc)},
            )
            raise ComplianceServiceUnavailable(
                f"Compliance authority unavailable: {exc}",
                award_code=award_code,
                classification_code=classification_code,
            ) from exc

        self._archive(
            award_code,
            classification_code,
            as_of,
            rate,
            request_payload,
            response_payload=response_payload,
            status="valid" if result.is_valid else "invalid",
            message=result.message,
            is_valid=result.is_valid,
            minimum_rate=result.minimum_rate,
        )
        logger.info(
            "compliance_check_recorded",
            extra={
                "award_code": award_code,
                "classification_code": classification_code,
                "is_valid": result.is_valid,
                "minimum_rate": str(result.minimum_rate),
            },
        )
        return result

    @staticmethod
    def _parse(payload: dict[str, Any]) -> ComplianceResult:
        is_valid = payload["isValid"]
        if not isinstance(is_valid, bool):
            raise TypeError(f"isValid must be a boolean, got {is_valid!r}")
        # null or non-numeric minimumRate raises InvalidOperation
        minimum_rate = round_half_up(to_decimal(payload["minimumRate"]))
        message = payload.get("message") or (
            "Rate meets the award minimum" if is_valid else f"Rate is below the award minimum of {minimum_rate}"
        )
        return ComplianceResult(is_valid=is_valid, minimum_rate=minimum_rate, message=message)

    def _archive(
        self,
        award_code: str,
        classification_code: str,
        as_of: date,
        rate: Decimal,
        request_payload: dict,
        *,
        response_payload: Optional[dict],
        status: str,
        message: str,
        is_valid: Optional[bool] = None,
        minimum_rate: Optional[Decimal] = None,
    ) -> ComplianceCheckLog:
        entry = ComplianceCheckLog(
            award_code=award_code,
            classification_code=classification_code,
            check_date=as_of,
            requested_rate=rate,
            minimum_rate=minimum_rate,
            is_valid=is_valid,
            status=status,
            message=message,
            request_payload=request_payload,
            response_payload=response_payload,
        )
        self.db.add(entry)
        self.db.commit()
        return entry

    def list_checks(
        self,
        award_code: Optional[str] = None,
        classification_code: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[ComplianceCheckLog]:
        query = self.db.query(ComplianceCheckLog)
        if award_code:
            query = query.filter(ComplianceCheckLog.award_code == award_code)
        if classification_code:
            query = query.filter(ComplianceCheckLog.classification_code == classification_code)
        if date_from:
            query = query.filter(ComplianceCheckLog.check_date >= date_from)
        if date_to:
            query = query.filter(ComplianceCheckLog.check_date <= date_to)
        return query.order_by(ComplianceCheckLog.created_at, ComplianceCheckLog.id).all()


def _error_body(exc: Exception) -> Optional[dict]:
    """Keep whatever the authority sent back on an HTTP error response."""
    response = getattr(exc, "response", None)
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return {"status_code": response.status_code, "body": response.text}
    return {"status_code": response.status_code, "body": body}
