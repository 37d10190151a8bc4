from datetime import date

from pay_engine.models.schemas import Shift
from pay_engine.services.award_rules import (
    DAY_PUBLIC_HOLIDAY,
    DAY_SATURDAY,
    DAY_SUNDAY,
    DAY_WEEKDAY,
)
from pay_engine.services.rate_catalog import RateCatalog


def day_of_week(d: date) -> int:
    """Day of week with Sunday=0 .. Saturday=6."""
    return d.isoweekday() % 7


class DayClassifier:
    def __init__(self, catalog: RateCatalog):
        self.catalog = catalog

    def classify(self, d: date, jurisdiction: str) -> str:
        """Public holiday overrides the day of week."""
        if self.catalog.is_public_holiday(d, jurisdiction):
            return DAY_PUBLIC_HOLIDAY
        dow = day_of_week(d)
        if dow == 0:
            return DAY_SUNDAY
        if dow == 6:
            return DAY_SATURDAY
        return DAY_WEEKDAY

    def day_type_for(self, shift: Shift, jurisdiction: str) -> str:
        # Explicit day type always wins, e.g. backfilled historical shifts
        if shift.day_type:
            return shift.day_type
        return self.classify(shift.date, jurisdiction)
