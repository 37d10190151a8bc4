"""
Constants shared by the pay engine.
Rates, penalties and allowances always come from the rate catalog; nothing
here is a fallback amount.
"""
from decimal import ROUND_HALF_UP, Decimal

# Day types, in classification precedence order
DAY_PUBLIC_HOLIDAY = "public_holiday"
DAY_SUNDAY = "sunday"
DAY_SATURDAY = "saturday"
DAY_WEEKDAY = "weekday"
DAY_TYPES = (DAY_WEEKDAY, DAY_SATURDAY, DAY_SUNDAY, DAY_PUBLIC_HOLIDAY)

# Penalty types; weekend and holiday penalties share the day-type name
PENALTY_WEEKDAY_OVERTIME = "weekday_overtime"
PENALTY_TYPES = (PENALTY_WEEKDAY_OVERTIME, DAY_SATURDAY, DAY_SUNDAY, DAY_PUBLIC_HOLIDAY)

# Allowance types
ALLOWANCE_PER_HOUR = "per_hour"
ALLOWANCE_PER_SHIFT = "per_shift"
ALLOWANCE_FIXED = "fixed"
ALLOWANCE_TYPES = (ALLOWANCE_PER_HOUR, ALLOWANCE_PER_SHIFT, ALLOWANCE_FIXED)

# applied_rules tags
RULE_BASE_RATE = "base_rate"
RULE_PENALTY = "penalty"
RULE_ALLOWANCES = "allowances"

# Holidays under this jurisdiction apply everywhere
NATIONAL_JURISDICTION = "NAT"

DEFAULT_APPRENTICESHIP_YEAR = 1
APPRENTICE_LEVEL_LABEL = "Apprentice Year {year}"

# Packaged trade -> award mapping; seeded into trade_award_mappings and used
# only when that table is empty.
TRADE_MAPPING_VERSION = "2024.1"
DEFAULT_TRADE_AWARD_MAPPINGS = [
    # (keyword, award_code, priority)
    ("electrical", "MA000025", 10),
    ("building", "MA000020", 20),
    ("construction", "MA000020", 20),
    ("hospitality", "MA000009", 30),
    ("food", "MA000009", 30),
]

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert a float/int/str amount to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Decimal, places: int = 2) -> Decimal:
    """Round to places; 0.5 rounds up (so 49.785 -> 49.79)."""
    exp = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exp, rounding=ROUND_HALF_UP)
