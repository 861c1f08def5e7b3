from __future__ import annotations

from decimal import Decimal

from cashflow.frequency import Frequency, parse_frequency
from cashflow.models import coerce_amount

# Canonical conversion constants. Every weekly/monthly figure in the package
# is derived from this table.
WEEKS_PER_MONTH = Decimal("4.33")
BI_WEEKLY_PER_MONTH = Decimal("2.17")
FOUR_WEEKLY_PER_MONTH = Decimal(13) / Decimal(12)
WEEKS_PER_YEAR = Decimal(52)
MONTHS_PER_YEAR = Decimal(12)

# Relative drift allowed between converting directly to weekly and converting
# through the monthly figure.
ROUND_TRIP_TOLERANCE = Decimal("0.005")


def to_weekly(amount: Decimal, frequency: Frequency) -> Decimal:
    value = coerce_amount(amount)
    frequency = parse_frequency(frequency)
    if frequency is Frequency.WEEKLY:
        return value
    if frequency is Frequency.BI_WEEKLY:
        return value / 2
    if frequency is Frequency.FOUR_WEEKLY:
        return value / 4
    if frequency is Frequency.MONTHLY:
        return value / WEEKS_PER_MONTH
    if frequency is Frequency.YEARLY:
        return value / WEEKS_PER_YEAR
    raise AssertionError(f"Unhandled frequency: {frequency}")


def to_monthly(amount: Decimal, frequency: Frequency) -> Decimal:
    value = coerce_amount(amount)
    frequency = parse_frequency(frequency)
    if frequency is Frequency.WEEKLY:
        return value * WEEKS_PER_MONTH
    if frequency is Frequency.BI_WEEKLY:
        return value * BI_WEEKLY_PER_MONTH
    if frequency is Frequency.FOUR_WEEKLY:
        return value * FOUR_WEEKLY_PER_MONTH
    if frequency is Frequency.MONTHLY:
        return value
    if frequency is Frequency.YEARLY:
        return value / MONTHS_PER_YEAR
    raise AssertionError(f"Unhandled frequency: {frequency}")


def within_round_trip_tolerance(expected: Decimal, actual: Decimal) -> bool:
    if expected == 0:
        return actual == 0
    return abs(actual - expected) / abs(expected) <= ROUND_TRIP_TOLERANCE
