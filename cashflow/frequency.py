from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from cashflow.exceptions import InvalidInput


class Frequency(str, Enum):
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    FOUR_WEEKLY = "4-weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class FixedDays:
    days: int


@dataclass(frozen=True)
class CalendarMonths:
    months: int


PeriodKind = Union[FixedDays, CalendarMonths]

_PERIODS: dict[Frequency, PeriodKind] = {
    Frequency.WEEKLY: FixedDays(7),
    Frequency.BI_WEEKLY: FixedDays(14),
    Frequency.FOUR_WEEKLY: FixedDays(28),
    Frequency.MONTHLY: CalendarMonths(1),
    Frequency.YEARLY: CalendarMonths(12),
}

_ALIASES: dict[str, Frequency] = {
    "weekly": Frequency.WEEKLY,
    "biweekly": Frequency.BI_WEEKLY,
    "byweekly": Frequency.BI_WEEKLY,
    "fortnightly": Frequency.BI_WEEKLY,
    "4weekly": Frequency.FOUR_WEEKLY,
    "fourweekly": Frequency.FOUR_WEEKLY,
    "monthly": Frequency.MONTHLY,
    "yearly": Frequency.YEARLY,
    "annual": Frequency.YEARLY,
    "annually": Frequency.YEARLY,
}


def period_kind(frequency: Frequency) -> PeriodKind:
    # _PERIODS covers every member; a KeyError here means the enum grew.
    return _PERIODS[parse_frequency(frequency)]


def parse_frequency(value: Frequency | str) -> Frequency:
    if isinstance(value, Frequency):
        return value
    if not isinstance(value, str):
        raise InvalidInput(f"Unsupported frequency: {value!r}")
    normalized = _normalize_frequency(value)
    try:
        return _ALIASES[normalized]
    except KeyError as exc:
        raise InvalidInput(
            "Only weekly, bi-weekly, 4-weekly, monthly, or yearly frequencies are supported."
        ) from exc


def _normalize_frequency(value: str) -> str:
    return "".join(ch for ch in value.strip().lower() if ch.isalnum())
