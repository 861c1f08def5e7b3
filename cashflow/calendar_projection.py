from __future__ import annotations

import logging
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, List, Sequence, Tuple

from cashflow.exceptions import InvalidInput
from cashflow.models import ZERO, EventKind, RecurringEvent
from cashflow.recurrence import is_due_on

logger = logging.getLogger(__name__)

WEEK_DAYS = 7


@dataclass(frozen=True)
class DayTotals:
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    debts: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses - self.debts

    def __add__(self, other: "DayTotals") -> "DayTotals":
        if not isinstance(other, DayTotals):
            return NotImplemented
        return DayTotals(
            income=self.income + other.income,
            expenses=self.expenses + other.expenses,
            debts=self.debts + other.debts,
        )


@dataclass(frozen=True)
class DayForecast:
    date: date
    due: Tuple[RecurringEvent, ...]
    totals: DayTotals


@dataclass(frozen=True)
class RangeProjection:
    """Day-by-day totals over ``days`` consecutive days from ``start``.

    Nothing is computed until the projection is iterated, and every iteration
    starts over from ``start``.
    """

    events: Tuple[RecurringEvent, ...]
    start: date
    days: int

    def __post_init__(self) -> None:
        if self.days < 0:
            raise InvalidInput("days must not be negative.")
        if self.days > (date.max - self.start).days + 1:
            raise InvalidInput(
                f"{self.days} days from {self.start} is beyond the supported date range."
            )

    def __iter__(self) -> Iterator[Tuple[date, DayTotals]]:
        for day in self.dates():
            yield day, totals_for(self.events, day)

    def __len__(self) -> int:
        return self.days

    def dates(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)

    def forecasts(self) -> Iterator[DayForecast]:
        for day in self.dates():
            yield forecast_day(self.events, day)

    def total(self) -> DayTotals:
        combined = DayTotals()
        for _, totals in self:
            combined = combined + totals
        return combined


def due_on(events: Iterable[RecurringEvent], target: date) -> List[RecurringEvent]:
    return [
        event
        for event in events
        if is_due_on(event.anchor_date, event.frequency, target)
    ]


def totals_for(events: Iterable[RecurringEvent], target: date) -> DayTotals:
    return _sum_by_kind(due_on(events, target))


def forecast_day(events: Iterable[RecurringEvent], target: date) -> DayForecast:
    due = tuple(due_on(events, target))
    return DayForecast(date=target, due=due, totals=_sum_by_kind(due))


def project_range(
    events: Sequence[RecurringEvent], start: date, days: int
) -> RangeProjection:
    logger.debug("Projecting %d events over %d days from %s.", len(events), days, start)
    return RangeProjection(events=tuple(events), start=start, days=days)


def week_ahead(events: Sequence[RecurringEvent], today: date) -> RangeProjection:
    return project_range(events, today, WEEK_DAYS)


def month_grid(events: Sequence[RecurringEvent], year: int, month: int) -> RangeProjection:
    if not 1 <= month <= 12:
        raise InvalidInput("month must be between 1 and 12.")
    return project_range(events, date(year, month, 1), monthrange(year, month)[1])


def range_totals(events: Sequence[RecurringEvent], start: date, days: int) -> DayTotals:
    return project_range(events, start, days).total()


def _sum_by_kind(due: Iterable[RecurringEvent]) -> DayTotals:
    income = ZERO
    expenses = ZERO
    debts = ZERO
    for event in due:
        if event.kind is EventKind.INCOME:
            income += event.amount
        elif event.kind is EventKind.EXPENSE:
            expenses += event.amount
        elif event.kind is EventKind.DEBT_PAYMENT:
            debts += event.amount
    return DayTotals(income=income, expenses=expenses, debts=debts)
