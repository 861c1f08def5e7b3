from __future__ import annotations

from calendar import monthrange
from datetime import MAXYEAR, MINYEAR, date, timedelta
from enum import Enum
from typing import Iterator, List

from cashflow.exceptions import InvalidInput
from cashflow.frequency import FixedDays, Frequency, period_kind
from cashflow.models import ProjectionResult, RecurringEvent


class Urgency(str, Enum):
    DUE = "due"
    SOON = "soon"
    THIS_WEEK = "this_week"
    LATER = "later"


def next_occurrence(anchor: date, frequency: Frequency, reference: date) -> date:
    """Earliest occurrence of the schedule on or after ``reference``."""
    if anchor >= reference:
        return anchor
    period = period_kind(frequency)
    if isinstance(period, FixedDays):
        return _first_fixed_on_or_after(anchor, reference, period.days)
    candidate, _ = _first_calendar_on_or_after(anchor, reference, period.months)
    return candidate


def following_occurrence(anchor: date, frequency: Frequency, after: date) -> date:
    """Earliest occurrence strictly after ``after``."""
    return next_occurrence(anchor, frequency, _add_days(after, 1))


def is_due_on(anchor: date, frequency: Frequency, target: date) -> bool:
    if target < anchor:
        return False
    period = period_kind(frequency)
    if isinstance(period, FixedDays):
        return (target - anchor).days % period.days == 0
    months_between = _months_between(anchor, target)
    if months_between % period.months != 0:
        return False
    return _add_months(anchor, months_between) == target


def iter_occurrences(anchor: date, frequency: Frequency, start: date) -> Iterator[date]:
    """Ascending walk of occurrences from ``start`` onwards.

    The walk is unbounded in practice and only ends once the next occurrence
    would fall past ``date.max``.
    """
    period = period_kind(frequency)
    if isinstance(period, FixedDays):
        try:
            current = next_occurrence(anchor, frequency, start)
        except InvalidInput:
            return
        while True:
            yield current
            try:
                current = _add_days(current, period.days)
            except InvalidInput:
                return
    if anchor >= start:
        month_offset = 0
    else:
        try:
            _, month_offset = _first_calendar_on_or_after(anchor, start, period.months)
        except InvalidInput:
            return
    while True:
        # Always step from the anchor so a clamped day never sticks.
        try:
            occurrence = _add_months(anchor, month_offset)
        except InvalidInput:
            return
        yield occurrence
        month_offset += period.months


def occurrences_between(
    anchor: date, frequency: Frequency, range_start: date, range_end: date
) -> List[date]:
    if range_start > range_end:
        raise InvalidInput("range_start must be on or before range_end.")
    occurrences: List[date] = []
    for occurrence in iter_occurrences(anchor, frequency, range_start):
        if occurrence > range_end:
            break
        occurrences.append(occurrence)
    return occurrences


def project(anchor: date, frequency: Frequency, today: date) -> ProjectionResult:
    next_due = next_occurrence(anchor, frequency, today)
    days_until = (next_due - today).days
    return ProjectionResult(
        next_due_date=next_due,
        is_due_today=days_until == 0,
        days_until=days_until,
    )


def project_event(event: RecurringEvent, today: date) -> ProjectionResult:
    return project(event.anchor_date, event.frequency, today)


def due_label(days_until: int) -> str:
    if days_until < 0:
        raise InvalidInput("days_until must not be negative.")
    if days_until == 0:
        return "Due today"
    if days_until == 1:
        return "Due tomorrow"
    return f"Due in {days_until} days"


def urgency(days_until: int) -> Urgency:
    if days_until < 0:
        raise InvalidInput("days_until must not be negative.")
    if days_until == 0:
        return Urgency.DUE
    if days_until <= 3:
        return Urgency.SOON
    if days_until <= 7:
        return Urgency.THIS_WEEK
    return Urgency.LATER


def _first_fixed_on_or_after(start_date: date, minimum_date: date, interval_days: int) -> date:
    if start_date >= minimum_date:
        return start_date
    days_between = (minimum_date - start_date).days
    intervals = (days_between + interval_days - 1) // interval_days
    return _add_days(start_date, interval_days * intervals)


def _first_calendar_on_or_after(
    start_date: date, minimum_date: date, step_months: int
) -> tuple[date, int]:
    months_between = _months_between(start_date, minimum_date)
    month_offset = -(-months_between // step_months) * step_months
    candidate = _add_months(start_date, month_offset)
    if candidate < minimum_date:
        month_offset += step_months
        candidate = _add_months(start_date, month_offset)
    return candidate, month_offset


def _months_between(start_date: date, end_date: date) -> int:
    return (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month)


def _add_days(start_date: date, days: int) -> date:
    try:
        return start_date + timedelta(days=days)
    except OverflowError as exc:
        raise InvalidInput(
            f"{start_date} plus {days} days is beyond the supported date range."
        ) from exc


def _add_months(start_date: date, months: int) -> date:
    total_month = start_date.month - 1 + months
    year = start_date.year + total_month // 12
    month = total_month % 12 + 1
    if not MINYEAR <= year <= MAXYEAR:
        raise InvalidInput(
            f"{start_date} plus {months} months is beyond the supported date range."
        )
    last_day = monthrange(year, month)[1]
    return date(year, month, min(start_date.day, last_day))
