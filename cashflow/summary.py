from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from cashflow.frequency import Frequency
from cashflow.models import ZERO, EventKind, RecurringEvent
from cashflow.normalizer import to_monthly, to_weekly


@dataclass(frozen=True)
class CashflowSummary:
    monthly_income: Decimal
    monthly_expenses: Decimal
    monthly_debt: Decimal
    total_debt: Decimal
    weekly_income: Decimal

    @property
    def monthly_net(self) -> Decimal:
        return self.monthly_income - self.monthly_expenses - self.monthly_debt


def summarize(events: Iterable[RecurringEvent]) -> CashflowSummary:
    monthly_income = ZERO
    monthly_expenses = ZERO
    monthly_debt = ZERO
    total_debt = ZERO
    for event in events:
        monthly_amount = to_monthly(event.amount, event.frequency)
        if event.kind is EventKind.INCOME:
            monthly_income += monthly_amount
        elif event.kind is EventKind.EXPENSE:
            monthly_expenses += monthly_amount
        elif event.kind is EventKind.DEBT_PAYMENT:
            if event.amount > ZERO:
                monthly_debt += monthly_amount
            if event.debt is not None:
                total_debt += event.debt.remaining_balance
    return CashflowSummary(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_debt=monthly_debt,
        total_debt=total_debt,
        weekly_income=to_weekly(monthly_income, Frequency.MONTHLY),
    )
