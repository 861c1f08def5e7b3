from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from cashflow.exceptions import InvalidInput
from cashflow.frequency import Frequency, parse_frequency

ZERO = Decimal("0")


class EventKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    DEBT_PAYMENT = "debt"


_KIND_ALIASES = {
    "income": EventKind.INCOME,
    "expense": EventKind.EXPENSE,
    "debt": EventKind.DEBT_PAYMENT,
    "debtpayment": EventKind.DEBT_PAYMENT,
}


def parse_kind(value: EventKind | str) -> EventKind:
    if isinstance(value, EventKind):
        return value
    normalized = "".join(ch for ch in str(value).strip().lower() if ch.isalnum())
    try:
        return _KIND_ALIASES[normalized]
    except KeyError as exc:
        raise InvalidInput("Only income, expense, or debt events are supported.") from exc


class RatePeriod(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


@dataclass(frozen=True)
class MonetaryInterest:
    monthly_amount: Decimal = ZERO

    def __post_init__(self) -> None:
        amount = coerce_amount(self.monthly_amount)
        if amount < ZERO:
            raise InvalidInput("Monthly interest must not be negative.")
        object.__setattr__(self, "monthly_amount", amount)


@dataclass(frozen=True)
class PercentageInterest:
    rate: Decimal
    rate_period: RatePeriod = RatePeriod.MONTHLY

    def __post_init__(self) -> None:
        rate = coerce_amount(self.rate)
        if rate < ZERO:
            raise InvalidInput("Interest rate must not be negative.")
        try:
            rate_period = RatePeriod(self.rate_period)
        except ValueError as exc:
            raise InvalidInput("Rate period must be monthly or annual.") from exc
        object.__setattr__(self, "rate", rate)
        object.__setattr__(self, "rate_period", rate_period)


InterestSpec = Union[MonetaryInterest, PercentageInterest]


@dataclass(frozen=True)
class DebtState:
    remaining_balance: Decimal
    interest: InterestSpec = field(default_factory=MonetaryInterest)

    def __post_init__(self) -> None:
        balance = coerce_amount(self.remaining_balance)
        if balance < ZERO:
            raise InvalidInput("Remaining balance must not be negative.")
        if not isinstance(self.interest, (MonetaryInterest, PercentageInterest)):
            raise InvalidInput("Interest must be monetary or percentage.")
        object.__setattr__(self, "remaining_balance", balance)

    @property
    def is_paid_off(self) -> bool:
        return self.remaining_balance == ZERO


@dataclass(frozen=True)
class RecurringEvent:
    anchor_date: date
    frequency: Frequency
    amount: Decimal
    kind: EventKind
    debt: Optional[DebtState] = None
    title: Optional[str] = None

    def __post_init__(self) -> None:
        amount = coerce_amount(self.amount)
        if amount < ZERO:
            raise InvalidInput("Event amount must not be negative.")
        kind = parse_kind(self.kind)
        if self.debt is not None and kind is not EventKind.DEBT_PAYMENT:
            raise InvalidInput("Only debt events may carry a debt state.")
        if isinstance(self.anchor_date, datetime):
            object.__setattr__(self, "anchor_date", self.anchor_date.date())
        elif not isinstance(self.anchor_date, date):
            raise InvalidInput("Anchor date must be a calendar date.")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "frequency", parse_frequency(self.frequency))

    @property
    def is_debt(self) -> bool:
        return self.kind is EventKind.DEBT_PAYMENT


@dataclass(frozen=True)
class ProjectionResult:
    next_due_date: date
    is_due_today: bool
    days_until: int


def coerce_amount(amount: Decimal | int | float | str) -> Decimal:
    if isinstance(amount, Decimal):
        value = amount
    else:
        try:
            value = Decimal(str(amount))
        except ArithmeticError as exc:
            raise InvalidInput(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise InvalidInput(f"Invalid amount: {amount!r}")
    return value
