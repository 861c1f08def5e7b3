from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_CEILING, Decimal
from enum import Enum
from typing import Optional

from cashflow.exceptions import InvalidInput
from cashflow.frequency import Frequency, parse_frequency
from cashflow.models import (
    ZERO,
    DebtState,
    MonetaryInterest,
    PercentageInterest,
    RatePeriod,
    RecurringEvent,
    coerce_amount,
)
from cashflow.normalizer import MONTHS_PER_YEAR, WEEKS_PER_MONTH, to_monthly

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


class PayoffStatus(str, Enum):
    PAID_OFF = "paid_off"
    NOT_PAYING = "not_paying"
    GROWING = "growing"
    PAYING_DOWN = "paying_down"


@dataclass(frozen=True)
class AmortizationResult:
    monthly_interest: Decimal
    net_monthly_payment: Decimal
    weeks_to_payoff: Optional[int]
    status: PayoffStatus


def monthly_interest(state: DebtState) -> Decimal:
    if state.is_paid_off:
        return ZERO
    interest = state.interest
    if isinstance(interest, MonetaryInterest):
        return interest.monthly_amount
    if isinstance(interest, PercentageInterest):
        rate = interest.rate / HUNDRED
        if interest.rate_period is RatePeriod.ANNUAL:
            return state.remaining_balance * rate / MONTHS_PER_YEAR
        return state.remaining_balance * rate
    raise InvalidInput("Interest must be monetary or percentage.")


def net_monthly_payment(
    amount_per_period: Decimal, frequency: Frequency, state: DebtState
) -> Decimal:
    return to_monthly(amount_per_period, frequency) - monthly_interest(state)


def weeks_to_payoff(
    amount_per_period: Decimal, frequency: Frequency, state: DebtState
) -> Optional[int]:
    """Single-step projection of weeks until the balance reaches zero.

    Interest is taken once against the current balance rather than compounded
    month by month. Returns ``None`` when the debt is already paid off, no
    payment is being made, or the payment does not cover the interest; use
    :func:`payoff_status` to tell those apart.
    """
    amount = _validated_payment(amount_per_period)
    if state.is_paid_off or amount == ZERO:
        return None
    net = net_monthly_payment(amount, frequency, state)
    if net <= ZERO:
        logger.debug(
            "Debt payment %s %s does not cover interest (net %s).",
            amount,
            parse_frequency(frequency).value,
            net,
        )
        return None
    weeks = (state.remaining_balance / net * WEEKS_PER_MONTH).to_integral_value(
        rounding=ROUND_CEILING
    )
    return int(weeks)


def payoff_status(
    amount_per_period: Decimal, frequency: Frequency, state: DebtState
) -> PayoffStatus:
    amount = _validated_payment(amount_per_period)
    if state.is_paid_off:
        return PayoffStatus.PAID_OFF
    if amount == ZERO:
        return PayoffStatus.NOT_PAYING
    if net_monthly_payment(amount, frequency, state) <= ZERO:
        return PayoffStatus.GROWING
    return PayoffStatus.PAYING_DOWN


def amortize(
    amount_per_period: Decimal, frequency: Frequency, state: DebtState
) -> AmortizationResult:
    return AmortizationResult(
        monthly_interest=monthly_interest(state),
        net_monthly_payment=net_monthly_payment(amount_per_period, frequency, state),
        weeks_to_payoff=weeks_to_payoff(amount_per_period, frequency, state),
        status=payoff_status(amount_per_period, frequency, state),
    )


def amortize_event(event: RecurringEvent) -> AmortizationResult:
    if not event.is_debt:
        raise InvalidInput("Only debt events can be amortized.")
    if event.debt is None:
        raise InvalidInput("Debt event is missing its debt state.")
    return amortize(event.amount, event.frequency, event.debt)


def payoff_date(
    amount_per_period: Decimal, frequency: Frequency, state: DebtState, today: date
) -> Optional[date]:
    weeks = weeks_to_payoff(amount_per_period, frequency, state)
    if weeks is None:
        return None
    try:
        return today + timedelta(weeks=weeks)
    except OverflowError as exc:
        raise InvalidInput("Payoff date is beyond the supported date range.") from exc


def _validated_payment(amount_per_period: Decimal) -> Decimal:
    amount = coerce_amount(amount_per_period)
    if amount < ZERO:
        raise InvalidInput("Payment amount must not be negative.")
    return amount
