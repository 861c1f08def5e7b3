from datetime import date
from decimal import Decimal

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cashflow.amortization import amortize_event, payoff_date
from cashflow.calendar_projection import (
    DayForecast,
    due_on,
    month_grid,
    project_range,
)
from cashflow.config import Settings
from cashflow.exceptions import InvalidInput
from cashflow.frequency import parse_frequency
from cashflow.logging import get_logger, setup_logging
from cashflow.models import (
    DebtState,
    EventKind,
    MonetaryInterest,
    PercentageInterest,
    RecurringEvent,
    parse_kind,
)
from cashflow.recurrence import due_label, project_event, urgency
from cashflow.summary import summarize

settings = Settings.from_env()
setup_logging(settings.log_level, settings.log_format)
logger = get_logger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


class EventPayload(BaseModel):
    title: str | None = None
    amount: Decimal
    type: str
    frequency: str
    anchor_date: date
    remaining_balance: Decimal | None = None
    interest_type: str | None = None
    monthly_interest: Decimal | None = None
    interest_rate: Decimal | None = None
    rate_frequency: str | None = None

    def to_event(self) -> RecurringEvent:
        kind = parse_kind(self.type)
        debt = None
        if kind is EventKind.DEBT_PAYMENT and self.remaining_balance is not None:
            debt = DebtState(
                remaining_balance=self.remaining_balance,
                interest=self._interest(),
            )
        return RecurringEvent(
            anchor_date=self.anchor_date,
            frequency=parse_frequency(self.frequency),
            amount=self.amount,
            kind=kind,
            debt=debt,
            title=self.title.strip() if self.title else None,
        )

    def _interest(self) -> MonetaryInterest | PercentageInterest:
        interest_type = (self.interest_type or "monetary").strip().lower()
        if interest_type == "monetary":
            return MonetaryInterest(self.monthly_interest or Decimal("0"))
        if interest_type == "percentage":
            return PercentageInterest(
                rate=self.interest_rate or Decimal("0"),
                rate_period=(self.rate_frequency or "monthly").strip().lower(),
            )
        raise InvalidInput("Interest type must be monetary or percentage.")


class EventsPayload(BaseModel):
    events: list[EventPayload]


class NextOccurrencePayload(EventsPayload):
    reference: date


class DueOnPayload(EventsPayload):
    date: date


class ForecastPayload(EventsPayload):
    start: date
    days: int | None = None


class DebtPayload(BaseModel):
    event: EventPayload
    today: date | None = None


class NextOccurrenceResponse(BaseModel):
    index: int
    title: str | None = None
    next_due_date: date
    is_due_today: bool
    days_until: int
    label: str
    urgency: str


class DueEventResponse(BaseModel):
    index: int
    title: str | None = None
    kind: str
    amount: Decimal


class DayTotalsResponse(BaseModel):
    date: date
    income: Decimal
    expenses: Decimal
    debts: Decimal
    net: Decimal


class DayForecastResponse(DayTotalsResponse):
    due: list[DueEventResponse]


class SummaryResponse(BaseModel):
    monthly_income: Decimal
    monthly_expenses: Decimal
    monthly_debt: Decimal
    total_debt: Decimal
    weekly_income: Decimal
    monthly_net: Decimal


class AmortizationResponse(BaseModel):
    monthly_interest: Decimal
    net_monthly_payment: Decimal
    weeks_to_payoff: int | None = None
    status: str
    payoff_date: date | None = None


def build_events(payloads: list[EventPayload]) -> list[RecurringEvent]:
    try:
        return [payload.to_event() for payload in payloads]
    except ValueError as exc:
        logger.warning("Rejected event payload: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def describe_due(events: list[RecurringEvent], due: list[RecurringEvent]) -> list[DueEventResponse]:
    positions = {id(event): index for index, event in enumerate(events)}
    return [
        DueEventResponse(
            index=positions[id(event)],
            title=event.title,
            kind=event.kind.value,
            amount=event.amount,
        )
        for event in due
    ]


def describe_day(events: list[RecurringEvent], forecast: DayForecast) -> DayForecastResponse:
    return DayForecastResponse(
        date=forecast.date,
        income=forecast.totals.income,
        expenses=forecast.totals.expenses,
        debts=forecast.totals.debts,
        net=forecast.totals.net,
        due=describe_due(events, list(forecast.due)),
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/occurrences/next", response_model=list[NextOccurrenceResponse])
def next_occurrences(payload: NextOccurrencePayload) -> list[NextOccurrenceResponse]:
    events = build_events(payload.events)
    responses: list[NextOccurrenceResponse] = []
    for index, event in enumerate(events):
        try:
            projection = project_event(event, payload.reference)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        responses.append(
            NextOccurrenceResponse(
                index=index,
                title=event.title,
                next_due_date=projection.next_due_date,
                is_due_today=projection.is_due_today,
                days_until=projection.days_until,
                label=due_label(projection.days_until),
                urgency=urgency(projection.days_until).value,
            )
        )
    responses.sort(key=lambda entry: (entry.next_due_date, entry.index))
    return responses


@app.post("/occurrences/due", response_model=list[DueEventResponse])
def due_events(payload: DueOnPayload) -> list[DueEventResponse]:
    events = build_events(payload.events)
    return describe_due(events, due_on(events, payload.date))


@app.post("/forecast", response_model=list[DayTotalsResponse])
def forecast(payload: ForecastPayload) -> list[DayTotalsResponse]:
    days = payload.days if payload.days is not None else settings.forecast_days
    if days < 0 or days > settings.max_forecast_days:
        raise HTTPException(
            status_code=400,
            detail=f"Forecast window must be between 0 and {settings.max_forecast_days} days.",
        )
    events = build_events(payload.events)
    try:
        projection = project_range(events, payload.start, days)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [
        DayTotalsResponse(
            date=day,
            income=totals.income,
            expenses=totals.expenses,
            debts=totals.debts,
            net=totals.net,
        )
        for day, totals in projection
    ]


@app.post("/calendar/{year}/{month}", response_model=list[DayForecastResponse])
def calendar_month(year: int, month: int, payload: EventsPayload) -> list[DayForecastResponse]:
    events = build_events(payload.events)
    try:
        grid = month_grid(events, year, month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [describe_day(events, day_forecast) for day_forecast in grid.forecasts()]


@app.post("/summary", response_model=SummaryResponse)
def summary(payload: EventsPayload) -> SummaryResponse:
    events = build_events(payload.events)
    result = summarize(events)
    return SummaryResponse(
        monthly_income=result.monthly_income,
        monthly_expenses=result.monthly_expenses,
        monthly_debt=result.monthly_debt,
        total_debt=result.total_debt,
        weekly_income=result.weekly_income,
        monthly_net=result.monthly_net,
    )


@app.post("/debts/amortization", response_model=AmortizationResponse)
def debt_amortization(payload: DebtPayload) -> AmortizationResponse:
    event = build_events([payload.event])[0]
    try:
        result = amortize_event(event)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    projected_payoff = None
    if payload.today is not None and event.debt is not None:
        try:
            projected_payoff = payoff_date(
                event.amount, event.frequency, event.debt, payload.today
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AmortizationResponse(
        monthly_interest=result.monthly_interest,
        net_monthly_payment=result.net_monthly_payment,
        weeks_to_payoff=result.weeks_to_payoff,
        status=result.status.value,
        payoff_date=projected_payoff,
    )
