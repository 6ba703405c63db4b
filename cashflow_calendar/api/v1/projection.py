"""POST /v1/projection - cash-flow calendar projection endpoint"""

import time
import logging
from typing import Iterable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from cashflow_calendar.api.v1.schemas import (
    CalendarDaySchema,
    CollisionSchema,
    EventSchema,
    ProjectionRequest,
    ProjectionResponse,
)
from cashflow_calendar.api.dependencies import TodayResolver, get_request_id, get_today_resolver
from cashflow_calendar.config import settings
from cashflow_calendar.domain.exceptions import DomainException
from cashflow_calendar.domain.models import AnalysisOptions, CashEvent, Projection
from cashflow_calendar.domain.projection import build_projection
from cashflow_calendar.domain.risk import balance_status
from cashflow_calendar.infrastructure.rows import records_from_rows
from cashflow_calendar.infrastructure.observability.metrics import record_projection
from cashflow_calendar.infrastructure.observability.logging import log_projection
from cashflow_calendar.utils.money import from_cents, to_cents

router = APIRouter()


def resolve_forecast_days(requested: Optional[int]) -> int:
    """Requested window length, or the configured default; capped by configuration"""
    forecast_days = requested or settings.forecast_days
    if forecast_days > settings.max_forecast_days:
        raise HTTPException(
            status_code=422,
            detail=f"forecast_days must be at most {settings.max_forecast_days}",
        )
    return forecast_days


def analysis_options() -> AnalysisOptions:
    return AnalysisOptions(
        safe_to_spend_horizon_days=settings.safe_to_spend_horizon_days,
        collision_min_bills_warning=settings.collision_min_bills_warning,
        collision_min_bills_critical=settings.collision_min_bills_critical,
        collision_critical_amount_cents=to_cents(settings.collision_critical_amount),
    )


def project_from_request(body: ProjectionRequest, resolve_today: TodayResolver, forecast_days: int) -> Projection:
    """Map request rows to domain records, resolve today in the user's timezone and project"""
    records = records_from_rows(
        accounts=[row.model_dump() for row in body.accounts],
        bills=[row.model_dump() for row in body.bills],
        income=[row.model_dump() for row in body.income],
        transfers=[row.model_dump() for row in body.transfers],
        user_settings=body.settings.model_dump() if body.settings else None,
    )
    safety = records["safety"]
    today = resolve_today(safety.timezone or settings.default_timezone)

    return build_projection(
        **records,
        today=today,
        forecast_days=forecast_days,
        options=analysis_options(),
        verbose=settings.calendar_verbose,
    )


def serialize_events(events: Iterable[CashEvent]) -> List[EventSchema]:
    return [
        EventSchema(
            id=event.source_id,
            name=event.label,
            amount=from_cents(event.amount_cents),
            kind=event.kind.value,
            account_id=event.account_id,
            category=event.category,
            invoice_id=event.invoice_id,
            status=event.status,
        )
        for event in events
    ]


def serialize_projection(projection: Projection) -> ProjectionResponse:
    summary = projection.summary
    buffer = projection.safety_buffer_cents

    days = [
        CalendarDaySchema(
            date=day.date,
            balance=from_cents(day.balance_cents),
            account_balances={account_id: from_cents(cents) for account_id, cents in day.account_balances.items()},
            income=serialize_events(day.income),
            bills=serialize_events(day.bills),
            transfers=serialize_events(day.transfers),
            status=balance_status(day.balance_cents, buffer).value,
        )
        for day in projection.days
    ]

    collisions = [
        CollisionSchema(
            date=collision.date,
            bills=serialize_events(collision.bills),
            total_amount=from_cents(collision.total_cents),
            severity=collision.severity.value,
        )
        for collision in summary.collision_days
    ]

    return ProjectionResponse(
        currency=projection.currency,
        starting_balance=from_cents(projection.starting_balance_cents),
        lowest_balance=from_cents(summary.lowest_balance_cents),
        lowest_balance_day=summary.lowest_balance_date,
        first_buffer_breach_date=summary.first_buffer_breach_date,
        first_overdraft_date=summary.first_overdraft_date,
        safe_to_spend=from_cents(summary.safe_to_spend_cents),
        monthly_income=from_cents(projection.monthly_income_cents),
        monthly_bills=from_cents(projection.monthly_bills_cents),
        collisions=collisions,
        highest_collision_amount=from_cents(summary.highest_collision_amount_cents),
        highest_collision_date=summary.highest_collision_date,
        days=days,
    )


@router.post("/projection", response_model=ProjectionResponse)
def create_projection(
    request_body: ProjectionRequest,
    request: Request,
    resolve_today: TodayResolver = Depends(get_today_resolver),
):
    """
    Project daily balances forward from today's account balances.

    Flow:
    1. Map account, bill, income and transfer rows to domain records
    2. Resolve today in the user's timezone
    3. Expand recurrences, walk balances day by day, analyze risk
    4. Return the calendar with lowest point, breaches and bill collisions
    """
    start_time = time.time()
    request_id = get_request_id(request)
    forecast_days = resolve_forecast_days(request_body.forecast_days)

    try:
        projection = project_from_request(request_body, resolve_today, forecast_days)

    except DomainException as e:
        logging.warning(f"Invalid projection input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration = time.time() - start_time
    summary = projection.summary
    record_projection(summary.lowest_balance_cents, projection.safety_buffer_cents, duration)
    log_projection(
        request_id,
        forecast_days,
        len(projection.events),
        summary.lowest_balance_cents,
        summary.first_overdraft_date.isoformat() if summary.first_overdraft_date else None,
        duration * 1000,
    )

    return serialize_projection(projection)
