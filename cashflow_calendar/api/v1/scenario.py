"""POST /v1/scenario - "can I afford this?" endpoint"""

import time
import logging
from typing import Iterable, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from cashflow_calendar.api.v1.projection import project_from_request, resolve_forecast_days
from cashflow_calendar.api.v1.schemas import (
    PreviewDaySchema,
    ScenarioRejectedResponse,
    ScenarioRequest,
    ScenarioResponse,
    ScenarioResultSchema,
    ScenarioSummarySchema,
)
from cashflow_calendar.api.dependencies import TodayResolver, get_request_id, get_today_resolver
from cashflow_calendar.config import settings
from cashflow_calendar.domain.exceptions import DomainException
from cashflow_calendar.domain.models import ScenarioDayDelta, ScenarioExpense, ScenarioOutcome, ScenarioRejected
from cashflow_calendar.domain.scenario import apply_scenario
from cashflow_calendar.infrastructure.observability.metrics import record_scenario
from cashflow_calendar.infrastructure.observability.logging import log_scenario
from cashflow_calendar.utils.money import from_cents

router = APIRouter()


def serialize_deltas(deltas: Iterable[ScenarioDayDelta]) -> List[PreviewDaySchema]:
    return [
        PreviewDaySchema(
            date=day.date,
            baseline_balance=from_cents(day.baseline_balance_cents),
            scenario_balance=from_cents(day.scenario_balance_cents),
            delta=from_cents(day.delta_cents),
        )
        for day in deltas
    ]


def serialize_outcome(outcome: ScenarioOutcome, currency: str) -> ScenarioResponse:
    expense = outcome.expense
    result = outcome.result

    return ScenarioResponse(
        currency=currency,
        scenario=ScenarioSummarySchema(
            name=expense.name,
            amount=from_cents(expense.amount_cents),
            date=expense.start_date,
            frequency=expense.frequency.value,
            is_recurring=expense.frequency.is_recurring,
        ),
        result=ScenarioResultSchema(
            can_afford=result.can_afford,
            lowest_balance=from_cents(result.lowest_balance_cents),
            previous_lowest=from_cents(result.previous_lowest_cents),
            lowest_date=result.lowest_date,
            causes_overdraft=result.causes_overdraft,
            causes_low_balance=result.causes_low_balance,
            first_problem_day=result.first_problem_day,
            impact_summary=result.impact_summary,
        ),
        preview=serialize_deltas(outcome.preview),
        timeline=serialize_deltas(outcome.timeline),
        next_affordable_date=outcome.next_affordable_date,
    )


@router.post(
    "/scenario",
    response_model=ScenarioResponse,
    responses={422: {"model": ScenarioRejectedResponse}},
)
def create_scenario(
    request_body: ScenarioRequest,
    request: Request,
    resolve_today: TodayResolver = Depends(get_today_resolver),
):
    """
    Test a hypothetical expense against the baseline projection without saving it.

    Flow:
    1. Build the baseline projection from the supplied rows
    2. Validate the expense (amount, date not in the past, account)
    3. Re-walk the same window with the expense added and compare day by day
    4. Suggest the next income day on which the expense would fit

    Invalid scenario input returns 422 with {"ok": false, "field", "error"}.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    forecast_days = resolve_forecast_days(request_body.forecast_days)
    scenario = request_body.scenario

    try:
        projection = project_from_request(request_body, resolve_today, forecast_days)
        outcome = apply_scenario(
            projection,
            ScenarioExpense(
                amount=scenario.amount,
                date=scenario.date,
                name=scenario.name or "",
                frequency=scenario.frequency,
                is_recurring=scenario.is_recurring,
                account_id=scenario.account_id,
            ),
            preview_radius_days=settings.preview_radius_days,
        )

    except DomainException as e:
        logging.warning(f"Invalid scenario input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000

    if isinstance(outcome, ScenarioRejected):
        record_scenario("rejected")
        log_scenario(request_id, "rejected", None, duration_ms)
        rejected = ScenarioRejectedResponse(field=outcome.field, error=outcome.reason)
        return JSONResponse(status_code=422, content=rejected.model_dump())

    label = "affordable" if outcome.result.can_afford else "unaffordable"
    record_scenario(label)
    log_scenario(request_id, label, outcome.expense.amount_cents, duration_ms)

    return serialize_outcome(outcome, projection.currency)
