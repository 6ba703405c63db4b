"""What-if scenarios - overlay a hypothetical expense on a baseline projection"""

from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence, Tuple, Union

from cashflow_calendar.domain.models import (
    CalendarDay,
    CashEvent,
    EventKind,
    Frequency,
    HypotheticalExpense,
    Projection,
    RiskSummary,
    ScenarioDayDelta,
    ScenarioExpense,
    ScenarioOutcome,
    ScenarioRejected,
    ScenarioResult,
)
from cashflow_calendar.domain.recurrence import expand
from cashflow_calendar.domain.risk import analyze
from cashflow_calendar.domain.walker import walk
from cashflow_calendar.utils.date_utils import format_short_date, parse_calendar_date
from cashflow_calendar.utils.money import format_money, is_finite_amount, to_cents

DEFAULT_EXPENSE_NAME = "New purchase"


def validate_expense(
    expense: ScenarioExpense,
    projection: Projection,
    today: date,
) -> Union[HypotheticalExpense, ScenarioRejected]:
    """
    Check a raw scenario request before any computation.

    Rejections are returned, not raised, so callers can show a field-level message.
    Nothing is clamped: a past date or a zero amount is refused outright.

    Raises:
        UnknownFrequencyError: Frequency value is not supported
    """
    if not is_finite_amount(expense.amount):
        return ScenarioRejected(field="amount", reason="Please enter a valid amount.")
    try:
        amount_cents = to_cents(expense.amount)
    except ValueError:
        return ScenarioRejected(field="amount", reason="Please enter a valid amount.")
    if amount_cents <= 0:
        return ScenarioRejected(field="amount", reason="Please enter a valid amount.")

    if expense.date is None or (isinstance(expense.date, str) and not expense.date.strip()):
        return ScenarioRejected(field="date", reason="Please select a date.")
    try:
        start_date = parse_calendar_date(expense.date)
    except ValueError:
        return ScenarioRejected(field="date", reason="Please select a valid date.")
    if start_date < today:
        return ScenarioRejected(field="date", reason="Please select a future date.")

    account_id = expense.account_id or projection.default_account_id
    if account_id not in {account.id for account in projection.accounts}:
        return ScenarioRejected(field="account_id", reason="Please choose one of your accounts.")

    if expense.frequency is not None:
        frequency = Frequency.parse(expense.frequency)
    else:
        frequency = Frequency.MONTHLY if expense.is_recurring else Frequency.ONE_TIME

    return HypotheticalExpense(
        name=(expense.name or "").strip() or DEFAULT_EXPENSE_NAME,
        amount_cents=amount_cents,
        start_date=start_date,
        frequency=frequency,
        account_id=account_id,
    )


def scenario_events(expense: HypotheticalExpense, window_start: date, window_end: date) -> List[CashEvent]:
    """Bill events for the hypothetical expense, expanded from its own start date"""
    return [
        CashEvent(
            date=occurrence,
            account_id=expense.account_id,
            delta_cents=-expense.amount_cents,
            kind=EventKind.BILL,
            label=expense.name,
            source_id="scenario",
            category="scenario",
        )
        for occurrence in expand(expense.start_date, expense.frequency, window_start, window_end)
    ]


def diff_days(baseline: Sequence[CalendarDay], scenario: Sequence[CalendarDay]) -> List[ScenarioDayDelta]:
    """Day-by-day comparison of two walks over the same window"""
    if len(baseline) != len(scenario):
        raise ValueError("Baseline and scenario must cover the same window")

    return [
        ScenarioDayDelta(
            date=base.date,
            baseline_balance_cents=base.balance_cents,
            scenario_balance_cents=alt.balance_cents,
            delta_cents=alt.balance_cents - base.balance_cents,
        )
        for base, alt in zip(baseline, scenario)
    ]


def summarize_impact(result: ScenarioResult, summary: RiskSummary, currency: str, safety_buffer_cents: int) -> str:
    lowest = format_money(result.lowest_balance_cents, currency)
    lowest_on = format_short_date(result.lowest_date)

    if result.causes_overdraft:
        return (
            f"This would cause an overdraft risk starting {format_short_date(result.first_problem_day)}. "
            f"Lowest balance would be {lowest} on {lowest_on}."
        )
    if result.causes_low_balance:
        return (
            f"You can afford this, but your balance would dip below your "
            f"{format_money(safety_buffer_cents, currency)} safety buffer starting "
            f"{format_short_date(summary.first_buffer_breach_date)}. "
            f"Lowest balance would be {lowest} on {lowest_on}."
        )
    return f"Lowest balance would be {lowest} on {lowest_on}."


def evaluate_expense(
    projection: Projection,
    expense: HypotheticalExpense,
) -> Tuple[ScenarioResult, List[ScenarioDayDelta]]:
    """
    Re-walk the baseline window with the expense added and judge affordability.

    Affordable means the scenario never goes below zero; dipping under the safety
    buffer is reported (causes_low_balance) but does not block.
    """
    extra = scenario_events(expense, projection.window_start, projection.window_end)
    days = walk(
        projection.accounts,
        projection.events + tuple(extra),
        projection.window_start,
        projection.window_end,
    )
    summary = analyze(days, projection.safety_buffer_cents, projection.options)

    causes_overdraft = summary.first_overdraft_date is not None
    result = ScenarioResult(
        can_afford=not causes_overdraft,
        lowest_balance_cents=summary.lowest_balance_cents,
        previous_lowest_cents=projection.summary.lowest_balance_cents,
        lowest_date=summary.lowest_balance_date,
        causes_overdraft=causes_overdraft,
        causes_low_balance=summary.first_buffer_breach_date is not None,
        first_problem_day=summary.first_overdraft_date,
        impact_summary="",
    )
    result = replace(
        result,
        impact_summary=summarize_impact(result, summary, projection.currency, projection.safety_buffer_cents),
    )
    return result, diff_days(projection.days, days)


def preview_window(
    timeline: Sequence[ScenarioDayDelta],
    result: ScenarioResult,
    radius_days: int = 3,
) -> List[ScenarioDayDelta]:
    """Slice of the timeline centred on the first problem day, else on the lowest day"""
    anchor = result.first_problem_day or result.lowest_date
    index = next((i for i, day in enumerate(timeline) if day.date == anchor), 0)
    start = max(0, index - radius_days)
    return list(timeline[start:index + radius_days + 1])


def find_next_affordable_date(projection: Projection, expense: HypotheticalExpense) -> Optional[date]:
    """
    First income day after the requested date on which the same expense would be affordable.

    Each candidate re-runs the scenario with the expense (and its recurrence) moved there.
    """
    for day in projection.days:
        if day.date <= expense.start_date or not day.income:
            continue
        result, _ = evaluate_expense(projection, replace(expense, start_date=day.date))
        if result.can_afford:
            return day.date
    return None


def apply_scenario(
    projection: Projection,
    expense: ScenarioExpense,
    today: Optional[date] = None,
    preview_radius_days: int = 3,
) -> Union[ScenarioOutcome, ScenarioRejected]:
    """
    Main entry point: answer "can I afford this?" against a baseline projection.

    Returns ScenarioRejected for invalid input (bad amount, missing/invalid/past date,
    unknown account). Otherwise a ScenarioOutcome with the verdict, the full day-by-day
    delta timeline, a short preview around the problem area and the next income day
    on which the expense would fit.
    """
    today = today or projection.today
    validated = validate_expense(expense, projection, today)
    if isinstance(validated, ScenarioRejected):
        return validated

    result, timeline = evaluate_expense(projection, validated)

    return ScenarioOutcome(
        expense=validated,
        result=result,
        timeline=tuple(timeline),
        preview=tuple(preview_window(timeline, result, preview_radius_days)),
        next_affordable_date=find_next_affordable_date(projection, validated),
    )
