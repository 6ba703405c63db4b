"""Projection orchestration - records in, walked and analyzed calendar out"""

from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from cashflow_calendar.domain.events import normalize, resolve_default_account
from cashflow_calendar.domain.exceptions import InvalidWindowError, NoAccountsError
from cashflow_calendar.domain.models import (
    Account,
    AnalysisOptions,
    Projection,
    RecurringItem,
    SafetySettings,
    Transfer,
)
from cashflow_calendar.domain.risk import analyze
from cashflow_calendar.domain.walker import spendable_total, walk


def monthly_equivalent_cents(items: Iterable[RecurringItem]) -> int:
    """Average monthly amount of active recurring items; one-off items are excluded"""
    yearly = sum(
        abs(item.amount_cents) * item.frequency.occurrences_per_year
        for item in items
        if item.is_active
    )
    return round(yearly / 12)


def build_projection(
    accounts: Sequence[Account],
    bills: Sequence[RecurringItem],
    income: Sequence[RecurringItem],
    transfers: Sequence[Transfer],
    safety: SafetySettings,
    today: date,
    forecast_days: int = 60,
    options: Optional[AnalysisOptions] = None,
    verbose: bool = False,
) -> Projection:
    """
    Main entry point: project balances for `forecast_days` days starting today.

    `today` is the calendar day in the user's timezone; the caller resolves it once
    so the whole computation is deterministic.

    Flow:
    1. Normalize bills, income, card payments and transfers into cash events
    2. Walk the events day by day from current balances
    3. Analyze the timeline against the safety buffer

    Raises:
        NoAccountsError: No accounts supplied
        InvalidWindowError: forecast_days is less than 1
    """
    if not accounts:
        raise NoAccountsError("Add at least one account to generate your forecast")
    if forecast_days < 1:
        raise InvalidWindowError(f"Forecast must cover at least one day, got {forecast_days}")

    options = options or AnalysisOptions()
    window_start = today
    window_end = today + timedelta(days=forecast_days - 1)

    events = normalize(accounts, bills, income, transfers, window_start, window_end)
    days = walk(accounts, events, window_start, window_end, verbose=verbose)
    summary = analyze(days, safety.safety_buffer_cents, options)

    return Projection(
        accounts=tuple(accounts),
        today=today,
        window_start=window_start,
        window_end=window_end,
        default_account_id=resolve_default_account(accounts),
        events=tuple(events),
        days=tuple(days),
        summary=summary,
        starting_balance_cents=spendable_total(accounts),
        safety_buffer_cents=safety.safety_buffer_cents,
        currency=safety.currency,
        monthly_income_cents=monthly_equivalent_cents(income),
        monthly_bills_cents=monthly_equivalent_cents(bills),
        options=options,
    )
