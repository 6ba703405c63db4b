"""Risk analysis over a walked timeline - lowest point, buffer breaches, overdrafts, bill collisions"""

from typing import List, Optional, Sequence

from cashflow_calendar.domain.exceptions import InvalidWindowError
from cashflow_calendar.domain.models import (
    AnalysisOptions,
    BalanceStatus,
    BillCollision,
    CalendarDay,
    CollisionSeverity,
    RiskSummary,
)


def balance_status(balance_cents: int, safety_buffer_cents: int) -> BalanceStatus:
    """
    Classify an end-of-day balance.

    Boundaries are strict: exactly zero is not negative, exactly the buffer is not low.
    """
    if balance_cents < 0:
        return BalanceStatus.NEGATIVE
    if balance_cents < safety_buffer_cents:
        return BalanceStatus.LOW
    return BalanceStatus.HEALTHY


def collision_for_day(day: CalendarDay, options: AnalysisOptions) -> Optional[BillCollision]:
    """
    Collision for one day, or None.

    Zero-amount bills are ignored. Several events from the same bill count once.
    Severity is critical at 4+ bills or a total above $1000 (configurable).
    """
    bills = []
    seen_sources = set()
    for event in day.bills:
        if event.amount_cents == 0 or event.source_id in seen_sources:
            continue
        seen_sources.add(event.source_id)
        bills.append(event)

    if len(bills) < options.collision_min_bills_warning:
        return None

    total = sum(event.amount_cents for event in bills)
    critical = (
        len(bills) >= options.collision_min_bills_critical
        or total > options.collision_critical_amount_cents
    )
    return BillCollision(
        date=day.date,
        bills=tuple(bills),
        total_cents=total,
        severity=CollisionSeverity.CRITICAL if critical else CollisionSeverity.WARNING,
    )


def detect_collisions(days: Sequence[CalendarDay], options: Optional[AnalysisOptions] = None) -> List[BillCollision]:
    """All collision days in chronological order"""
    options = options or AnalysisOptions()
    collisions = (collision_for_day(day, options) for day in days)
    return [collision for collision in collisions if collision is not None]


def analyze(
    days: Sequence[CalendarDay],
    safety_buffer_cents: int,
    options: Optional[AnalysisOptions] = None,
) -> RiskSummary:
    """
    Derive risk metrics from a walked timeline in a single pass.

    Requirements:
    - Lowest spendable balance and its first date (ties keep the earliest day)
    - First day below the safety buffer, first day below zero
    - Bill collision days
    - Safe to spend: lowest balance within the horizon minus the buffer, never negative

    Raises:
        InvalidWindowError: No days to analyze
    """
    if not days:
        raise InvalidWindowError("No calendar days to analyze")
    options = options or AnalysisOptions()

    lowest = days[0]
    first_breach = None
    first_overdraft = None
    collisions = []
    horizon_lowest = days[0].balance_cents

    for index, day in enumerate(days):
        balance = day.balance_cents

        if balance < lowest.balance_cents:
            lowest = day
        if first_breach is None and balance < safety_buffer_cents:
            first_breach = day.date
        if first_overdraft is None and balance < 0:
            first_overdraft = day.date
        if index < options.safe_to_spend_horizon_days:
            horizon_lowest = min(horizon_lowest, balance)

        collision = collision_for_day(day, options)
        if collision is not None:
            collisions.append(collision)

    return RiskSummary(
        lowest_balance_cents=lowest.balance_cents,
        lowest_balance_date=lowest.date,
        first_buffer_breach_date=first_breach,
        first_overdraft_date=first_overdraft,
        collision_days=tuple(collisions),
        safe_to_spend_cents=max(0, horizon_lowest - safety_buffer_cents),
    )
