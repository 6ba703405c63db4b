"""Recurrence expansion - turns a frequency rule into dated occurrences"""

from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from cashflow_calendar.domain.models import Frequency
from cashflow_calendar.utils.date_utils import clamp_day

# (anchor, first, last) -> occurrences within [first, last]; first is never before anchor
Expander = Callable[[date, date, date], List[date]]


def expand(
    anchor: date,
    frequency: Union[Frequency, str],
    window_start: date,
    window_end: date,
    until: Optional[date] = None,
) -> List[date]:
    """
    Expand a recurrence rule into occurrence dates within a window.

    Requirements:
    - Every date lies in [window_start, window_end] and on or before `until`
    - Ascending, no duplicates, never before the anchor
    - Cadence is always measured from the anchor, so an anchor far in the past
      keeps its weekly/biweekly phase and its day of month

    Args:
        anchor: First occurrence (bill due date, income next date, ...)
        frequency: Recurrence rule
        window_start: First day of the projection window (inclusive)
        window_end: Last day of the projection window (inclusive)
        until: Optional last day the rule is active

    Raises:
        UnknownFrequencyError: Frequency value is not supported

    Example:
        biweekly from 2024-01-05 over 2024-01-01..2024-02-28
        -> 01-05, 01-19, 02-02, 02-16
    """
    frequency = Frequency.parse(frequency)

    last = window_end if until is None else min(window_end, until)
    first = max(window_start, anchor)
    if first > last:
        return []

    return _EXPANDERS[frequency](anchor, first, last)


def _single(anchor: date, first: date, last: date) -> List[date]:
    return [anchor] if first <= anchor <= last else []


def _every_n_days(step_days: int) -> Expander:
    def expand_interval(anchor: date, first: date, last: date) -> List[date]:
        # Ceil division lands on the first on-phase day at or after `first`
        periods = -(-(first - anchor).days // step_days)
        current = anchor + timedelta(days=periods * step_days)

        occurrences = []
        while current <= last:
            occurrences.append(current)
            current += timedelta(days=step_days)
        return occurrences

    return expand_interval


def _every_n_months(step_months: int) -> Expander:
    def expand_months(anchor: date, first: date, last: date) -> List[date]:
        # Offsets are taken from the anchor each time, so a clamped month
        # (Jan 31 -> Feb 29) never shifts later months (-> Mar 31)
        months_apart = (first.year - anchor.year) * 12 + (first.month - anchor.month)
        step = months_apart // step_months

        occurrences = []
        current = anchor + relativedelta(months=step * step_months)
        while current <= last:
            if current >= first:
                occurrences.append(current)
            step += 1
            current = anchor + relativedelta(months=step * step_months)
        return occurrences

    return expand_months


def semi_monthly_days(anchor_day: int) -> Tuple[int, int]:
    """
    Paydays for a twice-a-month rule anchored on `anchor_day`.

    1st-15th pair with the day fifteen later (1st & 16th, 15th & 30th);
    16th-31st pair with the day fifteen earlier (20th & 5th, 31st & 16th).
    """
    other = anchor_day + 15 if anchor_day <= 15 else anchor_day - 15
    return anchor_day, other


def _semi_monthly(anchor: date, first: date, last: date) -> List[date]:
    days = semi_monthly_days(anchor.day)
    year, month = first.year, first.month

    occurrences = []
    while date(year, month, 1) <= last:
        for occurrence in sorted({clamp_day(year, month, day) for day in days}):
            if first <= occurrence <= last:
                occurrences.append(occurrence)
        month += 1
        if month > 12:
            month = 1
            year += 1
    return occurrences


_EXPANDERS: Dict[Frequency, Expander] = {
    Frequency.ONE_TIME: _single,
    Frequency.IRREGULAR: _single,
    Frequency.WEEKLY: _every_n_days(7),
    Frequency.BIWEEKLY: _every_n_days(14),
    Frequency.SEMI_MONTHLY: _semi_monthly,
    Frequency.MONTHLY: _every_n_months(1),
    Frequency.QUARTERLY: _every_n_months(3),
    Frequency.ANNUALLY: _every_n_months(12),
}
