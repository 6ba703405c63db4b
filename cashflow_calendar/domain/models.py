"""Domain models - pure Python dataclasses representing cash-flow entities"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from cashflow_calendar.domain.exceptions import UnknownFrequencyError


class Frequency(str, Enum):
    """Recurrence rule shared by bills, income, transfers and scenarios"""

    ONE_TIME = "one-time"
    IRREGULAR = "irregular"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMI_MONTHLY = "semi-monthly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"

    @classmethod
    def parse(cls, value: Union["Frequency", str]) -> "Frequency":
        """
        Parse a stored frequency value, tolerating case, whitespace and legacy spellings.

        Raises:
            UnknownFrequencyError: Value is not a supported frequency
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise UnknownFrequencyError(f"Frequency must be a string, got {type(value).__name__}")

        normalized = value.strip().lower().replace("_", "-")
        normalized = _FREQUENCY_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError as e:
            raise UnknownFrequencyError(f"Unknown frequency: {value!r}") from e

    @property
    def label(self) -> str:
        return _FREQUENCY_LABELS[self]

    @property
    def occurrences_per_year(self) -> int:
        """Expected occurrences per year; one-off frequencies count as zero"""
        return _OCCURRENCES_PER_YEAR[self]

    @property
    def is_recurring(self) -> bool:
        return self.occurrences_per_year > 0


_FREQUENCY_ALIASES = {
    "once": "one-time",
    "onetime": "one-time",
    "one time": "one-time",
    "bi-weekly": "biweekly",
    "semimonthly": "semi-monthly",
    "annual": "annually",
    "yearly": "annually",
}

_FREQUENCY_LABELS = {
    Frequency.ONE_TIME: "One-time",
    Frequency.IRREGULAR: "Irregular",
    Frequency.WEEKLY: "Weekly",
    Frequency.BIWEEKLY: "Every 2 weeks",
    Frequency.SEMI_MONTHLY: "Twice a month",
    Frequency.MONTHLY: "Monthly",
    Frequency.QUARTERLY: "Quarterly",
    Frequency.ANNUALLY: "Annually",
}

_OCCURRENCES_PER_YEAR = {
    Frequency.ONE_TIME: 0,
    Frequency.IRREGULAR: 0,
    Frequency.WEEKLY: 52,
    Frequency.BIWEEKLY: 26,
    Frequency.SEMI_MONTHLY: 24,
    Frequency.MONTHLY: 12,
    Frequency.QUARTERLY: 4,
    Frequency.ANNUALLY: 1,
}


class AccountKind(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class EventKind(str, Enum):
    BILL = "bill"
    INCOME = "income"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"


class BalanceStatus(str, Enum):
    HEALTHY = "healthy"
    LOW = "low"  # Below the safety buffer
    NEGATIVE = "negative"


class CollisionSeverity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Account:
    """Bank or card account; its balance anchors day 0 of the projection"""

    id: str
    name: str
    balance_cents: int  # Credit cards: amount owed
    currency: str = "USD"
    kind: AccountKind = AccountKind.CHECKING
    is_spendable: bool = True  # Credit cards track debt, not safe-to-spend cash
    credit_limit_cents: Optional[int] = None
    apr: Optional[float] = None
    min_payment_percent: Optional[float] = None
    payment_due_day: Optional[int] = None  # 1-31, clamped to month end

    @property
    def is_credit_card(self) -> bool:
        return self.kind == AccountKind.CREDIT_CARD


@dataclass(frozen=True)
class RecurringItem:
    """Bill or income source; amount is a magnitude, the sign comes from its role"""

    id: str
    name: str
    amount_cents: int
    frequency: Frequency
    anchor_date: date  # Bill due date or income next date
    is_active: bool = True
    category: Optional[str] = None
    account_id: Optional[str] = None  # None posts to the default account
    invoice_id: Optional[str] = None  # Income only
    end_date: Optional[date] = None
    status: Optional[str] = None  # "pending" | "confirmed" for invoice income


@dataclass(frozen=True)
class Transfer:
    """Money moved between two of the user's accounts"""

    id: str
    from_account_id: str
    to_account_id: str
    amount_cents: int
    anchor_date: date
    frequency: Frequency = Frequency.ONE_TIME
    is_active: bool = True
    description: Optional[str] = None


@dataclass(frozen=True)
class CashEvent:
    """Single dated change to one account's balance"""

    date: date
    account_id: str
    delta_cents: int
    kind: EventKind
    label: str
    source_id: str
    category: Optional[str] = None
    invoice_id: Optional[str] = None
    status: Optional[str] = None  # Invoice income: "pending" | "confirmed"

    def __post_init__(self):
        outflow = self.kind in (EventKind.BILL, EventKind.TRANSFER_OUT)
        if outflow and self.delta_cents > 0:
            raise ValueError(f"{self.kind.value} event must not increase a balance")
        if not outflow and self.delta_cents < 0:
            raise ValueError(f"{self.kind.value} event must not decrease a balance")

    @property
    def amount_cents(self) -> int:
        return abs(self.delta_cents)


@dataclass(frozen=True)
class SafetySettings:
    """User preferences that shape risk analysis"""

    safety_buffer_cents: int = 50_000  # $500
    timezone: Optional[str] = None
    currency: str = "USD"


@dataclass(frozen=True)
class CalendarDay:
    """End-of-day balances for one calendar day"""

    date: date
    balance_cents: int  # Sum of spendable accounts only
    account_balances: Dict[str, int]  # Credit cards hold the amount owed
    events: Tuple[CashEvent, ...] = ()

    @property
    def income(self) -> Tuple[CashEvent, ...]:
        return tuple(e for e in self.events if e.kind == EventKind.INCOME)

    @property
    def bills(self) -> Tuple[CashEvent, ...]:
        return tuple(e for e in self.events if e.kind == EventKind.BILL)

    @property
    def transfers(self) -> Tuple[CashEvent, ...]:
        return tuple(e for e in self.events if e.kind in (EventKind.TRANSFER_IN, EventKind.TRANSFER_OUT))


@dataclass(frozen=True)
class BillCollision:
    """Day on which several bills fall due together"""

    date: date
    bills: Tuple[CashEvent, ...]
    total_cents: int
    severity: CollisionSeverity


@dataclass(frozen=True)
class AnalysisOptions:
    """Thresholds for risk analysis"""

    safe_to_spend_horizon_days: int = 14
    collision_min_bills_warning: int = 2
    collision_min_bills_critical: int = 4
    collision_critical_amount_cents: int = 100_000  # $1000


@dataclass(frozen=True)
class RiskSummary:
    """Risk metrics derived from a walked timeline"""

    lowest_balance_cents: int
    lowest_balance_date: date
    first_buffer_breach_date: Optional[date]
    first_overdraft_date: Optional[date]
    collision_days: Tuple[BillCollision, ...]
    safe_to_spend_cents: int

    @property
    def critical_collision_count(self) -> int:
        return sum(1 for c in self.collision_days if c.severity == CollisionSeverity.CRITICAL)

    @property
    def warning_collision_count(self) -> int:
        return sum(1 for c in self.collision_days if c.severity == CollisionSeverity.WARNING)

    @property
    def highest_collision(self) -> Optional[BillCollision]:
        """Collision with the largest total; the earliest wins a tie"""
        highest = None
        for collision in self.collision_days:
            if highest is None or collision.total_cents > highest.total_cents:
                highest = collision
        return highest

    @property
    def highest_collision_amount_cents(self) -> int:
        return self.highest_collision.total_cents if self.highest_collision else 0

    @property
    def highest_collision_date(self) -> Optional[date]:
        return self.highest_collision.date if self.highest_collision else None


@dataclass(frozen=True)
class Projection:
    """Baseline projection; everything a scenario needs to re-walk the same window"""

    accounts: Tuple[Account, ...]
    today: date
    window_start: date
    window_end: date
    default_account_id: str
    events: Tuple[CashEvent, ...]
    days: Tuple[CalendarDay, ...]
    summary: RiskSummary
    starting_balance_cents: int
    safety_buffer_cents: int
    currency: str
    monthly_income_cents: int
    monthly_bills_cents: int
    options: AnalysisOptions = AnalysisOptions()


@dataclass(frozen=True)
class ScenarioExpense:
    """Raw what-if request, validated by the scenario overlay"""

    amount: Union[int, float, Decimal, str, None]  # Major units
    date: Union[date, str, None]
    name: str = "New purchase"
    frequency: Optional[Union[Frequency, str]] = None
    is_recurring: bool = False  # Shorthand for monthly when frequency is unset
    account_id: Optional[str] = None


@dataclass(frozen=True)
class HypotheticalExpense:
    """Validated scenario expense"""

    name: str
    amount_cents: int
    start_date: date
    frequency: Frequency
    account_id: str


@dataclass(frozen=True)
class ScenarioResult:
    """Affordability verdict for a scenario"""

    can_afford: bool
    lowest_balance_cents: int
    previous_lowest_cents: int
    lowest_date: date
    causes_overdraft: bool
    causes_low_balance: bool
    first_problem_day: Optional[date]
    impact_summary: str


@dataclass(frozen=True)
class ScenarioDayDelta:
    """Baseline vs scenario spendable balance for one day"""

    date: date
    baseline_balance_cents: int
    scenario_balance_cents: int
    delta_cents: int  # scenario - baseline


@dataclass(frozen=True)
class ScenarioOutcome:
    """Successful scenario evaluation"""

    expense: HypotheticalExpense
    result: ScenarioResult
    timeline: Tuple[ScenarioDayDelta, ...]
    preview: Tuple[ScenarioDayDelta, ...]
    next_affordable_date: Optional[date]
    ok: bool = True


@dataclass(frozen=True)
class ScenarioRejected:
    """Scenario input failed validation; nothing was computed"""

    field: str
    reason: str
    ok: bool = False
