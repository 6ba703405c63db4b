"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import Dict, List, Optional


class AccountRow(BaseModel):
    """Row from the accounts store"""

    id: str = Field(..., min_length=1)
    name: str
    account_type: str = "checking"
    current_balance: float
    currency: Optional[str] = None
    is_spendable: Optional[bool] = None
    credit_limit: Optional[float] = None
    apr: Optional[float] = None
    min_payment_percent: Optional[float] = None
    payment_due_day: Optional[int] = Field(None, ge=1, le=31)


class BillRow(BaseModel):
    """Row from the bills store"""

    id: str = Field(..., min_length=1)
    name: str
    amount: float
    due_date: str = Field(..., description="YYYY-MM-DD")
    frequency: str
    is_active: Optional[bool] = True
    category: Optional[str] = None
    account_id: Optional[str] = None
    end_date: Optional[str] = None


class IncomeRow(BaseModel):
    """Row from the income store"""

    id: str = Field(..., min_length=1)
    name: str
    amount: float
    frequency: str
    next_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    start_date: Optional[str] = None
    is_active: Optional[bool] = True
    category: Optional[str] = None
    account_id: Optional[str] = None
    invoice_id: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None


class TransferRow(BaseModel):
    """Row from the transfers store"""

    id: str = Field(..., min_length=1)
    from_account_id: str
    to_account_id: str
    amount: float
    transfer_date: str = Field(..., description="YYYY-MM-DD")
    frequency: str = "one-time"
    is_active: Optional[bool] = True
    description: Optional[str] = None


class UserSettingsRow(BaseModel):
    """Row from the user settings store; missing values use service defaults"""

    safety_buffer: Optional[float] = None
    timezone: Optional[str] = None
    currency: Optional[str] = None


class ProjectionRequest(BaseModel):
    """Request body for POST /v1/projection"""

    accounts: List[AccountRow] = Field(default_factory=list)
    bills: List[BillRow] = Field(default_factory=list)
    income: List[IncomeRow] = Field(default_factory=list)
    transfers: List[TransferRow] = Field(default_factory=list)
    settings: Optional[UserSettingsRow] = None
    forecast_days: Optional[int] = Field(None, ge=1, description="Days to project, including today")


class EventSchema(BaseModel):
    """Cash event landing on a calendar day"""

    id: str
    name: str
    amount: float
    kind: str
    account_id: str
    category: Optional[str] = None
    invoice_id: Optional[str] = None
    status: Optional[str] = None


class CalendarDaySchema(BaseModel):
    """Single projected day"""

    date: date
    balance: float
    account_balances: Dict[str, float]
    income: List[EventSchema]
    bills: List[EventSchema]
    transfers: List[EventSchema]
    status: str


class CollisionSchema(BaseModel):
    """Day with several bills due"""

    date: date
    bills: List[EventSchema]
    total_amount: float
    severity: str


class ProjectionResponse(BaseModel):
    """Response for POST /v1/projection"""

    currency: str
    starting_balance: float
    lowest_balance: float
    lowest_balance_day: date
    first_buffer_breach_date: Optional[date] = None
    first_overdraft_date: Optional[date] = None
    safe_to_spend: float
    monthly_income: float
    monthly_bills: float
    collisions: List[CollisionSchema]
    highest_collision_amount: float = 0.0
    highest_collision_date: Optional[date] = None
    days: List[CalendarDaySchema]


class ScenarioInput(BaseModel):
    """Hypothetical expense; validated by the scenario engine, not here"""

    name: Optional[str] = None
    amount: Optional[float] = None
    date: Optional[str] = Field(None, description="YYYY-MM-DD")
    is_recurring: bool = False
    frequency: Optional[str] = None
    account_id: Optional[str] = None


class ScenarioRequest(ProjectionRequest):
    """Request body for POST /v1/scenario"""

    scenario: ScenarioInput


class ScenarioSummarySchema(BaseModel):
    """Validated scenario as it was evaluated"""

    name: str
    amount: float
    date: date
    frequency: str
    is_recurring: bool


class ScenarioResultSchema(BaseModel):
    """Affordability verdict"""

    can_afford: bool
    lowest_balance: float
    previous_lowest: float
    lowest_date: date
    causes_overdraft: bool
    causes_low_balance: bool
    first_problem_day: Optional[date] = None
    impact_summary: str


class PreviewDaySchema(BaseModel):
    """Baseline vs scenario balance for one day"""

    date: date
    baseline_balance: float
    scenario_balance: float
    delta: float


class ScenarioResponse(BaseModel):
    """Response for POST /v1/scenario"""

    ok: bool = True
    currency: str
    scenario: ScenarioSummarySchema
    result: ScenarioResultSchema
    preview: List[PreviewDaySchema]
    timeline: List[PreviewDaySchema]
    next_affordable_date: Optional[date] = None


class ScenarioRejectedResponse(BaseModel):
    """Response for POST /v1/scenario when the scenario input is invalid"""

    ok: bool = False
    field: str
    error: str
