"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Any, Dict
from fastapi.testclient import TestClient
from cashflow_calendar.api.main import create_app
from cashflow_calendar.api.dependencies import get_today_resolver
from cashflow_calendar.domain.models import Account, AccountKind, SafetySettings


# Fixed "today" so projections are reproducible
TODAY = date(2024, 1, 1)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client with a frozen clock"""
    app = create_app()

    def override_today_resolver():
        return lambda timezone: TODAY

    app.dependency_overrides[get_today_resolver] = override_today_resolver
    return TestClient(app)


@pytest.fixture
def checking() -> Account:
    """$1000 spendable checking account"""
    return Account(id="chk", name="Checking", balance_cents=100_000)


@pytest.fixture
def savings() -> Account:
    """$5000 spendable savings account"""
    return Account(id="sav", name="Savings", balance_cents=500_000, kind=AccountKind.SAVINGS)


@pytest.fixture
def credit_card() -> Account:
    """Card with $300 owed, payment due on the 15th"""
    return Account(
        id="visa",
        name="Visa",
        balance_cents=30_000,
        kind=AccountKind.CREDIT_CARD,
        is_spendable=False,
        credit_limit_cents=500_000,
        apr=24.99,
        payment_due_day=15,
    )


@pytest.fixture
def safety() -> SafetySettings:
    """$500 buffer"""
    return SafetySettings(safety_buffer_cents=50_000, timezone="America/New_York", currency="USD")


@pytest.fixture
def sample_rows() -> Dict[str, Any]:
    """Rows as the data store returns them: freelancer with a checking account and a card"""
    return {
        "accounts": [
            {
                "id": "chk",
                "name": "Checking",
                "account_type": "checking",
                "current_balance": 1500.00,
                "currency": "USD",
                "is_spendable": True,
            },
            {
                "id": "visa",
                "name": "Visa",
                "account_type": "credit_card",
                "current_balance": 250.00,
                "currency": "USD",
                "is_spendable": False,
                "payment_due_day": 20,
            },
        ],
        "bills": [
            {"id": "rent", "name": "Rent", "amount": 1200, "due_date": "2024-01-05", "frequency": "monthly"},
            {"id": "phone", "name": "Phone", "amount": 60, "due_date": "2024-01-05", "frequency": "monthly"},
            {
                "id": "gym",
                "name": "Gym",
                "amount": 40,
                "due_date": "2024-01-10",
                "frequency": "monthly",
                "is_active": False,
            },
        ],
        "income": [
            {"id": "client-a", "name": "Client A", "amount": 900, "next_date": "2024-01-12", "frequency": "biweekly"},
        ],
        "transfers": [],
        "settings": {"safety_buffer": 500, "timezone": "America/New_York", "currency": "USD"},
    }
