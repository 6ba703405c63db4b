"""Integration tests for API endpoints"""

import copy
import pytest
from typing import Any, Dict
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


@pytest.fixture
def projection_body(sample_rows: Dict[str, Any]) -> Dict[str, Any]:
    """
    $1500 checking, $250 owed on a card due the 20th, rent + phone on the 5th,
    $900 every two weeks from Jan 12. Today is 2024-01-01; default 60-day window.
    """
    return copy.deepcopy(sample_rows)


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "cashflow-calendar"}


def test_metrics_endpoint(client: TestClient, projection_body: Dict[str, Any]):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/projection", json=projection_body)

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "cashflow_projection_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_projection_endpoint(client: TestClient, projection_body: Dict[str, Any]):
    """Test POST /v1/projection summary and calendar"""
    response = client.post("/v1/projection", json=projection_body)

    assert response.status_code == 200
    data = response.json()

    assert data["currency"] == "USD"
    assert data["starting_balance"] == 1500.0
    # 1500 - 1200 rent - 60 phone on Jan 5
    assert data["lowest_balance"] == 240.0
    assert data["lowest_balance_day"] == "2024-01-05"
    assert data["first_buffer_breach_date"] == "2024-01-05"
    assert data["first_overdraft_date"] is None
    assert data["safe_to_spend"] == 0.0
    assert data["monthly_bills"] == 1260.0  # Inactive gym excluded
    assert data["monthly_income"] == 1950.0

    days = data["days"]
    assert len(days) == 60
    assert days[0]["date"] == "2024-01-01"
    assert days[-1]["date"] == "2024-02-29"
    assert days[0]["status"] == "healthy"
    assert days[4]["status"] == "low"


def test_projection_calendar_events(client: TestClient, projection_body: Dict[str, Any]):
    """Card payment, paychecks and collisions land on the right days"""
    data = client.post("/v1/projection", json=projection_body).json()
    days = {day["date"]: day for day in data["days"]}

    card_day = days["2024-01-20"]
    assert [bill["name"] for bill in card_day["bills"]] == ["Visa Payment"]
    assert card_day["bills"][0]["account_id"] == "chk"
    assert card_day["balance"] == 890.0
    assert card_day["account_balances"]["visa"] == 0.0
    assert days["2024-01-19"]["account_balances"]["visa"] == 250.0
    assert [t["account_id"] for t in card_day["transfers"]] == ["visa"]

    assert [event["amount"] for event in days["2024-01-12"]["income"]] == [900.0]

    collisions = data["collisions"]
    assert [c["date"] for c in collisions] == ["2024-01-05", "2024-02-05"]
    assert collisions[0]["severity"] == "critical"
    assert collisions[0]["total_amount"] == 1260.0
    assert data["highest_collision_amount"] == 1260.0
    assert data["highest_collision_date"] == "2024-01-05"


def test_projection_forecast_days(client: TestClient, projection_body: Dict[str, Any]):
    projection_body["forecast_days"] = 7

    data = client.post("/v1/projection", json=projection_body).json()

    assert len(data["days"]) == 7
    assert data["collisions"][0]["date"] == "2024-01-05"


def test_projection_forecast_days_above_limit(client: TestClient, projection_body: Dict[str, Any]):
    projection_body["forecast_days"] = 400

    response = client.post("/v1/projection", json=projection_body)

    assert response.status_code == 422


def test_projection_without_accounts(client: TestClient):
    response = client.post("/v1/projection", json={"accounts": []})

    assert response.status_code == 422
    assert "account" in response.json()["detail"]


def test_projection_with_unknown_frequency(client: TestClient, projection_body: Dict[str, Any]):
    projection_body["bills"][0]["frequency"] = "hourly"

    response = client.post("/v1/projection", json=projection_body)

    assert response.status_code == 422
    assert "hourly" in response.json()["detail"]


def test_projection_with_oversized_balance(client: TestClient, projection_body: Dict[str, Any]):
    projection_body["accounts"][0]["current_balance"] = 1e30

    response = client.post("/v1/projection", json=projection_body)

    assert response.status_code == 422
    assert "too large" in response.json()["detail"]


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_scenario_endpoint_unaffordable(client: TestClient, projection_body: Dict[str, Any]):
    """$300 on Jan 3 pushes rent day below zero; it fits after the Jan 12 paycheck"""
    projection_body["scenario"] = {"name": "New laptop", "amount": 300, "date": "2024-01-03"}

    response = client.post("/v1/scenario", json=projection_body)

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["scenario"] == {
        "name": "New laptop",
        "amount": 300.0,
        "date": "2024-01-03",
        "frequency": "one-time",
        "is_recurring": False,
    }

    result = data["result"]
    assert result["can_afford"] is False
    assert result["causes_overdraft"] is True
    assert result["first_problem_day"] == "2024-01-05"
    assert result["lowest_balance"] == -60.0
    assert result["previous_lowest"] == 240.0
    assert result["impact_summary"].startswith("This would cause an overdraft risk starting Jan 5.")

    assert data["next_affordable_date"] == "2024-01-12"
    assert len(data["timeline"]) == 60
    assert [day["date"] for day in data["preview"]] == [
        "2024-01-02",
        "2024-01-03",
        "2024-01-04",
        "2024-01-05",
        "2024-01-06",
        "2024-01-07",
        "2024-01-08",
    ]
    assert data["preview"][0]["delta"] == 0.0
    assert data["preview"][1]["delta"] == -300.0


def test_scenario_endpoint_affordable(client: TestClient, projection_body: Dict[str, Any]):
    """$50 on Jan 10 takes the post-rent $240 down to $190 until the Jan 12 paycheck"""
    projection_body["scenario"] = {"amount": 50, "date": "2024-01-10"}

    response = client.post("/v1/scenario", json=projection_body)

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["can_afford"] is True
    assert result["causes_overdraft"] is False
    assert result["causes_low_balance"] is True
    assert result["lowest_balance"] == 190.0
    assert result["lowest_date"] == "2024-01-10"
    assert response.json()["scenario"]["name"] == "New purchase"


def test_scenario_endpoint_recurring(client: TestClient, projection_body: Dict[str, Any]):
    projection_body["scenario"] = {"amount": 20, "date": "2024-01-10", "is_recurring": True}

    data = client.post("/v1/scenario", json=projection_body).json()

    assert data["scenario"]["frequency"] == "monthly"
    assert data["scenario"]["is_recurring"] is True
    assert data["timeline"][-1]["delta"] == -40.0


@pytest.mark.parametrize(
    "scenario,field,error",
    [
        ({"amount": 0, "date": "2024-01-10"}, "amount", "Please enter a valid amount."),
        ({"date": "2024-01-10"}, "amount", "Please enter a valid amount."),
        ({"amount": 1e30, "date": "2024-01-10"}, "amount", "Please enter a valid amount."),
        ({"amount": 10}, "date", "Please select a date."),
        ({"amount": 10, "date": "soon"}, "date", "Please select a valid date."),
        ({"amount": 10, "date": "2023-12-01"}, "date", "Please select a future date."),
        ({"amount": 10, "date": "2024-01-10", "account_id": "nope"}, "account_id", "Please choose one of your accounts."),
    ],
)
def test_scenario_endpoint_rejects_invalid_input(
    client: TestClient,
    projection_body: Dict[str, Any],
    scenario: Dict[str, Any],
    field: str,
    error: str,
):
    projection_body["scenario"] = scenario

    response = client.post("/v1/scenario", json=projection_body)

    assert response.status_code == 422
    assert response.json() == {"ok": False, "field": field, "error": error}


def test_scenario_endpoint_without_accounts(client: TestClient):
    response = client.post("/v1/scenario", json={"scenario": {"amount": 10, "date": "2024-01-10"}})

    assert response.status_code == 422
