"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from cashflow_calendar.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_projection(
    request_id: str,
    forecast_days: int,
    event_count: int,
    lowest_balance_cents: int,
    first_overdraft_date: Optional[str],
    duration_ms: float,
) -> None:
    """Log structured projection outcome for analysis"""
    logging.info(
        "Projection completed",
        extra={
            "request_id": request_id,
            "step": "projection_complete",
            "forecast_days": forecast_days,
            "event_count": event_count,
            "lowest_balance_cents": lowest_balance_cents,
            "overdraft_forecast": first_overdraft_date is not None,
            "first_overdraft_date": first_overdraft_date,
            "duration_ms": duration_ms,
        },
    )


def log_scenario(
    request_id: str,
    outcome: str,
    amount_cents: Optional[int],
    duration_ms: float,
) -> None:
    """Log structured scenario outcome (affordable | unaffordable | rejected)"""
    logging.info(
        "Scenario completed",
        extra={
            "request_id": request_id,
            "step": "scenario_complete",
            "scenario_outcome": outcome,
            "amount_cents": amount_cents,
            "duration_ms": duration_ms,
        },
    )
