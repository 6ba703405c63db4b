"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Callable, Optional

from fastapi import Request

from cashflow_calendar.utils.date_utils import resolve_today

TodayResolver = Callable[[Optional[str]], date]


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today_resolver() -> TodayResolver:
    """Provide the function mapping a timezone name to today's calendar day"""
    return resolve_today
