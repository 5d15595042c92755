"""FastAPI dependencies for authentication and shared resources."""

import secrets
from collections.abc import Callable
from pathlib import Path

from fastapi import Header, HTTPException, Request, status

from api.models.responses import ErrorCodes
from core.config import LEDGER_PATH, PAYROLL_API_KEY
from models.payroll import Employee
from services.cache import ReportStore
from services.calendar import fetch_calendar_events, list_calendars
from services.roster import Roster


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not PAYROLL_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, PAYROLL_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": ErrorCodes.UNAUTHORIZED,
                "details": [],
            },
        )

    return x_api_key


def get_report_store(request: Request) -> ReportStore:
    """Report store created at startup."""
    return request.app.state.report_store


def get_roster(request: Request) -> Roster:
    """
    Roster loaded at startup.

    Raises:
        HTTPException: 503 if the roster workbook could not be loaded
    """
    roster = getattr(request.app.state, "roster", None)
    if roster is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "Roster not loaded",
                "code": ErrorCodes.ROSTER_UNAVAILABLE,
                "details": [],
            },
        )
    return roster


def get_event_fetcher() -> Callable:
    """Calendar event source: (calendar_id, start, end) -> list[CalendarEvent]."""
    return fetch_calendar_events


def get_ledger_path() -> Path:
    """Ledger workbook used for spreadsheet sync."""
    return LEDGER_PATH


def get_calendar_lister() -> Callable:
    """Calendar list source: () -> list of calendar dicts."""
    return list_calendars


def employee_or_404(roster: Roster, employee_id: str) -> Employee:
    """
    Look up an employee by id or name.

    Raises:
        HTTPException: 404 if the roster has no such employee
    """
    employee = roster.employee(employee_id)
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "Employee not found",
                "code": ErrorCodes.EMPLOYEE_NOT_FOUND,
                "details": [f"Unknown employee '{employee_id}'"],
            },
        )
    return employee
