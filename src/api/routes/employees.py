"""Employee roster endpoints."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from api.dependencies import employee_or_404, get_roster, verify_api_key
from api.models.payroll import ClientInfo, EmployeeInfo
from api.models.responses import ErrorCodes
from core.config import ROSTER_PATH
from models.payroll import Employee
from services.roster import Roster, load_roster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/employees", dependencies=[Depends(verify_api_key)])


class RosterRefreshResponse(BaseModel):
    employees: int
    clients: int


def employee_info(employee: Employee) -> EmployeeInfo:
    return EmployeeInfo(
        id=employee.id, name=employee.name, email=employee.email, calendar_id=employee.calendar_id
    )


@router.get("", response_model=list[EmployeeInfo])
async def list_employees(roster: Roster = Depends(get_roster)):
    """Employees from the loaded roster, in workbook order."""
    return [employee_info(e) for e in roster.employees]


@router.get("/{employee_id}", response_model=EmployeeInfo)
async def get_employee(employee_id: str, roster: Roster = Depends(get_roster)):
    """One employee, by id or name."""
    return employee_info(employee_or_404(roster, employee_id))


@router.get("/{employee_id}/clients", response_model=list[ClientInfo])
async def list_employee_clients(employee_id: str, roster: Roster = Depends(get_roster)):
    """The employee's client price list, in roster order."""
    employee = employee_or_404(roster, employee_id)
    return [
        ClientInfo(
            name=c.name,
            price_per_session=c.price_per_session,
            employee_share_per_session=c.employee_share_per_session,
            company_share_per_session=c.company_share_per_session,
            stopped=c.stopped,
        )
        for c in roster.clients_for(employee.id)
    ]


@router.post("/refresh", response_model=RosterRefreshResponse)
async def refresh_roster(request: Request):
    """Reload the roster workbook (after price list edits)."""
    try:
        roster = await asyncio.to_thread(load_roster, ROSTER_PATH)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Roster reload failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "Roster could not be loaded",
                "code": ErrorCodes.ROSTER_UNAVAILABLE,
                "details": [str(e)],
            },
        )

    request.app.state.roster = roster
    return RosterRefreshResponse(employees=len(roster.employees), clients=len(roster.clients))
