"""Calendar endpoints: visible calendars and client matching previews."""

import asyncio
from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import (
    employee_or_404,
    get_calendar_lister,
    get_event_fetcher,
    get_roster,
    verify_api_key,
)
from api.models.payroll import CalendarInfo, CalendarPreviewResponse, EmployeeInfo, MatchedEvent
from api.models.responses import ErrorCodes
from services.calendar import event_status_label, group_events_by_client
from services.payroll import supervision_config_for
from services.pdf import format_period
from services.periods import to_local_naive
from services.roster import Roster

router = APIRouter(prefix="/v1/calendar", dependencies=[Depends(verify_api_key)])


@router.get("/calendars", response_model=list[CalendarInfo])
async def get_calendars(list_calendars: Callable = Depends(get_calendar_lister)):
    """Calendars shared with the service account."""
    calendars = await asyncio.to_thread(list_calendars)
    return [CalendarInfo(**cal) for cal in calendars]


@router.get("/events/{employee_id}", response_model=CalendarPreviewResponse)
async def preview_employee_events(
    employee_id: str,
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    roster: Roster = Depends(get_roster),
    fetch_events: Callable = Depends(get_event_fetcher),
):
    """
    Group an employee's calendar events by client without pricing them.

    Shows which events would count towards which client (and supervision)
    before a payroll is calculated.
    """
    employee = employee_or_404(roster, employee_id)
    start, end = to_local_naive(start_date), to_local_naive(end_date)
    if start >= end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid period",
                "code": ErrorCodes.INVALID_PERIOD,
                "details": ["start_date must be before end_date"],
            },
        )

    events = []
    if employee.calendar_id:
        events = await asyncio.to_thread(fetch_events, employee.calendar_id, start, end)

    supervision = supervision_config_for(employee)
    grouped = group_events_by_client(
        events,
        [c.name for c in roster.clients_for(employee.id)],
        supervision.keywords if supervision.enabled else (),
    )
    matched = {
        name: [
            MatchedEvent(
                id=e.id,
                title=e.title,
                start_time=e.start_time,
                end_time=e.end_time,
                status=event_status_label(e),
                color_id=e.color_tag,
            )
            for e in group
        ]
        for name, group in grouped.items()
        if group
    }

    return CalendarPreviewResponse(
        employee=EmployeeInfo(
            id=employee.id,
            name=employee.name,
            email=employee.email,
            calendar_id=employee.calendar_id,
        ),
        period=format_period(start, end),
        total_events=len(events),
        matched_count=sum(len(group) for group in matched.values()),
        matched_events=matched,
    )
