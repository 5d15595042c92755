"""
Payroll calculation from client-grouped calendar events.

Filters sessions to the requested period, prices them with each client's
employee/company split and sums the report totals. Also converts reports to
and from plain dicts for caching and API responses.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from decimal import Decimal

from core.config import SUPERVISION_EMPLOYEE_RATIO, SUPERVISION_KEYWORDS, SUPERVISION_LABEL
from models.payroll import (
    CalendarEvent,
    Client,
    Employee,
    PayrollEntry,
    PayrollReport,
    SupervisionConfig,
)
from services.calendar import group_events_by_client
from services.periods import to_local_naive

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


# =============================================================================
# FILTERING
# =============================================================================


def in_period(event: CalendarEvent, period_start: datetime, period_end: datetime) -> bool:
    """Check if the event starts strictly inside the period (bounds excluded)."""
    return period_start < event.start_time < period_end


def filter_sessions(
    events: Iterable[CalendarEvent], period_start: datetime, period_end: datetime
) -> list[CalendarEvent]:
    """
    Keep billable events: inside the period and either not cancelled or
    cancelled with pending payment.
    """
    return [
        e
        for e in events
        if in_period(e, period_start, period_end) and (not e.cancelled or e.pending_payment)
    ]


def filter_supervision_sessions(
    events: Iterable[CalendarEvent], period_start: datetime, period_end: datetime
) -> list[CalendarEvent]:
    """Supervision sessions are billed only when not cancelled."""
    return [e for e in events if in_period(e, period_start, period_end) and not e.cancelled]


# =============================================================================
# CALCULATION
# =============================================================================


def make_entry(
    client_name: str,
    session_count: int,
    price: Decimal,
    employee_share: Decimal,
    company_share: Decimal,
) -> PayrollEntry:
    """Price a number of sessions at the given per-session rates."""
    return PayrollEntry(
        client_name=client_name,
        price_per_session=price,
        employee_share_per_session=employee_share,
        company_share_per_session=company_share,
        session_count=session_count,
        total_revenue=session_count * price,
        employee_earnings=session_count * employee_share,
        company_earnings=session_count * company_share,
    )


def supervision_config_for(employee: Employee) -> SupervisionConfig:
    """
    Build the supervision rates from the employee's roster supervision price.

    Disabled when the employee has no supervision price.
    """
    price = employee.supervision_price
    employee_share = (price * SUPERVISION_EMPLOYEE_RATIO).quantize(Decimal("0.01"))
    return SupervisionConfig(
        enabled=price > 0,
        price_per_session=price,
        employee_share=employee_share,
        company_share=price - employee_share,
        keywords=SUPERVISION_KEYWORDS,
    )


def calculate_payroll(
    employee: Employee,
    clients: Sequence[Client],
    client_events: Mapping[str, Sequence[CalendarEvent]],
    period_start: datetime,
    period_end: datetime,
    supervision_config: SupervisionConfig | None = None,
) -> PayrollReport:
    """
    Calculate payroll for one employee and period.

    Args:
        employee: Employee the report is for
        clients: The employee's client price list
        client_events: Client name (or supervision keyword) -> matched events
        period_start: Exclusive lower bound for session start times
        period_end: Exclusive upper bound for session start times
        supervision_config: Optional supervision rates and keywords

    Groups for unknown clients are skipped, and no entry is produced for a
    client without eligible sessions.
    """
    client_lookup = {client.name: client for client in clients}
    supervision_keywords = set(supervision_config.keywords) if supervision_config else set()
    entries = []

    for client_name, events in client_events.items():
        if client_name in supervision_keywords:
            continue
        client = client_lookup.get(client_name)
        if client is None:
            continue

        sessions = filter_sessions(events, period_start, period_end)
        if sessions:
            entries.append(
                make_entry(
                    client_name,
                    len(sessions),
                    client.price_per_session,
                    client.employee_share_per_session,
                    client.company_share_per_session,
                )
            )

    if supervision_config is not None and supervision_config.enabled:
        for keyword in supervision_config.keywords:
            sessions = filter_supervision_sessions(
                client_events.get(keyword, ()), period_start, period_end
            )
            if sessions:
                entries.append(
                    make_entry(
                        SUPERVISION_LABEL,
                        len(sessions),
                        supervision_config.price_per_session,
                        supervision_config.employee_share,
                        supervision_config.company_share,
                    )
                )

    return PayrollReport(
        employee=employee,
        period_start=period_start,
        period_end=period_end,
        entries=tuple(entries),
        total_sessions=sum(e.session_count for e in entries),
        total_revenue=sum((e.total_revenue for e in entries), ZERO),
        total_employee_earnings=sum((e.employee_earnings for e in entries), ZERO),
        total_company_earnings=sum((e.company_earnings for e in entries), ZERO),
    )


def empty_report(employee: Employee, period_start: datetime, period_end: datetime) -> PayrollReport:
    """Report with no entries (no clients or no events)."""
    return calculate_payroll(employee, [], {}, period_start, period_end)


def run_payroll(
    employee: Employee,
    clients: Sequence[Client],
    events: Sequence[CalendarEvent],
    period_start: datetime,
    period_end: datetime,
) -> tuple[PayrollReport, dict[str, list[CalendarEvent]]]:
    """
    Match events to clients and calculate the employee's payroll.

    Aware period bounds are converted to naive local time first.

    Returns:
        Tuple of (report, client name / supervision keyword -> matched events)
    """
    period_start = to_local_naive(period_start)
    period_end = to_local_naive(period_end)

    if not clients or not events:
        logger.info("No clients or events for %s, returning empty payroll", employee.name)
        return empty_report(employee, period_start, period_end), {}

    supervision = supervision_config_for(employee)
    keywords = supervision.keywords if supervision.enabled else ()
    client_events = group_events_by_client(events, [c.name for c in clients], keywords)
    report = calculate_payroll(
        employee, clients, client_events, period_start, period_end, supervision
    )
    logger.info(
        "Payroll for %s: %d sessions, revenue %s", employee.name, report.total_sessions, report.total_revenue
    )
    return report, client_events


def events_for_entry(
    entry: PayrollEntry,
    client_events: Mapping[str, Sequence[CalendarEvent]],
    period_start: datetime,
    period_end: datetime,
) -> list[CalendarEvent]:
    """Events behind a report line within the period, cancelled ones included."""
    if entry.client_name == SUPERVISION_LABEL:
        events = [e for keyword in SUPERVISION_KEYWORDS for e in client_events.get(keyword, ())]
    else:
        events = list(client_events.get(entry.client_name, ()))
    return [e for e in events if period_start <= e.start_time <= period_end]


# =============================================================================
# SERIALIZATION
# =============================================================================


def entry_to_dict(entry: PayrollEntry) -> dict:
    return {
        "client_name": entry.client_name,
        "price_per_session": str(entry.price_per_session),
        "employee_share_per_session": str(entry.employee_share_per_session),
        "company_share_per_session": str(entry.company_share_per_session),
        "session_count": entry.session_count,
        "total_revenue": str(entry.total_revenue),
        "employee_earnings": str(entry.employee_earnings),
        "company_earnings": str(entry.company_earnings),
    }


def report_to_dict(report: PayrollReport) -> dict:
    """Convert a report to JSON-safe primitives (Decimals as strings)."""
    employee = report.employee
    return {
        "employee": {
            "id": employee.id,
            "name": employee.name,
            "email": employee.email,
            "calendar_id": employee.calendar_id,
            "sheet_name": employee.sheet_name,
            "supervision_price": str(employee.supervision_price),
        },
        "period_start": report.period_start.isoformat(),
        "period_end": report.period_end.isoformat(),
        "entries": [entry_to_dict(e) for e in report.entries],
        "total_sessions": report.total_sessions,
        "total_revenue": str(report.total_revenue),
        "total_employee_earnings": str(report.total_employee_earnings),
        "total_company_earnings": str(report.total_company_earnings),
        "generated_at": report.generated_at.isoformat(),
    }


def report_from_dict(data: dict) -> PayrollReport:
    """Rebuild a report from report_to_dict output."""
    emp = data["employee"]
    employee = Employee(
        id=emp["id"],
        name=emp["name"],
        email=emp.get("email", ""),
        calendar_id=emp.get("calendar_id", ""),
        sheet_name=emp.get("sheet_name", ""),
        supervision_price=Decimal(emp.get("supervision_price", "0")),
    )
    entries = tuple(
        PayrollEntry(
            client_name=e["client_name"],
            price_per_session=Decimal(e["price_per_session"]),
            employee_share_per_session=Decimal(e["employee_share_per_session"]),
            company_share_per_session=Decimal(e["company_share_per_session"]),
            session_count=int(e["session_count"]),
            total_revenue=Decimal(e["total_revenue"]),
            employee_earnings=Decimal(e["employee_earnings"]),
            company_earnings=Decimal(e["company_earnings"]),
        )
        for e in data["entries"]
    )
    return PayrollReport(
        employee=employee,
        period_start=datetime.fromisoformat(data["period_start"]),
        period_end=datetime.fromisoformat(data["period_end"]),
        entries=entries,
        total_sessions=int(data["total_sessions"]),
        total_revenue=Decimal(data["total_revenue"]),
        total_employee_earnings=Decimal(data["total_employee_earnings"]),
        total_company_earnings=Decimal(data["total_company_earnings"]),
        generated_at=datetime.fromisoformat(data["generated_at"]),
    )
