"""Payroll calculation, export and ledger sync endpoints."""

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from api.dependencies import (
    employee_or_404,
    get_event_fetcher,
    get_ledger_path,
    get_report_store,
    get_roster,
    verify_api_key,
)
from api.logging import RequestLog, log_request
from api.models.payroll import (
    ClientPayrollDetail,
    EmployeeInfo,
    EventDetail,
    LedgerCheckResponse,
    LedgerSyncResponse,
    PayrollCalculationResponse,
    PayrollRequest,
    PayrollResponse,
    PayrollSummary,
    PeriodOption,
    ValidationInfo,
)
from api.models.responses import ErrorCodes
from core.config import DATE_FORMAT
from core.validation import validate_payroll_report
from models.payroll import CalendarEvent, PayrollReport
from services.cache import ReportStore
from services.calendar import event_status_label
from services.ledger import count_existing_details, find_existing_payroll, sync_report_to_ledger
from services.payroll import events_for_entry, run_payroll
from services.pdf import format_period, generate_payroll_pdf
from services.periods import common_periods, default_period
from services.roster import Roster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/payroll", dependencies=[Depends(verify_api_key)])


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def not_found(payroll_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "Payroll not found",
            "code": ErrorCodes.PAYROLL_NOT_FOUND,
            "details": [f"No cached payroll with id '{payroll_id}'"],
        },
    )


def build_payroll_response(
    report: PayrollReport, client_events: dict[str, list[CalendarEvent]] | None = None
) -> PayrollResponse:
    """Convert a report (and optionally its matched events) to the API shape."""
    breakdown = []
    for entry in report.entries:
        details = []
        if client_events:
            for event in events_for_entry(entry, client_events, report.period_start, report.period_end):
                details.append(
                    EventDetail(
                        date=event.start_time.strftime(DATE_FORMAT),
                        time=event.start_time.strftime("%H:%M"),
                        status=event_status_label(event),
                        color_id=event.color_tag,
                    )
                )
        breakdown.append(
            ClientPayrollDetail(
                client_name=entry.client_name,
                price_per_session=entry.price_per_session,
                employee_share_per_session=entry.employee_share_per_session,
                company_share_per_session=entry.company_share_per_session,
                sessions=entry.session_count,
                total_revenue=entry.total_revenue,
                employee_earnings=entry.employee_earnings,
                company_earnings=entry.company_earnings,
                event_details=details,
            )
        )

    return PayrollResponse(
        employee=EmployeeInfo(
            id=report.employee.id,
            name=report.employee.name,
            email=report.employee.email,
            calendar_id=report.employee.calendar_id,
        ),
        period_start=report.period_start,
        period_end=report.period_end,
        period=format_period(report.period_start, report.period_end),
        summary=PayrollSummary(
            total_sessions=report.total_sessions,
            total_revenue=report.total_revenue,
            employee_earnings=report.total_employee_earnings,
            company_earnings=report.total_company_earnings,
        ),
        client_breakdown=breakdown,
        generated_at=report.generated_at,
    )


@router.get("/periods", response_model=list[PeriodOption])
async def list_periods():
    """Common payroll periods (current/previous month, last 30 days, current week)."""
    return [PeriodOption(**period) for period in common_periods()]


@router.get("/default-period", response_model=PeriodOption)
async def get_default_period():
    """Period preselected for a new calculation: the last two weeks."""
    return PeriodOption(**default_period())


@router.post("/calculate", response_model=PayrollCalculationResponse)
async def calculate_payroll_endpoint(
    request: Request,
    body: PayrollRequest,
    roster: Roster = Depends(get_roster),
    store: ReportStore = Depends(get_report_store),
    fetch_events: Callable = Depends(get_event_fetcher),
    ledger_path: Path = Depends(get_ledger_path),
):
    """
    Calculate payroll for an employee and period.

    Fetches the employee's calendar events, matches them to clients, prices
    the sessions and caches the report. Optionally syncs it to the ledger.
    """
    start_time = time.time()

    request_log = RequestLog(
        endpoint="/v1/payroll/calculate",
        method="POST",
        client_ip=get_client_ip(request),
        employee_id=body.employee_id,
    )

    try:
        employee = employee_or_404(roster, body.employee_id)

        if body.start_date >= body.end_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "error": "Invalid period",
                    "code": ErrorCodes.INVALID_PERIOD,
                    "details": ["start_date must be before end_date"],
                },
            )

        clients = roster.clients_for(employee.id)
        events = []
        if clients and employee.calendar_id:
            # Calendar client is blocking
            events = await asyncio.to_thread(
                fetch_events, employee.calendar_id, body.start_date, body.end_date
            )

        report, client_events = run_payroll(
            employee, clients, events, body.start_date, body.end_date
        )
        validation = validate_payroll_report(report)
        if not validation.valid:
            logger.warning("Payroll validation failed: %s", validation.error_type)
            for line in (validation.error_details or "").split("\n"):
                if line.strip():
                    request_log.details.append(("validation_error", line.strip()))

        synced = False
        if body.sync_to_ledger:
            result = await asyncio.to_thread(sync_report_to_ledger, report, ledger_path)
            synced = result.status == "success"
            if not synced:
                request_log.details.append(("warning", result.message))

        payroll_id = await asyncio.to_thread(store.store, report)

        request_log.status_code = 200
        request_log.payroll_id = payroll_id
        request_log.total_sessions = report.total_sessions
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        return PayrollCalculationResponse(
            id=payroll_id,
            payroll=build_payroll_response(report, client_events),
            validation=ValidationInfo(
                valid=validation.valid,
                error_type=validation.error_type,
                error_details=validation.error_details,
            ),
            synced_to_ledger=synced,
        )

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
        else:
            request_log.error_message = str(e.detail)
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        raise

    except Exception as e:
        logger.exception("Error calculating payroll")
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Internal server error",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    finally:
        # Always log the request
        try:
            await asyncio.to_thread(log_request, request_log)
        except Exception:
            # Don't fail the request if logging fails
            logger.debug("Request log write failed", exc_info=True)


@router.get("/{payroll_id}", response_model=PayrollResponse)
async def get_payroll(payroll_id: str, store: ReportStore = Depends(get_report_store)):
    """Cached payroll report by id."""
    report = await asyncio.to_thread(store.get, payroll_id)
    if report is None:
        raise not_found(payroll_id)
    return build_payroll_response(report)


@router.get("/{payroll_id}/pdf")
async def download_payroll_pdf(payroll_id: str, store: ReportStore = Depends(get_report_store)):
    """Cached payroll report rendered as a PDF attachment."""
    report = await asyncio.to_thread(store.get, payroll_id)
    if report is None:
        raise not_found(payroll_id)

    pdf_bytes = await asyncio.to_thread(generate_payroll_pdf, report)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="payroll-{payroll_id}.pdf"'},
    )


@router.get("/{payroll_id}/ledger", response_model=LedgerCheckResponse)
async def check_payroll_in_ledger(
    payroll_id: str,
    store: ReportStore = Depends(get_report_store),
    ledger_path: Path = Depends(get_ledger_path),
):
    """Check whether syncing this payroll would insert or update ledger rows."""
    report = await asyncio.to_thread(store.get, payroll_id)
    if report is None:
        raise not_found(payroll_id)

    name = report.employee.name
    start = report.period_start.strftime(DATE_FORMAT)
    end = report.period_end.strftime(DATE_FORMAT)
    existing = await asyncio.to_thread(find_existing_payroll, ledger_path, name, start, end)
    detail_rows = 0
    if existing:
        detail_rows = await asyncio.to_thread(count_existing_details, ledger_path, name, start, end)

    return LedgerCheckResponse(
        exists=existing is not None,
        employee_name=name,
        period=f"{start} - {end}",
        existing_master_row=existing.row_index if existing else None,
        existing_detail_rows=detail_rows,
        action="update" if existing else "insert",
    )


@router.post("/{payroll_id}/ledger", response_model=LedgerSyncResponse)
async def sync_payroll_to_ledger(
    request: Request,
    payroll_id: str,
    store: ReportStore = Depends(get_report_store),
    ledger_path: Path = Depends(get_ledger_path),
):
    """Upsert a cached payroll into the ledger; 422 if it fails validation."""
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/payroll/{id}/ledger",
        method="POST",
        client_ip=get_client_ip(request),
        payroll_id=payroll_id,
    )

    try:
        report = await asyncio.to_thread(store.get, payroll_id)
        if report is None:
            raise not_found(payroll_id)
        request_log.employee_id = report.employee_id
        request_log.total_sessions = report.total_sessions

        result = await asyncio.to_thread(sync_report_to_ledger, report, ledger_path)
        if result.status == "validation_failed":
            details = [d for d in (result.error_details or "").split("\n") if d.strip()]
            for detail in details:
                request_log.details.append(("validation_error", detail))
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={
                    "error": result.message,
                    "code": ErrorCodes.PAYROLL_INVALID,
                    "details": details,
                },
            )

        request_log.status_code = 200
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        return LedgerSyncResponse(
            status=result.status,
            message=result.message,
            mode=result.mode,
            employee_name=report.employee.name,
            period=format_period(report.period_start, report.period_end),
            master_rows=result.master_rows,
            detail_rows=result.detail_rows,
        )

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        raise

    except Exception as e:
        logger.exception("Error syncing payroll %s to ledger", payroll_id)
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Internal server error",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [str(e)],
            },
        )

    finally:
        try:
            await asyncio.to_thread(log_request, request_log)
        except Exception:
            logger.debug("Request log write failed", exc_info=True)
