"""Pydantic request/response models for payroll endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, field_validator

from services.periods import to_local_naive


class PayrollRequest(BaseModel):
    """Payroll calculation request."""

    employee_id: str
    start_date: datetime
    end_date: datetime
    sync_to_ledger: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def local_time(cls, value: datetime) -> datetime:
        """Calendar times are naive local; "Z" or offset inputs are converted."""
        return to_local_naive(value)


class EmployeeInfo(BaseModel):
    id: str
    name: str
    email: str
    calendar_id: str = ""


class EventDetail(BaseModel):
    """One matched calendar event in a client breakdown."""

    date: str  # dd/mm/YYYY
    time: str  # HH:MM
    status: str  # completed, cancelled, pending_payment
    color_id: str | None = None


class ClientPayrollDetail(BaseModel):
    client_name: str
    price_per_session: Decimal
    employee_share_per_session: Decimal
    company_share_per_session: Decimal
    sessions: int
    total_revenue: Decimal
    employee_earnings: Decimal
    company_earnings: Decimal
    event_details: list[EventDetail] = []


class PayrollSummary(BaseModel):
    total_sessions: int
    total_revenue: Decimal
    employee_earnings: Decimal
    company_earnings: Decimal


class PayrollResponse(BaseModel):
    """Payroll report as returned by the API."""

    employee: EmployeeInfo
    period_start: datetime
    period_end: datetime
    period: str  # dd/mm/YYYY - dd/mm/YYYY
    summary: PayrollSummary
    client_breakdown: list[ClientPayrollDetail]
    generated_at: datetime


class ValidationInfo(BaseModel):
    valid: bool
    error_type: str | None = None
    error_details: str | None = None


class PayrollCalculationResponse(BaseModel):
    """Calculated payroll wrapped with its cache id."""

    id: str
    payroll: PayrollResponse
    validation: ValidationInfo
    synced_to_ledger: bool = False


class LedgerCheckResponse(BaseModel):
    exists: bool
    employee_name: str
    period: str
    existing_master_row: int | None = None
    existing_detail_rows: int = 0
    action: str  # "update" or "insert"


class LedgerSyncResponse(BaseModel):
    status: str
    message: str
    mode: str | None = None
    employee_name: str
    period: str
    master_rows: int = 0
    detail_rows: int = 0
    error_type: str | None = None
    error_details: str | None = None


class PeriodOption(BaseModel):
    name: str
    start_date: datetime
    end_date: datetime


class ClientInfo(BaseModel):
    """Client price list row."""

    name: str
    price_per_session: Decimal
    employee_share_per_session: Decimal
    company_share_per_session: Decimal
    stopped: bool = False


class CalendarInfo(BaseModel):
    id: str
    summary: str
    primary: bool = False
    access_role: str = ""


class MatchedEvent(BaseModel):
    """Calendar event assigned to a client, before pricing."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    status: str  # completed, cancelled, pending_payment
    color_id: str | None = None


class CalendarPreviewResponse(BaseModel):
    """Client -> events grouping for an employee's calendar."""

    employee: EmployeeInfo
    period: str
    total_events: int
    matched_count: int
    matched_events: dict[str, list[MatchedEvent]]
