"""
Data models for the roster, calendar events and payroll reports.

Frozen dataclasses: records are built once per run and never mutated.
Money is Decimal everywhere; timestamps are naive local datetimes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from core.config import SUPERVISION_KEYWORDS


@dataclass(frozen=True)
class Employee:
    """Employee from the roster workbook."""

    id: str
    name: str
    email: str = ""
    calendar_id: str = ""
    sheet_name: str = ""
    supervision_price: Decimal = Decimal("0")


@dataclass(frozen=True)
class Client:
    """Client price list row. Identity is (owner_id, name)."""

    name: str
    price_per_session: Decimal
    employee_share_per_session: Decimal
    company_share_per_session: Decimal
    owner_id: str
    stopped: bool = False


@dataclass(frozen=True)
class CalendarEvent:
    """Calendar event as seen by the payroll engine."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    color_tag: str | None = None
    cancelled: bool = False
    pending_payment: bool = False
    attendees: tuple[str, ...] = ()


@dataclass(frozen=True)
class EventStatus:
    """Derived cancellation flags for an event."""

    cancelled: bool
    pending_payment: bool


@dataclass(frozen=True)
class SupervisionConfig:
    """Rates and title keywords for supervision sessions."""

    enabled: bool
    price_per_session: Decimal
    employee_share: Decimal
    company_share: Decimal
    keywords: tuple[str, ...] = SUPERVISION_KEYWORDS


@dataclass(frozen=True)
class PayrollEntry:
    """One client line of a payroll report."""

    client_name: str
    price_per_session: Decimal
    employee_share_per_session: Decimal
    company_share_per_session: Decimal
    session_count: int
    total_revenue: Decimal
    employee_earnings: Decimal
    company_earnings: Decimal


@dataclass(frozen=True)
class PayrollReport:
    """Payroll for one employee and period."""

    employee: Employee
    period_start: datetime
    period_end: datetime
    entries: tuple[PayrollEntry, ...]
    total_sessions: int
    total_revenue: Decimal
    total_employee_earnings: Decimal
    total_company_earnings: Decimal
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def employee_id(self) -> str:
        return self.employee.id


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the payroll validation gate."""

    valid: bool
    error_type: str | None = None
    error_details: str | None = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failure(cls, error_type: str, error_details: str) -> "ValidationResult":
        return cls(valid=False, error_type=error_type, error_details=error_details)
