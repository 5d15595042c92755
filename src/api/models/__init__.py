"""API Pydantic models."""

from .payroll import (
    CalendarInfo,
    CalendarPreviewResponse,
    ClientInfo,
    EmployeeInfo,
    LedgerCheckResponse,
    LedgerSyncResponse,
    PayrollCalculationResponse,
    PayrollRequest,
    PayrollResponse,
    PeriodOption,
)
from .responses import ErrorCodes, ErrorResponse, HealthResponse

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "EmployeeInfo",
    "ClientInfo",
    "CalendarInfo",
    "CalendarPreviewResponse",
    "PayrollRequest",
    "PayrollResponse",
    "PayrollCalculationResponse",
    "LedgerCheckResponse",
    "LedgerSyncResponse",
    "PeriodOption",
]
