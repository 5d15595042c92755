"""Pydantic response models shared by all endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Service status: the roster must be loaded for payroll to work."""

    status: str  # "healthy" or "unhealthy"
    version: str
    roster_loaded: bool
    employees: int = 0
    clients: int = 0
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Body of every error (inside FastAPI's "detail" for HTTPException)."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Machine-readable error codes, one per way a payroll request can fail."""

    # Request problems
    INVALID_PERIOD = "INVALID_PERIOD"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Lookups
    EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
    PAYROLL_NOT_FOUND = "PAYROLL_NOT_FOUND"

    # Payroll rejected by the validation gate (ledger sync)
    PAYROLL_INVALID = "PAYROLL_INVALID"

    # Collaborators
    ROSTER_UNAVAILABLE = "ROSTER_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
