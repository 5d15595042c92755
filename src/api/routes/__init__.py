"""API route modules."""

from .calendar import router as calendar_router
from .employees import router as employees_router
from .health import router as health_router
from .payroll import router as payroll_router

__all__ = ["health_router", "employees_router", "calendar_router", "payroll_router"]
