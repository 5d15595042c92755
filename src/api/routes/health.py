"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Liveness plus roster state.

    503 while no roster is loaded, since no payroll can be calculated then.
    """
    roster = getattr(request.app.state, "roster", None)
    health = HealthResponse(
        status="healthy" if roster is not None else "unhealthy",
        version=API_VERSION,
        roster_loaded=roster is not None,
        employees=len(roster.employees) if roster is not None else 0,
        clients=len(roster.clients) if roster is not None else 0,
        timestamp=datetime.now(timezone.utc).isoformat(),
        error=None if roster is not None else "Roster workbook not loaded",
    )
    if roster is None:
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
