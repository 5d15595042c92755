"""
Payroll API application.

Startup loads the roster workbook and opens the report store; both live on
app.state and reach the routes through api.dependencies. A missing roster
does not stop the app: /health reports it and payroll routes answer 503
until POST /v1/employees/refresh succeeds.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import calendar_router, employees_router, health_router, payroll_router
from core.config import API_DEBUG, API_VERSION, DB_PATH, ROSTER_PATH
from core.logging_config import configure_logging
from services.cache import SqliteReportStore
from services.roster import load_roster

logger = logging.getLogger(__name__)

DESCRIPTION = """
Therapist payroll from Google Calendar sessions.

Events are matched to each employee's clients by name (Greek, accent
insensitive), priced with the client's employee/company split, checked by the
validation gate and cached. Cached payrolls can be downloaded as PDF or
upserted into the ledger workbook.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    app.state.report_store = SqliteReportStore(DB_PATH)
    try:
        app.state.roster = load_roster(ROSTER_PATH)
    except (FileNotFoundError, ValueError) as e:
        logger.warning("Starting without roster: %s", e)
        app.state.roster = None

    logger.info("Payroll API %s ready (reports: %s)", API_VERSION, DB_PATH)
    yield


app = FastAPI(
    title="Practice Payroll API",
    description=DESCRIPTION,
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

if API_DEBUG:
    # Local frontend during development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    """Anything not raised as HTTPException becomes a 500 with the standard body."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = ErrorResponse(error="Internal server error", code=ErrorCodes.INTERNAL_ERROR)
    return JSONResponse(status_code=500, content=body.model_dump())


for router in (health_router, employees_router, calendar_router, payroll_router):
    app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT, reload=API_DEBUG)
