"""SQLite request logging for API."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from core.config import DB_PATH
from core.database import get_connection

REQUEST_COLUMNS = (
    "request_id",
    "timestamp",
    "endpoint",
    "method",
    "client_ip",
    "employee_id",
    "payroll_id",
    "status_code",
    "error_code",
    "error_message",
    "processing_time_ms",
    "total_sessions",
)


@dataclass
class RequestLog:
    """One API call: who asked for which payroll, and how it ended."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    employee_id: str | None = None
    payroll_id: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    total_sessions: int | None = None
    # (detail_type, message); detail_type is 'validation_error' or 'warning'
    details: list[tuple[str, str]] = field(default_factory=list)

    def row(self) -> tuple:
        return tuple(getattr(self, column) for column in REQUEST_COLUMNS)


def log_request(log: RequestLog, db_path: Path = DB_PATH) -> None:
    """Write the request and its details to the api_requests tables."""
    placeholders = ", ".join("?" for _ in REQUEST_COLUMNS)
    conn = get_connection(db_path)
    try:
        conn.execute(
            f"INSERT INTO api_requests ({', '.join(REQUEST_COLUMNS)}) VALUES ({placeholders})",
            log.row(),
        )
        conn.executemany(
            "INSERT INTO api_request_details (request_id, detail_type, message) VALUES (?, ?, ?)",
            [(log.request_id, detail_type, message) for detail_type, message in log.details],
        )
        conn.commit()
    finally:
        conn.close()
