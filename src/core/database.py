"""
SQLite database operations for cached payroll reports and API request logs.
"""

import sqlite3
from pathlib import Path

from core.config import DB_PATH

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS payroll_reports (
        id TEXT PRIMARY KEY,
        employee_id TEXT NOT NULL,
        period_start TEXT NOT NULL,
        period_end TEXT NOT NULL,
        data TEXT NOT NULL,
        create_date TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        employee_id TEXT,
        payroll_id TEXT,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL,
        total_sessions INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'warning')),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_payroll_reports_employee ON payroll_reports(employee_id)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)",
]


def get_connection(db_path: Path = DB_PATH) -> sqlite3.Connection:
    """Get a database connection."""
    return sqlite3.connect(db_path)


def create_tables(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    for statement in SCHEMA:
        conn.execute(statement)
    conn.commit()


def insert_report_if_absent(
    conn: sqlite3.Connection,
    report_id: str,
    employee_id: str,
    period_start: str,
    period_end: str,
    data: str,
) -> bool:
    """Insert a serialized report; returns False if the id is already taken."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT OR IGNORE INTO payroll_reports (id, employee_id, period_start, period_end, data)
        VALUES (?, ?, ?, ?, ?)
        """,
        (report_id, employee_id, period_start, period_end, data),
    )
    conn.commit()
    return cursor.rowcount == 1


def select_report_data(conn: sqlite3.Connection, report_id: str) -> str | None:
    """Serialized report for an id, or None."""
    cursor = conn.cursor()
    cursor.execute("SELECT data FROM payroll_reports WHERE id = ?", (report_id,))
    row = cursor.fetchone()
    return row[0] if row else None


def delete_reports(conn: sqlite3.Connection) -> None:
    conn.execute("DELETE FROM payroll_reports")
    conn.commit()
