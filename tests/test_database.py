"""Tests for the SQLite schema and API request log."""

import sqlite3

from api.logging import RequestLog, log_request
from core.database import create_tables, get_connection


def test_log_request_with_details(tmp_path):
    db_path = tmp_path / "payroll.db"
    conn = get_connection(db_path)
    create_tables(conn)
    conn.close()

    log = RequestLog(
        endpoint="/v1/payroll/calculate",
        method="POST",
        employee_id="αννα-κ",
        status_code=200,
        total_sessions=5,
        details=[("validation_error", "Sessions mismatch: Master=6, Sum=5")],
    )
    log_request(log, db_path)

    conn = sqlite3.connect(db_path)
    try:
        row = conn.execute(
            "SELECT endpoint, employee_id, status_code, total_sessions FROM api_requests"
        ).fetchone()
        details = conn.execute(
            "SELECT request_id, detail_type FROM api_request_details"
        ).fetchall()
    finally:
        conn.close()

    assert row == ("/v1/payroll/calculate", "αννα-κ", 200, 5)
    assert details == [(log.request_id, "validation_error")]


def test_create_tables_is_idempotent(tmp_path):
    conn = get_connection(tmp_path / "payroll.db")
    try:
        create_tables(conn)
        create_tables(conn)
        tables = {
            name
            for (name,) in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
    finally:
        conn.close()
    assert {"payroll_reports", "api_requests", "api_request_details"} <= tables
