"""
Payroll ledger sync (Excel workbook with upsert semantics).

The ledger keeps one MASTER_PAYROLL row per (employee, period start, period end)
and one CLIENT_DETAILS row per client line, newest first. Syncing a period
that already exists updates the master row and replaces its detail rows.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from core.config import (
    DATE_FORMAT,
    DATETIME_FORMAT,
    DETAIL_HEADERS,
    DETAILS_SHEET,
    MASTER_HEADERS,
    MASTER_SHEET,
)
from core.validation import validate_payroll_report
from models.payroll import PayrollReport

logger = logging.getLogger(__name__)

# First data row (row 1 holds headers)
FIRST_DATA_ROW = 2


@dataclass
class LedgerRecord:
    """Existing master row for an employee and period."""

    row_index: int
    employee_name: str
    period_start: str
    period_end: str


@dataclass
class SyncResult:
    """Outcome of a ledger sync."""

    status: str  # "success" or "validation_failed"
    message: str
    mode: str | None = None  # "insert" or "update"
    error_type: str | None = None
    error_details: str | None = None
    master_rows: int = 0
    detail_rows: int = 0


# =============================================================================
# WORKBOOK HELPERS
# =============================================================================


def write_headers(ws, headers: list[str]) -> None:
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)


def open_ledger(path: Path) -> Workbook:
    """Open the ledger workbook, creating it (and missing sheets) as needed."""
    if path.exists():
        wb = load_workbook(path)
    else:
        wb = Workbook()
        wb.active.title = MASTER_SHEET
        write_headers(wb.active, MASTER_HEADERS)

    if MASTER_SHEET not in wb.sheetnames:
        write_headers(wb.create_sheet(MASTER_SHEET), MASTER_HEADERS)
    if DETAILS_SHEET not in wb.sheetnames:
        write_headers(wb.create_sheet(DETAILS_SHEET), DETAIL_HEADERS)
    return wb


def period_key(report: PayrollReport) -> tuple[str, str, str]:
    return (
        report.employee.name,
        report.period_start.strftime(DATE_FORMAT),
        report.period_end.strftime(DATE_FORMAT),
    )


def find_master_row(ws, employee_name: str, period_start: str, period_end: str) -> int | None:
    """Row index of the master row for an employee and period, or None."""
    for row_idx in range(FIRST_DATA_ROW, ws.max_row + 1):
        if (
            ws.cell(row=row_idx, column=2).value == employee_name
            and ws.cell(row=row_idx, column=3).value == period_start
            and ws.cell(row=row_idx, column=4).value == period_end
        ):
            return row_idx
    return None


def find_detail_rows(ws, employee_name: str, period_start: str, period_end: str) -> list[int]:
    """Detail row indexes for an employee and period, ascending."""
    return [
        row_idx
        for row_idx in range(FIRST_DATA_ROW, ws.max_row + 1)
        if ws.cell(row=row_idx, column=2).value == employee_name
        and ws.cell(row=row_idx, column=3).value == period_start
        and ws.cell(row=row_idx, column=4).value == period_end
    ]


def master_values(report: PayrollReport, calculation_date: str, notes: str) -> list:
    employee_name, period_start, period_end = period_key(report)
    return [
        calculation_date,
        employee_name,
        period_start,
        period_end,
        report.total_sessions,
        float(report.total_revenue),
        float(report.total_employee_earnings),
        float(report.total_company_earnings),
        notes,
    ]


def detail_values(report: PayrollReport, calculation_date: str) -> list[list]:
    employee_name, period_start, period_end = period_key(report)
    period = f"{period_start} - {period_end}"
    return [
        [
            calculation_date,
            employee_name,
            period_start,
            period_end,
            period,
            entry.client_name,
            entry.session_count,
            float(entry.price_per_session),
            float(entry.employee_earnings),
            float(entry.company_earnings),
            float(entry.total_revenue),
        ]
        for entry in report.entries
    ]


def write_row(ws, row_idx: int, values: list) -> None:
    for col_idx, value in enumerate(values, start=1):
        ws.cell(row=row_idx, column=col_idx, value=value)


def insert_rows_at_top(ws, rows: list[list]) -> None:
    """Insert rows directly under the header, keeping their order."""
    if not rows:
        return
    ws.insert_rows(FIRST_DATA_ROW, amount=len(rows))
    for offset, values in enumerate(rows):
        write_row(ws, FIRST_DATA_ROW + offset, values)


# =============================================================================
# LOOKUPS
# =============================================================================


def find_existing_payroll(
    path: Path, employee_name: str, period_start: str, period_end: str
) -> LedgerRecord | None:
    """Existing master record for an employee and period (dd/mm/YYYY dates)."""
    if not path.exists():
        return None
    wb = open_ledger(path)
    row_idx = find_master_row(wb[MASTER_SHEET], employee_name, period_start, period_end)
    if row_idx is None:
        return None
    return LedgerRecord(row_idx, employee_name, period_start, period_end)


def count_existing_details(
    path: Path, employee_name: str, period_start: str, period_end: str
) -> int:
    if not path.exists():
        return 0
    wb = open_ledger(path)
    return len(find_detail_rows(wb[DETAILS_SHEET], employee_name, period_start, period_end))


# =============================================================================
# SYNC
# =============================================================================


def sync_report_to_ledger(report: PayrollReport, path: Path) -> SyncResult:
    """
    Upsert a payroll report into the ledger workbook.

    Validates first; an invalid report is never written.
    """
    validation = validate_payroll_report(report)
    if not validation.valid:
        logger.warning("Ledger sync refused: %s\n%s", validation.error_type, validation.error_details)
        return SyncResult(
            status="validation_failed",
            message=f"Validation failed: {validation.error_type}",
            error_type=validation.error_type,
            error_details=validation.error_details,
        )

    employee_name, period_start, period_end = period_key(report)
    calculation_date = datetime.now().strftime(DATETIME_FORMAT)

    wb = open_ledger(path)
    master_ws = wb[MASTER_SHEET]
    details_ws = wb[DETAILS_SHEET]

    master_row = find_master_row(master_ws, employee_name, period_start, period_end)
    if master_row is not None:
        mode = "update"
        write_row(master_ws, master_row, master_values(report, calculation_date, "Updated"))
        old_details = find_detail_rows(details_ws, employee_name, period_start, period_end)
        for row_idx in reversed(old_details):
            details_ws.delete_rows(row_idx, 1)
        logger.info(
            "Updated ledger master row %d, replaced %d detail rows", master_row, len(old_details)
        )
    else:
        mode = "insert"
        insert_rows_at_top(master_ws, [master_values(report, calculation_date, "")])
        logger.info("Inserted ledger master row for %s %s - %s", employee_name, period_start, period_end)

    details = detail_values(report, calculation_date)
    insert_rows_at_top(details_ws, details)

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))

    return SyncResult(
        status="success",
        message=f"Payroll {'updated' if mode == 'update' else 'inserted'} successfully",
        mode=mode,
        master_rows=1,
        detail_rows=len(details),
    )
