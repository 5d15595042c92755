"""
Storage for finished payroll reports.

Reports are immutable once calculated, so the only operations are an atomic
insert under a fresh id and a lookup. The store is passed to whoever needs it
(API dependency, scripts) instead of living in a module global.
"""

import json
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from core.database import (
    create_tables,
    delete_reports,
    get_connection,
    insert_report_if_absent,
    select_report_data,
)
from models.payroll import PayrollReport
from services.payroll import report_from_dict, report_to_dict

MAX_ID_ATTEMPTS = 5


class ReportStore(ABC):
    """Key/value store for payroll reports."""

    @abstractmethod
    def put_if_absent(self, report_id: str, report: PayrollReport) -> bool:
        """Store the report unless the id is taken; returns True if stored."""

    @abstractmethod
    def get(self, report_id: str) -> PayrollReport | None:
        """Report for an id, or None if unknown."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all reports."""

    def store(self, report: PayrollReport) -> str:
        """
        Store a report under a newly generated id.

        Raises:
            RuntimeError: If no free id was found (practically impossible)
        """
        for _ in range(MAX_ID_ATTEMPTS):
            report_id = str(uuid.uuid4())
            if self.put_if_absent(report_id, report):
                return report_id
        raise RuntimeError("Could not allocate a report id")


class InMemoryReportStore(ReportStore):
    """Process-local store, safe to share between request threads."""

    def __init__(self):
        self._reports: dict[str, PayrollReport] = {}
        self._lock = threading.Lock()

    def put_if_absent(self, report_id: str, report: PayrollReport) -> bool:
        with self._lock:
            if report_id in self._reports:
                return False
            self._reports[report_id] = report
            return True

    def get(self, report_id: str) -> PayrollReport | None:
        with self._lock:
            return self._reports.get(report_id)

    def clear(self) -> None:
        with self._lock:
            self._reports.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)


class SqliteReportStore(ReportStore):
    """Store backed by the payroll_reports table; one connection per call."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = get_connection(self.db_path)
        try:
            create_tables(conn)
        finally:
            conn.close()

    def put_if_absent(self, report_id: str, report: PayrollReport) -> bool:
        conn = get_connection(self.db_path)
        try:
            return insert_report_if_absent(
                conn,
                report_id,
                report.employee_id,
                report.period_start.isoformat(),
                report.period_end.isoformat(),
                json.dumps(report_to_dict(report), ensure_ascii=False),
            )
        finally:
            conn.close()

    def get(self, report_id: str) -> PayrollReport | None:
        conn = get_connection(self.db_path)
        try:
            data = select_report_data(conn, report_id)
        finally:
            conn.close()
        return report_from_dict(json.loads(data)) if data else None

    def clear(self) -> None:
        conn = get_connection(self.db_path)
        try:
            delete_reports(conn)
        finally:
            conn.close()
