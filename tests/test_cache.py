"""Tests for the payroll report stores."""

import pytest

from services.cache import InMemoryReportStore, SqliteReportStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryReportStore()
    return SqliteReportStore(tmp_path / "payroll.db")


def test_put_if_absent_keeps_first(store, report, employee, period):
    assert store.put_if_absent("r1", report)
    other = report.__class__(
        employee=employee,
        period_start=period[0],
        period_end=period[1],
        entries=(),
        total_sessions=0,
        total_revenue=report.total_revenue * 0,
        total_employee_earnings=report.total_revenue * 0,
        total_company_earnings=report.total_revenue * 0,
    )
    assert not store.put_if_absent("r1", other)
    assert store.get("r1") == report


def test_get_unknown(store):
    assert store.get("missing") is None


def test_store_generates_distinct_ids(store, report):
    first = store.store(report)
    second = store.store(report)
    assert first != second
    assert store.get(first) == report
    assert store.get(second) == report


def test_clear(store, report):
    report_id = store.store(report)
    store.clear()
    assert store.get(report_id) is None


def test_sqlite_store_persists(tmp_path, report):
    db_path = tmp_path / "payroll.db"
    report_id = SqliteReportStore(db_path).store(report)
    assert SqliteReportStore(db_path).get(report_id) == report
