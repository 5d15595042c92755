"""Tests for the REST API."""

import asyncio
from dataclasses import replace
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

import api.dependencies
import api.routes.payroll
from api.dependencies import get_calendar_lister, get_event_fetcher, get_ledger_path
from api.main import app
from services.cache import InMemoryReportStore
from services.roster import Roster

API_KEY = "test-key"
HEADERS = {"X-API-Key": API_KEY}


@pytest.fixture
def client(monkeypatch, tmp_path, employee, clients, sample_events):
    """Test client with an in-memory store, fixed roster and fake calendar."""
    monkeypatch.setattr(api.dependencies, "PAYROLL_API_KEY", API_KEY)
    monkeypatch.setattr(api.routes.payroll, "log_request", lambda log: None)

    def fake_fetch(calendar_id, start, end):
        return sample_events

    app.dependency_overrides[get_event_fetcher] = lambda: fake_fetch
    app.dependency_overrides[get_ledger_path] = lambda: tmp_path / "ledger.xlsx"

    # No context manager: lifespan (real roster and database) is not run
    test_client = TestClient(app)
    app.state.report_store = InMemoryReportStore()
    app.state.roster = Roster(employees=[employee], clients=clients)

    yield test_client

    app.dependency_overrides.clear()
    app.state.roster = None


def calculate(client, employee_id="αννα-κ", **extra):
    body = {
        "employee_id": employee_id,
        "start_date": "2025-11-01T00:00:00",
        "end_date": "2025-11-30T23:59:59",
        **extra,
    }
    return client.post("/v1/payroll/calculate", json=body, headers=HEADERS)


class TestHealth:
    def test_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["roster_loaded"] is True
        assert response.json()["clients"] == 2

    def test_unhealthy_without_roster(self, client):
        app.state.roster = None
        response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestAuth:
    def test_missing_key(self, client):
        response = client.get("/v1/employees")
        assert response.status_code == 422

    def test_wrong_key(self, client):
        response = client.get("/v1/employees", headers={"X-API-Key": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"


class TestEmployees:
    def test_list(self, client):
        response = client.get("/v1/employees", headers=HEADERS)
        assert response.status_code == 200
        assert response.json() == [
            {
                "id": "αννα-κ",
                "name": "Άννα Κ.",
                "email": "anna@example.com",
                "calendar_id": "anna@example.com",
            }
        ]

    def test_roster_unavailable(self, client):
        app.state.roster = None
        response = client.get("/v1/employees", headers=HEADERS)
        assert response.status_code == 503
        assert response.json()["detail"]["code"] == "ROSTER_UNAVAILABLE"


class TestCalculate:
    def test_calculate(self, client):
        response = calculate(client)
        assert response.status_code == 200

        data = response.json()
        assert data["validation"]["valid"] is True
        assert data["synced_to_ledger"] is False
        payroll = data["payroll"]
        assert payroll["period"] == "01/11/2025 - 30/11/2025"
        assert payroll["summary"]["total_sessions"] == 5
        assert float(payroll["summary"]["total_revenue"]) == 205.5

        breakdown = {row["client_name"]: row for row in payroll["client_breakdown"]}
        statuses = [e["status"] for e in breakdown["Γιάννης Παπαδόπουλος"]["event_details"]]
        assert statuses == ["completed", "completed", "pending_payment"]

    def test_calculated_report_is_cached(self, client):
        payroll_id = calculate(client).json()["id"]
        response = client.get(f"/v1/payroll/{payroll_id}", headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["summary"]["total_sessions"] == 5

    def test_utc_dates_are_converted_to_local_time(self, client):
        response = calculate(
            client,
            start_date="2025-10-31T22:00:00Z",
            end_date="2025-11-30T21:59:59Z",
        )
        assert response.status_code == 200
        payroll = response.json()["payroll"]
        assert payroll["period"] == "01/11/2025 - 30/11/2025"
        assert payroll["period_start"] == "2025-11-01T00:00:00"
        assert payroll["summary"]["total_sessions"] == 5

    def test_offset_dates(self, client):
        response = calculate(
            client,
            start_date="2025-11-01T00:00:00+02:00",
            end_date="2025-11-30T23:59:59+02:00",
        )
        assert response.status_code == 200
        assert response.json()["payroll"]["summary"]["total_sessions"] == 5

    def test_unknown_employee(self, client):
        response = calculate(client, employee_id="nobody")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EMPLOYEE_NOT_FOUND"

    def test_start_after_end(self, client):
        response = client.post(
            "/v1/payroll/calculate",
            json={
                "employee_id": "αννα-κ",
                "start_date": "2025-12-01T00:00:00",
                "end_date": "2025-11-01T00:00:00",
            },
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PERIOD"

    def test_no_events_gives_empty_payroll(self, client):
        app.dependency_overrides[get_event_fetcher] = lambda: (lambda *args: [])
        data = calculate(client).json()
        assert data["payroll"]["summary"]["total_sessions"] == 0
        assert data["payroll"]["client_breakdown"] == []

    def test_calculate_and_sync(self, client, tmp_path):
        data = calculate(client, sync_to_ledger=True).json()
        assert data["synced_to_ledger"] is True
        assert (tmp_path / "ledger.xlsx").exists()


class TestPayrollExports:
    def test_unknown_id(self, client):
        assert client.get("/v1/payroll/missing", headers=HEADERS).status_code == 404
        assert client.get("/v1/payroll/missing/pdf", headers=HEADERS).status_code == 404

    def test_pdf(self, client):
        payroll_id = calculate(client).json()["id"]
        response = client.get(f"/v1/payroll/{payroll_id}/pdf", headers=HEADERS)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert f"payroll-{payroll_id}.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_ledger_check_and_sync(self, client):
        payroll_id = calculate(client).json()["id"]

        check = client.get(f"/v1/payroll/{payroll_id}/ledger", headers=HEADERS).json()
        assert check["exists"] is False
        assert check["action"] == "insert"

        sync = client.post(f"/v1/payroll/{payroll_id}/ledger", headers=HEADERS)
        assert sync.status_code == 200
        assert sync.json()["mode"] == "insert"

        check = client.get(f"/v1/payroll/{payroll_id}/ledger", headers=HEADERS).json()
        assert check["exists"] is True
        assert check["action"] == "update"
        assert check["existing_detail_rows"] == 3

    def test_invalid_report_refused(self, client, report):
        store = app.state.report_store
        payroll_id = store.store(replace(report, total_sessions=99))
        response = client.post(f"/v1/payroll/{payroll_id}/ledger", headers=HEADERS)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "PAYROLL_INVALID"


def test_periods(client):
    response = client.get("/v1/payroll/periods", headers=HEADERS)
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == [
        "Current Month",
        "Previous Month",
        "Last 30 Days",
        "Current Week",
    ]


def test_default_period(client):
    response = client.get("/v1/payroll/default-period", headers=HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Last Two Weeks"
    start = datetime.fromisoformat(data["start_date"])
    end = datetime.fromisoformat(data["end_date"])
    assert (end.date() - start.date()).days == 14


class TestEmployeeDetails:
    def test_get_employee_by_id(self, client):
        response = client.get("/v1/employees/αννα-κ", headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["name"] == "Άννα Κ."

    def test_get_unknown_employee(self, client):
        response = client.get("/v1/employees/nobody", headers=HEADERS)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EMPLOYEE_NOT_FOUND"

    def test_client_price_list(self, client):
        response = client.get("/v1/employees/αννα-κ/clients", headers=HEADERS)
        assert response.status_code == 200
        rows = response.json()
        assert [row["name"] for row in rows] == ["Γιάννης Παπαδόπουλος", "Μαρία Οικονόμου"]
        assert float(rows[1]["price_per_session"]) == 35.5
        assert rows[1]["stopped"] is False


class TestCalendar:
    def test_calendars(self, client):
        calendars = [
            {"id": "anna@example.com", "summary": "Άννα", "primary": False, "access_role": "reader"}
        ]
        app.dependency_overrides[get_calendar_lister] = lambda: (lambda: calendars)
        response = client.get("/v1/calendar/calendars", headers=HEADERS)
        assert response.status_code == 200
        assert response.json() == calendars

    def test_event_preview(self, client):
        response = client.get(
            "/v1/calendar/events/αννα-κ",
            params={"start_date": "2025-11-01T00:00:00", "end_date": "2025-11-30T23:59:59"},
            headers=HEADERS,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_events"] == 7
        assert data["matched_count"] == 6
        assert set(data["matched_events"]) == {
            "Γιάννης Παπαδόπουλος",
            "Μαρία Οικονόμου",
            "Εποπτεία",
        }
        statuses = [e["status"] for e in data["matched_events"]["Μαρία Οικονόμου"]]
        assert statuses == ["completed", "cancelled"]

    def test_event_preview_unknown_employee(self, client):
        response = client.get(
            "/v1/calendar/events/nobody",
            params={"start_date": "2025-11-01T00:00:00", "end_date": "2025-11-30T23:59:59"},
            headers=HEADERS,
        )
        assert response.status_code == 404

    def test_event_preview_bad_period(self, client):
        response = client.get(
            "/v1/calendar/events/αννα-κ",
            params={"start_date": "2025-12-01T00:00:00", "end_date": "2025-11-01T00:00:00"},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PERIOD"


def on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class LoopCheckingStore(InMemoryReportStore):
    """Records, per call, whether it ran on the event loop thread."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def put_if_absent(self, report_id, report):
        self.calls.append(("put", on_event_loop()))
        return super().put_if_absent(report_id, report)

    def get(self, report_id):
        self.calls.append(("get", on_event_loop()))
        return super().get(report_id)


def test_store_and_request_log_run_off_the_event_loop(client, monkeypatch):
    store = LoopCheckingStore()
    app.state.report_store = store
    log_calls = []
    monkeypatch.setattr(api.routes.payroll, "log_request", lambda log: log_calls.append(on_event_loop()))

    payroll_id = calculate(client).json()["id"]
    client.get(f"/v1/payroll/{payroll_id}", headers=HEADERS)
    client.get(f"/v1/payroll/{payroll_id}/pdf", headers=HEADERS)

    assert [name for name, _ in store.calls] == ["put", "get", "get"]
    assert not any(on_loop for _, on_loop in store.calls)
    assert log_calls == [False]
