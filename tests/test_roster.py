"""Tests for loading the roster workbook."""

from decimal import Decimal

import pytest
from openpyxl import Workbook

from services.roster import cell_amount, load_roster, make_employee_id


@pytest.fixture
def roster_path(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.title = "EMPLOYEES"
    ws.append(["Name", "Email", "Calendar ID", "Client Sheet", "Supervision"])
    ws.append(["Άννα Κ.", "anna@example.com", "anna-cal", "Άννα", 50])
    ws.append(["Νίκος Λ.", "nikos@example.com", "nikos-cal", None, None])
    ws.append([None, None, None, None, None])
    ws.append(["Κακή Τιμή", "bad@example.com", "bad-cal", None, "abc"])

    clients = wb.create_sheet("Άννα")
    clients.append(["Client", "Price", "Employee Share", "Company Share", "Status"])
    clients.append(["Γιάννης Παπαδόπουλος", 40, 24, 16, None])
    clients.append(["Μαρία Οικονόμου", "35,50", 20, "15.50", "Σταμάτησε"])
    clients.append(["Γιάννης Παπαδόπουλος", 45, 25, 20, None])
    clients.append(["Λάθος", -5, 0, 0, None])

    nikos = wb.create_sheet("Νίκος Λ.")
    nikos.append(["Client", "Price", "Employee Share", "Company Share", "Status"])
    nikos.append(["Γιάννης Παπαδόπουλος", 50, 30, 20, None])

    path = tmp_path / "roster.xlsx"
    wb.save(path)
    return path


def test_load_employees(roster_path):
    roster = load_roster(roster_path)
    assert [e.name for e in roster.employees] == ["Άννα Κ.", "Νίκος Λ."]
    anna = roster.employees[0]
    assert anna.supervision_price == Decimal("50")
    assert anna.calendar_id == "anna-cal"
    assert roster.employees[1].sheet_name == "Νίκος Λ."


def test_load_clients(roster_path):
    roster = load_roster(roster_path)
    anna = roster.employee("Άννα Κ.")
    clients = roster.clients_for(anna.id)

    assert [c.name for c in clients] == ["Γιάννης Παπαδόπουλος", "Μαρία Οικονόμου"]
    assert clients[0].price_per_session == Decimal("40")
    assert clients[1].price_per_session == Decimal("35.50")
    assert clients[1].stopped


def test_same_client_name_for_different_employees(roster_path):
    roster = load_roster(roster_path)
    nikos = roster.employee("νικος λ.")
    assert [c.price_per_session for c in roster.clients_for(nikos.id)] == [Decimal("50")]


def test_employee_lookup_by_id(roster_path):
    roster = load_roster(roster_path)
    assert roster.employee(make_employee_id("Άννα Κ.")).name == "Άννα Κ."
    assert roster.employee("nobody") is None


def test_missing_workbook(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_roster(tmp_path / "missing.xlsx")


def test_missing_employees_sheet(tmp_path):
    path = tmp_path / "roster.xlsx"
    Workbook().save(path)
    with pytest.raises(ValueError):
        load_roster(path)


def test_cell_amount():
    assert cell_amount(None) == Decimal("0")
    assert cell_amount("€ 12,5") == Decimal("12.5")
    with pytest.raises(ValueError):
        cell_amount("-3")
