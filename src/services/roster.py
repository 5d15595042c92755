"""
Roster loading from the Excel workbook.

The workbook has an EMPLOYEES sheet plus one client price-list sheet per
employee:

EMPLOYEES:  A Name | B Email | C Calendar ID | D Client Sheet | E Supervision (€)
<client>:   A Client | B Price | C Employee Share | D Company Share | E Status
"""

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from openpyxl import load_workbook

from core.config import EMPLOYEES_SHEET, STOPPED_CLIENT_MARKER
from core.normalize import normalize_greek
from models.payroll import Client, Employee

logger = logging.getLogger(__name__)


@dataclass
class Roster:
    """Employees and their client price lists."""

    employees: list[Employee] = field(default_factory=list)
    clients: list[Client] = field(default_factory=list)

    def employee(self, employee_id: str) -> Employee | None:
        """Find an employee by id, falling back to a case-insensitive name match."""
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        wanted = normalize_greek(employee_id)
        for employee in self.employees:
            if normalize_greek(employee.name) == wanted:
                return employee
        return None

    def clients_for(self, employee_id: str) -> list[Client]:
        """Clients owned by an employee, in roster order."""
        return [c for c in self.clients if c.owner_id == employee_id]


def make_employee_id(name: str) -> str:
    """Stable URL slug for an employee name, e.g. 'Άννα Κ.' -> 'αννα-κ'."""
    folded = unicodedata.normalize("NFKD", normalize_greek(name))
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return re.sub(r"[^\w]+", "-", folded).strip("-")


def cell_text(value) -> str:
    """Cell value as stripped text ('' for empty cells)."""
    if value is None:
        return ""
    return str(value).strip()


def cell_amount(value) -> Decimal:
    """
    Cell value as Decimal (0 for empty cells).

    Raises:
        ValueError: If the value is not a number or is negative
    """
    if value is None or cell_text(value) == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value).replace(",", ".").replace("€", "").strip())
    except InvalidOperation as e:
        raise ValueError(f"Not a number: '{value}'") from e
    if amount < 0:
        raise ValueError(f"Negative amount: {amount}")
    return amount


def parse_employees(ws) -> list[Employee]:
    """Parse the EMPLOYEES sheet (header row skipped)."""
    employees = []
    for row_idx, row in enumerate(ws.iter_rows(min_row=2, values_only=True), start=2):
        row = tuple(row) + (None,) * (5 - len(row))
        name = cell_text(row[0])
        if not name:
            continue
        try:
            employees.append(
                Employee(
                    id=make_employee_id(name),
                    name=name,
                    email=cell_text(row[1]),
                    calendar_id=cell_text(row[2]),
                    sheet_name=cell_text(row[3]) or name,
                    supervision_price=cell_amount(row[4]),
                )
            )
        except ValueError as e:
            logger.warning("Skipping employee row %d: %s", row_idx, e)
    return employees


def parse_clients(ws, employee: Employee) -> list[Client]:
    """Parse one employee's client sheet (header row skipped)."""
    clients = []
    for row_idx, row in enumerate(ws.iter_rows(min_row=2, values_only=True), start=2):
        row = tuple(row) + (None,) * (5 - len(row))
        name = cell_text(row[0])
        if not name:
            continue
        try:
            clients.append(
                Client(
                    name=name,
                    price_per_session=cell_amount(row[1]),
                    employee_share_per_session=cell_amount(row[2]),
                    company_share_per_session=cell_amount(row[3]),
                    owner_id=employee.id,
                    stopped=STOPPED_CLIENT_MARKER.lower() in cell_text(row[4]).lower(),
                )
            )
        except ValueError as e:
            logger.warning("Skipping client row %d in '%s': %s", row_idx, ws.title, e)
    return clients


def load_roster(path: Path) -> Roster:
    """
    Read employees and clients from the roster workbook.

    Raises:
        FileNotFoundError: If the workbook does not exist
        ValueError: If the EMPLOYEES sheet is missing
    """
    if not path.exists():
        raise FileNotFoundError(f"Roster workbook not found: {path}")

    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        if EMPLOYEES_SHEET not in wb.sheetnames:
            raise ValueError(f"Expected sheet '{EMPLOYEES_SHEET}' not found in {path.name}")

        employees = parse_employees(wb[EMPLOYEES_SHEET])
        clients = []
        seen = set()
        for employee in employees:
            if employee.sheet_name not in wb.sheetnames:
                logger.warning("No client sheet '%s' for %s", employee.sheet_name, employee.name)
                continue
            for client in parse_clients(wb[employee.sheet_name], employee):
                key = (client.owner_id, client.name)
                if key in seen:
                    logger.warning("Duplicate client '%s' for %s ignored", client.name, employee.name)
                    continue
                seen.add(key)
                clients.append(client)
    finally:
        wb.close()

    logger.info("Loaded roster: %d employees, %d clients", len(employees), len(clients))
    return Roster(employees=employees, clients=clients)
