"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.payroll import CalendarEvent, Client, Employee  # noqa: E402
from services.payroll import run_payroll  # noqa: E402


@pytest.fixture
def employee():
    """Roster employee with a supervision price."""
    return Employee(
        id="αννα-κ",
        name="Άννα Κ.",
        email="anna@example.com",
        calendar_id="anna@example.com",
        sheet_name="Άννα",
        supervision_price=Decimal("50"),
    )


@pytest.fixture
def clients(employee):
    """Client price list with Greek names, in roster order."""
    return [
        Client(
            name="Γιάννης Παπαδόπουλος",
            price_per_session=Decimal("40"),
            employee_share_per_session=Decimal("24"),
            company_share_per_session=Decimal("16"),
            owner_id=employee.id,
        ),
        Client(
            name="Μαρία Οικονόμου",
            price_per_session=Decimal("35.50"),
            employee_share_per_session=Decimal("20"),
            company_share_per_session=Decimal("15.50"),
            owner_id=employee.id,
        ),
    ]


@pytest.fixture
def period():
    """November 2025, first to last second."""
    return datetime(2025, 11, 1, 0, 0, 0), datetime(2025, 11, 30, 23, 59, 59)


@pytest.fixture
def make_event():
    """Factory for calendar events starting at the given time."""
    counter = iter(range(1, 10_000))

    def _make(title, start, cancelled=False, pending_payment=False, color_tag=None):
        return CalendarEvent(
            id=f"evt-{next(counter)}",
            title=title,
            start_time=start,
            end_time=start.replace(hour=min(start.hour + 1, 23)),
            color_tag=color_tag,
            cancelled=cancelled,
            pending_payment=pending_payment,
        )

    return _make


@pytest.fixture
def sample_events(make_event):
    """A month of sessions: 3 for Γιάννης (one late-cancelled), 1 for Μαρία,
    1 supervision, 1 plain cancellation and 1 unmatched event."""
    return [
        make_event("Παπαδόπουλος Γιάννης", datetime(2025, 11, 3, 10)),
        make_event("Γιαννης παπαδοπουλος - συνεδρία", datetime(2025, 11, 10, 10)),
        make_event(
            "Παπαδόπουλος",
            datetime(2025, 11, 17, 10),
            cancelled=True,
            pending_payment=True,
            color_tag="8",
        ),
        make_event("Οικονόμου", datetime(2025, 11, 4, 12)),
        make_event("Οικονόμου", datetime(2025, 11, 11, 12), cancelled=True),
        make_event("Εποπτεία ομάδας", datetime(2025, 11, 20, 18)),
        make_event("Οδοντίατρος", datetime(2025, 11, 21, 9)),
    ]


@pytest.fixture
def report(employee, clients, sample_events, period):
    """Payroll report calculated from the sample events."""
    report, _ = run_payroll(employee, clients, sample_events, *period)
    return report
