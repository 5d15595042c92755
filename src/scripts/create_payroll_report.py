#!/usr/bin/env python3
"""
Calculate payroll for one employee from their Google Calendar.

Prints the per-client breakdown and validation result, and optionally
writes a PDF and syncs the report to the ledger workbook.

Usage:
    uv run python src/scripts/create_payroll_report.py --employee "Άννα Κ." --month 2025-11
    uv run python src/scripts/create_payroll_report.py --employee anna-k \
        --start 2025-11-01 --end 2025-11-30 --pdf --sync
"""

import argparse
import sys
import traceback
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import LEDGER_PATH, OUTPUT_DIR, ROSTER_PATH
from core.logging_config import configure_logging
from core.validation import validate_payroll_report
from services.calendar import fetch_calendar_events
from services.ledger import sync_report_to_ledger
from services.payroll import run_payroll
from services.pdf import format_money, format_period, generate_payroll_pdf
from services.periods import day_end, day_start, month_range, previous_month
from services.roster import load_roster


# =============================================================================
# DATE UTILITIES
# =============================================================================


def get_period(
    month_str: str | None, start_str: str | None, end_str: str | None
) -> tuple[datetime, datetime]:
    """
    Resolve the payroll period from the command line.

    Explicit --start/--end win over --month; with neither, the previous
    month is used.
    """
    if start_str and end_str:
        return (
            day_start(date.fromisoformat(start_str)),
            day_end(date.fromisoformat(end_str)),
        )
    if month_str:
        year, month = map(int, month_str.split("-"))
        return month_range(year, month)
    return month_range(*previous_month(date.today()))


# =============================================================================
# MAIN
# =============================================================================


def main(args: argparse.Namespace) -> int:
    """Main entry point for a payroll run."""
    try:
        start, end = get_period(args.month, args.start, args.end)
        roster = load_roster(ROSTER_PATH)

        employee = roster.employee(args.employee)
        if employee is None:
            print(f"Employee not found: {args.employee}")
            return 1

        print(f"Calculating payroll for {employee.name}: {format_period(start, end)}")

        clients = roster.clients_for(employee.id)
        print(f"  Clients: {len(clients)}")

        events = []
        if clients and employee.calendar_id:
            events = fetch_calendar_events(employee.calendar_id, start, end)
        print(f"  Events: {len(events)}")

        report, _ = run_payroll(employee, clients, events, start, end)

        print("\n" + "=" * 80)
        for entry in report.entries:
            print(
                f"{entry.client_name:<40} {entry.session_count:>4} x "
                f"{format_money(entry.price_per_session):>10}  "
                f"employee {format_money(entry.employee_earnings):>12}"
            )
        print("-" * 80)
        print(f"Sessions:          {report.total_sessions}")
        print(f"Revenue:           {format_money(report.total_revenue)}")
        print(f"Employee earnings: {format_money(report.total_employee_earnings)}")
        print(f"Company earnings:  {format_money(report.total_company_earnings)}")

        validation = validate_payroll_report(report)
        if validation.valid:
            print("\nValidation: OK")
        else:
            print(f"\nValidation: {validation.error_type}")
            print(validation.error_details)

        if args.pdf:
            output_dir = OUTPUT_DIR / "payroll"
            output_dir.mkdir(parents=True, exist_ok=True)
            output_path = output_dir / (
                f"payroll_{employee.id}_{start:%Y%m%d}_{end:%Y%m%d}.pdf"
            )
            output_path.write_bytes(generate_payroll_pdf(report))
            print(f"\nPDF written to {output_path}")

        if args.sync:
            result = sync_report_to_ledger(report, LEDGER_PATH)
            print(f"\nLedger: {result.message}")
            if result.status != "success":
                return 1

        print("\nDone!")
        return 0 if validation.valid else 1

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Calculate payroll for an employee")
    parser.add_argument("--employee", required=True, help="Employee id or name")
    parser.add_argument("--month", help="Target month (YYYY-MM). Defaults to previous month.")
    parser.add_argument("--start", help="Period start date (YYYY-MM-DD)")
    parser.add_argument("--end", help="Period end date (YYYY-MM-DD)")
    parser.add_argument("--pdf", action="store_true", help="Write a PDF report")
    parser.add_argument("--sync", action="store_true", help="Sync the report to the ledger")
    args = parser.parse_args()

    configure_logging()
    sys.exit(main(args))
