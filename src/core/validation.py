"""
Payroll report validation.

Two checks, first failure wins:
1. Totals match the sum of the client entries
2. No negative counts or amounts anywhere in the report
"""

from decimal import Decimal

from core.config import TOTALS_TOLERANCE
from models.payroll import PayrollReport, ValidationResult

TOTALS_MISMATCH = "Totals Mismatch"
NEGATIVE_VALUES = "Negative Values Detected"


def amounts_equal(a: Decimal, b: Decimal, tolerance: Decimal = TOTALS_TOLERANCE) -> bool:
    """Compare two amounts within an absolute tolerance."""
    return abs(Decimal(a) - Decimal(b)) < tolerance


def check_totals_match(report: PayrollReport) -> list[str]:
    """Compare report totals with the sums over its entries."""
    entries = report.entries
    summed_sessions = sum(e.session_count for e in entries)
    summed_revenue = sum((e.total_revenue for e in entries), Decimal("0"))
    summed_employee = sum((e.employee_earnings for e in entries), Decimal("0"))
    summed_company = sum((e.company_earnings for e in entries), Decimal("0"))

    errors = []
    if summed_sessions != report.total_sessions:
        errors.append(f"Sessions mismatch: Master={report.total_sessions}, Sum={summed_sessions}")
    if not amounts_equal(summed_revenue, report.total_revenue):
        errors.append(f"Revenue mismatch: Master=€{report.total_revenue}, Sum=€{summed_revenue}")
    if not amounts_equal(summed_employee, report.total_employee_earnings):
        errors.append(
            f"Employee earnings mismatch: Master=€{report.total_employee_earnings}, "
            f"Sum=€{summed_employee}"
        )
    if not amounts_equal(summed_company, report.total_company_earnings):
        errors.append(
            f"Company earnings mismatch: Master=€{report.total_company_earnings}, "
            f"Sum=€{summed_company}"
        )
    return errors


def check_no_negatives(report: PayrollReport) -> list[str]:
    """List every negative count or amount at report and entry level."""
    errors = []

    if report.total_sessions < 0:
        errors.append(f"Total sessions is negative: {report.total_sessions}")
    if report.total_revenue < 0:
        errors.append(f"Total revenue is negative: €{report.total_revenue}")
    if report.total_employee_earnings < 0:
        errors.append(f"Employee earnings is negative: €{report.total_employee_earnings}")
    if report.total_company_earnings < 0:
        errors.append(f"Company earnings is negative: €{report.total_company_earnings}")

    for entry in report.entries:
        name = entry.client_name
        if entry.session_count < 0:
            errors.append(f"Client '{name}' has negative sessions: {entry.session_count}")
        if entry.total_revenue < 0:
            errors.append(f"Client '{name}' has negative revenue: €{entry.total_revenue}")
        if entry.employee_earnings < 0:
            errors.append(
                f"Client '{name}' has negative employee earnings: €{entry.employee_earnings}"
            )
        if entry.company_earnings < 0:
            errors.append(
                f"Client '{name}' has negative company earnings: €{entry.company_earnings}"
            )

    return errors


def validate_payroll_report(report: PayrollReport) -> ValidationResult:
    """
    Validate a payroll report without modifying it.

    Returns:
        ValidationResult.success() or a failure with error_type
        "Totals Mismatch" / "Negative Values Detected" and one line per problem
    """
    errors = check_totals_match(report)
    if errors:
        return ValidationResult.failure(TOTALS_MISMATCH, "\n".join(errors))

    errors = check_no_negatives(report)
    if errors:
        return ValidationResult.failure(NEGATIVE_VALUES, "\n".join(errors))

    return ValidationResult.success()
