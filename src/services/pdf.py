"""
PDF export of payroll reports.
"""

from datetime import datetime
from decimal import Decimal
from io import BytesIO
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.config import DATE_FORMAT, DATETIME_FORMAT, PDF_FONT_PATH
from models.payroll import PayrollReport

UNICODE_FONT_NAME = "PayrollSans"
FALLBACK_FONT_NAME = "Helvetica"


def format_money(amount: Decimal) -> str:
    """Format an amount as '€1,234.50'."""
    return f"€{amount:,.2f}"


def format_period(start: datetime, end: datetime) -> str:
    """Format a period as 'dd/mm/YYYY - dd/mm/YYYY'."""
    return f"{start.strftime(DATE_FORMAT)} - {end.strftime(DATE_FORMAT)}"


def register_font(font_path: Path = PDF_FONT_PATH) -> str:
    """
    Register a Unicode TTF so Greek names render.

    Returns:
        Font name to use (Helvetica if the TTF is unavailable)
    """
    if UNICODE_FONT_NAME in pdfmetrics.getRegisteredFontNames():
        return UNICODE_FONT_NAME
    if not font_path.exists():
        return FALLBACK_FONT_NAME
    pdfmetrics.registerFont(TTFont(UNICODE_FONT_NAME, str(font_path)))
    return UNICODE_FONT_NAME


def make_table(rows: list[list[str]], col_widths: list[float], font_name: str) -> Table:
    """Table with a shaded header row and light grid."""
    table = Table(rows, colWidths=col_widths, hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f2f2f2")),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#cccccc")),
                ("FONTNAME", (0, 0), (-1, -1), font_name),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#fafafa")]),
            ]
        )
    )
    return table


def generate_payroll_pdf(report: PayrollReport) -> bytes:
    """Render a payroll report (header, summary, per-client breakdown) to PDF bytes."""
    font_name = register_font()
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("PayrollTitle", parent=styles["Heading1"], fontName=font_name)
    heading_style = ParagraphStyle("PayrollHeading", parent=styles["Heading2"], fontName=font_name)
    body_style = ParagraphStyle("PayrollBody", parent=styles["BodyText"], fontName=font_name)
    footer_style = ParagraphStyle(
        "PayrollFooter", parent=body_style, fontSize=8, textColor=colors.HexColor("#666666")
    )

    story = [
        Paragraph("ΑΝΑΦΟΡΑ ΜΙΣΘΟΔΟΣΙΑΣ / Payroll Report", title_style),
        Paragraph(f"Εργαζόμενος: {report.employee.name}", body_style),
    ]
    if report.employee.email:
        story.append(Paragraph(f"Email: {report.employee.email}", body_style))
    story.extend(
        [
            Paragraph(f"Περίοδος: {format_period(report.period_start, report.period_end)}", body_style),
            Paragraph(f"Δημιουργήθηκε: {report.generated_at.strftime(DATETIME_FORMAT)}", body_style),
            Spacer(1, 12),
            Paragraph("Σύνοψη / Summary", heading_style),
        ]
    )

    summary_rows = [
        ["", ""],
        ["Συνεδρίες / Sessions", str(report.total_sessions)],
        ["Έσοδα / Revenue", format_money(report.total_revenue)],
        ["Εργαζόμενος / Employee", format_money(report.total_employee_earnings)],
        ["Εταιρεία / Company", format_money(report.total_company_earnings)],
    ]
    story.append(make_table(summary_rows, [220, 120], font_name))
    story.append(Spacer(1, 12))

    story.append(Paragraph("Ανά πελάτη / By client", heading_style))
    if report.entries:
        detail_rows = [["Πελάτης / Client", "Sessions", "Price", "Revenue", "Employee", "Company"]]
        for entry in report.entries:
            detail_rows.append(
                [
                    entry.client_name,
                    str(entry.session_count),
                    format_money(entry.price_per_session),
                    format_money(entry.total_revenue),
                    format_money(entry.employee_earnings),
                    format_money(entry.company_earnings),
                ]
            )
        story.append(make_table(detail_rows, [170, 55, 65, 70, 70, 70], font_name))
    else:
        story.append(Paragraph("Δεν βρέθηκαν συνεδρίες. No sessions found.", body_style))

    story.append(Spacer(1, 18))
    story.append(Paragraph("Payroll System", footer_style))

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4, leftMargin=36, rightMargin=36, topMargin=30, bottomMargin=30,
        title=f"Payroll {report.employee.name}",
    )
    doc.build(story)
    return buffer.getvalue()
