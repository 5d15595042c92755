"""
Configuration constants and environment setup.
"""

import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("PAYROLL_DB_PATH", PROJECT_ROOT / "data" / "db" / "payroll.db"))
OUTPUT_DIR = PROJECT_ROOT / "output"
ROSTER_PATH = Path(os.environ.get("ROSTER_PATH", PROJECT_ROOT / "data" / "roster.xlsx"))
LEDGER_PATH = Path(os.environ.get("LEDGER_PATH", OUTPUT_DIR / "ledger" / "payroll-ledger.xlsx"))

# Unicode TTF for Greek text in PDFs (e.g. DejaVuSans.ttf); Helvetica is used if missing
PDF_FONT_PATH = Path(os.environ.get("PDF_FONT_PATH", PROJECT_ROOT / "data" / "fonts" / "DejaVuSans.ttf"))

# =============================================================================
# CALENDAR CONFIGURATION
# =============================================================================

GOOGLE_SERVICE_ACCOUNT_FILE = os.environ.get(
    "GOOGLE_SERVICE_ACCOUNT_FILE", str(PROJECT_ROOT / "data" / "credentials.json")
)
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]
CALENDAR_TIMEZONE = os.environ.get("CALENDAR_TIMEZONE", "Europe/Athens")
CALENDAR_PAGE_SIZE = 250

# Google Calendar colorId "8" (graphite) marks a late cancellation that is still billed
GREY_COLOR_ID = "8"
CANCELLED_STATUS = "cancelled"
UNTITLED_EVENT_TITLE = "Χωρίς τίτλο"

# =============================================================================
# MATCHING CONFIGURATION
# =============================================================================

# Minimum token length for word-boundary matching on a single name part
SURNAME_MIN_LENGTH = 4
FIRST_NAME_MIN_LENGTH = int(os.environ.get("FIRST_NAME_MIN_LENGTH", "4"))

# =============================================================================
# PAYROLL CONFIGURATION
# =============================================================================

SUPERVISION_KEYWORDS = ("Εποπτεία", "Supervision")
SUPERVISION_LABEL = "Εποπτεία (Supervision)"
SUPERVISION_EMPLOYEE_RATIO = Decimal(os.environ.get("SUPERVISION_EMPLOYEE_RATIO", "0.4"))

# Absolute tolerance when comparing report totals with the sum of entries
TOTALS_TOLERANCE = Decimal("0.01")

# Roster status text for clients that stopped attending
STOPPED_CLIENT_MARKER = "Σταμάτησε"

# =============================================================================
# ROSTER / LEDGER CONFIGURATION
# =============================================================================

EMPLOYEES_SHEET = "EMPLOYEES"

MASTER_SHEET = "MASTER_PAYROLL"
DETAILS_SHEET = "CLIENT_DETAILS"
MASTER_HEADERS = [
    "Calculation Date", "Employee", "Period Start", "Period End",
    "Total Sessions", "Total Revenue", "Employee Earnings", "Company Earnings", "Notes",
]
DETAIL_HEADERS = [
    "Calculation Date", "Employee", "Period Start", "Period End", "Period",
    "Client", "Sessions", "Price/Session", "Employee Share", "Company Share", "Total Revenue",
]

DATE_FORMAT = "%d/%m/%Y"
DATETIME_FORMAT = "%d/%m/%Y %H:%M"

# =============================================================================
# API CONFIGURATION
# =============================================================================

PAYROLL_API_KEY = os.environ.get("PAYROLL_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
