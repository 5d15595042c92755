"""
Google Calendar client setup with lazy initialization.
"""

from google.oauth2 import service_account
from googleapiclient.discovery import build

from core.config import CALENDAR_SCOPES, GOOGLE_SERVICE_ACCOUNT_FILE

_calendar_service = None


def get_calendar_service():
    """Get or create the Google Calendar v3 service (lazy initialization)."""
    global _calendar_service
    if _calendar_service is None:
        credentials = service_account.Credentials.from_service_account_file(
            GOOGLE_SERVICE_ACCOUNT_FILE,
            scopes=CALENDAR_SCOPES,
        )
        _calendar_service = build(
            "calendar", "v3", credentials=credentials, cache_discovery=False
        )
    return _calendar_service
