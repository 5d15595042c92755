"""
Calendar event fetching, classification and grouping by client.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, time
from zoneinfo import ZoneInfo

from core.calendar_client import get_calendar_service
from core.config import (
    CALENDAR_PAGE_SIZE,
    CALENDAR_TIMEZONE,
    CANCELLED_STATUS,
    GREY_COLOR_ID,
    UNTITLED_EVENT_TITLE,
)
from core.matching import find_client_matches
from models.payroll import CalendarEvent, EventStatus
from services.periods import to_local_naive

logger = logging.getLogger(__name__)


# =============================================================================
# CLASSIFICATION
# =============================================================================


def classify_event(status: str | None, color_tag: str | None) -> EventStatus:
    """
    Derive cancellation flags from the event status and color.

    A cancelled event colored grey is a late cancellation that is still billed
    (pending payment). Events without a color are never pending payment.
    """
    cancelled = status == CANCELLED_STATUS
    pending_payment = cancelled and color_tag == GREY_COLOR_ID
    return EventStatus(cancelled=cancelled, pending_payment=pending_payment)


def event_status_label(event: CalendarEvent) -> str:
    """Status label for event breakdowns: completed, cancelled or pending_payment."""
    if event.cancelled and event.pending_payment:
        return "pending_payment"
    if event.cancelled:
        return "cancelled"
    return "completed"


# =============================================================================
# PARSING
# =============================================================================


def parse_event_time(value: dict | None, tz: ZoneInfo, all_day_time: time) -> datetime | None:
    """
    Parse a Google Calendar start/end object into a naive local datetime.

    Timed events carry 'dateTime' (RFC 3339); all-day events only 'date'.
    """
    if not value:
        return None
    if value.get("dateTime"):
        parsed = datetime.fromisoformat(value["dateTime"].replace("Z", "+00:00"))
        return to_local_naive(parsed, tz)
    if value.get("date"):
        day = datetime.strptime(value["date"], "%Y-%m-%d").date()
        return datetime.combine(day, all_day_time)
    return None


def parse_event(raw: dict, tz: ZoneInfo | None = None) -> CalendarEvent | None:
    """
    Parse a Google Calendar v3 event resource into our format.

    Returns None if the event has no usable start time.
    """
    tz = tz or ZoneInfo(CALENDAR_TIMEZONE)
    start_time = parse_event_time(raw.get("start"), tz, time(0, 0, 0))
    if start_time is None:
        return None
    end_time = parse_event_time(raw.get("end"), tz, time(23, 59, 59)) or start_time

    color_tag = raw.get("colorId")
    status = classify_event(raw.get("status"), color_tag)
    attendees = tuple(a["email"] for a in raw.get("attendees", []) if a.get("email"))

    return CalendarEvent(
        id=raw.get("id") or "",
        title=raw.get("summary") or UNTITLED_EVENT_TITLE,
        start_time=start_time,
        end_time=end_time,
        color_tag=color_tag,
        cancelled=status.cancelled,
        pending_payment=status.pending_payment,
        attendees=attendees,
    )


# =============================================================================
# FETCHING
# =============================================================================


def fetch_calendar_events(
    calendar_id: str, start: datetime, end: datetime
) -> list[CalendarEvent]:
    """
    Fetch all events from a calendar within a time window.

    Handles pagination. Errors are logged and produce an empty list, so a
    calendar outage yields an empty payroll instead of a failed request.
    """
    tz = ZoneInfo(CALENDAR_TIMEZONE)
    time_min = start.replace(tzinfo=tz).isoformat() if start.tzinfo is None else start.isoformat()
    time_max = end.replace(tzinfo=tz).isoformat() if end.tzinfo is None else end.isoformat()

    events = []
    try:
        service = get_calendar_service()
        page_token = None
        while True:
            response = (
                service.events()
                .list(
                    calendarId=calendar_id,
                    timeMin=time_min,
                    timeMax=time_max,
                    singleEvents=True,
                    orderBy="startTime",
                    showDeleted=False,
                    maxResults=CALENDAR_PAGE_SIZE,
                    pageToken=page_token,
                )
                .execute()
            )
            for raw in response.get("items", []):
                parsed = parse_event(raw, tz)
                if parsed is not None:
                    events.append(parsed)

            page_token = response.get("nextPageToken")
            if not page_token:
                break

    except Exception:
        logger.exception("Error fetching events for calendar %s", calendar_id)
        return []

    logger.info("Fetched %d events from calendar %s", len(events), calendar_id)
    return events


def list_calendars() -> list[dict]:
    """List calendars visible to the service account."""
    try:
        response = get_calendar_service().calendarList().list().execute()
    except Exception:
        logger.exception("Error fetching calendar list")
        return []

    return [
        {
            "id": item.get("id", ""),
            "summary": item.get("summary", ""),
            "primary": item.get("primary", False),
            "access_role": item.get("accessRole", ""),
        }
        for item in response.get("items", [])
    ]


# =============================================================================
# GROUPING
# =============================================================================


def group_events_by_client(
    events: Sequence[CalendarEvent],
    client_names: Sequence[str],
    special_keywords: Sequence[str] = (),
) -> dict[str, list[CalendarEvent]]:
    """
    Assign each event to the first client its title matches.

    Returns:
        Dict with every client name (roster order) and every special keyword
        as keys, mapped to their events (possibly empty)
    """
    grouped: dict[str, list[CalendarEvent]] = {name: [] for name in client_names}
    for keyword in special_keywords:
        grouped.setdefault(keyword, [])

    unmatched = 0
    for event in events:
        matches = find_client_matches(event.title, client_names, special_keywords)
        if not matches:
            unmatched += 1
            continue
        if len(matches) > 1:
            logger.warning("Multiple matches for '%s': %s (using '%s')", event.title, matches, matches[0])
        grouped[matches[0]].append(event)

    matched = sum(len(group) for group in grouped.values())
    cancelled = sum(1 for e in events if e.cancelled)
    pending = sum(1 for e in events if e.pending_payment)
    logger.info(
        "Matched events: %d, cancelled: %d, pending payment: %d, unmatched: %d",
        matched, cancelled, pending, unmatched,
    )
    return grouped
