#!/usr/bin/env python3
"""
List the Google calendars shared with the service account, and the roster
employees each one belongs to.

Usage:
    uv run python src/scripts/list_calendars.py
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import ROSTER_PATH
from services.calendar import list_calendars
from services.roster import load_roster


def main():
    """List calendars and map them to roster employees."""
    owners = {}
    if ROSTER_PATH.exists():
        roster = load_roster(ROSTER_PATH)
        owners = {e.calendar_id: e.name for e in roster.employees if e.calendar_id}
    else:
        print(f"Roster not found at {ROSTER_PATH}, skipping employee lookup\n")

    print("Fetching calendars from Google...\n")
    calendars = list_calendars()
    print(f"Found {len(calendars)} calendars\n")
    print("=" * 80)

    for cal in calendars:
        print(f"\nCalendar: {cal['summary']}")
        print(f"  ID: {cal['id']}")
        print(f"  Access: {cal['access_role']}")
        if cal["primary"]:
            print("  Primary: yes")
        print(f"  Employee: {owners.get(cal['id'], '-')}")
        print("-" * 80)

    missing = sorted(set(owners) - {cal["id"] for cal in calendars})
    if missing:
        print("\nRoster calendars not shared with the service account:")
        for calendar_id in missing:
            print(f"  - {owners[calendar_id]}: {calendar_id}")

    print("\nDone!")


if __name__ == "__main__":
    main()
