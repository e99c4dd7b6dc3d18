"""
Print a partner's weekly availability as merged time blocks.

Read-only: fetches the persisted schedule and never writes.

Usage:
    python scripts/show_availability.py                      # configured partner
    python scripts/show_availability.py --partner p-123
    python scripts/show_availability.py --json               # blocks as JSON
"""

import argparse
import json
import sys

from config import format_week, get_client

from src.availability.config import get_config
from src.availability.editor import EditorSession


def _parse_args():
    parser = argparse.ArgumentParser(
        description="Show a partner's weekly availability blocks.",
    )
    parser.add_argument(
        "--partner",
        type=str,
        default=None,
        help="Partner ID (default: AVAILABILITY_PARTNER_ID).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output blocks as JSON instead of a table.",
    )
    return parser.parse_args()


def main():
    args = _parse_args()
    session = EditorSession(get_client(), partner_id=args.partner)
    session.load()
    blocks_by_day = session.all_blocks()

    if args.json:
        output = {
            "partnerId": session.partner_id,
            "slotDurationMinutes": session.geometry.slot_duration_minutes,
            "bufferTimeMinutes": session.buffer_time_minutes,
            "maxAdvanceBookingDays": session.max_advance_booking_days,
            "blocks": [
                block.model_dump(include={"day_index", "start_time", "end_time"})
                for day in session.columns()
                for block in blocks_by_day[day]
            ],
        }
        print(json.dumps(output, indent=2))
        return

    config = get_config()
    print(f"Partner {session.partner_id} ({session.active_days()} active days)")
    print(format_week(blocks_by_day, session.columns()))
    print(
        f"\nSlot: {config.slot_duration_minutes} min, "
        f"buffer: {session.buffer_time_minutes} min, "
        f"book ahead: {session.max_advance_booking_days} days"
    )


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
