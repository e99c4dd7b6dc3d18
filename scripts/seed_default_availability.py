"""
Write the default opening hours as a partner's weekly schedule.

Defaults: Monday-Friday 08:00-18:00, Saturday 09:00-14:00, Sunday closed.
The save is a full replace of whatever the partner had configured.

Usage:
    python scripts/seed_default_availability.py                 # dry-run (default)
    python scripts/seed_default_availability.py --execute       # save it
    python scripts/seed_default_availability.py --partner p-123 --execute
    python scripts/seed_default_availability.py --force --execute  # overwrite existing hours
"""

import argparse
import sys

from config import format_week, get_client

from src.availability.blocks import merge
from src.availability.editor import EditorSession, SaveOutcome
from src.availability.serializer import default_slot_set


def _parse_args():
    parser = argparse.ArgumentParser(
        description="Seed a partner's weekly schedule with default opening hours.",
    )
    parser.add_argument("--partner", type=str, default=None, help="Partner ID.")
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Actually save (default is dry-run).",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite a partner that already has availability.",
    )
    return parser.parse_args()


def main():
    args = _parse_args()
    client = get_client()
    session = EditorSession(client, partner_id=args.partner)

    # Fetch directly so a failed request aborts instead of looking empty
    existing = client.fetch_weekly_schedule(session.partner_id)
    current = session.serializer.load(existing)

    if not current.is_empty() and not args.force:
        print(f"Partner {session.partner_id} already has availability:")
        print(format_week(merge(current), session.columns()))
        print("\nUse --force to overwrite.")
        return 0

    defaults = default_slot_set(session.geometry)
    print(f"Default schedule for {session.partner_id}:")
    print(format_week(merge(defaults), session.columns()))

    if not args.execute:
        print("\nDry run. Run with --execute to save.")
        return 0

    if existing is not None:
        session.set_buffer_time(existing.buffer_time_minutes)
        session.set_max_advance_booking_days(existing.max_advance_booking_days)
    session.replace(defaults)
    outcome = session.save()
    print(f"\nSave: {outcome.value}")
    return 0 if outcome is SaveOutcome.SAVED else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
