"""Expand a SlotSet into the persisted WeeklySchedule and collapse it back.

The persisted schedule is exhaustive: every (day, slot) pair is written with
an ``isAvailable`` flag, so ``load(save(s)) == s`` for every SlotSet ``s``.
Loading is forgiving: a missing or malformed schedule gives an empty SlotSet
instead of an error, so a partner without configured hours still gets a
blank editor.
"""

from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any

from src.availability.blocks import expand_range
from src.availability.geometry import (
    DAY_NAMES,
    TimeGeometry,
    minutes_to_time,
    time_to_minutes,
)
from src.availability.logging import get_logger
from src.availability.models import (
    DaySchedule,
    SlotRecord,
    WeeklySchedule,
    parse_weekly_schedule,
)
from src.availability.slots import DAYS_IN_WEEK, SlotSet

log = get_logger(__name__)

# Seeded hours for a new partner: (open, close) per dayOfWeek, None = closed
DEFAULT_HOURS: dict[int, tuple[str, str] | None] = {
    0: None,
    1: ("08:00", "18:00"),
    2: ("08:00", "18:00"),
    3: ("08:00", "18:00"),
    4: ("08:00", "18:00"),
    5: ("08:00", "18:00"),
    6: ("09:00", "14:00"),
}


class WeeklyScheduleSerializer:
    """Converts between SlotSet and WeeklySchedule for one slot geometry."""

    def __init__(self, geometry: TimeGeometry | None = None) -> None:
        self.geometry = geometry or TimeGeometry()

    def save(
        self,
        slot_set: SlotSet,
        partner_id: str,
        *,
        buffer_time_minutes: int = 15,
        max_advance_booking_days: int = 14,
    ) -> WeeklySchedule:
        """Build the full 7 x N schedule for a SlotSet.

        The result replaces whatever was persisted before; nothing is merged.
        """
        if slot_set.slot_duration_minutes != self.geometry.slot_duration_minutes:
            raise ValueError("SlotSet slot duration does not match serializer geometry")

        days: list[DaySchedule] = []
        for day in range(DAYS_IN_WEEK):
            available = slot_set.day(day)
            slots = [
                SlotRecord(
                    start_time=minutes_to_time(start),
                    end_time=minutes_to_time(self.geometry.slot_end(start)),
                    is_available=start in available,
                )
                for start in self.geometry.slot_starts()
            ]
            days.append(
                DaySchedule(
                    day_of_week=day,
                    day_name=DAY_NAMES[day],
                    is_enabled=bool(available),
                    slots=slots,
                )
            )

        schedule = WeeklySchedule(
            partner_id=partner_id,
            schedule=days,
            slot_duration_minutes=self.geometry.slot_duration_minutes,
            buffer_time_minutes=buffer_time_minutes,
            max_advance_booking_days=max_advance_booking_days,
        )
        log.debug(
            "schedule_serialized",
            partner_id=partner_id,
            records=sum(len(d.slots) for d in days),
            available=slot_set.total(),
        )
        return schedule

    def load(self, schedule: WeeklySchedule | Mapping[str, Any] | None) -> SlotSet:
        """Collapse a persisted schedule into a SlotSet.

        A slot is available when its start falls inside an available record's
        ``[startTime, endTime)`` span, so schedules stored with a different
        slot duration are re-quantized. Legacy ``timeBlocks`` days are
        expanded the same way.

        Never raises: missing or malformed input gives an empty SlotSet. Days
        and records that fail validation are skipped; the rest still load.
        """
        slot_set = SlotSet(self.geometry.slot_duration_minutes)
        if schedule is None:
            log.info("schedule_missing", result="empty")
            return slot_set

        if not isinstance(schedule, WeeklySchedule):
            try:
                schedule, dropped = parse_weekly_schedule(schedule)
            except ValueError as e:
                log.warning("schedule_malformed", result="empty", detail=str(e))
                return slot_set
            if dropped:
                log.warning("schedule_entries_skipped", count=dropped)

        skipped = 0
        for day_schedule in schedule.schedule:
            for start, end in self._available_spans(day_schedule):
                try:
                    span = (time_to_minutes(start), time_to_minutes(end))
                except ValueError:
                    skipped += 1
                    continue
                for slot in expand_range(*span, self.geometry.slot_duration_minutes):
                    slot_set.add(day_schedule.day_of_week, slot)

        if skipped:
            log.warning("schedule_records_skipped", count=skipped)
        log.debug(
            "schedule_loaded",
            partner_id=schedule.partner_id,
            available=slot_set.total(),
        )
        return slot_set

    @staticmethod
    def _available_spans(day_schedule: DaySchedule) -> Iterable[tuple[str, str]]:
        if day_schedule.slots:
            for record in day_schedule.slots:
                if record.is_available:
                    yield record.start_time, record.end_time
        elif day_schedule.time_blocks and day_schedule.is_enabled:
            for block in day_schedule.time_blocks:
                yield block.start, block.end


def default_slot_set(geometry: TimeGeometry | None = None) -> SlotSet:
    """SlotSet with the seeded opening hours (Mon-Fri 08-18, Sat 09-14)."""
    geometry = geometry or TimeGeometry()
    slot_set = SlotSet(geometry.slot_duration_minutes)
    for day, hours in DEFAULT_HOURS.items():
        if hours is None:
            continue
        opening, closing = (time_to_minutes(t) for t in hours)
        slot_set.replace_day(
            day, expand_range(opening, closing, geometry.slot_duration_minutes)
        )
    return slot_set


def available_slots_on(
    schedule: WeeklySchedule,
    on_date: date,
    *,
    booked_start_times: Iterable[str] = (),
    today: date | None = None,
) -> list[SlotRecord]:
    """Bookable slots of ``schedule`` for one calendar date.

    Returns an empty list when the weekday is disabled or the date lies
    outside ``[today, today + maxAdvanceBookingDays]``. Slots that start at a
    booked time are reported with ``is_available=False``. Legacy
    ``timeBlocks`` days are expanded into slots of the schedule's duration.

    Raises:
        ValueError: If a booked start time is not a valid ``"H:MM"`` time.
    """
    today = today or date.today()
    horizon = today + timedelta(days=schedule.max_advance_booking_days)
    if not today <= on_date <= horizon:
        log.debug("date_outside_booking_window", date=on_date.isoformat())
        return []

    day_of_week = (on_date.weekday() + 1) % 7  # Python Monday=0 -> wire Sunday=0
    day_schedule = next(
        (d for d in schedule.schedule if d.day_of_week == day_of_week), None
    )
    if day_schedule is None or not day_schedule.is_enabled:
        return []

    geometry = TimeGeometry(slot_duration_minutes=schedule.slot_duration_minutes)
    starts = WeeklyScheduleSerializer(geometry).load(schedule).day(day_of_week)
    booked = {time_to_minutes(t) for t in booked_start_times}
    return [
        SlotRecord(
            start_time=minutes_to_time(start),
            end_time=minutes_to_time(geometry.slot_end(start)),
            is_available=start not in booked,
        )
        for start in sorted(starts)
    ]
