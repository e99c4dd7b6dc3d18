"""Pydantic models for weekly availability data.

Wire models mirror the partner API JSON (camelCase); Python code uses the
snake_case attribute names. Dump with ``model_dump(by_alias=True)`` to get the
wire shape back.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field
from pydantic.alias_generators import to_camel

from src.availability.geometry import time_to_minutes

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SlotRecord(BaseModel):
    """One (day, slot) entry of the persisted schedule."""

    model_config = _WIRE_CONFIG

    start_time: str  # "09:00"
    end_time: str  # "09:30"
    is_available: bool = False


class TimeBlock(BaseModel):
    """Legacy ``{start, end}`` range stored by older backends."""

    start: str  # "08:00"
    end: str  # "18:00"


class DaySchedule(BaseModel):
    """All slots of one weekday."""

    model_config = _WIRE_CONFIG

    day_of_week: int = Field(ge=0, le=6)  # 0 = Sunday
    day_name: str = ""
    is_enabled: bool = False
    slots: list[SlotRecord] = Field(default_factory=list)
    time_blocks: list[TimeBlock] | None = None


class WeeklySchedule(BaseModel):
    """Exhaustive weekly availability for one partner.

    Written as a full replace on every save; never merged server-side.
    """

    model_config = _WIRE_CONFIG

    partner_id: str
    schedule: list[DaySchedule] = Field(default_factory=list)
    slot_duration_minutes: int = Field(default=30, gt=0)
    buffer_time_minutes: int = Field(default=15, ge=0)
    max_advance_booking_days: int = Field(default=14, ge=0)

    def to_wire(self) -> dict:
        """JSON-ready dict in the partner API's camelCase shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _parse_entries(raw: Any, model: type[BaseModel]) -> tuple[list, int]:
    """Validate a list entry by entry; returns (valid models, skipped count)."""
    if raw is None:
        return [], 0
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of {model.__name__}, got {type(raw).__name__}")
    parsed, skipped = [], 0
    for entry in raw:
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError:
            skipped += 1
    return parsed, skipped


def _parse_day(raw: Any) -> tuple[DaySchedule, int]:
    if not isinstance(raw, Mapping):
        raise ValueError("Day entry is not an object")
    fields = dict(raw)
    slots, skipped = _parse_entries(fields.pop("slots", None), SlotRecord)
    raw_blocks = fields.pop("timeBlocks", fields.pop("time_blocks", None))
    blocks, skipped_blocks = _parse_entries(raw_blocks, TimeBlock)

    day = DaySchedule.model_validate(fields)
    day.slots = slots
    day.time_blocks = blocks if raw_blocks is not None else None
    return day, skipped + skipped_blocks


def parse_weekly_schedule(data: Any) -> tuple[WeeklySchedule, int]:
    """Validate a raw weekly schedule one day and one record at a time.

    Days that fail validation (e.g. ``dayOfWeek`` outside 0-6) and records
    that fail (e.g. a non-boolean ``isAvailable``) are dropped and counted
    instead of rejecting the whole document.

    Returns:
        The schedule built from the valid entries, and the number skipped.

    Raises:
        ValueError: If the envelope itself is unusable: not an object, a
            ``schedule`` that is not a list, or invalid top-level fields.
            ``pydantic.ValidationError`` is a ValueError subclass.
    """
    if not isinstance(data, Mapping):
        raise ValueError("Weekly schedule is not an object")
    header = dict(data)
    raw_days = header.pop("schedule", None)
    if raw_days is not None and not isinstance(raw_days, list):
        raise ValueError("Weekly schedule 'schedule' is not a list")
    schedule = WeeklySchedule.model_validate(header)

    skipped = 0
    for raw_day in raw_days or []:
        try:
            day, day_skipped = _parse_day(raw_day)
        except ValueError:
            skipped += 1
            continue
        skipped += day_skipped
        schedule.schedule.append(day)
    return schedule, skipped


class AvailabilityBlock(BaseModel):
    """A maximal run of contiguous available slots on one day.

    Derived from a SlotSet for display; never persisted.
    """

    model_config = ConfigDict(frozen=True)

    day_index: int = Field(ge=0, le=6)
    start_time: str
    end_time: str

    @computed_field
    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @computed_field
    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"
