"""Time, minute and pixel conversions for the weekly grid.

A day column is ``day_height`` pixels tall and is cut into ``slot_count``
equal slots. Times are canonical ``"HH:MM"`` strings; internally everything is
a minute offset from midnight. Pixel functions clamp their input to the column
and never raise, so pointer coordinates from outside the column are safe.
"""

import math
import re
from dataclasses import dataclass

MINUTES_PER_DAY = 24 * 60

# Matches the wire ``dayOfWeek`` numbering (0 = Sunday)
DAY_NAMES: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def time_to_minutes(time: str) -> int:
    """Parse ``"HH:MM"`` into minutes after midnight.

    ``"24:00"`` is accepted as the end of the day (1440).

    Raises:
        ValueError: If the string is not a valid time of day.
    """
    match = _TIME_RE.match(time.strip()) if isinstance(time, str) else None
    if match is None:
        raise ValueError(f"Invalid time {time!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid time {time!r}, out of range")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Format minutes after midnight as ``"HH:MM"`` (1440 becomes ``"24:00"``)."""
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Minutes {minutes} outside 0..{MINUTES_PER_DAY}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_order(week_start: int = 1) -> list[int]:
    """Day indices in column order for a week starting on ``week_start``."""
    return [(week_start + offset) % 7 for offset in range(7)]


def check_day(day: int) -> int:
    if not isinstance(day, int) or not 0 <= day <= 6:
        raise ValueError(f"Day index must be 0..6, got {day!r}")
    return day


@dataclass(frozen=True)
class TimeGeometry:
    """Slot quantization and pixel mapping for one day column."""

    slot_duration_minutes: int = 30
    hour_height: float = 60.0

    def __post_init__(self) -> None:
        if self.slot_duration_minutes <= 0 or MINUTES_PER_DAY % self.slot_duration_minutes:
            raise ValueError(
                f"Slot duration {self.slot_duration_minutes} must divide {MINUTES_PER_DAY}"
            )
        if self.hour_height <= 0:
            raise ValueError("hour_height must be positive")

    @property
    def slot_count(self) -> int:
        return MINUTES_PER_DAY // self.slot_duration_minutes

    @property
    def slot_height(self) -> float:
        return self.hour_height * self.slot_duration_minutes / 60

    @property
    def day_height(self) -> float:
        return self.hour_height * 24

    @property
    def last_slot_start(self) -> int:
        return MINUTES_PER_DAY - self.slot_duration_minutes

    # -- minutes <-> slots -------------------------------------------------

    def slot_starts(self) -> list[int]:
        """Every slot start minute of a day, ascending."""
        return list(range(0, MINUTES_PER_DAY, self.slot_duration_minutes))

    def slot_end(self, start: int) -> int:
        return start + self.slot_duration_minutes

    def is_slot_start(self, minutes: int) -> bool:
        return (
            0 <= minutes < MINUTES_PER_DAY
            and minutes % self.slot_duration_minutes == 0
        )

    def slot_index(self, minutes: int) -> int:
        return minutes // self.slot_duration_minutes

    # -- pixels ------------------------------------------------------------

    def clamp_pixels(self, pixels: float) -> float:
        if pixels is None or math.isnan(pixels):
            return 0.0
        return max(0.0, min(float(pixels), self.day_height))

    def minutes_to_pixels(self, minutes: float) -> float:
        return minutes / 60 * self.hour_height

    def time_to_pixels(self, time: str) -> float:
        return self.minutes_to_pixels(time_to_minutes(time))

    def pixels_to_minutes(self, pixels: float) -> float:
        """Continuous minute offset for a pixel offset (clamped to the day)."""
        return self.clamp_pixels(pixels) / self.hour_height * 60

    def pixels_to_time(self, pixels: float) -> str:
        """Nearest slot start for a pixel offset, never past the last slot."""
        return minutes_to_time(min(self.boundary_at(pixels), self.last_slot_start))

    def snap_to_slot(self, pixels: float) -> float:
        """Round a pixel offset to the nearest slot boundary."""
        return self.minutes_to_pixels(self.boundary_at(pixels))

    def slot_at(self, pixels: float) -> int:
        """Start minute of the slot under the pointer (floor quantization)."""
        index = math.floor(self.clamp_pixels(pixels) / self.slot_height)
        return min(index, self.slot_count - 1) * self.slot_duration_minutes

    def boundary_at(self, pixels: float) -> int:
        """Nearest slot boundary minute, 0..1440 inclusive."""
        index = math.floor(self.clamp_pixels(pixels) / self.slot_height + 0.5)
        return min(index, self.slot_count) * self.slot_duration_minutes
