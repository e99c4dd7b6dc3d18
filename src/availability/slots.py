"""Per-day sets of available slot start times."""

from collections.abc import Iterable, Iterator, Mapping

from src.availability.geometry import (
    TimeGeometry,
    check_day,
    minutes_to_time,
    time_to_minutes,
)

DAYS_IN_WEEK = 7


class SlotSet:
    """Seven independent sets of available slot starts, one per weekday.

    A slot is identified by ``(day, start)`` where ``start`` is a minute offset
    on a slot boundary. ``"HH:MM"`` strings are accepted anywhere a start is
    expected and canonicalised to minutes.
    """

    def __init__(self, slot_duration_minutes: int = 30) -> None:
        self.geometry = TimeGeometry(slot_duration_minutes=slot_duration_minutes)
        self._days: list[set[int]] = [set() for _ in range(DAYS_IN_WEEK)]

    @classmethod
    def from_times(
        cls,
        times: Mapping[int, Iterable[str | int]],
        slot_duration_minutes: int = 30,
    ) -> "SlotSet":
        """Build a SlotSet from ``{day: ["09:00", ...]}``."""
        slot_set = cls(slot_duration_minutes)
        for day, starts in times.items():
            for start in starts:
                slot_set.add(day, start)
        return slot_set

    @property
    def slot_duration_minutes(self) -> int:
        return self.geometry.slot_duration_minutes

    def _start(self, start: str | float) -> int:
        if isinstance(start, str):
            minutes = time_to_minutes(start)
        elif isinstance(start, (int, float)) and not isinstance(start, bool):
            # 540.0 is stored as 540; 540.5 is not a minute offset
            if not float(start).is_integer():
                raise ValueError(f"{start!r} is not a whole number of minutes")
            minutes = int(start)
        else:
            raise ValueError(f"{start!r} is not a slot start")
        if not self.geometry.is_slot_start(minutes):
            raise ValueError(
                f"{start!r} is not a {self.slot_duration_minutes}-minute slot start"
            )
        return minutes

    def add(self, day: int, start: str | int) -> bool:
        """Mark a slot available. Returns True if it was not already."""
        starts = self._days[check_day(day)]
        minutes = self._start(start)
        if minutes in starts:
            return False
        starts.add(minutes)
        return True

    def discard(self, day: int, start: str | int) -> bool:
        """Mark a slot unavailable. Returns True if it was available."""
        starts = self._days[check_day(day)]
        minutes = self._start(start)
        if minutes not in starts:
            return False
        starts.remove(minutes)
        return True

    def has(self, day: int, start: str | int) -> bool:
        return self._start(start) in self._days[check_day(day)]

    def __contains__(self, item: tuple[int, str | int]) -> bool:
        day, start = item
        return self.has(day, start)

    def day(self, day: int) -> frozenset[int]:
        return frozenset(self._days[check_day(day)])

    def times(self, day: int) -> list[str]:
        """Sorted ``"HH:MM"`` starts for one day."""
        return [minutes_to_time(m) for m in sorted(self._days[check_day(day)])]

    def replace_day(self, day: int, starts: Iterable[str | int]) -> None:
        self._days[check_day(day)] = {self._start(s) for s in starts}

    def size(self, day: int) -> int:
        return len(self._days[check_day(day)])

    def is_enabled(self, day: int) -> bool:
        return self.size(day) > 0

    def total(self) -> int:
        return sum(len(starts) for starts in self._days)

    def is_empty(self) -> bool:
        return self.total() == 0

    def clear(self) -> None:
        for starts in self._days:
            starts.clear()

    def copy(self) -> "SlotSet":
        clone = SlotSet(self.slot_duration_minutes)
        clone._days = [set(starts) for starts in self._days]
        return clone

    def __iter__(self) -> Iterator[tuple[int, frozenset[int]]]:
        for day in range(DAYS_IN_WEEK):
            yield day, frozenset(self._days[day])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlotSet):
            return NotImplemented
        return (
            self.slot_duration_minutes == other.slot_duration_minutes
            and self._days == other._days
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        days = {day: self.times(day) for day in range(DAYS_IN_WEEK) if self._days[day]}
        return f"SlotSet(slot_duration_minutes={self.slot_duration_minutes}, {days})"
