"""Merge slot sets into display blocks and expand blocks back into slots.

Blocks and slot sets are two views of the same data: ``expand(merge(s)) == s``
for every SlotSet ``s``. Merging never crosses a day boundary.
"""

from collections.abc import Iterable

from src.availability.geometry import MINUTES_PER_DAY, minutes_to_time
from src.availability.models import AvailabilityBlock
from src.availability.slots import DAYS_IN_WEEK, SlotSet


def merge_day(
    day: int, starts: Iterable[int], slot_duration_minutes: int
) -> list[AvailabilityBlock]:
    """Collapse one day's slot starts into sorted, non-overlapping blocks.

    Args:
        day: Day index the blocks belong to.
        starts: Available slot start minutes (any order, duplicates ignored).
        slot_duration_minutes: Slot length used to compute each slot's end.

    Returns:
        Blocks sorted by start time. Each block is a maximal contiguous run.
    """
    runs: list[list[int]] = []
    for start in sorted(set(starts)):
        end = start + slot_duration_minutes
        # A gap opens a new block; a touching slot extends the current one
        if runs and runs[-1][1] == start:
            runs[-1][1] = end
        else:
            runs.append([start, end])

    return [
        AvailabilityBlock(
            day_index=day,
            start_time=minutes_to_time(start),
            end_time=minutes_to_time(end),
        )
        for start, end in runs
    ]


def merge(slot_set: SlotSet) -> dict[int, list[AvailabilityBlock]]:
    """Blocks for every day of the week, keyed by day index."""
    return {
        day: merge_day(day, starts, slot_set.slot_duration_minutes)
        for day, starts in slot_set
    }


def expand_range(start: int, end: int, slot_duration_minutes: int) -> list[int]:
    """Slot starts whose slot begins inside ``[start, end)``.

    The range is clamped to the day and aligned up to the next slot boundary.
    """
    start = max(0, start)
    end = min(end, MINUTES_PER_DAY)
    first = -(-start // slot_duration_minutes) * slot_duration_minutes
    return list(range(first, end, slot_duration_minutes))


def expand(
    blocks: Iterable[AvailabilityBlock], slot_duration_minutes: int = 30
) -> SlotSet:
    """Inverse of :func:`merge`: turn blocks back into a SlotSet."""
    slot_set = SlotSet(slot_duration_minutes)
    for block in blocks:
        for start in expand_range(
            block.start_minutes, block.end_minutes, slot_duration_minutes
        ):
            slot_set.add(block.day_index, start)
    return slot_set


def flatten(blocks_by_day: dict[int, list[AvailabilityBlock]]) -> list[AvailabilityBlock]:
    """All blocks of a week in day order, then start order."""
    return [
        block
        for day in range(DAYS_IN_WEEK)
        for block in blocks_by_day.get(day, [])
    ]
