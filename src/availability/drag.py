"""Drag-to-toggle selection on a day column.

The controller is an explicit two-state machine::

    Idle --pointer_down--> Dragging --pointer_move--> Dragging
    Dragging --pointer_up--> Idle      (commit)
    Dragging --pointer_leave--> Idle   (abort, nothing written)

The add/remove mode is fixed at pointer-down from the anchor slot's state.
The SlotSet is only touched on commit, and every slot in the dragged range is
updated in one step.

Leaving the anchor column always cancels. Re-entering the column before
releasing does not resume the drag: the controller is already Idle, so the
following moves and the release are ignored.
"""

from dataclasses import dataclass
from enum import Enum

from src.availability.geometry import TimeGeometry, check_day, minutes_to_time
from src.availability.logging import get_logger
from src.availability.slots import SlotSet

log = get_logger(__name__)


class DragMode(str, Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    day: int
    anchor_slot: int  # start minute of the slot under pointer-down
    mode: DragMode
    current_slot: int  # start minute of the last slot reached

    @property
    def first_slot(self) -> int:
        return min(self.anchor_slot, self.current_slot)

    @property
    def last_slot(self) -> int:
        return max(self.anchor_slot, self.current_slot)


DragState = Idle | Dragging

IDLE = Idle()


@dataclass(frozen=True)
class DragCommit:
    """Result of a committed drag."""

    day: int
    mode: DragMode
    starts: tuple[int, ...]  # every slot start in the dragged range
    changed: tuple[int, ...]  # the subset whose availability actually flipped

    @property
    def has_changes(self) -> bool:
        return bool(self.changed)


class DragSelectionController:
    """Turns pointer events on day columns into batched SlotSet toggles.

    Pointer ``y`` values are pixel offsets from the top of the day column;
    anything outside the column is clamped by the geometry.
    """

    def __init__(self, slot_set: SlotSet, geometry: TimeGeometry | None = None) -> None:
        self.slot_set = slot_set
        self.geometry = geometry or slot_set.geometry
        if self.geometry.slot_duration_minutes != slot_set.slot_duration_minutes:
            raise ValueError("Geometry and SlotSet use different slot durations")
        self.state: DragState = IDLE

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def _current_from(self, anchor: int, y: float) -> int:
        # The moving edge snaps to the nearest boundary; the covered slot is
        # the one just inside that boundary, on the anchor's side.
        boundary = self.geometry.boundary_at(y)
        if boundary > anchor:
            return boundary - self.geometry.slot_duration_minutes
        return min(boundary, self.geometry.last_slot_start)

    def pointer_down(self, day: int, y: float) -> DragState:
        check_day(day)
        if isinstance(self.state, Dragging):
            log.debug("drag_ignored", reason="already_dragging", day=day)
            return self.state

        anchor = self.geometry.slot_at(y)
        mode = DragMode.REMOVE if self.slot_set.has(day, anchor) else DragMode.ADD
        self.state = Dragging(day=day, anchor_slot=anchor, mode=mode, current_slot=anchor)
        log.debug(
            "drag_started",
            day=day,
            anchor=minutes_to_time(anchor),
            mode=mode.value,
        )
        return self.state

    def pointer_move(self, day: int, y: float) -> DragState:
        state = self.state
        if not isinstance(state, Dragging) or day != state.day:
            return state
        current = self._current_from(state.anchor_slot, y)
        if current != state.current_slot:
            self.state = Dragging(
                day=state.day,
                anchor_slot=state.anchor_slot,
                mode=state.mode,
                current_slot=current,
            )
        return self.state

    def pointer_up(self, day: int, y: float | None = None) -> DragCommit | None:
        """Commit the drag and return to Idle.

        A release over another day keeps the last position reached on the
        anchor day. Returns None when no drag was active.
        """
        state = self.state
        if not isinstance(state, Dragging):
            return None
        if day == state.day and y is not None:
            state = self.pointer_move(day, y)

        step = self.geometry.slot_duration_minutes
        starts = tuple(range(state.first_slot, state.last_slot + step, step))
        if state.mode is DragMode.ADD:
            changed = tuple(s for s in starts if self.slot_set.add(state.day, s))
        else:
            changed = tuple(s for s in starts if self.slot_set.discard(state.day, s))

        self.state = IDLE
        log.info(
            "drag_committed",
            day=state.day,
            mode=state.mode.value,
            start=minutes_to_time(state.first_slot),
            end=minutes_to_time(state.last_slot + step),
            changed=len(changed),
        )
        return DragCommit(day=state.day, mode=state.mode, starts=starts, changed=changed)

    def pointer_leave(self, day: int) -> DragState:
        """Abort the drag when the pointer leaves the anchor column."""
        state = self.state
        if isinstance(state, Dragging) and day == state.day:
            log.debug("drag_aborted", day=day, reason="pointer_left_column")
            self.state = IDLE
        return self.state

    def cancel(self) -> None:
        if isinstance(self.state, Dragging):
            log.debug("drag_aborted", day=self.state.day, reason="cancelled")
        self.state = IDLE

    def pending_range(self) -> tuple[int, DragMode, str, str] | None:
        """``(day, mode, start, end)`` of the range a release would commit."""
        state = self.state
        if not isinstance(state, Dragging):
            return None
        end = state.last_slot + self.geometry.slot_duration_minutes
        return state.day, state.mode, minutes_to_time(state.first_slot), minutes_to_time(end)
