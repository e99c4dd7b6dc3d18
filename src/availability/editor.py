"""One partner's weekly availability editing session.

EditorSession owns the in-memory SlotSet and wires the pieces together:

    fetch -> serializer.load -> SlotSet -> merge -> blocks
    pointer events -> DragSelectionController -> SlotSet
    save -> serializer.save -> ScheduleSyncClient

Saves are full-replace writes, so at most one may be in flight. A second
save while one is running returns ``SaveOutcome.BUSY`` without touching the
network.
"""

import threading
from enum import Enum

from src.availability.blocks import merge, merge_day
from src.availability.config import EditorConfig, get_config
from src.availability.drag import DragCommit, DragSelectionController, DragState
from src.availability.errors import ScheduleSyncError
from src.availability.geometry import TimeGeometry, check_day, day_order
from src.availability.logging import get_logger, partner_context
from src.availability.models import AvailabilityBlock, WeeklySchedule
from src.availability.serializer import WeeklyScheduleSerializer
from src.availability.slots import SlotSet
from src.availability.sync import ScheduleSyncClient

logger = get_logger(__name__)


class SaveOutcome(str, Enum):
    SAVED = "saved"
    FAILED = "failed"
    BUSY = "busy"


class EditorSession:
    """Weekly availability editor for a single partner."""

    def __init__(
        self,
        client: ScheduleSyncClient,
        partner_id: str | None = None,
        config: EditorConfig | None = None,
    ) -> None:
        self.config = config or get_config()
        self.client = client
        self.partner_id = partner_id or self.config.partner_id
        self.geometry = TimeGeometry(
            slot_duration_minutes=self.config.slot_duration_minutes,
            hour_height=self.config.hour_height_px,
        )
        self.serializer = WeeklyScheduleSerializer(self.geometry)
        self.buffer_time_minutes = self.config.buffer_time_minutes
        self.max_advance_booking_days = self.config.max_advance_booking_days

        self._reset(SlotSet(self.geometry.slot_duration_minutes))
        self._save_lock = threading.Lock()

    def _reset(self, slot_set: SlotSet) -> None:
        self.slot_set = slot_set
        self.controller = DragSelectionController(slot_set, self.geometry)
        self._revision = 0
        self._saved_revision = 0

    def _touch(self) -> None:
        self._revision += 1

    # -- loading -----------------------------------------------------------

    def load(self) -> SlotSet:
        """Replace the session state with the persisted schedule.

        A missing schedule, a malformed one, or a failed fetch all give an
        empty editor; loading never raises a sync error.
        """
        with partner_context(self.partner_id, action="load"):
            return self._load()

    def _load(self) -> SlotSet:
        try:
            schedule = self.client.fetch_weekly_schedule(self.partner_id)
        except ScheduleSyncError as e:
            logger.warning(
                "schedule_load_failed",
                error=str(e),
                type=type(e).__name__,
            )
            schedule = None

        self._reset(self.serializer.load(schedule))
        if schedule is not None:
            self.buffer_time_minutes = schedule.buffer_time_minutes
            self.max_advance_booking_days = schedule.max_advance_booking_days

        logger.info(
            "editor_loaded",
            active_days=self.active_days(),
            available_slots=self.slot_set.total(),
        )
        return self.slot_set

    def replace(self, slot_set: SlotSet) -> None:
        """Swap in a whole new week of availability as an unsaved edit."""
        if slot_set.slot_duration_minutes != self.geometry.slot_duration_minutes:
            raise ValueError("SlotSet slot duration does not match the editor grid")
        self.controller.cancel()
        revision = self._revision
        saved = self._saved_revision
        self._reset(slot_set.copy())
        self._revision, self._saved_revision = revision + 1, saved

    def discard(self) -> None:
        """Drop unsaved edits and start from an empty week."""
        self.controller.cancel()
        self._reset(SlotSet(self.geometry.slot_duration_minutes))
        logger.info("editor_discarded", partner_id=self.partner_id)

    # -- pointer events ----------------------------------------------------

    @property
    def drag_state(self) -> DragState:
        return self.controller.state

    def pointer_down(self, day: int, y: float) -> DragState:
        return self.controller.pointer_down(day, y)

    def pointer_move(self, day: int, y: float) -> DragState:
        return self.controller.pointer_move(day, y)

    def pointer_up(self, day: int, y: float | None = None) -> DragCommit | None:
        commit = self.controller.pointer_up(day, y)
        if commit is not None and commit.has_changes:
            self._touch()
        return commit

    def pointer_leave(self, day: int) -> DragState:
        return self.controller.pointer_leave(day)

    # -- derived views -----------------------------------------------------

    def blocks(self, day: int) -> list[AvailabilityBlock]:
        check_day(day)
        return merge_day(
            day, self.slot_set.day(day), self.geometry.slot_duration_minutes
        )

    def all_blocks(self) -> dict[int, list[AvailabilityBlock]]:
        return merge(self.slot_set)

    def columns(self) -> list[int]:
        """Day indices in display order for the configured week start."""
        return day_order(self.config.week_start)

    def active_days(self) -> int:
        return sum(1 for day, starts in self.slot_set if starts)

    # -- metadata ----------------------------------------------------------

    def set_buffer_time(self, minutes: int) -> None:
        if minutes < 0:
            raise ValueError("Buffer time cannot be negative")
        if minutes != self.buffer_time_minutes:
            self.buffer_time_minutes = minutes
            self._touch()

    def set_max_advance_booking_days(self, days: int) -> None:
        if days < 0:
            raise ValueError("Advance booking days cannot be negative")
        if days != self.max_advance_booking_days:
            self.max_advance_booking_days = days
            self._touch()

    # -- saving ------------------------------------------------------------

    @property
    def has_unsaved_changes(self) -> bool:
        return self._revision != self._saved_revision

    @property
    def is_saving(self) -> bool:
        return self._save_lock.locked()

    def to_schedule(self) -> WeeklySchedule:
        return self.serializer.save(
            self.slot_set,
            self.partner_id,
            buffer_time_minutes=self.buffer_time_minutes,
            max_advance_booking_days=self.max_advance_booking_days,
        )

    def save(self) -> SaveOutcome:
        """Persist the current week as a full replace.

        On failure the SlotSet and the unsaved flag are left as they were so
        the user can retry.
        """
        with partner_context(self.partner_id, action="save"):
            if not self._save_lock.acquire(blocking=False):
                logger.info("schedule_save_skipped", reason="in_flight")
                return SaveOutcome.BUSY
            try:
                return self._save()
            finally:
                self._save_lock.release()

    def _save(self) -> SaveOutcome:
        revision = self._revision
        schedule = self.to_schedule()
        try:
            self.client.save_weekly_schedule(self.partner_id, schedule)
        except ScheduleSyncError as e:
            logger.error(
                "schedule_save_failed",
                error=str(e),
                type=type(e).__name__,
            )
            return SaveOutcome.FAILED

        # Edits made while the request was in flight stay unsaved
        self._saved_revision = revision
        logger.info(
            "schedule_save_succeeded",
            pending_changes=self.has_unsaved_changes,
        )
        return SaveOutcome.SAVED
