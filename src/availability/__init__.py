"""Weekly availability editor for car-wash partners.

Converts between pixel positions on a weekly grid, per-day sets of available
slots, and the exhaustive WeeklySchedule persisted by the partner API.
"""

from src.availability.blocks import expand, merge, merge_day
from src.availability.drag import DragMode, DragSelectionController, Dragging, Idle
from src.availability.editor import EditorSession, SaveOutcome
from src.availability.geometry import TimeGeometry, minutes_to_time, time_to_minutes
from src.availability.models import AvailabilityBlock, WeeklySchedule
from src.availability.serializer import WeeklyScheduleSerializer
from src.availability.slots import SlotSet
from src.availability.sync import ScheduleSyncClient

__all__ = [
    "AvailabilityBlock",
    "DragMode",
    "DragSelectionController",
    "Dragging",
    "EditorSession",
    "Idle",
    "SaveOutcome",
    "ScheduleSyncClient",
    "SlotSet",
    "TimeGeometry",
    "WeeklySchedule",
    "WeeklyScheduleSerializer",
    "expand",
    "merge",
    "merge_day",
    "minutes_to_time",
    "time_to_minutes",
]
