import unittest

from src.availability.blocks import merge
from src.availability.drag import DragMode, DragSelectionController, Dragging, Idle
from src.availability.geometry import TimeGeometry
from src.availability.slots import SlotSet

MONDAY = 1
TUESDAY = 2


def y(time: str) -> float:
    """Pixel offset of a time line at 60px per hour."""
    hours, minutes = (int(p) for p in time.split(":"))
    return hours * 60 + minutes


class TestDragAdd(unittest.TestCase):
    def setUp(self) -> None:
        self.slots = SlotSet(30)
        self.ctl = DragSelectionController(self.slots, TimeGeometry(30, 60))

    def test_drag_from_nine_to_half_past_ten_adds_three_slots(self) -> None:
        state = self.ctl.pointer_down(MONDAY, y("09:00") + 5)
        self.assertIsInstance(state, Dragging)
        self.assertEqual(state.mode, DragMode.ADD)
        self.assertEqual(state.anchor_slot, 540)

        self.ctl.pointer_move(MONDAY, y("10:00"))
        self.ctl.pointer_move(MONDAY, y("10:30"))
        commit = self.ctl.pointer_up(MONDAY, y("10:30"))

        self.assertIsInstance(self.ctl.state, Idle)
        self.assertEqual(commit.mode, DragMode.ADD)
        self.assertEqual(commit.changed, (540, 570, 600))
        self.assertEqual(self.slots.times(MONDAY), ["09:00", "09:30", "10:00"])
        self.assertEqual([str(b) for b in merge(self.slots)[MONDAY]], ["09:00-10:30"])
        for day in range(7):
            if day != MONDAY:
                self.assertEqual(self.slots.size(day), 0)

    def test_moves_do_not_mutate_until_release(self) -> None:
        self.ctl.pointer_down(MONDAY, y("09:00"))
        self.ctl.pointer_move(MONDAY, y("12:00"))
        self.assertTrue(self.slots.is_empty())
        self.assertEqual(self.ctl.pending_range(), (MONDAY, DragMode.ADD, "09:00", "12:00"))
        self.ctl.pointer_up(MONDAY)
        self.assertEqual(self.slots.size(MONDAY), 6)

    def test_click_without_moving_toggles_one_slot(self) -> None:
        self.ctl.pointer_down(MONDAY, y("14:10"))
        commit = self.ctl.pointer_up(MONDAY, y("14:10"))
        self.assertEqual(commit.starts, (840,))
        self.assertEqual(self.slots.times(MONDAY), ["14:00"])

        # clicking the same slot again removes it
        self.ctl.pointer_down(MONDAY, y("14:20"))
        commit = self.ctl.pointer_up(MONDAY, y("14:20"))
        self.assertEqual(commit.mode, DragMode.REMOVE)
        self.assertTrue(self.slots.is_empty())

    def test_upward_drag_includes_anchor_slot(self) -> None:
        self.ctl.pointer_down(MONDAY, y("11:10"))
        commit = self.ctl.pointer_up(MONDAY, y("10:00"))
        self.assertEqual(commit.starts, (600, 630, 660))
        self.assertEqual(self.slots.times(MONDAY), ["10:00", "10:30", "11:00"])

    def test_drag_past_column_edges_is_clamped(self) -> None:
        self.ctl.pointer_down(MONDAY, y("23:00"))
        self.ctl.pointer_move(MONDAY, 5000)
        commit = self.ctl.pointer_up(MONDAY)
        self.assertEqual(commit.starts, (1380, 1410))

        self.ctl.pointer_down(TUESDAY, y("00:40"))
        commit = self.ctl.pointer_up(TUESDAY, -200)
        self.assertEqual(commit.starts, (0, 30))

    def test_range_mixing_available_and_unavailable_fills_gaps(self) -> None:
        self.slots.add(MONDAY, "10:00")
        self.ctl.pointer_down(MONDAY, y("09:00"))
        commit = self.ctl.pointer_up(MONDAY, y("11:00"))
        self.assertEqual(commit.mode, DragMode.ADD)
        self.assertEqual(commit.starts, (540, 570, 600, 630))
        self.assertEqual(commit.changed, (540, 570, 630))
        self.assertEqual([str(b) for b in merge(self.slots)[MONDAY]], ["09:00-11:00"])


class TestDragRemove(unittest.TestCase):
    def test_drag_starting_on_available_slot_removes_range(self) -> None:
        slots = SlotSet.from_times({MONDAY: ["09:00", "09:30", "10:00", "11:00"]})
        ctl = DragSelectionController(slots)

        state = ctl.pointer_down(MONDAY, y("09:00") + 5)
        self.assertEqual(state.mode, DragMode.REMOVE)
        ctl.pointer_move(MONDAY, y("10:25"))
        commit = ctl.pointer_up(MONDAY, y("10:25"))

        self.assertEqual(commit.changed, (540, 570, 600))
        self.assertEqual(slots.times(MONDAY), ["11:00"])
        self.assertEqual([str(b) for b in merge(slots)[MONDAY]], ["11:00-11:30"])


class TestDragLifecycle(unittest.TestCase):
    def setUp(self) -> None:
        self.slots = SlotSet(30)
        self.ctl = DragSelectionController(self.slots)

    def test_leave_aborts_without_commit(self) -> None:
        self.ctl.pointer_down(MONDAY, y("09:00"))
        self.ctl.pointer_move(MONDAY, y("12:00"))
        self.assertIsInstance(self.ctl.pointer_leave(MONDAY), Idle)
        self.assertTrue(self.slots.is_empty())

    def test_reentering_column_does_not_resume(self) -> None:
        self.ctl.pointer_down(MONDAY, y("09:00"))
        self.ctl.pointer_leave(MONDAY)
        self.ctl.pointer_move(MONDAY, y("11:00"))
        self.assertIsNone(self.ctl.pointer_up(MONDAY, y("11:00")))
        self.assertTrue(self.slots.is_empty())

    def test_leaving_another_column_is_ignored(self) -> None:
        self.ctl.pointer_down(MONDAY, y("09:00"))
        self.ctl.pointer_leave(TUESDAY)
        self.assertTrue(self.ctl.is_dragging)

    def test_moves_over_other_days_are_ignored(self) -> None:
        self.ctl.pointer_down(MONDAY, y("09:00"))
        self.ctl.pointer_move(MONDAY, y("10:00"))
        self.ctl.pointer_move(TUESDAY, y("15:00"))
        self.assertEqual(self.ctl.state.current_slot, 570)

        # release over Tuesday commits Monday's last position only
        commit = self.ctl.pointer_up(TUESDAY, y("15:00"))
        self.assertEqual(commit.day, MONDAY)
        self.assertEqual(self.slots.times(MONDAY), ["09:00", "09:30"])
        self.assertEqual(self.slots.size(TUESDAY), 0)

    def test_single_active_session(self) -> None:
        first = self.ctl.pointer_down(MONDAY, y("09:00"))
        second = self.ctl.pointer_down(TUESDAY, y("15:00"))
        self.assertIs(first, second)
        self.assertEqual(self.ctl.state.day, MONDAY)

    def test_release_while_idle_is_a_no_op(self) -> None:
        self.assertIsNone(self.ctl.pointer_up(MONDAY, y("09:00")))
        self.assertIsNone(self.ctl.pending_range())

    def test_cancel(self) -> None:
        self.ctl.pointer_down(MONDAY, y("09:00"))
        self.ctl.cancel()
        self.assertFalse(self.ctl.is_dragging)
        self.assertIsNone(self.ctl.pointer_up(MONDAY))

    def test_geometry_must_match_slot_set(self) -> None:
        with self.assertRaises(ValueError):
            DragSelectionController(SlotSet(30), TimeGeometry(15))


if __name__ == "__main__":
    unittest.main(verbosity=2)
