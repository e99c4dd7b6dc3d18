import unittest
from unittest import mock

import requests
import structlog

from src.availability.config import EditorConfig
from src.availability.editor import EditorSession, SaveOutcome
from src.availability.errors import PermanentError, TransientError
from src.availability.geometry import TimeGeometry
from src.availability.serializer import WeeklyScheduleSerializer
from src.availability.slots import SlotSet
from src.availability.sync import ScheduleSyncClient

MONDAY = 1


def _session(fetched=None) -> tuple[EditorSession, mock.Mock]:
    client = mock.Mock()
    client.fetch_weekly_schedule.return_value = fetched
    client.save_weekly_schedule.return_value = True
    config = EditorConfig(partner_id="p-1", slot_duration_minutes=30, hour_height_px=60)
    return EditorSession(client, config=config), client


class TestEditorLoad(unittest.TestCase):
    def test_no_schedule_gives_blank_editor(self) -> None:
        session, client = _session(None)
        self.assertTrue(session.load().is_empty())
        client.fetch_weekly_schedule.assert_called_once_with("p-1")
        self.assertFalse(session.has_unsaved_changes)
        self.assertEqual(session.active_days(), 0)

    def test_fetch_failure_gives_blank_editor(self) -> None:
        session, client = _session()
        client.fetch_weekly_schedule.side_effect = TransientError("down")
        self.assertTrue(session.load().is_empty())

    def test_load_hydrates_slots_and_metadata(self) -> None:
        stored = WeeklyScheduleSerializer(TimeGeometry(30)).save(
            SlotSet.from_times({MONDAY: ["09:00", "09:30"], 3: ["14:00"]}),
            "p-1",
            buffer_time_minutes=20,
            max_advance_booking_days=7,
        )
        session, _ = _session(stored)
        session.load()
        self.assertEqual([str(b) for b in session.blocks(MONDAY)], ["09:00-10:00"])
        self.assertEqual(session.active_days(), 2)
        self.assertEqual(session.buffer_time_minutes, 20)
        self.assertEqual(session.max_advance_booking_days, 7)

    def test_columns_follow_week_start(self) -> None:
        session, _ = _session()
        self.assertEqual(session.columns()[0], 1)


class TestEditorEditing(unittest.TestCase):
    def test_drag_marks_unsaved_and_updates_blocks(self) -> None:
        session, _ = _session()
        session.load()
        session.pointer_down(MONDAY, 545)
        session.pointer_move(MONDAY, 630)
        self.assertFalse(session.has_unsaved_changes)
        commit = session.pointer_up(MONDAY, 630)

        self.assertTrue(commit.has_changes)
        self.assertTrue(session.has_unsaved_changes)
        self.assertEqual([str(b) for b in session.all_blocks()[MONDAY]], ["09:00-10:30"])

    def test_aborted_drag_changes_nothing(self) -> None:
        session, _ = _session()
        session.load()
        session.pointer_down(MONDAY, 545)
        session.pointer_leave(MONDAY)
        self.assertIsNone(session.pointer_up(MONDAY, 630))
        self.assertFalse(session.has_unsaved_changes)

    def test_metadata_setters(self) -> None:
        session, _ = _session()
        session.set_buffer_time(15)  # unchanged default
        self.assertFalse(session.has_unsaved_changes)
        session.set_max_advance_booking_days(7)
        self.assertTrue(session.has_unsaved_changes)
        with self.assertRaises(ValueError):
            session.set_buffer_time(-5)

    def test_replace_and_discard(self) -> None:
        session, _ = _session()
        replacement = SlotSet.from_times({2: ["08:00"]})
        session.replace(replacement)
        self.assertTrue(session.has_unsaved_changes)
        self.assertEqual(session.slot_set.times(2), ["08:00"])
        self.assertIsNot(session.slot_set, replacement)

        session.discard()
        self.assertTrue(session.slot_set.is_empty())
        self.assertFalse(session.has_unsaved_changes)

        with self.assertRaises(ValueError):
            session.replace(SlotSet(60))


class TestEditorSave(unittest.TestCase):
    def _dirty_session(self):
        session, client = _session()
        session.load()
        session.pointer_down(MONDAY, 545)
        session.pointer_up(MONDAY, 630)
        return session, client

    def test_successful_save_clears_unsaved_flag(self) -> None:
        session, client = self._dirty_session()
        self.assertEqual(session.save(), SaveOutcome.SAVED)
        self.assertFalse(session.has_unsaved_changes)

        partner_id, schedule = client.save_weekly_schedule.call_args.args
        self.assertEqual(partner_id, "p-1")
        self.assertEqual(len(schedule.schedule), 7)
        self.assertTrue(schedule.schedule[MONDAY].is_enabled)
        self.assertEqual(sum(len(d.slots) for d in schedule.schedule), 7 * 48)

    def test_failed_save_keeps_edits(self) -> None:
        session, client = self._dirty_session()
        before = session.slot_set.copy()
        client.save_weekly_schedule.side_effect = PermanentError("rejected")

        self.assertEqual(session.save(), SaveOutcome.FAILED)
        self.assertTrue(session.has_unsaved_changes)
        self.assertEqual(session.slot_set, before)
        self.assertFalse(session.is_saving)

        # retry succeeds
        client.save_weekly_schedule.side_effect = None
        self.assertEqual(session.save(), SaveOutcome.SAVED)
        self.assertFalse(session.has_unsaved_changes)

    def test_second_save_while_in_flight_is_refused(self) -> None:
        session, client = self._dirty_session()

        def nested_save(partner_id, schedule):
            self.assertTrue(session.is_saving)
            self.assertEqual(session.save(), SaveOutcome.BUSY)
            return True

        client.save_weekly_schedule.side_effect = nested_save
        self.assertEqual(session.save(), SaveOutcome.SAVED)
        self.assertEqual(client.save_weekly_schedule.call_count, 1)

    def test_edits_during_save_stay_unsaved(self) -> None:
        session, client = self._dirty_session()

        def edit_while_saving(partner_id, schedule):
            session.pointer_down(MONDAY, 725)
            session.pointer_up(MONDAY, 725)
            return True

        client.save_weekly_schedule.side_effect = edit_while_saving
        self.assertEqual(session.save(), SaveOutcome.SAVED)
        self.assertTrue(session.has_unsaved_changes)

    def test_log_context_carries_partner(self) -> None:
        session, client = self._dirty_session()
        seen = {}

        def record_context(partner_id, schedule):
            seen.update(structlog.contextvars.get_contextvars())
            return True

        client.save_weekly_schedule.side_effect = record_context
        session.save()
        self.assertEqual(seen["partner_id"], "p-1")
        self.assertEqual(seen["action"], "save")
        self.assertNotIn("partner_id", structlog.contextvars.get_contextvars())


class TestEditorOverHttpClient(unittest.TestCase):
    """EditorSession with a real ScheduleSyncClient and a stubbed HTTP session."""

    def setUp(self) -> None:
        self.http = mock.MagicMock()
        self.http.headers = {}
        client = ScheduleSyncClient(
            base_url="https://api.example.com/api",
            token="t",
            retry_attempts=2,
            retry_wait=0,
            session=self.http,
        )
        config = EditorConfig(partner_id="p-1", slot_duration_minutes=30, hour_height_px=60)
        self.session = EditorSession(client, config=config)

    def test_transport_error_on_save_fails_and_keeps_edits(self) -> None:
        self.session.replace(SlotSet.from_times({MONDAY: ["09:00"]}))
        before = self.session.slot_set.copy()
        self.http.request.side_effect = requests.exceptions.ChunkedEncodingError("cut")

        self.assertEqual(self.session.save(), SaveOutcome.FAILED)
        self.assertTrue(self.session.has_unsaved_changes)
        self.assertEqual(self.session.slot_set, before)
        self.assertFalse(self.session.is_saving)
        self.assertEqual(self.http.request.call_count, 2)

    def test_transport_error_on_load_gives_blank_editor(self) -> None:
        self.http.request.side_effect = requests.exceptions.TooManyRedirects("loop")
        self.assertTrue(self.session.load().is_empty())
        self.assertFalse(self.session.has_unsaved_changes)

    def test_invalid_url_on_save_fails_without_retry(self) -> None:
        self.http.request.side_effect = requests.exceptions.InvalidURL("bad host")
        self.assertEqual(self.session.save(), SaveOutcome.FAILED)
        self.assertEqual(self.http.request.call_count, 1)

    def test_partly_invalid_payload_loads_valid_days(self) -> None:
        wire = WeeklyScheduleSerializer(TimeGeometry(30)).save(
            SlotSet.from_times({MONDAY: ["09:00", "09:30"]}), "p-1"
        ).to_wire()
        wire["schedule"].append({"dayOfWeek": 7, "slots": []})
        response = mock.Mock(status_code=200)
        response.json.return_value = {"status": "success", "data": wire}
        self.http.request.return_value = response

        self.session.load()
        self.assertEqual([str(b) for b in self.session.blocks(MONDAY)], ["09:00-10:00"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
