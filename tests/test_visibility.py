"""
Unit tests for event visibility.

Rules:
- general audience: visible to every student
- department / class audience: exact, case-sensitive match
- lecturers see their own events, administrators see all
- upcoming vs past is decided against a given "now" (strictly after = upcoming)
"""

import unittest
from datetime import timedelta

from eventdesk.model import Audience, AudienceType, Role
from eventdesk.visibility import events_for_viewer, is_visible, partition_by_time

from fakes import NOW, make_event, make_user


class TestIsVisible(unittest.TestCase):
    def test_general_visible_for_any_viewer(self) -> None:
        aud = Audience.general()
        for dept, cls in [("CS", "200lvl"), ("", ""), (None, None)]:
            self.assertTrue(is_visible(aud, dept, cls))

    def test_department_match(self) -> None:
        aud = Audience.department("CS")
        self.assertTrue(is_visible(aud, "CS", "200lvl"))
        self.assertFalse(is_visible(aud, "IT", "200lvl"))

    def test_department_is_case_sensitive(self) -> None:
        self.assertFalse(is_visible(Audience.department("CS"), "cs", None))

    def test_class_match(self) -> None:
        aud = Audience.for_class("CS101")
        self.assertTrue(is_visible(aud, "CS", "CS101"))
        self.assertFalse(is_visible(aud, "CS", "CS102"))

    def test_class_does_not_match_department_field(self) -> None:
        self.assertFalse(is_visible(Audience.for_class("CS"), "CS", "100lvl"))

    def test_unknown_tag_is_hidden(self) -> None:
        aud = Audience("faculty", "Engineering")
        self.assertFalse(is_visible(aud, "Engineering", "Engineering"))

    def test_unresolved_target_is_hidden(self) -> None:
        for kind in (AudienceType.DEPARTMENT, AudienceType.CLASS):
            aud = Audience.unresolved_target(kind)
            self.assertFalse(is_visible(aud, None, None))
            self.assertFalse(is_visible(aud, "CS", "100lvl"))


class TestEventsForViewer(unittest.TestCase):
    def setUp(self) -> None:
        self.events = [
            make_event("e1", creator_id="lect1"),
            make_event("e2", creator_id="lect2", audience=Audience.department("CS")),
            make_event("e3", creator_id="admin", audience=Audience.for_class("200lvl")),
        ]

    def test_admin_sees_everything(self) -> None:
        admin = make_user("admin", Role.ADMIN)
        self.assertEqual([e.id for e in events_for_viewer(self.events, admin)], ["e1", "e2", "e3"])

    def test_lecturer_sees_own_events(self) -> None:
        lect = make_user("lect2", Role.LECTURER)
        self.assertEqual([e.id for e in events_for_viewer(self.events, lect)], ["e2"])

    def test_student_sees_matching_audiences(self) -> None:
        student = make_user("s1", Role.STUDENT, department="IT", class_level="200lvl")
        self.assertEqual([e.id for e in events_for_viewer(self.events, student)], ["e1", "e3"])


class TestPartition(unittest.TestCase):
    def test_every_event_in_exactly_one_bucket(self) -> None:
        events = [make_event(str(d), days=d) for d in range(-3, 4)]
        upcoming, past = partition_by_time(events, now=NOW)

        self.assertEqual(len(upcoming) + len(past), len(events))
        self.assertFalse({e.id for e in upcoming} & {e.id for e in past})
        self.assertTrue(all(e.date > NOW for e in upcoming))
        self.assertTrue(all(e.date <= NOW for e in past))

    def test_event_exactly_now_is_past(self) -> None:
        ev = make_event("now", days=0)
        upcoming, past = partition_by_time([ev], now=NOW)
        self.assertEqual(upcoming, [])
        self.assertEqual(past, [ev])

    def test_moving_now_moves_events(self) -> None:
        ev = make_event("e", days=1)
        self.assertEqual(partition_by_time([ev], now=NOW)[0], [ev])
        self.assertEqual(partition_by_time([ev], now=NOW + timedelta(days=2))[1], [ev])


if __name__ == "__main__":
    unittest.main()
