import unittest

from fakes import COURSE_42, two_events

from lecturecal.synthesize import build_calendar


class TestBuildCalendar(unittest.TestCase):
    def test_name_and_description(self) -> None:
        doc = build_calendar(two_events(), COURSE_42, 1)
        self.assertEqual(doc.name, "Computer Engineering - 1 year")
        self.assertEqual(doc.description, "Lecture schedule for year 1 of the course Computer Engineering")

    def test_events_are_kept_verbatim(self) -> None:
        events = two_events()
        # duplicates and order come straight from the source
        events.append(events[0])
        doc = build_calendar(events, COURSE_42, 2)
        self.assertEqual(list(doc.events), events)

    def test_is_deterministic(self) -> None:
        self.assertEqual(build_calendar(two_events(), COURSE_42, 3), build_calendar(two_events(), COURSE_42, 3))


if __name__ == "__main__":
    unittest.main()
