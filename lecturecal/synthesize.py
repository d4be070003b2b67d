"""
Calendar synthesis.

Wraps one timetable slice (the ordered lecture events of a course year)
into a CalendarDocument with a readable name and description.
"""

from __future__ import annotations

from typing import Iterable

from lecturecal.model import CalendarDocument, Course, Event


def calendar_name(course: Course, year: int) -> str:
    return f"{course.title} - {year} year"


def calendar_description(course: Course, year: int) -> str:
    return f"Lecture schedule for year {year} of the course {course.title}"


def build_calendar(events: Iterable[Event], course: Course, year: int) -> CalendarDocument:
    """
    Build the calendar document for one course year.

    Events keep the order (and duplicates) the timetable source returned.
    """
    return CalendarDocument(
        name=calendar_name(course, year),
        description=calendar_description(course, year),
        events=tuple(events),
    )
