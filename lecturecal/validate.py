"""
Request validation.

Turns the raw path/query values of a calendar request into a typed
CalendarRequest, or raises InvalidInput / NotFound.

Checks run in this order:
    course id parses -> course exists -> year parses -> 1 <= year <= duration
so an unknown course is reported as NotFound whatever year was asked for.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from lecturecal.courses import CourseDirectory
from lecturecal.errors import InvalidInput, NotFound
from lecturecal.model import Course

_INT_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class CalendarRequest:
    course: Course
    year: int
    curriculum: Optional[str]

    @property
    def cache_key(self) -> str:
        """
        Fingerprint of the request, e.g. '42-1-' or '42-1-A58-000'.

        The curriculum token is used verbatim (no case folding, no stripping).
        """
        return f"{self.course.course_id}-{self.year}-{self.curriculum or ''}"


def _parse_int(text: object) -> int:
    raw = str(text if text is not None else "")
    # int() alone would also accept '+3', ' 3' and '3_0'
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"Not a base-10 integer: {raw!r}")
    return int(raw, 10)


def normalize_curriculum(curriculum: Optional[str]) -> Optional[str]:
    """
    Empty or missing curriculum means "no filter"; anything else is kept as-is.
    """
    if curriculum is None or curriculum == "":
        return None
    return curriculum


def validate_request(
    course_id: object,
    year: object,
    curriculum: Optional[str],
    directory: CourseDirectory,
) -> CalendarRequest:
    """
    Validate one calendar request against the course directory.
    """
    try:
        course_id_int = _parse_int(course_id)
    except ValueError:
        raise InvalidInput("Invalid course id") from None

    course = directory.find_by_id(course_id_int)
    if course is None:
        raise NotFound("Course not found", f"course_id={course_id_int}")

    try:
        year_int = _parse_int(year)
    except ValueError:
        raise InvalidInput("Invalid year") from None

    if year_int <= 0 or year_int > course.duration_years:
        raise InvalidInput("Invalid year", f"year={year_int} duration={course.duration_years}")

    return CalendarRequest(course=course, year=year_int, curriculum=normalize_curriculum(curriculum))
