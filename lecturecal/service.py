"""
Calendar request orchestration.

One call of CalendarService.calendar_for() handles one calendar request:

    1. validate (InvalidInput / NotFound)
    2. cache lookup -> return cached bytes on hit
    3. reuse the course resolved during validation
    4. fetch the timetable slice (TimetableUnavailable)
    5. synthesize + serialize (CalendarSerializationError)
    6. store the bytes in the cache and return them

Failures are logged with their request context and never cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from lecturecal.cache import ArtifactCache
from lecturecal.courses import CourseDirectory
from lecturecal.errors import CalendarSerializationError, NotFound, SynthesisFailed, TimetableUnavailable
from lecturecal.export_ics import serialize_calendar
from lecturecal.model import Curriculum
from lecturecal.synthesize import build_calendar
from lecturecal.timetable import TimetableSource
from lecturecal.validate import CalendarRequest, validate_request

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CalendarResponse:
    body: bytes
    request: CalendarRequest
    cached: bool


class CalendarService:
    def __init__(
        self,
        directory: CourseDirectory,
        source: TimetableSource,
        cache: ArtifactCache,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.directory = directory
        self.source = source
        self.cache = cache
        self.now = now

    def calendar_for(self, course_id: object, year: object, curriculum: Optional[str] = None) -> CalendarResponse:
        """
        Return the serialized calendar for one course year (and curriculum).
        """
        request = validate_request(course_id, year, curriculum, self.directory)

        key = request.cache_key
        cached = self.cache.get(key)
        if cached is not None:
            return CalendarResponse(body=cached, request=request, cached=True)

        body = self._synthesize(request)
        self.cache.put(key, body)
        return CalendarResponse(body=body, request=request, cached=False)

    def _synthesize(self, request: CalendarRequest) -> bytes:
        course = request.course
        if course is None:
            raise NotFound("Course not found")

        context = f"course_id={course.course_id} year={request.year} curriculum={request.curriculum!r}"
        try:
            events = self.source.get_timetable(course, request.year, request.curriculum)
        except SynthesisFailed as exc:
            logger.error("Timetable retrieval failed (%s): %s", context, exc)
            raise
        except Exception as exc:
            logger.exception("Timetable source crashed (%s)", context)
            raise TimetableUnavailable("Unable to retrieve timetable", str(exc)) from exc

        document = build_calendar(events, course, request.year)
        try:
            return serialize_calendar(document, stamp=self.now())
        except CalendarSerializationError as exc:
            logger.error("Calendar serialization failed (%s): %s", context, exc)
            raise
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error("Calendar serialization failed (%s): %s", context, exc)
            raise CalendarSerializationError("Unable to serialize calendar", str(exc)) from exc

    def curricula_for(self, course_id: object, year: object) -> List[Curriculum]:
        """
        List the curricula of a course year (not cached).
        """
        request = validate_request(course_id, year, None, self.directory)
        try:
            return self.source.get_curricula(request.course, request.year)
        except SynthesisFailed as exc:
            logger.error("Curricula retrieval failed (course_id=%s year=%s): %s", course_id, request.year, exc)
            raise
