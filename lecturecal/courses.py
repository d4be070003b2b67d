"""
Course directory.

Loads the open-data course list (CSV) once and keeps an in-memory index
by numeric course id. The directory is read-only after construction, so it
can be shared by concurrent requests without locking.

Expected CSV columns (open-data "corsi" file):
    anno, corso_codice, corso_descrizione, url, campus, tipologia, durata, lingue

Rows that cannot be parsed are skipped. When the same course appears for
several academic years, the most recent row wins.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, Optional

from lecturecal.model import Course

logger = logging.getLogger(__name__)


def _default_courses_path() -> Path:
    """
    Return the default location of the course CSV inside the package.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "courses.csv"


def _course_from_row(row: dict[str, str]) -> Optional[Course]:
    """
    Convert one CSV row into a Course, or None if required fields are missing/invalid.
    """
    try:
        course_id = int(str(row.get("corso_codice", "")).strip())
        duration = int(str(row.get("durata", "")).strip())
    except ValueError:
        return None

    title = str(row.get("corso_descrizione", "") or "").strip()
    if course_id <= 0 or duration <= 0 or not title:
        return None

    return Course(
        course_id=course_id,
        title=title,
        duration_years=duration,
        url=str(row.get("url", "") or "").strip(),
        campus=(row.get("campus") or "").strip() or None,
        course_type=(row.get("tipologia") or "").strip() or None,
        language=(row.get("lingue") or "").strip() or None,
    )


class CourseDirectory:
    """
    Lookup of courses by numeric id.
    """

    def __init__(self, courses: Iterable[Course] = ()) -> None:
        self._by_id: dict[int, Course] = {}
        for course in courses:
            self._by_id[course.course_id] = course

    @classmethod
    def from_csv(cls, path: str | Path | None = None) -> "CourseDirectory":
        """
        Build a directory from the open-data CSV file.

        Raises OSError if the file cannot be read.
        """
        csv_path = Path(path) if path is not None else _default_courses_path()

        latest: dict[int, tuple[str, Course]] = {}
        skipped = 0
        with csv_path.open(encoding="utf-8-sig", newline="") as fh:
            for row in csv.DictReader(fh):
                course = _course_from_row(row)
                if course is None:
                    skipped += 1
                    continue
                year_label = str(row.get("anno", "") or "").strip()
                current = latest.get(course.course_id)
                if current is None or year_label >= current[0]:
                    latest[course.course_id] = (year_label, course)

        if skipped:
            logger.warning("Skipped %d invalid rows in %s", skipped, csv_path)
        logger.info("Loaded %d courses from %s", len(latest), csv_path)
        return cls(course for _, course in latest.values())

    def find_by_id(self, course_id: int) -> Optional[Course]:
        return self._by_id.get(course_id)

    def search(self, text: str) -> list[Course]:
        """
        Case-insensitive substring match on course id and title, sorted by title.
        """
        query = (text or "").strip().lower()
        if not query:
            return []
        matches = [c for c in self._by_id.values() if query in f"{c.course_id} {c.title}".lower()]
        return sorted(matches, key=lambda c: (c.title.lower(), c.course_id))

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(sorted(self._by_id.values(), key=lambda c: c.course_id))
