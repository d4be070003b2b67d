"""
Timetable source (course website -> lecture events).

The course websites publish each course's timetable as JSON:

    <course url>/orario-lezioni/@@orario_reale_json?anno=<year>&curricula=<code>
    <course url>/orario-lezioni/@@available_curricula?anno=<year>

English-taught courses use '/timetable' instead of '/orario-lezioni', so the
timetable page is discovered from the links on the course home page.

Important rules:
- 1 JSON entry = 1 Event, in the order the website returns them
- any network or format problem raises TimetableUnavailable
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from lecturecal.errors import TimetableUnavailable
from lecturecal.model import Course, Curriculum, Event

logger = logging.getLogger(__name__)

TIMETABLE_PATHS = ("orario-lezioni", "timetable")
TIMETABLE_JSON = "@@orario_reale_json"
CURRICULA_JSON = "@@available_curricula"


class TimetableSource(Protocol):
    def get_timetable(self, course: Course, year: int, curriculum: Optional[str]) -> List[Event]: ...

    def get_curricula(self, course: Course, year: int) -> List[Curriculum]: ...


# ---------------------------------------------------------------------------
# JSON parsing
# ---------------------------------------------------------------------------


def _location(rooms: Any) -> str:
    """
    Join the rooms of an entry: 'AULA 5.7 - VIA ZAMBONI 33 - BOLOGNA'.
    """
    if not isinstance(rooms, list):
        return ""
    out: List[str] = []
    for room in rooms:
        if not isinstance(room, dict):
            continue
        parts = [str(room.get(k) or "").strip() for k in ("des_risorsa", "des_ubicazione")]
        text = " - ".join(p for p in parts if p)
        if text and text not in out:
            out.append(text)
    return "; ".join(out)


def parse_timetable_entry(entry: Dict[str, Any]) -> Event:
    """
    Parses exactly one timetable JSON entry into exactly one event.

    Raises ValueError if the entry has no usable title or times.
    """
    if not isinstance(entry, dict):
        raise ValueError(f"Timetable entry is not an object: {entry!r}")

    title = str(entry.get("title") or "").strip()
    if not title:
        raise ValueError(f"Timetable entry without title: {entry!r}")

    start = datetime.fromisoformat(str(entry.get("start") or ""))
    end = datetime.fromisoformat(str(entry.get("end") or ""))
    if end < start:
        raise ValueError(f"Timetable entry ends before it starts: {entry!r}")

    lecturer = str(entry.get("docente") or "").strip() or None
    module_code = str(entry.get("cod_modulo") or "").strip() or None
    url = str(entry.get("teams") or "").strip() or None

    return Event(
        start=start,
        end=end,
        title=title,
        location=_location(entry.get("aule")),
        lecturer=lecturer,
        module_code=module_code,
        url=url,
    )


def parse_timetable(payload: Any) -> List[Event]:
    if not isinstance(payload, list):
        raise ValueError(f"Timetable payload is not a list: {type(payload).__name__}")
    return [parse_timetable_entry(entry) for entry in payload]


def parse_curricula(payload: Any) -> List[Curriculum]:
    if not isinstance(payload, list):
        raise ValueError(f"Curricula payload is not a list: {type(payload).__name__}")
    out: List[Curriculum] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        code = str(item.get("value") or "").strip()
        if code:
            out.append(Curriculum(code=code, label=str(item.get("label") or "").strip()))
    return out


def find_timetable_page(course_url: str, html: str) -> str:
    """
    Find the timetable page link on a course home page.

    Links below the course url win over links to other pages (e.g. a
    related course's timetable). Falls back to '<course url>/orario-lezioni'
    when no link matches.
    """
    base = course_url.rstrip("/") + "/"
    soup = BeautifulSoup(html, "html.parser")

    candidates: List[str] = []
    for a in soup.select("a[href]"):
        href = str(a.get("href") or "").strip()
        path = href.split("?", 1)[0].rstrip("/")
        if path.rsplit("/", 1)[-1] in TIMETABLE_PATHS:
            candidates.append(urljoin(base, path))

    for url in candidates:
        if url.startswith(base):
            return url
    if candidates:
        return candidates[0]
    return base + TIMETABLE_PATHS[0]


# ---------------------------------------------------------------------------
# HTTP source
# ---------------------------------------------------------------------------


class UniboTimetableSource:
    """
    Fetch timetables from the course websites over HTTP.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 30) -> None:
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        resp = self.session.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def timetable_page(self, course: Course) -> str:
        if not course.url:
            raise TimetableUnavailable("Unable to retrieve timetable", f"course {course.course_id} has no website")
        try:
            resp = self._get(course.url)
        except requests.RequestException as exc:
            raise TimetableUnavailable("Unable to retrieve timetable", f"{course.url}: {exc}") from exc
        # the course url usually redirects to the localized home page
        base = getattr(resp, "url", None) or course.url
        return find_timetable_page(base, resp.text)

    def _fetch_json(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            return self._get(url, params=params).json()
        except (requests.RequestException, ValueError) as exc:
            raise TimetableUnavailable("Unable to retrieve timetable", f"{url}: {exc}") from exc

    def get_timetable(self, course: Course, year: int, curriculum: Optional[str]) -> List[Event]:
        page = self.timetable_page(course)
        params: Dict[str, Any] = {"anno": year}
        if curriculum:
            params["curricula"] = curriculum

        payload = self._fetch_json(f"{page}/{TIMETABLE_JSON}", params)
        try:
            events = parse_timetable(payload)
        except (ValueError, TypeError) as exc:
            raise TimetableUnavailable("Unable to retrieve timetable", f"malformed timetable: {exc}") from exc

        logger.info(
            "Fetched %d events for course=%s year=%s curriculum=%s", len(events), course.course_id, year, curriculum
        )
        return events

    def get_curricula(self, course: Course, year: int) -> List[Curriculum]:
        page = self.timetable_page(course)
        payload = self._fetch_json(f"{page}/{CURRICULA_JSON}", {"anno": year})
        try:
            return parse_curricula(payload)
        except ValueError as exc:
            raise TimetableUnavailable("Unable to retrieve curricula", f"malformed curricula: {exc}") from exc
