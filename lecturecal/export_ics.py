"""
iCalendar (.ics) serialization.

We convert a CalendarDocument into RFC 5545 text that calendar clients can
subscribe to or import:
- Google Calendar
- Outlook
- Apple Calendar

Lecture times from the timetable are local wall-clock times, so they are
written as floating DATE-TIMEs and the calendar advertises its zone with
X-WR-TIMEZONE. Timezone-aware datetimes are written in UTC.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from lecturecal.errors import CalendarSerializationError
from lecturecal.model import CalendarDocument, Event

PRODID = "-//lecturecal//Lecture timetables//EN"


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS TEXT values.
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _fold(line: str) -> str:
    """
    Fold a content line at 75 octets without splitting UTF-8 sequences.
    """
    if len(line.encode("utf-8")) <= 75:
        return line

    parts: list[str] = []
    current = ""
    size = 0
    limit = 75
    for ch in line:
        n = len(ch.encode("utf-8"))
        if size + n > limit:
            parts.append(current)
            # continuation lines start with a space, which counts toward the limit
            current = " "
            size = 1
        current += ch
        size += n
    parts.append(current)
    return "\r\n".join(parts)


def _dt(value: datetime) -> str:
    """
    Format a datetime as 'YYYYMMDDTHHMMSS' (floating) or 'YYYYMMDDTHHMMSSZ' (aware).
    """
    if value.tzinfo is not None and value.utcoffset() is not None:
        return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return value.strftime("%Y%m%dT%H%M%S")


def event_uid(ev: Event) -> str:
    """
    Stable UID for an event: the source UID if present, else a hash of its content.
    """
    if ev.uid:
        return ev.uid
    src = f"{ev.module_code or ''}|{ev.start.isoformat()}|{ev.end.isoformat()}|{ev.title}|{ev.location}"
    return hashlib.sha1(src.encode("utf-8")).hexdigest() + "@lecturecal"


def _event_lines(ev: Event, dtstamp: str) -> list[str]:
    if not isinstance(ev.start, datetime) or not isinstance(ev.end, datetime):
        raise CalendarSerializationError("Unable to serialize calendar", f"event without start/end: {ev!r}")
    try:
        inverted = ev.end < ev.start
    except TypeError:
        raise CalendarSerializationError("Unable to serialize calendar", f"mixed naive/aware times: {ev!r}") from None
    if inverted:
        raise CalendarSerializationError("Unable to serialize calendar", f"event ends before it starts: {ev!r}")

    lines = [
        "BEGIN:VEVENT",
        f"UID:{_ics_escape(event_uid(ev))}",
        f"DTSTAMP:{dtstamp}",
        f"DTSTART:{_dt(ev.start)}",
        f"DTEND:{_dt(ev.end)}",
        f"SUMMARY:{_ics_escape(ev.title.strip() or 'Lecture')}",
    ]
    if ev.location.strip():
        lines.append(f"LOCATION:{_ics_escape(ev.location.strip())}")

    details = [x.strip() for x in (ev.lecturer, ev.module_code and f"Module: {ev.module_code}") if x and x.strip()]
    if details:
        description = _ics_escape("\n".join(details))
        lines.append(f"DESCRIPTION:{description}")
    if ev.url:
        lines.append(f"URL:{ev.url}")
    lines.append("END:VEVENT")
    return lines


def serialize_calendar(document: CalendarDocument, stamp: Optional[datetime] = None) -> bytes:
    """
    Serialize a calendar document to UTF-8 iCalendar bytes.

    `stamp` is used for every DTSTAMP (defaults to now, UTC).
    Raises CalendarSerializationError for malformed events.
    """
    when = stamp if stamp is not None else datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    dtstamp = _dt(when)

    name = _ics_escape(document.name)
    description = _ics_escape(document.description)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append(f"PRODID:{PRODID}")
    lines.append("CALSCALE:GREGORIAN")
    lines.append("METHOD:PUBLISH")
    lines.append(f"NAME:{name}")
    lines.append(f"X-WR-CALNAME:{name}")
    lines.append(f"DESCRIPTION:{description}")
    lines.append(f"X-WR-CALDESC:{description}")
    lines.append(f"X-WR-TIMEZONE:{document.timezone}")

    for ev in document.events:
        lines.extend(_event_lines(ev, dtstamp))

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    return ("\r\n".join(_fold(line) for line in lines) + "\r\n").encode("utf-8")


def export_calendar(document: CalendarDocument, out_path: str | Path) -> int:
    """
    Write a calendar document to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(serialize_calendar(document))
    return len(document.events)
