"""
Central data model definitions used across the project.

This module defines the canonical structure of Course, Curriculum, Event and
CalendarDocument objects so that:
- the directory, the timetable source and the calendar writer share the same field names
- objects handed between threads are immutable (frozen dataclasses)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Course:
    """
    Represents one degree course as listed in the open-data course file.
    """

    course_id: int
    title: str
    duration_years: int
    url: str = ""
    campus: Optional[str] = None
    course_type: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class Curriculum:
    """
    One study track within a course (e.g. "A58-000").
    """

    code: str
    label: str


@dataclass(frozen=True)
class Event:
    """
    Represents one concrete lecture (single date & time slot).
    """

    start: datetime
    end: datetime
    title: str
    location: str = ""
    lecturer: Optional[str] = None
    module_code: Optional[str] = None
    url: Optional[str] = None
    uid: Optional[str] = None


@dataclass(frozen=True)
class CalendarDocument:
    """
    A calendar ready to be serialized: metadata plus the embedded events.
    """

    name: str
    description: str
    events: Tuple[Event, ...] = field(default_factory=tuple)
    timezone: str = "Europe/Rome"
