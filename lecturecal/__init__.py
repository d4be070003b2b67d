"""Lecture timetables served as subscribe-able iCalendar feeds."""
