"""
CLI (Command Line Interface).

This module provides terminal commands for running and trying out the service, e.g.:

    lecturecal serve --port 8080
    lecturecal search <text>
    lecturecal export <course_id> <year> <file.ics> [--curriculum CODE]

Note:
- Settings come from LECTURECAL_* environment variables (see lecturecal/config.py);
  flags given here override them
- Output is plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from lecturecal.config import Settings
from lecturecal.courses import CourseDirectory
from lecturecal.errors import CalendarError
from lecturecal.export_ics import export_calendar
from lecturecal.logging_utils import configure_logging
from lecturecal.synthesize import build_calendar
from lecturecal.timetable import UniboTimetableSource
from lecturecal.validate import validate_request


def _load_directory(settings: Settings) -> CourseDirectory | None:
    """
    Load the course CSV. Prints a message and returns None if it cannot be read.
    """
    try:
        return CourseDirectory.from_csv(settings.courses_csv)
    except OSError as exc:
        print(f"Unable to read course list {settings.courses_csv}: {exc}")
        return None


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """
    Run the HTTP service (Flask threaded server).
    """
    from lecturecal.server import create_app

    app = create_app(settings=settings)
    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)
    return 0


def _cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    """
    Search courses by substring match in course id or title.
    """
    query = (args.text or "").strip()
    if not query:
        print("Please provide a search text.")
        return 1

    directory = _load_directory(settings)
    if directory is None:
        return 1

    matches = directory.search(query)
    if not matches:
        print("No results.")
        return 0

    # show max 20
    for course in matches[:20]:
        print(f"{course.course_id} | {course.title} ({course.duration_years} years)")
    if len(matches) > 20:
        print(f"... and {len(matches) - 20} more results")

    return 0


def _cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    """
    Export one course year into an iCalendar (.ics) file.
    """
    out_path = (args.out or "").strip()
    if not out_path:
        print("Please provide output .ics path.")
        return 1

    directory = _load_directory(settings)
    if directory is None:
        return 1

    try:
        req = validate_request(args.course_id, args.year, args.curriculum, directory)
        source = UniboTimetableSource(timeout=settings.http_timeout)
        events = source.get_timetable(req.course, req.year, req.curriculum)
        n = export_calendar(build_calendar(events, req.course, req.year), out_path)
    except CalendarError as exc:
        print(f"Error: {exc.code}")
        return 1

    print(f"Exported {n} events to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="lecturecal", description="Lecture timetable calendars")
    parser.add_argument("--courses", type=str, default=None, help="Path to the open-data course CSV")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (e.g. DEBUG, INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the calendar HTTP service")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8080)
    p_serve.add_argument("--debug", action="store_true")
    p_serve.add_argument("--cache-ttl", type=float, default=None, help="Seconds a calendar stays cached")

    p_search = sub.add_parser("search", help="Search for courses")
    p_search.add_argument("text", type=str, help="Search text")

    p_export = sub.add_parser("export", help="Export one course year to .ics")
    p_export.add_argument("course_id", type=str, help="Course id (e.g. 9254)")
    p_export.add_argument("year", type=str, help="Course year (1..duration)")
    p_export.add_argument("out", type=str, help="Output file path (e.g. out.ics)")
    p_export.add_argument("--curriculum", type=str, default=None, help="Curriculum code (e.g. A58-000)")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.courses:
        settings.courses_csv = Path(args.courses)
    if args.log_level:
        settings.log_level = args.log_level.strip().upper()
    cache_ttl = getattr(args, "cache_ttl", None)
    if cache_ttl is not None:
        if cache_ttl <= 0:
            parser.error(f"--cache-ttl must be positive, got {cache_ttl}")
        settings.cache_ttl = cache_ttl
    configure_logging(getattr(logging, settings.log_level, logging.INFO))

    if args.command == "serve":
        raise SystemExit(_cmd_serve(args, settings))
    if args.command == "search":
        raise SystemExit(_cmd_search(args, settings))
    if args.command == "export":
        raise SystemExit(_cmd_export(args, settings))

    raise SystemExit(2)
