"""Flask service exposing calendar feeds."""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, Response, jsonify, request

from lecturecal.cache import ArtifactCache
from lecturecal.config import Settings
from lecturecal.courses import CourseDirectory
from lecturecal.errors import CalendarError
from lecturecal.logging_utils import configure_logging
from lecturecal.service import CalendarService
from lecturecal.timetable import UniboTimetableSource

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Content-Length, Accept-Encoding, Authorization",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
}


def build_service(settings: Settings) -> CalendarService:
    """
    Wire the production collaborators: CSV directory, HTTP timetable source, cache with janitor.
    """
    directory = CourseDirectory.from_csv(settings.courses_csv)
    source = UniboTimetableSource(timeout=settings.http_timeout)
    cache = ArtifactCache(
        ttl=settings.cache_ttl,
        cleanup_interval=settings.cache_cleanup_interval,
        maxsize=settings.cache_maxsize,
    )
    cache.start_janitor()
    return CalendarService(directory, source, cache)


def _text(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def create_app(service: Optional[CalendarService] = None, settings: Optional[Settings] = None) -> Flask:
    settings = settings if settings is not None else Settings.from_env()
    configure_logging(settings.log_level)
    service = service if service is not None else build_service(settings)

    app = Flask(__name__)
    app.config["CALENDAR_SERVICE"] = service

    @app.errorhandler(CalendarError)
    def calendar_error(exc: CalendarError) -> Response:
        if exc.status >= 500:
            logger.warning("%s %s -> %d %s", request.method, request.path, exc.status, exc.code)
        resp = _text(exc.code, exc.status)
        if request.path.startswith("/cal/"):
            resp.headers.update(CORS_HEADERS)
        return resp

    @app.get("/cal/<course_id>/<year>")
    def course_calendar(course_id: str, year: str) -> Response:
        curriculum = request.args.get("curriculum")
        result = service.calendar_for(course_id, year, curriculum)

        resp = Response(result.body, status=200)
        resp.headers["Content-Type"] = "text/calendar; charset=utf-8"
        resp.headers["Content-Disposition"] = f"attachment; filename={settings.attachment_name}.ics"
        resp.headers.update(CORS_HEADERS)
        return resp

    @app.get("/courses/<course_id>/curricula")
    def course_curricula(course_id: str) -> Any:
        year = request.args.get("year", "1")
        curricula = service.curricula_for(course_id, year)
        return jsonify([{"code": c.code, "label": c.label} for c in curricula])

    @app.get("/health")
    def health() -> Any:
        return {"ok": True}, 200

    return app
