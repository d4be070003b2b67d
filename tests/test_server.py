"""
End-to-end tests of the HTTP surface using the Flask test client.
"""

import unittest

from fakes import CountingSource, failing_source, make_service

from lecturecal.config import Settings
from lecturecal.server import create_app


def _client(source=None):
    service, source, clock = make_service(source=source)
    app = create_app(service=service, settings=Settings())
    return app.test_client(), source


class TestCalendarRoute(unittest.TestCase):
    def test_unknown_course_is_404(self) -> None:
        client, source = _client()
        resp = client.get("/cal/9999/1")
        self.assertEqual(resp.status_code, 404)
        self.assertIn("not found", resp.get_data(as_text=True).lower())
        self.assertEqual(source.calls, [])

    def test_year_beyond_duration_is_400(self) -> None:
        client, source = _client()
        resp = client.get("/cal/42/5")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_data(as_text=True), "Invalid year")
        self.assertEqual(source.calls, [])

    def test_invalid_course_id_is_400(self) -> None:
        client, _ = _client()
        resp = client.get("/cal/abc/1")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_data(as_text=True), "Invalid course id")

    def test_calendar_download(self) -> None:
        client, source = _client()
        resp = client.get("/cal/42/1")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["Content-Type"], "text/calendar; charset=utf-8")
        self.assertEqual(resp.headers["Content-Disposition"], "attachment; filename=lezioni.ics")
        self.assertEqual(resp.headers["Access-Control-Allow-Origin"], "*")
        self.assertIn("GET", resp.headers["Access-Control-Allow-Methods"])

        text = resp.get_data(as_text=True)
        self.assertEqual(text.count("BEGIN:VEVENT"), 2)
        self.assertIn("X-WR-CALNAME:Computer Engineering - 1 year", text)
        self.assertEqual(source.calls, [(42, 1, None)])

    def test_repeated_download_is_identical_and_cached(self) -> None:
        client, source = _client()
        first = client.get("/cal/42/2?curriculum=A58-000")
        second = client.get("/cal/42/2?curriculum=A58-000")

        self.assertEqual(first.get_data(), second.get_data())
        self.assertEqual(source.calls, [(42, 2, "A58-000")])

    def test_timetable_failure_is_generic_5xx(self) -> None:
        client, _ = _client(source=failing_source())
        resp = client.get("/cal/42/1")
        self.assertEqual(resp.status_code, 502)
        body = resp.get_data(as_text=True)
        self.assertEqual(body, "Unable to retrieve timetable")
        self.assertNotIn("upstream down", body)

    def test_unexpected_failure_does_not_leak_details(self) -> None:
        client, _ = _client(source=CountingSource(error=RuntimeError("secret stack detail")))
        resp = client.get("/cal/42/1")
        self.assertEqual(resp.status_code, 502)
        self.assertNotIn("secret", resp.get_data(as_text=True))


class TestOtherRoutes(unittest.TestCase):
    def test_curricula_json(self) -> None:
        client, _ = _client()
        resp = client.get("/courses/42/curricula?year=1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()[0], {"code": "A58-000", "label": "Common"})

    def test_curricula_unknown_course(self) -> None:
        client, _ = _client()
        self.assertEqual(client.get("/courses/1/curricula").status_code, 404)

    def test_health(self) -> None:
        client, _ = _client()
        resp = client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"ok": True})


if __name__ == "__main__":
    unittest.main()
