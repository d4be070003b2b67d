"""
Tests for CLI entry points.

These tests focus on:
- Basic CLI argument validation (search requires text)
- Search and export against a temporary course list, without network access
"""

import contextlib
import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fakes import two_events

from lecturecal.cli import main

CSV_TEXT = """anno,corso_codice,corso_descrizione,url,campus,tipologia,durata,lingue
2024/2025,42,Computer Engineering,https://example.org/laurea/CE,Bologna,Laurea,3,italiano
"""


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.csv = self.dir / "courses.csv"
        self.csv.write_text(CSV_TEXT, encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, argv: list[str]) -> tuple[int, str]:
        out = io.StringIO()
        with contextlib.redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
            main(argv)
        return ctx.exception.code, out.getvalue()

    def test_cli_search_requires_text(self) -> None:
        # search without text should exit with nonzero
        code, _ = self._run(["--courses", str(self.csv), "search", ""])
        self.assertNotEqual(code, 0)

    def test_cli_search_finds_course(self) -> None:
        code, out = self._run(["--courses", str(self.csv), "search", "computer"])
        self.assertEqual(code, 0)
        self.assertIn("42 | Computer Engineering", out)

    def test_cli_missing_course_list(self) -> None:
        code, out = self._run(["--courses", str(self.dir / "missing.csv"), "search", "x"])
        self.assertEqual(code, 1)
        self.assertIn("Unable to read course list", out)

    def test_cli_export_writes_file(self) -> None:
        target = self.dir / "out.ics"
        with mock.patch("lecturecal.cli.UniboTimetableSource") as source_cls:
            source_cls.return_value.get_timetable.return_value = two_events()
            code, out = self._run(["--courses", str(self.csv), "export", "42", "1", str(target)])

        self.assertEqual(code, 0)
        self.assertIn("Exported 2 events", out)
        self.assertIn("Computer Engineering - 1 year", target.read_text(encoding="utf-8"))

    def test_cli_serve_rejects_non_positive_cache_ttl(self) -> None:
        for ttl in ("0", "-5"):
            err = io.StringIO()
            with mock.patch("lecturecal.cli._cmd_serve") as serve, contextlib.redirect_stderr(err):
                with self.assertRaises(SystemExit) as ctx:
                    main(["--courses", str(self.csv), "serve", "--cache-ttl", ttl])
            self.assertEqual(ctx.exception.code, 2)
            self.assertIn("--cache-ttl must be positive", err.getvalue())
            serve.assert_not_called()

    def test_cli_serve_applies_cache_ttl(self) -> None:
        with mock.patch("lecturecal.cli._cmd_serve", return_value=0) as serve:
            code, _ = self._run(["--courses", str(self.csv), "serve", "--cache-ttl", "30"])
        self.assertEqual(code, 0)
        settings = serve.call_args[0][1]
        self.assertEqual(settings.cache_ttl, 30)

    def test_cli_export_rejects_invalid_year(self) -> None:
        code, out = self._run(["--courses", str(self.csv), "export", "42", "9", str(self.dir / "x.ics")])
        self.assertEqual(code, 1)
        self.assertIn("Invalid year", out)


if __name__ == "__main__":
    unittest.main()
