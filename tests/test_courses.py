"""
Unit tests for the course directory.

Loading contract:
- invalid rows are skipped
- the most recent academic year wins for duplicated course ids
- lookup by integer id, search by substring
"""

import tempfile
import unittest
from pathlib import Path

from lecturecal.courses import CourseDirectory

CSV_TEXT = """anno,corso_codice,corso_descrizione,url,campus,tipologia,durata,lingue
2023/2024,9254,Ingegneria informatica (old),https://example.org/old,Bologna,Laurea,3,italiano
2024/2025,9254,Ingegneria informatica,https://example.org/ii,Bologna,Laurea,3,italiano
2024/2025,8028,Computer Science,https://example.org/cs,Bologna,Laurea Magistrale,2,inglese
2024/2025,abc,Broken id,https://example.org/x,Bologna,Laurea,3,italiano
2024/2025,1234,No duration,https://example.org/y,Bologna,Laurea,,italiano
"""


class TestCourseDirectory(unittest.TestCase):
    def _load(self, text: str = CSV_TEXT) -> CourseDirectory:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.csv"
            p.write_text(text, encoding="utf-8")
            return CourseDirectory.from_csv(p)

    def test_load_skips_invalid_rows(self) -> None:
        directory = self._load()
        self.assertEqual(len(directory), 2)
        self.assertIsNone(directory.find_by_id(1234))

    def test_latest_year_wins(self) -> None:
        course = self._load().find_by_id(9254)
        self.assertIsNotNone(course)
        assert course is not None
        self.assertEqual(course.title, "Ingegneria informatica")
        self.assertEqual(course.duration_years, 3)
        self.assertEqual(course.url, "https://example.org/ii")
        self.assertEqual(course.language, "italiano")

    def test_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(OSError):
                CourseDirectory.from_csv(Path(d) / "missing.csv")

    def test_search(self) -> None:
        directory = self._load()
        self.assertEqual([c.course_id for c in directory.search("computer")], [8028])
        self.assertEqual([c.course_id for c in directory.search("9254")], [9254])
        self.assertEqual(directory.search("   "), [])

    def test_bundled_course_list_loads(self) -> None:
        directory = CourseDirectory.from_csv()
        self.assertGreater(len(directory), 0)


if __name__ == "__main__":
    unittest.main()
