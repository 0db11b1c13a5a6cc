import unittest
from datetime import datetime, timezone
from pathlib import Path

from cli import commands
from oncall.coverage import Window
from oncall.shifts import check_coverage

from tests.helpers import TempDatabaseTestCase

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "sample_data"


class SmokeTest(TempDatabaseTestCase):
    def test_import_sample_schedule_and_check_coverage(self):
        result = commands.import_shifts(SAMPLE_DIR / "shifts.csv")
        self.assertEqual(result.shifts_imported, 4)
        self.assertEqual(result.shifts_skipped, 0)

        window = Window(
            datetime(2026, 1, 5, 8, tzinfo=timezone.utc),
            datetime(2026, 1, 7, 8, tzinfo=timezone.utc),
        )
        shifts, report = check_coverage(window, "liaison")
        self.assertEqual(len(shifts), 4)
        self.assertEqual(report.status, "full")
        self.assertEqual(report.covered_percentage, 100.0)
        self.assertEqual([o.owners for o in report.overlaps], [["Priya Shah", "Jordan Lee"]])


if __name__ == "__main__":
    unittest.main()
