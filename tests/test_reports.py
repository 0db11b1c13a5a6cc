import unittest
from datetime import datetime, timedelta, timezone

import pandas as pd

from oncall.coverage import Shift, Window, analyze_coverage
from oncall.reports import (
    SCHEDULE_REPORT_COLUMNS,
    build_warnings,
    format_gap_report,
    format_schedule_report,
    gap_to_dict,
)

BASE = datetime(2026, 1, 5, tzinfo=timezone.utc)


def shift(name: str, start_h: float, end_h: float) -> Shift:
    return Shift(
        id=name,
        owner_name=name,
        start=BASE + timedelta(hours=start_h),
        end=BASE + timedelta(hours=end_h),
    )


class ReportsTest(unittest.TestCase):
    def setUp(self):
        window = Window(BASE, BASE + timedelta(hours=24))
        self.report = analyze_coverage([shift("A", 0, 10), shift("B", 9, 12), shift("C", 15, 24)], window)

    def test_build_warnings_lists_gaps_then_overlaps(self):
        warnings = build_warnings(self.report)
        self.assertEqual([w["type"] for w in warnings], ["gap", "overlap"])
        self.assertEqual(warnings[0], {
            "type": "gap",
            "severity": "medium",
            "message": "Coverage gap between B and C",
            "start": "2026-01-05T12:00:00.000Z",
            "end": "2026-01-05T15:00:00.000Z",
            "hours": 3.0,
        })
        self.assertEqual(warnings[1]["severity"], "warning")

    def test_gap_to_dict_includes_neighbours(self):
        data = gap_to_dict(self.report.gaps[0])
        self.assertEqual(data["previous_user"], "B")
        self.assertEqual(data["next_user"], "C")

    def test_format_gap_report(self):
        text = format_gap_report(self.report, "liaison")
        lines = text.splitlines()
        self.assertEqual(lines[0], "On-Call Coverage Gap Report (liaison)")
        self.assertIn("Period: Jan 5, 2026 12:00 AM UTC - Jan 6, 2026 12:00 AM UTC", lines)
        self.assertIn("Coverage: 87.5%", lines)
        self.assertIn("1. [MEDIUM] Coverage gap between B and C", lines)
        self.assertIn("   Jan 5, 2026 12:00 PM UTC - Jan 5, 2026 3:00 PM UTC (3.0 hours)", lines)
        self.assertIn("- A and B have overlapping shifts (1.0 hours)", lines)

    def test_format_gap_report_without_gaps(self):
        report = analyze_coverage([shift("A", 0, 24)], Window(BASE, BASE + timedelta(hours=24)))
        text = format_gap_report(report)
        self.assertTrue(text.startswith("On-Call Coverage Gap Report\n"))
        self.assertIn("No coverage gaps found for this period.", text)


class ScheduleReportTest(unittest.TestCase):
    def setUp(self):
        window = Window(BASE, BASE + timedelta(hours=24))
        self.report = analyze_coverage([shift("A", 0, 10), shift("B", 9, 12), shift("C", 15, 24)], window)
        self.generated_at = datetime(2026, 1, 4, 15, 30, tzinfo=timezone.utc)

    def test_format_schedule_report(self):
        shifts_df = pd.DataFrame([
            {
                "user_name": "Dana Ortiz",
                "user_phone": "555-0100",
                "user_email": "dana@example.org",
                "start_datetime": "2026-01-05T00:00:00.000Z",
                "end_datetime": "2026-01-05T10:00:00.000Z",
                "priority_level": "primary",
                "notes": "Handover, 9am",
            },
            {
                "user_name": "Sam Reyes",
                "user_phone": None,
                "user_email": None,
                "start_datetime": "2026-01-05T09:00:00.000Z",
                "end_datetime": "2026-01-05T12:00:00.000Z",
                "priority_level": None,
                "notes": None,
            },
        ])
        text = format_schedule_report(shifts_df, self.report, "liaison", generated_at=self.generated_at)
        self.assertEqual(text.splitlines(), [
            "On-Call Schedule Report - liaison",
            "Generated: Jan 4, 2026 3:30 PM UTC",
            "Coverage: 87.5% (2 assignments)",
            "",
            "Assignee,Phone,Email,Start Date,Start Time,End Date,End Time,Duration,Priority,Notes",
            '"Dana Ortiz","555-0100","dana@example.org","Jan 5, 2026","12:00 AM",'
            '"Jan 5, 2026","10:00 AM","10.0 hours","primary","Handover, 9am"',
            '"Sam Reyes","N/A","N/A","Jan 5, 2026","9:00 AM",'
            '"Jan 5, 2026","12:00 PM","3.0 hours","normal",""',
        ])

    def test_format_schedule_report_without_shifts(self):
        report = analyze_coverage([], Window(BASE, BASE + timedelta(hours=24)))
        text = format_schedule_report(
            pd.DataFrame(columns=["user_name", "start_datetime", "end_datetime"]),
            report,
            generated_at=self.generated_at,
        )
        lines = text.splitlines()
        self.assertEqual(lines[0], "On-Call Schedule Report - all types")
        self.assertEqual(lines[2], "Coverage: 0.0% (0 assignments)")
        self.assertEqual(lines[-1], ",".join(SCHEDULE_REPORT_COLUMNS))


if __name__ == "__main__":
    unittest.main()
