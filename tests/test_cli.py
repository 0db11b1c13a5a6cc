import unittest
from pathlib import Path

from typer.testing import CliRunner

from cli import importers
from cli import commands
from cli.__main__ import app
from oncall.shifts import list_shifts

from tests.helpers import TempDatabaseTestCase

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "sample_data"


class ImporterTest(unittest.TestCase):
    def test_prepare_shift_maps_aliases(self):
        prepared = importers.prepare_shift({
            "userName": " Dana ",
            "userId": "u-1",
            "start": "2026-01-01T00:00:00Z",
            "end": "2026-01-01T08:00:00Z",
            "type": "liaison",
            "priority": "high",
            "notes": "",
        })
        self.assertEqual(prepared, {
            "user_name": "Dana",
            "start_datetime": "2026-01-01T00:00:00Z",
            "end_datetime": "2026-01-01T08:00:00Z",
            "user_id": "u-1",
            "priority_level": "high",
            "on_call_type": "liaison",
        })

    def test_prepare_shift_missing_fields(self):
        with self.assertRaises(ValueError) as ctx:
            importers.prepare_shift({"user_name": "Dana", "start_datetime": "2026-01-01T00:00:00Z"})
        self.assertIn("end_datetime", str(ctx.exception))

    def test_iter_rows_by_suffix(self):
        yaml_rows = list(importers.iter_rows(SAMPLE_DIR / "shifts.yaml"))
        self.assertEqual(len(yaml_rows), 2)
        self.assertEqual(yaml_rows[0][0], 1)
        csv_rows = list(importers.iter_rows(SAMPLE_DIR / "shifts.csv"))
        self.assertEqual(csv_rows[0][0], 2)
        self.assertEqual(csv_rows[0][1]["user_name"], "Dana Ortiz")


class ImportCommandTest(TempDatabaseTestCase):
    def test_import_stops_on_first_error(self):
        with self.assertRaises(ValueError) as ctx:
            commands.import_shifts(SAMPLE_DIR / "shifts.ndjson")
        self.assertIn("line 2", str(ctx.exception))

    def test_import_skip_errors(self):
        result = commands.import_shifts(SAMPLE_DIR / "shifts.ndjson", skip_errors=True)
        self.assertEqual(result.shifts_imported, 2)
        self.assertEqual(result.shifts_skipped, 1)
        self.assertEqual(result.errors[0]["line"], 2)
        lines = commands.print_import_report(result)
        self.assertIn("  Skipped: 1 rows", lines)

    def test_import_yaml_applies_defaults(self):
        result = commands.import_shifts(SAMPLE_DIR / "shifts.yaml", created_by_name="Loader")
        self.assertEqual(result.shifts_imported, 2)
        df = list_shifts()
        self.assertEqual(df["on_call_type"].tolist(), ["emergency", "emergency"])
        self.assertEqual(df["created_by_name"].tolist(), ["Loader", "Loader"])
        self.assertEqual(df["priority_level"].tolist(), ["normal", "high"])

    def _write(self, name: str, text: str) -> Path:
        path = self.tmp_dir / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_import_skips_malformed_json_line(self):
        path = self._write("shifts.ndjson", "\n".join([
            '{"user_name": "Dana", "start_datetime": "2026-03-01T08:00:00Z", "end_datetime": "2026-03-01T20:00:00Z"}',
            "{not json",
            '{"user_name": "Sam", "start_datetime": "2026-03-01T20:00:00Z", "end_datetime": "2026-03-02T08:00:00Z"}',
        ]))
        result = commands.import_shifts(path, skip_errors=True)
        self.assertEqual(result.shifts_imported, 2)
        self.assertEqual(result.shifts_skipped, 1)
        self.assertEqual(result.errors[0]["line"], 2)
        self.assertEqual(result.errors[0]["kind"], "invalid")

        with self.assertRaises(ValueError) as ctx:
            commands.import_shifts(path)
        self.assertIn("line 2", str(ctx.exception))

    def test_import_yaml_with_empty_shifts_key(self):
        result = commands.import_shifts(self._write("empty.yaml", "shifts:\n"))
        self.assertEqual(result.shifts_imported, 0)
        self.assertEqual(result.shifts_skipped, 0)

    def test_import_yaml_rejects_non_list(self):
        with self.assertRaises(ValueError) as ctx:
            commands.import_shifts(self._write("bad.yaml", "shifts: tomorrow\n"))
        self.assertIn("expected a list of shifts", str(ctx.exception))


class CliTest(TempDatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.runner = CliRunner()

    def test_add_shift_and_coverage(self):
        result = self.runner.invoke(app, [
            "add-shift",
            "--user-name", "Dana",
            "--start", "2026-01-01T00:00:00Z",
            "--end", "2026-01-01T16:00:00Z",
        ])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Added shift", result.output)

        result = self.runner.invoke(app, [
            "coverage", "--start", "2026-01-01T00:00:00Z", "--end", "2026-01-02T00:00:00Z",
        ])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Status: partial", result.output)
        self.assertIn("Covered: 66.7%", result.output)

    def test_add_shift_rejects_inverted_range(self):
        result = self.runner.invoke(app, [
            "add-shift",
            "--user-name", "Dana",
            "--start", "2026-01-01T16:00:00Z",
            "--end", "2026-01-01T00:00:00Z",
        ])
        self.assertEqual(result.exit_code, 1)

    def test_gap_report_command(self):
        result = self.runner.invoke(app, [
            "gap-report", "--start", "2026-01-01T00:00:00Z", "--end", "2026-01-02T00:00:00Z",
        ])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No on-call coverage scheduled", result.output)
        self.assertIn("Status: CRITICAL", result.output)

    def test_schedule_report_command(self):
        commands.import_shifts(SAMPLE_DIR / "shifts.csv")
        output = self.tmp_dir / "schedule.csv"
        result = self.runner.invoke(app, [
            "schedule-report",
            "--start", "2026-01-05T08:00:00Z",
            "--end", "2026-01-07T08:00:00Z",
            "--type", "liaison",
            "--output", str(output),
        ])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("4 assignments", result.output)
        lines = output.read_text(encoding="utf-8").splitlines()
        self.assertEqual(lines[0], "On-Call Schedule Report - liaison")
        self.assertEqual(lines[2], "Coverage: 100.0% (4 assignments)")
        self.assertTrue(lines[5].startswith('"Dana Ortiz","N/A","dana@example.org","Jan 5, 2026","8:00 AM"'))
        self.assertTrue(lines[-1].endswith('"15.0 hours","backup",""'))

    def test_schedule_report_rejects_bad_date(self):
        result = self.runner.invoke(app, ["schedule-report", "--start", "soon"])
        self.assertEqual(result.exit_code, 1)


if __name__ == "__main__":
    unittest.main()
