"""Coverage warnings and gap report text."""
from __future__ import annotations

import csv
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from oncall.coverage import CoverageReport, Gap, Overlap, hours_between
from oncall.db import now_utc, parse_ts, to_iso

OVERLAP_SEVERITY = "warning"

SCHEDULE_REPORT_COLUMNS = [
    "Assignee",
    "Phone",
    "Email",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "Duration",
    "Priority",
    "Notes",
]


def gap_to_dict(gap: Gap) -> Dict[str, Any]:
    data = {
        "gap_start": to_iso(gap.start),
        "gap_end": to_iso(gap.end),
        "gap_hours": gap.duration_hours,
        "severity": gap.severity,
        "message": gap.message,
    }
    if gap.preceding_owner is not None:
        data["previous_user"] = gap.preceding_owner
        data["next_user"] = gap.following_owner
    return data


def overlap_to_dict(overlap: Overlap) -> Dict[str, Any]:
    return {
        "overlap_start": to_iso(overlap.start),
        "overlap_end": to_iso(overlap.end),
        "overlap_hours": overlap.duration_hours,
        "users": list(overlap.owners),
        "message": overlap.message,
    }


def build_warnings(report: CoverageReport) -> List[Dict[str, Any]]:
    """Merge gaps and overlaps into one list, gaps first."""
    warnings = [
        {
            "type": "gap",
            "severity": g.severity,
            "message": g.message,
            "start": to_iso(g.start),
            "end": to_iso(g.end),
            "hours": g.duration_hours,
        }
        for g in report.gaps
    ]
    warnings.extend(
        {
            "type": "overlap",
            "severity": OVERLAP_SEVERITY,
            "message": o.message,
            "start": to_iso(o.start),
            "end": to_iso(o.end),
            "hours": o.duration_hours,
        }
        for o in report.overlaps
    )
    return warnings


def _display_date(dt: datetime) -> str:
    return f"{dt:%b} {dt.day}, {dt.year}"


def _display_time(dt: datetime) -> str:
    return f"{dt.hour % 12 or 12}:{dt:%M %p}"


def _display_ts(dt: datetime) -> str:
    # e.g. "Jan 5, 2026 3:00 PM UTC"
    dt = parse_ts(dt)
    return f"{_display_date(dt)} {_display_time(dt)} UTC"


def format_gap_report(report: CoverageReport, on_call_type: Optional[str] = None) -> str:
    title = "On-Call Coverage Gap Report"
    if on_call_type:
        title += f" ({on_call_type})"

    lines = [
        title,
        "=" * len(title),
        f"Period: {_display_ts(report.window.start)} - {_display_ts(report.window.end)}",
        f"Status: {report.status.upper()}",
        f"Coverage: {report.covered_percentage:.1f}%",
        f"Gaps: {len(report.gaps)} ({report.gap_hours:.1f} hours uncovered)",
        "",
    ]

    if not report.gaps:
        lines.append("No coverage gaps found for this period.")
        return "\n".join(lines)

    for i, gap in enumerate(report.gaps, start=1):
        lines.append(f"{i}. [{gap.severity.upper()}] {gap.message}")
        lines.append(f"   {_display_ts(gap.start)} - {_display_ts(gap.end)} ({gap.duration_hours:.1f} hours)")

    if report.overlaps:
        lines.append("")
        lines.append(f"Overlapping shifts: {len(report.overlaps)}")
        for overlap in report.overlaps:
            lines.append(f"- {overlap.message} ({overlap.duration_hours:.1f} hours)")

    return "\n".join(lines)


def _cell(value: Any, default: str = "") -> str:
    if value is None or pd.isna(value):
        return default
    text = str(value).strip()
    return text or default


def schedule_rows(shifts_df: pd.DataFrame) -> pd.DataFrame:
    """One spreadsheet row per assignment, in ``SCHEDULE_REPORT_COLUMNS`` order."""
    rows = []
    for record in shifts_df.to_dict("records"):
        start = parse_ts(record["start_datetime"])
        end = parse_ts(record["end_datetime"])
        rows.append({
            "Assignee": _cell(record.get("user_name")),
            "Phone": _cell(record.get("user_phone"), "N/A"),
            "Email": _cell(record.get("user_email"), "N/A"),
            "Start Date": _display_date(start),
            "Start Time": _display_time(start),
            "End Date": _display_date(end),
            "End Time": _display_time(end),
            "Duration": f"{hours_between(start, end):.1f} hours",
            "Priority": _cell(record.get("priority_level"), "normal"),
            "Notes": _cell(record.get("notes")),
        })
    return pd.DataFrame(rows, columns=SCHEDULE_REPORT_COLUMNS)


def format_schedule_report(
    shifts_df: pd.DataFrame,
    report: CoverageReport,
    on_call_type: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Build the schedule export: a short summary header followed by CSV.

    Times are shown in UTC. Every data cell is quoted so the file opens
    cleanly in spreadsheet tools.

    Args:
        shifts_df: Shifts as returned by ``oncall.shifts.list_shifts``
        report: Coverage report for the same window and type
        on_call_type: Type named in the title, all types when None
        generated_at: Timestamp printed in the header, defaults to now
    """
    rows = schedule_rows(shifts_df)
    header = [
        f"On-Call Schedule Report - {on_call_type or 'all types'}",
        f"Generated: {_display_ts(generated_at or now_utc())}",
        f"Coverage: {report.covered_percentage:.1f}% ({len(rows)} assignments)",
        "",
    ]
    body = rows.to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    lines = header + [",".join(SCHEDULE_REPORT_COLUMNS)]
    if body.strip():
        lines.append(body.rstrip("\n"))
    return "\n".join(lines)
