from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from cli import importers
from oncall.coverage import CoverageReport
from oncall.db import init_db, to_iso
from oncall.shifts import ShiftConflict, create_shift

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Result of importing a shift file."""
    path: Path
    shifts_imported: int = 0
    shifts_skipped: int = 0
    shift_ids: List[str] = field(default_factory=list)
    errors: List[dict] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.shifts_imported > 0 or self.shifts_skipped == 0


def import_shifts(
    path: Path,
    skip_errors: bool = False,
    on_call_type: Optional[str] = None,
    created_by_name: Optional[str] = None,
) -> ImportResult:
    """Import shifts from a CSV, NDJSON or YAML file.

    Args:
        path: File to import
        skip_errors: If True, record bad rows and keep going
        on_call_type: Type applied to rows that do not set one
        created_by_name: Recorded as the creator of every shift

    Returns:
        ImportResult with counts and per-row errors

    Raises:
        ValueError: On the first bad row when ``skip_errors`` is False
    """
    init_db()
    result = ImportResult(path=path)

    for line_no, row in importers.iter_rows(path):
        try:
            prepared = importers.prepare_shift(row)
            if on_call_type and not prepared.get("on_call_type"):
                prepared["on_call_type"] = on_call_type
            if created_by_name:
                prepared["created_by_name"] = created_by_name
            result.shift_ids.append(create_shift(**prepared))
            result.shifts_imported += 1
        except ValueError as e:
            # Covers ShiftConflict, InvalidInterval and undecodable NDJSON lines
            if not skip_errors:
                raise ValueError(f"{path.name} line {line_no}: {e}") from e
            kind = "conflict" if isinstance(e, ShiftConflict) else "invalid"
            result.errors.append({"line": line_no, "error": str(e), "kind": kind})
            result.shifts_skipped += 1

    logger.info(
        "Imported %d shifts from %s (%d skipped)",
        result.shifts_imported, path, result.shifts_skipped,
    )
    return result


def print_import_report(result: ImportResult, verbose: bool = False) -> List[str]:
    lines = [f"Importing {result.path.name}"]
    lines.append(f"  Imported: {result.shifts_imported} shifts")
    if result.shifts_skipped > 0:
        lines.append(f"  Skipped: {result.shifts_skipped} rows")
        errors = result.errors if verbose else result.errors[:1]
        for err in errors:
            lines.append(f"    Line {err['line']}: {err['error']}")
    return lines


def print_coverage(report: CoverageReport, verbose: bool = False) -> List[str]:
    """Format a CoverageReport for CLI output."""
    lines = [
        f"Coverage {to_iso(report.window.start)} -> {to_iso(report.window.end)}",
        f"  Status: {report.status}",
        f"  Covered: {report.covered_percentage:.1f}% "
        f"({report.covered_hours:.1f} of {report.total_hours:.1f} hours)",
        f"  Gaps: {len(report.gaps)} ({report.gap_hours:.1f} hours)",
        f"  Overlaps: {len(report.overlaps)}",
    ]
    for gap in report.gaps:
        lines.append(
            f"  [gap/{gap.severity}] {to_iso(gap.start)} -> {to_iso(gap.end)} "
            f"({gap.duration_hours:.2f}h) {gap.message}"
        )
    if verbose:
        for overlap in report.overlaps:
            lines.append(
                f"  [overlap] {to_iso(overlap.start)} -> {to_iso(overlap.end)} "
                f"({overlap.duration_hours:.2f}h) {overlap.message}"
            )
    return lines


def init_database(path: Optional[Path] = None) -> Path:
    return init_db(path)
