"""On-call coverage gap and overlap detection."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# Gaps between two shifts at or below this size are treated as covered
MIN_GAP_HOURS = 0.1

STATUS_FULL = "full"
STATUS_PARTIAL = "partial"
STATUS_CRITICAL = "critical"

SEVERITY_CRITICAL = "critical"
SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"


class InvalidInterval(ValueError):
    """A window or shift whose end is not after its start."""


class EmptyCoveragePolicy(str, Enum):
    """Severity applied when a window has no shifts at all."""

    ALWAYS_CRITICAL = "always_critical"
    BY_DURATION = "by_duration"


@dataclass(frozen=True)
class Shift:
    """A single on-call assignment. ``end`` is exclusive."""
    id: str
    owner_name: str
    start: datetime
    end: datetime
    priority_level: Optional[str] = None


@dataclass(frozen=True)
class Window:
    start: datetime
    end: datetime

    @property
    def hours(self) -> float:
        return hours_between(self.start, self.end)


@dataclass
class Gap:
    """A stretch of the window nobody is on call for."""
    start: datetime
    end: datetime
    duration_hours: float
    severity: str  # "critical", "high", "medium"
    message: str
    preceding_owner: Optional[str] = None
    following_owner: Optional[str] = None


@dataclass
class Overlap:
    """Two neighbouring shifts covering the same stretch."""
    start: datetime
    end: datetime
    duration_hours: float
    owners: List[str]
    message: str


@dataclass
class CoverageReport:
    window: Window
    status: str
    covered_percentage: float
    total_hours: float
    covered_hours: float
    gap_hours: float
    gaps: List[Gap] = field(default_factory=list)
    overlaps: List[Overlap] = field(default_factory=list)


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours from ``start`` to ``end`` at millisecond resolution."""
    millis = (end - start) // timedelta(milliseconds=1)
    return millis / 3_600_000


def gap_severity(duration_hours: float) -> str:
    if duration_hours > 24:
        return SEVERITY_CRITICAL
    if duration_hours > 4:
        return SEVERITY_HIGH
    return SEVERITY_MEDIUM


def validate_window(window: Window) -> None:
    # Sub-millisecond windows have zero length at the resolution hours are measured in
    if window.end <= window.start or window.hours <= 0:
        raise InvalidInterval(
            f"Window end {window.end.isoformat()} must be after start {window.start.isoformat()}"
        )


def validate_shift(shift: Shift) -> None:
    if shift.end <= shift.start:
        raise InvalidInterval(
            f"Shift {shift.id} ({shift.owner_name}) ends at {shift.end.isoformat()}, "
            f"which is not after its start {shift.start.isoformat()}"
        )


def _boundary_gap(start: datetime, end: datetime, message: str) -> Gap:
    hours = hours_between(start, end)
    return Gap(
        start=start,
        end=end,
        duration_hours=hours,
        severity=gap_severity(hours),
        message=message,
    )


def analyze_coverage(
    shifts: Sequence[Shift],
    window: Window,
    empty_policy: EmptyCoveragePolicy = EmptyCoveragePolicy.ALWAYS_CRITICAL,
) -> CoverageReport:
    """Find coverage gaps and overlaps for ``shifts`` across ``window``.

    Shifts must already be sorted by start time; they are not re-sorted here.
    Each shift is only compared with the one right after it, so when three or
    more shifts overlap only the neighbouring pairs are reported.

    Args:
        shifts: On-call shifts ordered by ``start`` ascending
        window: Time range being evaluated
        empty_policy: Severity rule for a window with no shifts

    Returns:
        CoverageReport with gaps, overlaps and aggregate hours

    Raises:
        InvalidInterval: If the window or any shift has non-positive duration
    """
    validate_window(window)
    for shift in shifts:
        validate_shift(shift)

    gaps: List[Gap] = []
    overlaps: List[Overlap] = []

    if not shifts:
        hours = window.hours
        severity = (
            SEVERITY_CRITICAL
            if empty_policy == EmptyCoveragePolicy.ALWAYS_CRITICAL
            else gap_severity(hours)
        )
        gaps.append(Gap(
            start=window.start,
            end=window.end,
            duration_hours=hours,
            severity=severity,
            message="No on-call coverage scheduled",
        ))
    else:
        first = shifts[0]
        if first.start > window.start:
            gaps.append(_boundary_gap(window.start, first.start, "Coverage gap at start of period"))

        for current, nxt in zip(shifts, shifts[1:]):
            if nxt.start > current.end:
                hours = hours_between(current.end, nxt.start)
                if hours > MIN_GAP_HOURS:
                    gaps.append(Gap(
                        start=current.end,
                        end=nxt.start,
                        duration_hours=hours,
                        severity=gap_severity(hours),
                        message=f"Coverage gap between {current.owner_name} and {nxt.owner_name}",
                        preceding_owner=current.owner_name,
                        following_owner=nxt.owner_name,
                    ))
            elif nxt.start < current.end:
                overlaps.append(Overlap(
                    start=nxt.start,
                    end=current.end,
                    duration_hours=hours_between(nxt.start, current.end),
                    owners=[current.owner_name, nxt.owner_name],
                    message=f"{current.owner_name} and {nxt.owner_name} have overlapping shifts",
                ))

        last = shifts[-1]
        if last.end < window.end:
            gaps.append(_boundary_gap(last.end, window.end, "Coverage gap at end of period"))

    total_hours = window.hours
    gap_hours = sum(g.duration_hours for g in gaps)
    covered_hours = total_hours - gap_hours
    covered_percentage = round(covered_hours / total_hours * 100, 1)

    if not gaps:
        status = STATUS_FULL
    elif any(g.severity == SEVERITY_CRITICAL for g in gaps):
        status = STATUS_CRITICAL
    else:
        status = STATUS_PARTIAL

    logger.info(
        "Coverage analysis complete: %d shifts, %d gaps, %d overlaps, %.1f%% coverage",
        len(shifts), len(gaps), len(overlaps), covered_percentage,
    )

    return CoverageReport(
        window=window,
        status=status,
        covered_percentage=covered_percentage,
        total_hours=total_hours,
        covered_hours=covered_hours,
        gap_hours=gap_hours,
        gaps=gaps,
        overlaps=overlaps,
    )
