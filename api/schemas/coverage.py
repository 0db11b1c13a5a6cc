"""Coverage report Pydantic models."""
from typing import List, Optional

from pydantic import BaseModel, Field


class CoverageGap(BaseModel):
    """A stretch of time with nobody on call."""

    gap_start: str
    gap_end: str
    gap_hours: float
    severity: str
    message: str
    previous_user: Optional[str] = None
    next_user: Optional[str] = None


class CoverageOverlap(BaseModel):
    """Two neighbouring shifts covering the same time."""

    overlap_start: str
    overlap_end: str
    overlap_hours: float
    users: List[str]
    message: str


class CoverageWarning(BaseModel):
    type: str  # "gap" | "overlap"
    severity: str
    message: str
    start: str
    end: str
    hours: float


class CoverageSummary(BaseModel):
    status: str  # "full" | "partial" | "critical"
    covered_percentage: float
    total_hours: float
    covered_hours: float
    gap_hours: float
    start_date: str
    end_date: str
    gaps: List[CoverageGap]
    overlaps: List[CoverageOverlap]


class CurrentOnCall(BaseModel):
    user_name: str
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    start_datetime: str
    end_datetime: str
    priority_level: Optional[str] = None


class ShiftSummary(BaseModel):
    id: str
    user_name: str
    start_datetime: str
    end_datetime: str
    priority_level: Optional[str] = None


class CoverageResponse(BaseModel):
    """Coverage analysis for a time window.

    ``gaps`` and ``overlaps`` repeat the ones inside ``coverage`` for older clients.
    """

    success: bool = True
    coverage: CoverageSummary
    current_on_call: Optional[CurrentOnCall] = None
    shifts: List[ShiftSummary]
    gaps: List[CoverageGap]
    overlaps: List[CoverageOverlap]
    warnings: List[CoverageWarning]
    timestamp: str


class GapReportRequest(BaseModel):
    """Window and type to build a gap report for."""

    start_date: Optional[str] = Field(None, description="Window start (ISO8601), defaults to now")
    end_date: Optional[str] = Field(None, description="Window end (ISO8601), defaults to 30 days ahead")
    on_call_type: Optional[str] = None


class GapReportResponse(BaseModel):
    success: bool = True
    status: str
    covered_percentage: float
    gap_count: int
    report: str


class ScheduleReportRequest(GapReportRequest):
    """Window and type to export the schedule for. The response is CSV."""
