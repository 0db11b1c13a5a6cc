"""Pydantic schemas for API request/response models."""
from api.schemas.shifts import (
    ShiftCreate,
    ShiftCreated,
    ShiftListResponse,
    ShiftRecord,
    ShiftResponse,
    ShiftUpdate,
)
from api.schemas.coverage import (
    CoverageGap,
    CoverageOverlap,
    CoverageResponse,
    CoverageSummary,
    CoverageWarning,
    CurrentOnCall,
    GapReportRequest,
    GapReportResponse,
    ScheduleReportRequest,
    ShiftSummary,
)

__all__ = [
    "ShiftCreate",
    "ShiftCreated",
    "ShiftListResponse",
    "ShiftRecord",
    "ShiftResponse",
    "ShiftUpdate",
    "CoverageGap",
    "CoverageOverlap",
    "CoverageResponse",
    "CoverageSummary",
    "CoverageWarning",
    "CurrentOnCall",
    "GapReportRequest",
    "GapReportResponse",
    "ScheduleReportRequest",
    "ShiftSummary",
]
