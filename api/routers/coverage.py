"""On-call coverage API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response

from oncall.coverage import InvalidInterval
from oncall.db import now_utc, now_utc_iso, to_iso
from oncall.reports import (
    build_warnings,
    format_gap_report,
    format_schedule_report,
    gap_to_dict,
    overlap_to_dict,
)
from oncall.shifts import check_coverage, current_on_call, list_shifts, resolve_window

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

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/on-call", tags=["coverage"])


@router.get("/coverage", response_model=CoverageResponse)
def get_coverage(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    on_call_type: Optional[str] = Query(default=None, alias="type"),
):
    """Check on-call coverage for a window and list gaps and overlaps.

    Defaults to the next 30 days when no window is given.
    """
    try:
        window = resolve_window(start_date, end_date)
    except ValueError as e:
        # InvalidInterval and unparseable dates alike
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        "Checking coverage from %s to %s (%s)",
        window.start.isoformat(), window.end.isoformat(), on_call_type or "all types",
    )

    try:
        shifts, report = check_coverage(window, on_call_type)
        on_call_now = current_on_call()
    except Exception as e:
        logger.exception("Error checking coverage")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Failed to check on-call coverage",
                "details": str(e),
            },
        )

    gaps = [CoverageGap(**gap_to_dict(g)) for g in report.gaps]
    overlaps = [CoverageOverlap(**overlap_to_dict(o)) for o in report.overlaps]

    return CoverageResponse(
        coverage=CoverageSummary(
            status=report.status,
            covered_percentage=report.covered_percentage,
            total_hours=report.total_hours,
            covered_hours=report.covered_hours,
            gap_hours=report.gap_hours,
            start_date=to_iso(window.start),
            end_date=to_iso(window.end),
            gaps=gaps,
            overlaps=overlaps,
        ),
        current_on_call=CurrentOnCall(**on_call_now) if on_call_now else None,
        shifts=[
            ShiftSummary(
                id=s.id,
                user_name=s.owner_name,
                start_datetime=to_iso(s.start),
                end_datetime=to_iso(s.end),
                priority_level=s.priority_level,
            )
            for s in shifts
        ],
        gaps=gaps,
        overlaps=overlaps,
        warnings=[CoverageWarning(**w) for w in build_warnings(report)],
        timestamp=now_utc_iso(),
    )


@router.post("/reports/gaps", response_model=GapReportResponse)
def create_gap_report(request: GapReportRequest):
    """Build a plain-text gap report for managers."""
    try:
        window = resolve_window(request.start_date, request.end_date)
        _, report = check_coverage(window, request.on_call_type)
    except InvalidInterval as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date: {e}")

    logger.info(
        "Generated gap report for %s: %.1f%% coverage, %d gaps",
        request.on_call_type or "all types", report.covered_percentage, len(report.gaps),
    )

    return GapReportResponse(
        status=report.status,
        covered_percentage=report.covered_percentage,
        gap_count=len(report.gaps),
        report=format_gap_report(report, request.on_call_type),
    )


@router.post("/reports/schedule")
def create_schedule_report(request: ScheduleReportRequest):
    """Export the schedule for a window as CSV with a coverage summary header."""
    try:
        window = resolve_window(request.start_date, request.end_date)
        _, report = check_coverage(window, request.on_call_type)
    except InvalidInterval as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date: {e}")

    shifts_df = list_shifts(window.start, window.end, on_call_type=request.on_call_type)
    content = format_schedule_report(shifts_df, report, request.on_call_type)
    filename = f"on-call-schedule-{request.on_call_type or 'all'}-{now_utc():%Y-%m-%d}.csv"

    logger.info(
        "Generated schedule report for %s: %d assignments",
        request.on_call_type or "all types", len(shifts_df),
    )

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
