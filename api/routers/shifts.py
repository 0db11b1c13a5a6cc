"""On-call schedule API endpoints."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from oncall.db import now_utc_iso
from oncall.shifts import (
    ShiftConflict,
    ShiftNotFound,
    create_shift,
    delete_shift,
    get_shift,
    list_shifts,
    update_shift,
)

from api.schemas.shifts import (
    ShiftCreate,
    ShiftCreated,
    ShiftListResponse,
    ShiftRecord,
    ShiftResponse,
    ShiftUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/on-call", tags=["on-call"])


def _conflict_response(error: ShiftConflict) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"success": False, "error": str(error), "code": error.code},
    )


@router.get("", response_model=ShiftListResponse)
def get_schedules(
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
):
    """List on-call schedules, optionally limited to a date range or user."""
    schedules_df = list_shifts(
        start=start_date,
        end=end_date,
        user_id=user_id,
        include_deleted=include_deleted,
    )
    schedules = [ShiftRecord(**row) for row in schedules_df.to_dict("records")]
    logger.info("Retrieved %d on-call schedules", len(schedules))
    return ShiftListResponse(schedules=schedules, count=len(schedules), timestamp=now_utc_iso())


@router.get("/{schedule_id}", response_model=ShiftResponse)
def get_schedule(schedule_id: str):
    """Get one on-call schedule."""
    schedule = get_shift(schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="On-call schedule not found")
    return ShiftResponse(schedule=ShiftRecord(**schedule))


@router.post("", response_model=ShiftCreated)
def create_schedule(schedule: ShiftCreate):
    """Create a new on-call assignment."""
    try:
        schedule_id = create_shift(**schedule.model_dump())
    except ShiftConflict as e:
        return _conflict_response(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ShiftCreated(schedule_id=schedule_id, message="On-call schedule created successfully")


@router.put("/{schedule_id}", response_model=ShiftResponse)
def update_schedule(schedule_id: str, update: ShiftUpdate):
    """Update an on-call assignment. Only the fields sent are changed."""
    fields = update.model_dump(exclude_unset=True)
    updated_by_name = fields.pop("updated_by_name", None)
    try:
        schedule = update_shift(schedule_id, updated_by_name=updated_by_name, **fields)
    except ShiftNotFound:
        raise HTTPException(status_code=404, detail="On-call schedule not found")
    except ShiftConflict as e:
        return _conflict_response(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ShiftResponse(schedule=ShiftRecord(**schedule))


@router.delete("/{schedule_id}")
def delete_schedule(schedule_id: str):
    """Soft delete an on-call assignment."""
    try:
        delete_shift(schedule_id)
    except ShiftNotFound:
        raise HTTPException(status_code=404, detail="On-call schedule not found")
    return {"success": True, "message": "On-call schedule deleted successfully"}
