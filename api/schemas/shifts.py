"""On-call schedule Pydantic models."""
from typing import List, Optional

from pydantic import BaseModel, Field


class ShiftRecord(BaseModel):
    """A stored on-call assignment."""

    id: str
    user_id: Optional[str] = None
    user_name: str
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    start_datetime: str
    end_datetime: str
    notes: Optional[str] = None
    priority_level: str = "normal"
    on_call_type: Optional[str] = None
    is_active: bool = True
    created_by_name: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None
    updated_by_name: Optional[str] = None
    is_currently_active: Optional[bool] = None


class ShiftListResponse(BaseModel):
    """Schedules matching a list query."""

    success: bool = True
    schedules: List[ShiftRecord]
    count: int
    timestamp: str


class ShiftResponse(BaseModel):
    success: bool = True
    schedule: ShiftRecord


class ShiftCreate(BaseModel):
    """Create a new on-call assignment."""

    user_name: str = Field(..., min_length=1)
    start_datetime: str = Field(..., description="Shift start (ISO8601)")
    end_datetime: str = Field(..., description="Shift end, exclusive (ISO8601)")
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    notes: Optional[str] = None
    priority_level: Optional[str] = Field(None, description="normal, primary, backup or high")
    on_call_type: Optional[str] = Field(None, description="liaison, general, emergency, ...")
    created_by_name: Optional[str] = None


class ShiftUpdate(BaseModel):
    """Partial update of an on-call assignment. Omitted fields are left unchanged."""

    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    start_datetime: Optional[str] = None
    end_datetime: Optional[str] = None
    notes: Optional[str] = None
    priority_level: Optional[str] = None
    on_call_type: Optional[str] = None
    is_active: Optional[bool] = None
    updated_by_name: Optional[str] = None


class ShiftCreated(BaseModel):
    success: bool = True
    schedule_id: str
    message: str
