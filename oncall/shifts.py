"""On-call schedule storage."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from oncall import config
from oncall.coverage import (
    CoverageReport,
    InvalidInterval,
    Shift,
    Window,
    analyze_coverage,
    validate_window,
)
from oncall.db import execute, normalize_ts, now_utc_iso, parse_ts, query_df, query_one

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = "normal"
PRIORITY_LEVELS = ["high", "primary", "normal", "backup"]
ON_CALL_TYPES = ["liaison", "general", "emergency", "technical", "management"]

SCHEDULE_COLUMNS = """
    id, user_id, user_name, user_email, user_phone,
    start_datetime, end_datetime, notes, priority_level, on_call_type,
    is_active, is_deleted, created_by_name, created_at, updated_at, updated_by_name
"""

# Higher rank wins when several people are on call at once
PRIORITY_RANK_SQL = """
    CASE priority_level
        WHEN 'high' THEN 3
        WHEN 'primary' THEN 2
        WHEN 'normal' THEN 1
        ELSE 0
    END
"""

UPDATABLE_FIELDS = {
    "user_id",
    "user_name",
    "user_email",
    "user_phone",
    "start_datetime",
    "end_datetime",
    "notes",
    "priority_level",
    "on_call_type",
    "is_active",
}


class ShiftNotFound(LookupError):
    """No live shift with the requested id."""


class ShiftConflict(ValueError):
    """The user already has an overlapping on-call assignment."""

    code = "OVERLAP_CONFLICT"


def row_to_shift(row: Dict[str, Any]) -> Shift:
    return Shift(
        id=row["id"],
        owner_name=row["user_name"],
        start=parse_ts(row["start_datetime"]),
        end=parse_ts(row["end_datetime"]),
        priority_level=row.get("priority_level"),
    )


def fetch_shifts_in_window(window: Window, on_call_type: Optional[str] = None) -> List[Shift]:
    """Get active shifts touching the window, ordered by start time.

    Args:
        window: Time range being checked
        on_call_type: Optional filter (liaison, general, ...)

    Returns:
        Shifts with ``end >= window.start`` and ``start <= window.end``
    """
    validate_window(window)
    where_clause = """
        is_active = 1
        AND is_deleted = 0
        AND end_datetime >= ?
        AND start_datetime <= ?
    """
    params: List = [normalize_ts(window.start), normalize_ts(window.end)]

    if on_call_type:
        where_clause += " AND on_call_type = ?"
        params.append(on_call_type)

    df = query_df(
        f"""
        SELECT id, user_name, start_datetime, end_datetime, priority_level
        FROM on_call_schedule
        WHERE {where_clause}
        ORDER BY start_datetime ASC
        """,
        tuple(params),
    )
    logger.info(
        "Found %d shifts between %s and %s%s",
        len(df), window.start.isoformat(), window.end.isoformat(),
        f" for type {on_call_type}" if on_call_type else "",
    )
    return [row_to_shift(row) for row in df.to_dict("records")]


def list_shifts(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    user_id: Optional[str] = None,
    include_deleted: bool = False,
    on_call_type: Optional[str] = None,
) -> pd.DataFrame:
    clauses = ["is_active = 1"]
    params: List = [now_utc_iso()]

    if not include_deleted:
        clauses.append("is_deleted = 0")
    if start:
        clauses.append("end_datetime >= ?")
        params.append(normalize_ts(start))
    if end:
        clauses.append("start_datetime <= ?")
        params.append(normalize_ts(end))
    if user_id:
        clauses.append("user_id = ?")
        params.append(user_id)
    if on_call_type:
        clauses.append("on_call_type = ?")
        params.append(on_call_type)

    return query_df(
        f"""
        SELECT {SCHEDULE_COLUMNS},
               CASE WHEN ? BETWEEN start_datetime AND end_datetime THEN 1 ELSE 0 END
                   AS is_currently_active
        FROM on_call_schedule
        WHERE {" AND ".join(clauses)}
        ORDER BY start_datetime ASC
        """,
        tuple(params),
    )


def get_shift(shift_id: str) -> Optional[dict]:
    return query_one(
        f"SELECT {SCHEDULE_COLUMNS} FROM on_call_schedule WHERE id = ? AND is_deleted = 0",
        (shift_id,),
    )


def has_overlap(
    user_id: str,
    start_datetime: str,
    end_datetime: str,
    exclude_id: Optional[str] = None,
) -> bool:
    """Check whether a user has another live shift overlapping the range.

    Exact boundary contact (one ends when the other starts) is not an overlap.
    """
    sql = """
        SELECT COUNT(*) AS overlap_count
        FROM on_call_schedule
        WHERE user_id = ?
          AND is_active = 1
          AND is_deleted = 0
          AND start_datetime < ?
          AND end_datetime > ?
    """
    params: List = [user_id, end_datetime, start_datetime]
    if exclude_id:
        sql += " AND id != ?"
        params.append(exclude_id)
    row = query_one(sql, tuple(params))
    return bool(row and row["overlap_count"])


def _check_choice(field_name: str, value: Optional[str], choices: List[str]) -> None:
    if value and value not in choices:
        raise ValueError(f"Invalid {field_name} '{value}'. Expected one of: {', '.join(choices)}")


def _validated_range(start: Any, end: Any) -> tuple:
    start_iso = normalize_ts(start)
    end_iso = normalize_ts(end)
    if parse_ts(end_iso) <= parse_ts(start_iso):
        raise InvalidInterval("End datetime must be after start datetime")
    return start_iso, end_iso


def create_shift(
    user_name: str,
    start_datetime: Any,
    end_datetime: Any,
    user_id: Optional[str] = None,
    user_email: Optional[str] = None,
    user_phone: Optional[str] = None,
    notes: Optional[str] = None,
    priority_level: Optional[str] = None,
    on_call_type: Optional[str] = None,
    created_by_name: Optional[str] = None,
) -> str:
    """Create an on-call assignment.

    Returns:
        The new shift id

    Raises:
        ValueError: If a required field is missing or a priority or type is unknown
        InvalidInterval: If the end is not after the start
        ShiftConflict: If ``user_id`` already has an overlapping assignment
    """
    if not user_name or not start_datetime or not end_datetime:
        raise ValueError("Missing required fields: user_name, start_datetime, end_datetime")
    _check_choice("priority_level", priority_level, PRIORITY_LEVELS)
    _check_choice("on_call_type", on_call_type, ON_CALL_TYPES)

    start_iso, end_iso = _validated_range(start_datetime, end_datetime)

    if user_id and has_overlap(user_id, start_iso, end_iso):
        raise ShiftConflict("This user already has an overlapping on-call assignment")

    shift_id = str(uuid.uuid4())
    execute(
        """
        INSERT INTO on_call_schedule(
            id, user_id, user_name, user_email, user_phone,
            start_datetime, end_datetime, notes, priority_level, on_call_type,
            is_active, is_deleted, created_by_name, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, 0, ?, ?)
        """,
        (
            shift_id,
            user_id,
            user_name,
            user_email,
            user_phone,
            start_iso,
            end_iso,
            notes,
            priority_level or DEFAULT_PRIORITY,
            on_call_type,
            created_by_name or "Unknown",
            now_utc_iso(),
        ),
    )
    logger.info("Created on-call schedule %s for %s", shift_id, user_name)
    return shift_id


def update_shift(shift_id: str, updated_by_name: Optional[str] = None, **fields: Any) -> dict:
    """Apply a partial update to a live shift and return the updated row.

    Raises:
        ShiftNotFound: If the shift does not exist or was deleted
        ValueError: If a field is unknown or a priority or type is not allowed
        InvalidInterval: If the resulting range is empty
        ShiftConflict: If the new range overlaps another shift of the same user
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")

    existing = get_shift(shift_id)
    if not existing:
        raise ShiftNotFound(f"On-call schedule {shift_id} not found")

    updates = {k: v for k, v in fields.items() if v is not None}
    _check_choice("priority_level", updates.get("priority_level"), PRIORITY_LEVELS)
    _check_choice("on_call_type", updates.get("on_call_type"), ON_CALL_TYPES)
    if "start_datetime" in updates or "end_datetime" in updates:
        start_iso, end_iso = _validated_range(
            updates.get("start_datetime", existing["start_datetime"]),
            updates.get("end_datetime", existing["end_datetime"]),
        )
        updates["start_datetime"] = start_iso
        updates["end_datetime"] = end_iso

        user_id = updates.get("user_id", existing["user_id"])
        if user_id and has_overlap(user_id, start_iso, end_iso, exclude_id=shift_id):
            raise ShiftConflict("This user already has an overlapping on-call assignment")

    if "is_active" in updates:
        updates["is_active"] = 1 if updates["is_active"] else 0

    updates["updated_by_name"] = updated_by_name or "System"
    updates["updated_at"] = now_utc_iso()

    assignments = ", ".join(f"{column} = ?" for column in updates)
    execute(
        f"UPDATE on_call_schedule SET {assignments} WHERE id = ?",
        tuple(updates.values()) + (shift_id,),
    )
    logger.info("Updated on-call schedule %s", shift_id)
    return get_shift(shift_id)


def delete_shift(shift_id: str) -> None:
    """Soft delete a shift."""
    if not get_shift(shift_id):
        raise ShiftNotFound(f"On-call schedule {shift_id} not found")
    execute(
        "UPDATE on_call_schedule SET is_deleted = 1, deleted_at = ? WHERE id = ?",
        (now_utc_iso(), shift_id),
    )
    logger.info("Deleted on-call schedule %s", shift_id)


def current_on_call(now: Optional[datetime] = None) -> Optional[dict]:
    """Get whoever is on call right now, highest priority first."""
    now_iso = normalize_ts(now) if now else now_utc_iso()
    return query_one(
        f"""
        SELECT user_name, user_email, user_phone, start_datetime, end_datetime, priority_level
        FROM on_call_schedule
        WHERE is_active = 1
          AND is_deleted = 0
          AND ? BETWEEN start_datetime AND end_datetime
        ORDER BY {PRIORITY_RANK_SQL} DESC, start_datetime ASC
        """,
        (now_iso,),
    )


def resolve_window(
    start_date: Optional[str | datetime] = None,
    end_date: Optional[str | datetime] = None,
) -> Window:
    """Build a window from optional ISO-8601 bounds.

    A missing start defaults to now and a missing end to
    ``start + COVERAGE_DEFAULT_DAYS``.
    """
    start = parse_ts(start_date) if start_date else parse_ts(now_utc_iso())
    end = parse_ts(end_date) if end_date else start + timedelta(days=config.COVERAGE_DEFAULT_DAYS)
    window = Window(start=start, end=end)
    validate_window(window)
    return window


def check_coverage(window: Window, on_call_type: Optional[str] = None) -> Tuple[List[Shift], CoverageReport]:
    """Load the shifts for a window and analyze their coverage."""
    shifts = fetch_shifts_in_window(window, on_call_type)
    return shifts, analyze_coverage(shifts, window)
