from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

import yaml

REQUIRED_FIELDS = ["user_name", "start_datetime", "end_datetime"]

OPTIONAL_FIELDS = [
    "user_id",
    "user_email",
    "user_phone",
    "notes",
    "priority_level",
    "on_call_type",
    "created_by_name",
]

# Column names used by schedule exports and the old JSON API
FIELD_ALIASES = {
    "username": "user_name",
    "name": "user_name",
    "userid": "user_id",
    "useremail": "user_email",
    "email": "user_email",
    "userphone": "user_phone",
    "phone": "user_phone",
    "start": "start_datetime",
    "startdatetime": "start_datetime",
    "end": "end_datetime",
    "enddatetime": "end_datetime",
    "priority": "priority_level",
    "prioritylevel": "priority_level",
    "type": "on_call_type",
    "oncalltype": "on_call_type",
}


def _normalize_value(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    text = value.strip()
    return text or None


def _parse_ndjson(path: Path) -> Iterator[Tuple[int, str]]:
    """Yield raw lines; they are decoded per row so one bad line can be skipped."""
    with path.open("r", encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            yield line_no, line


def _parse_csv(path: Path) -> Iterator[Tuple[int, Dict[str, Any]]]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        for row_no, row in enumerate(reader, start=2):
            yield row_no, row


def _parse_yaml(path: Path) -> Iterator[Tuple[int, Dict[str, Any]]]:
    """YAML files hold a list of shifts, either top-level or under ``shifts:``."""
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    if isinstance(data, dict):
        data = data.get("shifts") or []
    if not isinstance(data, list):
        raise ValueError(f"{path.name}: expected a list of shifts, got {type(data).__name__}")
    for index, row in enumerate(data, start=1):
        yield index, row


def iter_rows(path: Path) -> Iterator[Tuple[int, Any]]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _parse_csv(path)
    if suffix in (".yaml", ".yml"):
        return _parse_yaml(path)
    return _parse_ndjson(path)


def canonical_field(name: str) -> str:
    key = name.strip().lower().replace("_", "").replace("-", "").replace(" ", "")
    if name in REQUIRED_FIELDS or name in OPTIONAL_FIELDS:
        return name
    return FIELD_ALIASES.get(key, name)


def validate_row(row: Dict[str, Any]) -> List[str]:
    return [field for field in REQUIRED_FIELDS if not row.get(field)]


def prepare_shift(row: Any) -> Dict[str, Any]:
    """Map a source row onto ``create_shift`` keyword arguments.

    NDJSON rows arrive as raw text; a line that is not valid JSON raises
    ``json.JSONDecodeError``, which is a ``ValueError``.
    """
    if isinstance(row, str):
        row = json.loads(row)
    if not isinstance(row, dict):
        raise ValueError(f"Expected a mapping, got {type(row).__name__}")
    normalized = {canonical_field(str(key)): _normalize_value(value) for key, value in row.items()}
    missing = validate_row(normalized)
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")

    prepared = {field: normalized[field] for field in REQUIRED_FIELDS}
    for field in OPTIONAL_FIELDS:
        if normalized.get(field) is not None:
            prepared[field] = str(normalized[field])
    prepared["start_datetime"] = str(prepared["start_datetime"])
    prepared["end_datetime"] = str(prepared["end_datetime"])
    return prepared
