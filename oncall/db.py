from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import pandas as pd

from oncall import config


def db_path() -> Path:
    return config.ONCALL_DB_PATH


def connect(path: Optional[Path] = None) -> sqlite3.Connection:
    conn = sqlite3.connect(path or db_path())
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_db(path: Optional[Path] = None, schema_path: Path = config.SCHEMA_PATH) -> Path:
    path = path or db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with connect(path) as conn:
        conn.executescript(schema_path.read_text(encoding="utf-8"))
    return path


def query_df(sql: str, params: Tuple = ()) -> pd.DataFrame:
    with connect() as conn:
        return pd.read_sql_query(sql, conn, params=params)


def query_one(sql: str, params: Tuple = ()) -> Optional[dict]:
    with connect() as conn:
        conn.row_factory = sqlite3.Row
        row = conn.execute(sql, params).fetchone()
        return dict(row) if row else None


def execute(sql: str, params: Tuple = ()) -> int:
    """Run a write statement and return the number of affected rows."""
    with connect() as conn:
        cursor = conn.execute(sql, params)
        return cursor.rowcount


def parse_ts(value: str | datetime) -> datetime:
    """Parse an ISO-8601 value into an aware UTC datetime. Naive input is taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    return parse_ts(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_ts(value: str | datetime | None) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_iso(parse_ts(value))


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_utc_iso() -> str:
    return to_iso(now_utc())
