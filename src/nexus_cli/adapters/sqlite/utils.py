"""Utility functions for the SQLite adapter."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def generate_uuid() -> str:
    return str(uuid.uuid4())


def now_utc() -> datetime:
    return datetime.now(UTC)


def to_db_value(value: Any) -> Any:
    """Convert a model value into something sqlite3 can bind.

    Datetimes become ISO-8601 strings in UTC (naive values are taken as UTC),
    enums their value and booleans 0/1.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary (empty for None)."""
    if row is None:
        return {}
    return dict(row)


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse a stored timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def build_set_clause(updates: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build an UPDATE SET clause; explicit ``None`` values clear the column.

    Returns:
        Tuple of (SET clause string, parameters list)
    """
    set_parts = [f"{key} = ?" for key in updates]
    params = [to_db_value(value) for value in updates.values()]
    return ", ".join(set_parts), params
