from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union
from uuid import uuid4

# Incoming due dates can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# PUBLIC_INTERFACE
def new_todo_id() -> str:
    """Return a fresh opaque identifier for a todo record."""
    return uuid4().hex


# PUBLIC_INTERFACE
def parse_timestamp(value: Optional[DueDateInput]) -> datetime:
    """
    Normalize a timestamp input into an aware UTC datetime.
    - Strings are parsed as ISO8601; a trailing 'Z' is accepted and date-only strings become midnight.
    - A date (not datetime) becomes midnight of that day.
    - Naive datetimes are taken to be UTC.
    """
    if value is None:
        raise ValueError("dueDate is required")

    if isinstance(value, datetime):
        return as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str):
        s = value.strip()
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError(
                    "Invalid dueDate format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)

    raise ValueError("Invalid type for dueDate; expected date, datetime, or ISO8601 string.")
