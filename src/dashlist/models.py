from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo record as held by the
    storage backends.

    Fields:
    - id: Opaque unique identifier, immutable after creation
    - task: Non-empty task text (trimmed on input via schemas)
    - due_date: Due timestamp (aware UTC datetime)
    - is_done: Completion flag, False at creation
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp, bumped by every mutation
    """

    id: str
    task: str
    due_date: datetime
    is_done: bool
    created_at: datetime
    updated_at: datetime
