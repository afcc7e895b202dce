from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import TodoEntity
from .utils import parse_timestamp

TASK_MAX_LENGTH = 200

# Wire payloads use camelCase (dueDate, isDone, ...); Python code uses snake_case
_wire_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_task(v: Any) -> str:
    if not isinstance(v, str):
        raise ValueError("task must be a string")
    s = v.strip()
    if not (1 <= len(s) <= TASK_MAX_LENGTH):
        raise ValueError(f"task length must be between 1 and {TASK_MAX_LENGTH} characters")
    return s


def _validate_id(v: Any) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ValueError("id must be a non-empty string")
    return v.strip()


# PUBLIC_INTERFACE
class AddTodoInput(BaseModel):
    """
    Input of the addTodo procedure.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"example": {"task": "Buy milk", "dueDate": "2024-01-01T10:00:00Z"}},
    )

    task: str = Field(..., description="Task text", min_length=1, max_length=TASK_MAX_LENGTH)
    due_date: datetime = Field(
        ...,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00 UTC",
    )

    @field_validator("task", mode="before")
    @classmethod
    def validate_task(cls, v: Any) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _validate_task(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Any) -> datetime:
        """
        Normalize dueDate from str/date/datetime to an aware UTC datetime.
        """
        return parse_timestamp(v)


# PUBLIC_INTERFACE
class UpdateTodoInput(AddTodoInput):
    """
    Input of the updateTodo procedure: the full replacement of task and dueDate.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {"id": "3f1c2b...", "task": "Buy oat milk", "dueDate": "2024-01-02T09:30:00Z"}
        },
    )

    id: str = Field(..., description="Identifier of the todo to update")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        return _validate_id(v)


# PUBLIC_INTERFACE
class MarkTodoAsDoneInput(BaseModel):
    """
    Input of the markTodoAsDone procedure.
    """

    model_config = _wire_config

    id: str = Field(..., description="Identifier of the todo")
    is_done: bool = Field(..., description="New completion flag")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        return _validate_id(v)


# PUBLIC_INTERFACE
class DeleteTodoInput(BaseModel):
    """
    Input of the deleteTodo procedure.
    """

    model_config = _wire_config

    id: str = Field(..., description="Identifier of the todo to delete")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        return _validate_id(v)


# PUBLIC_INTERFACE
class DeletedTodo(BaseModel):
    """Result of deleteTodo: the id of the removed record."""

    id: str = Field(..., description="Identifier of the deleted todo")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the procedures for a Todo record.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f1c2b7de0a94c0c9d1f5e6a7b8c9d0e",
                "task": "Buy milk",
                "dueDate": "2024-01-01T10:00:00Z",
                "isDone": False,
                "createdAt": "2023-12-30T10:15:30.123456Z",
                "updatedAt": "2023-12-30T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the todo")
    task: str = Field(..., description="Task text")
    due_date: datetime = Field(..., description="Due date/time as an ISO8601 datetime")
    is_done: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    # PUBLIC_INTERFACE
    @classmethod
    def from_entity(cls, entity: TodoEntity) -> "TodoOut":
        """Build the wire model from a stored entity."""
        return cls(**entity)
