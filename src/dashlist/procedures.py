"""
Todo procedure layer.

Five named procedures sit between the request routing layer and the
repository: one query (listTodos) and four mutations (addTodo,
updateTodo, markTodoAsDone, deleteTodo). Each validates its input,
performs exactly one single-record repository operation, and raises a
ProcedureError subclass on failure. Nothing is swallowed.

Deleting an id that is not in the store raises NotFoundError whether the
record was deleted earlier or never existed.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Type, TypeVar, Union

from fastapi import Depends
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import NotFoundError, ValidationError
from .repositories import Repository, get_repository
from .schemas import (
    AddTodoInput,
    DeletedTodo,
    DeleteTodoInput,
    MarkTodoAsDoneInput,
    TodoOut,
    UpdateTodoInput,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# PUBLIC_INTERFACE
def validate_input(model: Type[ModelT], payload: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """
    Validate a raw procedure payload against its input model.

    Already-validated model instances pass through. Pydantic failures are
    re-raised as ValidationError with the per-field error list as detail.
    """
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError(f"{model.__name__} payload must be an object")
    try:
        return model.model_validate(dict(payload))
    except PydanticValidationError as e:
        raise ValidationError(
            "Request validation failed",
            detail=[{"type": err["type"], "loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        ) from e


def _not_found(todo_id: str) -> NotFoundError:
    logger.warning("Todo %s not found", todo_id)
    return NotFoundError(f"Todo {todo_id} not found")


# PUBLIC_INTERFACE
class TodoProcedures:
    """The public procedure set for todos, bound to one repository."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    # PUBLIC_INTERFACE
    def list_todos(self) -> List[TodoOut]:
        """Return all todos. StorageError if the store is unreachable."""
        logger.debug("listTodos")
        return [TodoOut.from_entity(t) for t in self.repository.list_all()]

    # PUBLIC_INTERFACE
    def add_todo(self, payload: Union[AddTodoInput, Mapping[str, Any]]) -> TodoOut:
        """Create a todo from {task, dueDate}; it starts with isDone=False."""
        data = validate_input(AddTodoInput, payload)
        created = self.repository.create(data.task, data.due_date)
        logger.info("Added todo %s", created["id"])
        return TodoOut.from_entity(created)

    # PUBLIC_INTERFACE
    def update_todo(self, payload: Union[UpdateTodoInput, Mapping[str, Any]]) -> TodoOut:
        """Replace task and dueDate of an existing todo."""
        data = validate_input(UpdateTodoInput, payload)
        updated = self.repository.update(data.id, data.task, data.due_date)
        if updated is None:
            raise _not_found(data.id)
        logger.info("Updated todo %s", data.id)
        return TodoOut.from_entity(updated)

    # PUBLIC_INTERFACE
    def mark_todo_as_done(self, payload: Union[MarkTodoAsDoneInput, Mapping[str, Any]]) -> TodoOut:
        """Set only the isDone flag of an existing todo."""
        data = validate_input(MarkTodoAsDoneInput, payload)
        updated = self.repository.set_done(data.id, data.is_done)
        if updated is None:
            raise _not_found(data.id)
        logger.info("Marked todo %s isDone=%s", data.id, data.is_done)
        return TodoOut.from_entity(updated)

    # PUBLIC_INTERFACE
    def delete_todo(self, payload: Union[DeleteTodoInput, Mapping[str, Any]]) -> DeletedTodo:
        """Hard-delete a todo and return its id."""
        data = validate_input(DeleteTodoInput, payload)
        if not self.repository.delete(data.id):
            raise _not_found(data.id)
        logger.info("Deleted todo %s", data.id)
        return DeletedTodo(id=data.id)


# PUBLIC_INTERFACE
def get_procedures(repo: Repository = Depends(get_repository)) -> TodoProcedures:
    """FastAPI dependency returning the procedure set over the configured repository."""
    return TodoProcedures(repo)
