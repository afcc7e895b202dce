from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ..procedures import TodoProcedures, get_procedures
from ..schemas import (
    AddTodoInput,
    DeletedTodo,
    DeleteTodoInput,
    MarkTodoAsDoneInput,
    TodoOut,
    UpdateTodoInput,
)

router = APIRouter(
    prefix="/api/trpc",
    tags=["todo"],
)

_error_responses = {
    422: {"description": "ValidationError: malformed or missing input"},
    503: {"description": "StorageError: backing store unavailable"},
}
_not_found_response = {404: {"description": "NotFoundError: todo not found"}}


# PUBLIC_INTERFACE
@router.get(
    "/todo.listTodos",
    response_model=List[TodoOut],
    summary="listTodos",
    description="Query returning every Todo. No ordering is guaranteed.",
    responses={
        200: {"description": "Todos retrieved"},
        503: _error_responses[503],
    },
)
def list_todos(procedures: TodoProcedures = Depends(get_procedures)) -> List[TodoOut]:
    """
    Return all todos.
    """
    return procedures.list_todos()


# PUBLIC_INTERFACE
@router.post(
    "/todo.addTodo",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="addTodo",
    description="Mutation creating a Todo from a non-empty task and a due date. The new Todo is not done.",
    responses={201: {"description": "Todo created"}, **_error_responses},
)
def add_todo(payload: AddTodoInput, procedures: TodoProcedures = Depends(get_procedures)) -> TodoOut:
    """
    Create a new Todo.
    """
    return procedures.add_todo(payload)


# PUBLIC_INTERFACE
@router.post(
    "/todo.updateTodo",
    response_model=TodoOut,
    summary="updateTodo",
    description="Mutation replacing the task and due date of an existing Todo.",
    responses={200: {"description": "Todo updated"}, **_not_found_response, **_error_responses},
)
def update_todo(payload: UpdateTodoInput, procedures: TodoProcedures = Depends(get_procedures)) -> TodoOut:
    """
    Replace task and dueDate of a Todo.
    """
    return procedures.update_todo(payload)


# PUBLIC_INTERFACE
@router.post(
    "/todo.markTodoAsDone",
    response_model=TodoOut,
    summary="markTodoAsDone",
    description="Mutation setting only the isDone flag of an existing Todo.",
    responses={200: {"description": "Todo updated"}, **_not_found_response, **_error_responses},
)
def mark_todo_as_done(
    payload: MarkTodoAsDoneInput, procedures: TodoProcedures = Depends(get_procedures)
) -> TodoOut:
    """
    Mark a Todo as done or not done.
    """
    return procedures.mark_todo_as_done(payload)


# PUBLIC_INTERFACE
@router.post(
    "/todo.deleteTodo",
    response_model=DeletedTodo,
    summary="deleteTodo",
    description=(
        "Mutation hard-deleting a Todo and returning its id. "
        "Deleting an id that is not stored fails with NotFoundError, including repeated deletes."
    ),
    responses={200: {"description": "Todo deleted"}, **_not_found_response, **_error_responses},
)
def delete_todo(payload: DeleteTodoInput, procedures: TodoProcedures = Depends(get_procedures)) -> DeletedTodo:
    """
    Delete a Todo.
    """
    return procedures.delete_todo(payload)
