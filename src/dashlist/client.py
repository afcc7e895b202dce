"""
Client side of the todo procedures.

TodoClient calls the procedures over HTTP with httpx and turns error
responses back into the same ValidationError / NotFoundError /
StorageError kinds the server raised. TodoListView keeps the listTodos
result in a QueryCache and refetches it after every successful mutation;
the cached list is always replaced wholesale, never patched locally.
"""
from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Hashable, List, Mapping, Optional, Tuple, Union

import httpx

from .dialogs import DialogKind, TodoDialog, TodoRow
from .errors import ProcedureError, StorageError, error_from_body
from .schemas import DeletedTodo, TodoOut

logger = logging.getLogger(__name__)

PROCEDURE_PREFIX = "/api/trpc/todo."

CacheKey = Tuple[str, Tuple[Tuple[str, Hashable], ...]]


def _wire_timestamp(value: Union[datetime, str]) -> str:
    return value.isoformat() if isinstance(value, datetime) else value


# PUBLIC_INTERFACE
class TodoClient:
    """Async client for the todo procedures."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "TodoClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _call(self, method: str, name: str, payload: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{PROCEDURE_PREFIX}{name}"
        logger.debug("Calling %s %s", method, url)
        try:
            response = await self._http.request(method, url, json=dict(payload) if payload is not None else None)
        except httpx.HTTPError as e:
            logger.error("Procedure %s unreachable: %s", name, e)
            raise StorageError(f"Could not reach the todo service: {e}") from e

        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise error_from_body(body, response.status_code)

    # PUBLIC_INTERFACE
    async def query(self, name: str) -> Any:
        """Run a query procedure (GET) and return the decoded JSON result."""
        return await self._call("GET", name)

    # PUBLIC_INTERFACE
    async def mutate(self, name: str, payload: Mapping[str, Any]) -> Any:
        """Run a mutation procedure (POST) and return the decoded JSON result."""
        return await self._call("POST", name, payload)

    async def list_todos(self) -> List[TodoOut]:
        data = await self.query("listTodos")
        return [TodoOut.model_validate(item) for item in data]

    async def add_todo(self, task: str, due_date: Union[datetime, str]) -> TodoOut:
        data = await self.mutate("addTodo", {"task": task, "dueDate": _wire_timestamp(due_date)})
        return TodoOut.model_validate(data)

    async def update_todo(self, todo_id: str, task: str, due_date: Union[datetime, str]) -> TodoOut:
        data = await self.mutate(
            "updateTodo", {"id": todo_id, "task": task, "dueDate": _wire_timestamp(due_date)}
        )
        return TodoOut.model_validate(data)

    async def mark_todo_as_done(self, todo_id: str, is_done: bool) -> TodoOut:
        data = await self.mutate("markTodoAsDone", {"id": todo_id, "isDone": is_done})
        return TodoOut.model_validate(data)

    async def delete_todo(self, todo_id: str) -> str:
        data = await self.mutate("deleteTodo", {"id": todo_id})
        return DeletedTodo.model_validate(data).id


# PUBLIC_INTERFACE
class QueryCache:
    """Query results keyed by procedure name and arguments."""

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, Any] = {}

    @staticmethod
    def key(name: str, args: Optional[Mapping[str, Hashable]] = None) -> CacheKey:
        return name, tuple(sorted((args or {}).items()))

    def has(self, name: str, args: Optional[Mapping[str, Hashable]] = None) -> bool:
        return self.key(name, args) in self._entries

    def get(self, name: str, args: Optional[Mapping[str, Hashable]] = None, default: Any = None) -> Any:
        return self._entries.get(self.key(name, args), default)

    def set(self, name: str, value: Any, args: Optional[Mapping[str, Hashable]] = None) -> None:
        self._entries[self.key(name, args)] = value

    def invalidate(self, name: str, args: Optional[Mapping[str, Hashable]] = None) -> None:
        self._entries.pop(self.key(name, args), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ViewStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


# PUBLIC_INTERFACE
class TodoListView:
    """
    The todo list page: the cached listTodos result, one TodoRow per todo,
    and the add dialog.

    A failed listTodos puts the whole view into the error status and no
    todos are exposed. Rows are kept across refetches for ids that are
    still present so each row's dialogs keep their own state.
    """

    LIST_QUERY = "listTodos"
    PAGE_ERROR_MESSAGE = "Some error has occured, please try again later."

    def __init__(self, client: TodoClient, cache: Optional[QueryCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else QueryCache()
        self.status = ViewStatus.LOADING
        self.error: Optional[str] = None
        self.add_dialog = TodoDialog(DialogKind.ADD, self)
        self._rows: Dict[str, TodoRow] = {}

    @property
    def todos(self) -> List[TodoOut]:
        if self.status is not ViewStatus.READY:
            return []
        return list(self.cache.get(self.LIST_QUERY, default=[]))

    @property
    def rows(self) -> List[TodoRow]:
        if self.status is not ViewStatus.READY:
            return []
        return list(self._rows.values())

    @property
    def is_empty(self) -> bool:
        return self.status is ViewStatus.READY and not self._rows

    def row(self, todo_id: str) -> TodoRow:
        return self._rows[todo_id]

    # PUBLIC_INTERFACE
    async def load(self) -> List[TodoOut]:
        """Initial fetch of the list query."""
        self.status = ViewStatus.LOADING
        return await self.refetch()

    # PUBLIC_INTERFACE
    async def refetch(self) -> List[TodoOut]:
        """Fetch listTodos and replace the cached list with the result."""
        try:
            todos = await self.client.list_todos()
        except ProcedureError as e:
            logger.error("listTodos failed: %s", e.message)
            self.cache.invalidate(self.LIST_QUERY)
            self.status = ViewStatus.ERROR
            self.error = self.PAGE_ERROR_MESSAGE
            return []

        self.cache.set(self.LIST_QUERY, todos)
        self.status = ViewStatus.READY
        self.error = None
        self._sync_rows(todos)
        return todos

    # PUBLIC_INTERFACE
    async def mutate(self, name: str, payload: Mapping[str, Any]) -> Any:
        """
        Run a mutation and, only if it succeeded, refetch the list.

        Errors from the mutation propagate and leave the cache untouched.
        """
        result = await self.client.mutate(name, payload)
        await self.refetch()
        return result

    def _sync_rows(self, todos: List[TodoOut]) -> None:
        rows: Dict[str, TodoRow] = {}
        for todo in todos:
            row = self._rows.get(todo.id)
            if row is None:
                row = TodoRow(todo, self)
            else:
                row.todo = todo
            rows[todo.id] = row
        self._rows = rows
