"""
Dialog state for the todo list page.

Every dialog instance owns its own state; there is no process-wide
visibility flag. A dialog moves closed -> open -> submitting and then
back to closed when its mutation succeeds, or back to open with an inline
error when it fails. Only one mutation per dialog can be in flight.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .errors import ProcedureError
from .utils import parse_timestamp

if TYPE_CHECKING:
    from .client import TodoListView
    from .schemas import TodoOut

logger = logging.getLogger(__name__)


class DialogKind(str, Enum):
    ADD = "add"
    UPDATE = "update"
    MANAGE = "manage"
    DELETE = "delete"
    CHECK = "check"


class DialogState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


class DialogStateError(RuntimeError):
    """A dialog action was requested from a state that does not allow it."""


TASK_REQUIRED = "Please enter a valid task name!"
DUE_DATE_REQUIRED = "Please input a valid datetime"


# PUBLIC_INTERFACE
class TodoDialog:
    """
    One dialog instance: add, update, manage, delete confirmation or done toggle.

    The update and delete dialogs of a row are opened from its manage dialog,
    which is passed in as ``parent``; when they succeed the parent is closed
    as well.
    """

    def __init__(
        self,
        kind: DialogKind,
        view: "TodoListView",
        row: Optional["TodoRow"] = None,
        parent: Optional["TodoDialog"] = None,
    ) -> None:
        self.kind = kind
        self.view = view
        self.row = row
        self.parent = parent
        self.children: List[TodoDialog] = []
        if parent is not None:
            parent.children.append(self)

        self.state = DialogState.CLOSED
        self.form: Dict[str, Any] = {}
        self.field_errors: Dict[str, str] = {}
        self.error: Optional[str] = None

    @property
    def todo(self) -> Optional["TodoOut"]:
        return self.row.todo if self.row is not None else None

    @property
    def is_open(self) -> bool:
        return self.state is not DialogState.CLOSED

    @property
    def busy(self) -> bool:
        """True while a mutation is in flight; the submit action is disabled."""
        return self.state is DialogState.SUBMITTING

    @property
    def title(self) -> str:
        if self.kind is DialogKind.ADD:
            return "Add a new todo"
        if self.kind is DialogKind.UPDATE:
            return "Update todo"
        if self.kind is DialogKind.MANAGE:
            return "Manage todo"
        if self.kind is DialogKind.DELETE:
            return "Are you sure to delete this task?"
        todo = self.todo
        if todo is not None and todo.is_done:
            return "Are you sure to undo this task?"
        return "Are you sure to mark this task as done?"

    def open(self) -> None:
        """Show the dialog. Opening an already open dialog keeps its current input."""
        if self.is_open:
            return
        self._reset()
        if self.kind is DialogKind.UPDATE and self.todo is not None:
            self.form = {"task": self.todo.task, "dueDate": self.todo.due_date}
        elif self.kind is DialogKind.ADD:
            self.form = {"task": "", "dueDate": None}
        self.state = DialogState.OPEN

    def close(self) -> None:
        """Hide the dialog and discard unsaved input and errors."""
        if self.busy or any(child.busy for child in self.children):
            raise DialogStateError(f"{self.kind.value} dialog cannot close while submitting")
        for child in self.children:
            child.close()
        self._reset()
        self.state = DialogState.CLOSED

    def set_field(self, name: str, value: Any) -> None:
        if self.state is not DialogState.OPEN:
            raise DialogStateError(f"{self.kind.value} dialog is not open for input")
        if name not in self.form:
            raise KeyError(name)
        self.form[name] = value
        self.field_errors.pop(name, None)

    # PUBLIC_INTERFACE
    async def submit(self) -> Any:
        """
        Confirm the dialog and issue its mutation.

        Returns the mutation result on success, or None when the form is
        invalid or the mutation failed; in both cases the dialog stays open
        and ``field_errors`` / ``error`` describe what went wrong.
        """
        if self.kind is DialogKind.MANAGE:
            raise DialogStateError("manage dialog has no mutation of its own")
        if self.busy:
            raise DialogStateError(f"{self.kind.value} dialog is already submitting")
        if self.state is not DialogState.OPEN:
            raise DialogStateError(f"{self.kind.value} dialog is not open")

        mutation = self._mutation()
        if mutation is None:
            return None
        name, payload = mutation

        self.state = DialogState.SUBMITTING
        self.error = None
        succeeded = False
        try:
            result = await self.view.mutate(name, payload)
            succeeded = True
        except ProcedureError as e:
            logger.info("%s failed: %s", name, e.message)
            self.error = e.message
            return None
        finally:
            if not succeeded:
                self.state = DialogState.OPEN

        self._reset()
        self.state = DialogState.CLOSED
        parent = self.parent
        # A sibling still in flight keeps the parent open; it closes it when it finishes
        if (
            parent is not None
            and parent.state is DialogState.OPEN
            and not any(child.busy for child in parent.children)
        ):
            parent.close()
        return result

    def _reset(self) -> None:
        self.form = {}
        self.field_errors = {}
        self.error = None

    def _mutation(self) -> Optional[Tuple[str, Dict[str, Any]]]:
        if self.kind is DialogKind.CHECK:
            todo = self._require_todo()
            return "markTodoAsDone", {"id": todo.id, "isDone": not todo.is_done}
        if self.kind is DialogKind.DELETE:
            return "deleteTodo", {"id": self._require_todo().id}

        task = self.form.get("task")
        if not isinstance(task, str) or not task.strip():
            self.field_errors["task"] = TASK_REQUIRED
        try:
            due_date = parse_timestamp(self.form.get("dueDate") or None)
        except ValueError:
            self.field_errors["dueDate"] = DUE_DATE_REQUIRED
        if self.field_errors:
            return None

        payload = {"task": task, "dueDate": due_date.isoformat()}
        if self.kind is DialogKind.UPDATE:
            return "updateTodo", {"id": self._require_todo().id, **payload}
        return "addTodo", payload

    def _require_todo(self) -> "TodoOut":
        todo = self.todo
        if todo is None:
            raise DialogStateError(f"{self.kind.value} dialog is not bound to a todo")
        return todo


# PUBLIC_INTERFACE
class TodoRow:
    """A rendered todo with the dialogs it owns."""

    def __init__(self, todo: "TodoOut", view: "TodoListView") -> None:
        self.todo = todo
        self.check = TodoDialog(DialogKind.CHECK, view, row=self)
        self.manage = TodoDialog(DialogKind.MANAGE, view, row=self)
        self.update = TodoDialog(DialogKind.UPDATE, view, row=self, parent=self.manage)
        self.delete = TodoDialog(DialogKind.DELETE, view, row=self, parent=self.manage)

    def edit(self) -> TodoDialog:
        """Open the update dialog from the manage dialog."""
        self._require_manage_open()
        self.update.open()
        return self.update

    def confirm_delete(self) -> TodoDialog:
        """Open the delete confirmation from the manage dialog."""
        self._require_manage_open()
        self.delete.open()
        return self.delete

    def _require_manage_open(self) -> None:
        if self.manage.state is not DialogState.OPEN:
            raise DialogStateError("manage dialog is not open")
