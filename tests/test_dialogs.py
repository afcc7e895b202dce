from datetime import datetime, timezone

import anyio
import pytest

from dashlist.client import TodoListView
from dashlist.dialogs import (
    DUE_DATE_REQUIRED,
    TASK_REQUIRED,
    DialogKind,
    DialogState,
    DialogStateError,
    TodoDialog,
    TodoRow,
)
from dashlist.errors import NotFoundError
from dashlist.schemas import TodoOut

pytestmark = pytest.mark.anyio

DUE = datetime(2024, 1, 1, 10, tzinfo=timezone.utc)


class GatedView:
    """Stand-in list view whose mutations block until released."""

    def __init__(self, error=None) -> None:
        self.calls = []
        self.entered = anyio.Event()
        self.release = anyio.Event()
        self.error = error

    async def mutate(self, name, payload):
        self.calls.append((name, payload))
        self.entered.set()
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return {"id": "1"}


class GatedUpdateView(GatedView):
    """Only updateTodo blocks; every other mutation completes at once."""

    async def mutate(self, name, payload):
        if name == "updateTodo":
            return await super().mutate(name, payload)
        self.calls.append((name, payload))
        return {"id": payload["id"]}


@pytest.fixture
async def view(todo_client):
    v = TodoListView(todo_client)
    await v.load()
    return v


async def add_via_dialog(view, task="Buy milk", due="2024-01-01T10:00:00Z"):
    view.add_dialog.open()
    view.add_dialog.set_field("task", task)
    view.add_dialog.set_field("dueDate", due)
    return await view.add_dialog.submit()


class TestDialogLifecycle:
    async def test_open_and_cancel_has_no_side_effect(self, view):
        dialog = view.add_dialog
        assert dialog.state is DialogState.CLOSED
        dialog.open()
        assert dialog.state is DialogState.OPEN
        dialog.set_field("task", "Unsaved")
        dialog.close()

        assert dialog.state is DialogState.CLOSED
        assert dialog.form == {}
        assert view.todos == []
        dialog.open()
        assert dialog.form["task"] == ""

    async def test_submit_requires_open(self, view):
        with pytest.raises(DialogStateError):
            await view.add_dialog.submit()

    async def test_add_success_closes_and_refetches(self, view):
        result = await add_via_dialog(view)
        assert view.add_dialog.state is DialogState.CLOSED
        assert [t.id for t in view.todos] == [result["id"]]
        assert view.todos[0].due_date == DUE
        assert view.todos[0].is_done is False

    @pytest.mark.parametrize(
        "task,due,errors",
        [
            ("", "2024-01-01T10:00", {"task": TASK_REQUIRED}),
            ("   ", "2024-01-01T10:00", {"task": TASK_REQUIRED}),
            ("Buy milk", "", {"dueDate": DUE_DATE_REQUIRED}),
            ("Buy milk", "someday", {"dueDate": DUE_DATE_REQUIRED}),
            ("", None, {"task": TASK_REQUIRED, "dueDate": DUE_DATE_REQUIRED}),
        ],
    )
    async def test_form_errors_stay_open_without_mutation(self, view, task, due, errors):
        assert await add_via_dialog(view, task, due) is None
        assert view.add_dialog.state is DialogState.OPEN
        assert view.add_dialog.field_errors == errors
        assert view.todos == []

    async def test_server_error_stays_open_with_inline_message(self):
        gated = GatedView(error=NotFoundError("Todo 1 not found"))
        dialog = TodoDialog(DialogKind.ADD, gated)
        dialog.open()
        dialog.set_field("task", "Buy milk")
        dialog.set_field("dueDate", DUE)
        gated.release.set()

        assert await dialog.submit() is None
        assert dialog.state is DialogState.OPEN
        assert dialog.error == "Todo 1 not found"
        assert dialog.form["task"] == "Buy milk"

    async def test_busy_dialog_rejects_resubmission_and_close(self):
        gated = GatedView()
        dialog = TodoDialog(DialogKind.ADD, gated)
        dialog.open()
        dialog.set_field("task", "Buy milk")
        dialog.set_field("dueDate", DUE)

        async with anyio.create_task_group() as tg:
            tg.start_soon(dialog.submit)
            await gated.entered.wait()

            assert dialog.busy
            assert dialog.state is DialogState.SUBMITTING
            with pytest.raises(DialogStateError):
                await dialog.submit()
            with pytest.raises(DialogStateError):
                dialog.close()
            gated.release.set()

        assert dialog.state is DialogState.CLOSED
        assert len(gated.calls) == 1


class TestRowDialogs:
    async def test_check_dialog_toggles_done(self, view):
        created = await add_via_dialog(view)
        row = view.row(created["id"])

        row.check.open()
        assert row.check.title == "Are you sure to mark this task as done?"
        await row.check.submit()
        assert row.check.state is DialogState.CLOSED
        assert view.row(created["id"]).todo.is_done is True

        row.check.open()
        assert row.check.title == "Are you sure to undo this task?"
        await row.check.submit()
        assert view.row(created["id"]).todo.is_done is False

    async def test_update_from_manage_dialog(self, view):
        created = await add_via_dialog(view, task="Old")
        row = view.row(created["id"])

        with pytest.raises(DialogStateError):
            row.edit()

        row.manage.open()
        update = row.edit()
        assert update.form == {"task": "Old", "dueDate": DUE}
        update.set_field("task", "New")
        await update.submit()

        assert update.state is DialogState.CLOSED
        assert row.manage.state is DialogState.CLOSED
        assert view.row(created["id"]).todo.task == "New"

    async def test_manage_dialog_has_no_mutation(self, view):
        created = await add_via_dialog(view)
        row = view.row(created["id"])
        row.manage.open()
        with pytest.raises(DialogStateError):
            await row.manage.submit()

    async def test_closing_manage_discards_child_input(self, view):
        created = await add_via_dialog(view, task="Keep")
        row = view.row(created["id"])
        row.manage.open()
        row.edit().set_field("task", "Discarded")
        row.manage.close()

        assert not row.update.is_open
        assert view.row(created["id"]).todo.task == "Keep"

    async def test_delete_confirmation_removes_row(self, view):
        created = await add_via_dialog(view)
        row = view.row(created["id"])
        row.manage.open()
        await row.confirm_delete().submit()

        assert row.manage.state is DialogState.CLOSED
        assert view.todos == []
        assert view.is_empty

    async def test_delete_of_vanished_todo_is_inline_error(self, view, repo):
        created = await add_via_dialog(view)
        row = view.row(created["id"])
        repo.delete(created["id"])

        row.manage.open()
        delete = row.confirm_delete()
        assert await delete.submit() is None
        assert delete.state is DialogState.OPEN
        assert delete.error == f"Todo {created['id']} not found"
        assert row.manage.is_open

    async def test_sibling_success_while_update_in_flight(self):
        gated = GatedUpdateView()
        todo = TodoOut(id="1", task="Old", due_date=DUE, is_done=False, created_at=DUE, updated_at=DUE)
        row = TodoRow(todo, gated)
        row.manage.open()
        update = row.edit()

        async with anyio.create_task_group() as tg:
            tg.start_soon(update.submit)
            await gated.entered.wait()

            assert await row.confirm_delete().submit() == {"id": "1"}
            assert row.delete.state is DialogState.CLOSED
            # The in-flight update still holds the manage dialog open
            assert row.manage.is_open
            assert update.busy
            gated.release.set()

        assert update.state is DialogState.CLOSED
        assert row.manage.state is DialogState.CLOSED
        assert [name for name, _ in gated.calls] == ["updateTodo", "deleteTodo"]

    async def test_dialogs_are_independent_per_row(self, view):
        first = await add_via_dialog(view, task="One")
        second = await add_via_dialog(view, task="Two")
        row_one, row_two = view.row(first["id"]), view.row(second["id"])

        row_one.check.open()
        assert row_one.check.is_open
        assert not row_two.check.is_open

        row_two.check.open()
        async with anyio.create_task_group() as tg:
            tg.start_soon(row_one.check.submit)
            tg.start_soon(row_two.check.submit)

        assert all(t.is_done for t in view.todos)
        assert not row_one.check.is_open and not row_two.check.is_open


async def test_buy_milk_scenario_through_dialogs(view):
    created = await add_via_dialog(view, "Buy milk", "2024-01-01T10:00:00Z")
    [todo] = view.todos
    assert (todo.task, todo.due_date, todo.is_done) == ("Buy milk", DUE, False)

    row = view.row(created["id"])
    row.check.open()
    await row.check.submit()
    assert view.todos[0].is_done is True

    row.manage.open()
    await row.confirm_delete().submit()
    assert view.todos == []
