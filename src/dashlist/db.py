from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .errors import StorageError
from .models import TodoEntity
from .repositories import Repository
from .utils import as_utc, new_todo_id, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    task: str = "task"
    due_date: str = "due_date"
    is_done: str = "is_done"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Each operation runs on its own connection and commits on success;
    sqlite3 errors are raised as StorageError.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create database directory for {db_path}: {e}") from e
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            logger.error("Cannot open sqlite database %s: %s", self._db_path, e)
            raise StorageError("Todo storage is unavailable") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("sqlite operation failed: %s", e)
            raise StorageError("Todo storage operation failed") from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.task} TEXT NOT NULL,
                    {_COLS.due_date} TEXT NOT NULL,
                    {_COLS.is_done} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        def parse_dt(s: str) -> datetime:
            return as_utc(datetime.fromisoformat(s))

        return {
            "id": str(row[_COLS.id]),
            "task": str(row[_COLS.task]),
            "due_date": parse_dt(row[_COLS.due_date]),
            "is_done": bool(row[_COLS.is_done]),
            "created_at": parse_dt(row[_COLS.created_at]),
            "updated_at": parse_dt(row[_COLS.updated_at]),
        }

    def _fetch(self, conn: sqlite3.Connection, todo_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,)).fetchone()

    def list_all(self) -> List[TodoEntity]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_COLS.table}").fetchall()
            return [self._row_to_entity(r) for r in rows]

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, todo_id)
            return self._row_to_entity(row) if row else None

    def create(self, task: str, due_date: datetime, todo_id: Optional[str] = None) -> TodoEntity:
        now = utcnow().isoformat()
        new_id = todo_id or new_todo_id()
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.task}, {_COLS.due_date},
                    {_COLS.is_done}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, 0, ?, ?)
                """,
                (new_id, task, as_utc(due_date).isoformat(), now, now),
            )
            row = self._fetch(conn, new_id)
            assert row is not None
            return self._row_to_entity(row)

    def update(self, todo_id: str, task: str, due_date: datetime) -> Optional[TodoEntity]:
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.task} = ?, {_COLS.due_date} = ?, {_COLS.updated_at} = ?
                WHERE {_COLS.id} = ?
                """,
                (task, as_utc(due_date).isoformat(), utcnow().isoformat(), todo_id),
            )
            if cur.rowcount == 0:
                return None
            row = self._fetch(conn, todo_id)
            assert row is not None
            return self._row_to_entity(row)

    def set_done(self, todo_id: str, is_done: bool) -> Optional[TodoEntity]:
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.is_done} = ?, {_COLS.updated_at} = ?
                WHERE {_COLS.id} = ?
                """,
                (1 if is_done else 0, utcnow().isoformat(), todo_id),
            )
            if cur.rowcount == 0:
                return None
            row = self._fetch(conn, todo_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, todo_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,))
            return cur.rowcount > 0
