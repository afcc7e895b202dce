from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import Dict, List, Optional

from .errors import StorageError
from .models import TodoEntity
from .settings import get_settings
from .utils import new_todo_id, utcnow

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends.

    Every method touches at most one record. Methods that target an id
    return None (or False) when the record is absent; backend failures
    are raised as StorageError.
    """

    @abstractmethod
    def list_all(self) -> List[TodoEntity]:
        """Return every stored TodoEntity. No ordering is guaranteed."""

    @abstractmethod
    def get(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def create(self, task: str, due_date: datetime, todo_id: Optional[str] = None) -> TodoEntity:
        """Create and return a new TodoEntity with is_done=False. A fresh id is allocated unless given."""

    @abstractmethod
    def update(self, todo_id: str, task: str, due_date: datetime) -> Optional[TodoEntity]:
        """Replace task and due_date of an existing TodoEntity. Return it, or None if not found."""

    @abstractmethod
    def set_done(self, todo_id: str, is_done: bool) -> Optional[TodoEntity]:
        """Set only the is_done flag. Return the updated entity, or None if not found."""

    @abstractmethod
    def delete(self, todo_id: str) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}

    def list_all(self) -> List[TodoEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for t in self._items.values()]

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def create(self, task: str, due_date: datetime, todo_id: Optional[str] = None) -> TodoEntity:
        now = utcnow()
        entity: TodoEntity = {
            "id": todo_id or new_todo_id(),
            "task": task,
            "due_date": due_date,
            "is_done": False,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            if entity["id"] in self._items:
                raise StorageError(f"Todo id {entity['id']!r} already exists")
            self._items[entity["id"]] = entity
            return entity.copy()

    def update(self, todo_id: str, task: str, due_date: datetime) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None
            updated = existing.copy()
            updated["task"] = task
            updated["due_date"] = due_date
            updated["updated_at"] = utcnow()
            self._items[todo_id] = updated
            return updated.copy()

    def set_done(self, todo_id: str, is_done: bool) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None
            updated = existing.copy()
            updated["is_done"] = is_done
            updated["updated_at"] = utcnow()
            self._items[todo_id] = updated
            return updated.copy()

    def delete(self, todo_id: str) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None


# PUBLIC_INTERFACE
@lru_cache(maxsize=None)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository at SQLITE_DB_PATH
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Using sqlite persistence at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path)
    logger.info("Using in-memory persistence")
    return InMemoryRepository()
