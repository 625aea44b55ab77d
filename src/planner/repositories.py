from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from threading import RLock
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .models import DiaryEntryEntity, ExpenseEntity, TaskEntity
from .schemas import (
    DiaryEntryCreate,
    DiaryEntryUpdate,
    ExpenseCreate,
    ExpenseUpdate,
    TaskCreate,
    TaskUpdate,
)
from .settings import get_settings, sqlite_path_from_url

logger = logging.getLogger(__name__)

E = TypeVar("E", DiaryEntryEntity, ExpenseEntity, TaskEntity)


def newest_first_key(item: Dict[str, Any]):
    """Sort key for diary entries and expenses: use with reverse=True."""
    return (item["date"], item["id"])


def task_order_key(task: TaskEntity):
    """Incomplete tasks first, each group by ascending due date, then id."""
    return (bool(task["completed"]), task["due_date"], task["id"])


# PUBLIC_INTERFACE
class DiaryRepository(ABC):
    """Abstract repository contract for diary entry storage backends."""

    @abstractmethod
    def create(self, data: DiaryEntryCreate) -> DiaryEntryEntity:
        """Create and return a new entry; id and created_at are assigned here."""

    @abstractmethod
    def get(self, entry_id: int) -> Optional[DiaryEntryEntity]:
        """Return an entry by id, or None if not found."""

    @abstractmethod
    def get_by_date(self, day: date) -> Optional[DiaryEntryEntity]:
        """Return the first entry (lowest id) written for `day`, or None."""

    @abstractmethod
    def list_all(self) -> List[DiaryEntryEntity]:
        """Return all entries, newest date first."""

    @abstractmethod
    def update(self, entry_id: int, data: DiaryEntryUpdate) -> Optional[DiaryEntryEntity]:
        """Merge the provided fields into an entry. Return it, or None if not found."""

    @abstractmethod
    def delete(self, entry_id: int) -> bool:
        """Delete an entry by id. Return True if deleted, False if not found."""


# PUBLIC_INTERFACE
class ExpenseRepository(ABC):
    """Abstract repository contract for expense storage backends."""

    @abstractmethod
    def create(self, data: ExpenseCreate) -> ExpenseEntity:
        """Create and return a new expense."""

    @abstractmethod
    def get(self, expense_id: int) -> Optional[ExpenseEntity]:
        """Return an expense by id, or None if not found."""

    @abstractmethod
    def list_by_date(self, day: date) -> List[ExpenseEntity]:
        """Return the expenses recorded on `day`, possibly empty."""

    @abstractmethod
    def list_all(self) -> List[ExpenseEntity]:
        """Return all expenses, newest date first."""

    @abstractmethod
    def update(self, expense_id: int, data: ExpenseUpdate) -> Optional[ExpenseEntity]:
        """Merge the provided fields into an expense. Return it, or None if not found."""

    @abstractmethod
    def delete(self, expense_id: int) -> bool:
        """Delete an expense by id. Return True if deleted, False if not found."""


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Create and return a new task."""

    @abstractmethod
    def get(self, task_id: int) -> Optional[TaskEntity]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def list_by_date(self, day: date) -> List[TaskEntity]:
        """Return the tasks due on `day`, possibly empty."""

    @abstractmethod
    def list_all(self) -> List[TaskEntity]:
        """
        Return all tasks:
        - incomplete tasks first, ascending by due date
        - completed tasks last, ascending by due date
        """

    @abstractmethod
    def update(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        """Merge the provided fields into a task. Return it, or None if not found."""

    @abstractmethod
    def toggle_completed(self, task_id: int) -> Optional[TaskEntity]:
        """Flip the completed flag. Return the task, or None if not found."""

    @abstractmethod
    def delete(self, task_id: int) -> bool:
        """Delete a task by id. Return True if deleted, False if not found."""


@dataclass(frozen=True)
class Storage:
    """The three entity repositories of one backend."""

    backend: str
    diary: DiaryRepository
    expenses: ExpenseRepository
    tasks: TaskRepository


def _copy(item: E) -> E:
    out = item.copy()
    if "tags" in out:
        out["tags"] = list(out["tags"])  # type: ignore[typeddict-item]
    return out


class _MemoryTable(Generic[E]):
    """
    Thread-safe auto-incrementing map shared by the in-memory repositories.
    Ids are never reused, even after deletes.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[int, E] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def insert(self, fields: Dict[str, Any]) -> E:
        with self._lock:
            entity = {"id": self._allocate_id(), **fields, "created_at": datetime.now()}
            self._items[entity["id"]] = entity  # type: ignore[assignment]
            return _copy(entity)  # type: ignore[arg-type]

    def get(self, item_id: int) -> Optional[E]:
        with self._lock:
            item = self._items.get(item_id)
            return None if item is None else _copy(item)

    def select(self, predicate: Callable[[E], bool] = lambda _: True) -> List[E]:
        with self._lock:
            return [_copy(t) for t in sorted(self._items.values(), key=lambda t: t["id"]) if predicate(t)]

    def merge(self, item_id: int, changes: Dict[str, Any]) -> Optional[E]:
        with self._lock:
            existing = self._items.get(item_id)
            if existing is None:
                return None
            updated = _copy(existing)
            updated.update(changes)  # type: ignore[typeddict-item]
            # id and created_at are never taken from a payload
            updated["id"] = existing["id"]
            updated["created_at"] = existing["created_at"]
            self._items[item_id] = updated
            return _copy(updated)

    def flip(self, item_id: int, field: str) -> Optional[E]:
        with self._lock:
            existing = self._items.get(item_id)
            if existing is None:
                return None
            return self.merge(item_id, {field: not existing[field]})  # type: ignore[literal-required]

    def remove(self, item_id: int) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None


class InMemoryDiaryRepository(DiaryRepository):
    """In-memory diary storage suitable for testing and default runtime."""

    def __init__(self) -> None:
        self._table: _MemoryTable[DiaryEntryEntity] = _MemoryTable()

    def create(self, data: DiaryEntryCreate) -> DiaryEntryEntity:
        return self._table.insert(data.model_dump())

    def get(self, entry_id: int) -> Optional[DiaryEntryEntity]:
        return self._table.get(entry_id)

    def get_by_date(self, day: date) -> Optional[DiaryEntryEntity]:
        matches = self._table.select(lambda e: e["date"] == day)
        return matches[0] if matches else None

    def list_all(self) -> List[DiaryEntryEntity]:
        return sorted(self._table.select(), key=newest_first_key, reverse=True)

    def update(self, entry_id: int, data: DiaryEntryUpdate) -> Optional[DiaryEntryEntity]:
        return self._table.merge(entry_id, data.changes())

    def delete(self, entry_id: int) -> bool:
        return self._table.remove(entry_id)


class InMemoryExpenseRepository(ExpenseRepository):
    """In-memory expense storage."""

    def __init__(self) -> None:
        self._table: _MemoryTable[ExpenseEntity] = _MemoryTable()

    def create(self, data: ExpenseCreate) -> ExpenseEntity:
        return self._table.insert(data.model_dump())

    def get(self, expense_id: int) -> Optional[ExpenseEntity]:
        return self._table.get(expense_id)

    def list_by_date(self, day: date) -> List[ExpenseEntity]:
        return self._table.select(lambda e: e["date"] == day)

    def list_all(self) -> List[ExpenseEntity]:
        return sorted(self._table.select(), key=newest_first_key, reverse=True)

    def update(self, expense_id: int, data: ExpenseUpdate) -> Optional[ExpenseEntity]:
        return self._table.merge(expense_id, data.changes())

    def delete(self, expense_id: int) -> bool:
        return self._table.remove(expense_id)


class InMemoryTaskRepository(TaskRepository):
    """In-memory task storage."""

    def __init__(self) -> None:
        self._table: _MemoryTable[TaskEntity] = _MemoryTable()

    def create(self, data: TaskCreate) -> TaskEntity:
        return self._table.insert(data.model_dump())

    def get(self, task_id: int) -> Optional[TaskEntity]:
        return self._table.get(task_id)

    def list_by_date(self, day: date) -> List[TaskEntity]:
        return self._table.select(lambda t: t["due_date"] == day)

    def list_all(self) -> List[TaskEntity]:
        return sorted(self._table.select(), key=task_order_key)

    def update(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        return self._table.merge(task_id, data.changes())

    def toggle_completed(self, task_id: int) -> Optional[TaskEntity]:
        return self._table.flip(task_id, "completed")

    def delete(self, task_id: int) -> bool:
        return self._table.remove(task_id)


# PUBLIC_INTERFACE
def memory_storage() -> Storage:
    """Return a fresh, empty in-memory Storage."""
    return Storage(
        backend="memory",
        diary=InMemoryDiaryRepository(),
        expenses=InMemoryExpenseRepository(),
        tasks=InMemoryTaskRepository(),
    )


# PUBLIC_INTERFACE
def create_storage(backend: str, database_url: Optional[str] = None) -> Storage:
    """
    Build a Storage for the named backend.
    - memory: in-memory repositories
    - sqlite: SQLite repositories; requires database_url
    """
    if backend == "sqlite":
        if not database_url:
            raise RuntimeError("DATABASE_URL must be set. Did you forget to provision a database?")
        from .db import sqlite_storage

        path = sqlite_path_from_url(database_url)
        logger.info("Using sqlite storage", extra={"resource": path})
        return sqlite_storage(path)
    return memory_storage()


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_storage() -> Storage:
    """
    FastAPI dependency returning the process-wide Storage configured from settings.
    Cached so every request sees the same repositories.
    """
    settings = get_settings()
    return create_storage(settings.persistence_backend, settings.database_url)
