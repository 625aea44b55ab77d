from __future__ import annotations

import json
import os
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence

from .models import DiaryEntryEntity, ExpenseEntity, TaskEntity
from .repositories import DiaryRepository, ExpenseRepository, Storage, TaskRepository
from .schemas import (
    DiaryEntryCreate,
    DiaryEntryUpdate,
    ExpenseCreate,
    ExpenseUpdate,
    TaskCreate,
    TaskUpdate,
)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS diary_entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        mood VARCHAR(20) NOT NULL,
        tags TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS expenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        description TEXT NOT NULL,
        amount REAL NOT NULL,
        category VARCHAR(30) NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        description TEXT NOT NULL,
        due_date TEXT NOT NULL,
        completed INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_diary_entries_date ON diary_entries(date)",
    "CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date)",
)


def _to_db(value: Any) -> Any:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, list):
        return json.dumps(value)
    return value


class _SQLiteTable:
    """
    Shared plumbing for one table: a connection per operation, committed on
    success, plus generic insert/select/update/delete helpers.
    """

    table: str = ""
    order_by: str = "id"

    def __init__(self, db_path: str, to_entity: Callable[[sqlite3.Row], Any]) -> None:
        self._db_path = db_path
        self._to_entity = to_entity

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _fetch_one(self, conn: sqlite3.Connection, item_id: int) -> Optional[Any]:
        row = conn.execute(f"SELECT * FROM {self.table} WHERE id = ?", (item_id,)).fetchone()
        return self._to_entity(row) if row else None

    def insert(self, fields: Dict[str, Any]) -> Any:
        values = {**fields, "created_at": datetime.now()}
        cols = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self._conn() as conn:
            cur = conn.execute(
                f"INSERT INTO {self.table} ({cols}) VALUES ({marks})",
                [_to_db(v) for v in values.values()],
            )
            entity = self._fetch_one(conn, int(cur.lastrowid))
            assert entity is not None
            return entity

    def get(self, item_id: int) -> Optional[Any]:
        with self._conn() as conn:
            return self._fetch_one(conn, item_id)

    def select(self, where: str = "", params: Sequence[Any] = (), order_by: Optional[str] = None) -> List[Any]:
        where_sql = f"WHERE {where}" if where else ""
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {self.table} {where_sql} ORDER BY {order_by or self.order_by}",
                list(params),
            ).fetchall()
            return [self._to_entity(r) for r in rows]

    def merge(self, item_id: int, changes: Dict[str, Any]) -> Optional[Any]:
        # id and created_at are never taken from a payload
        changes = {k: v for k, v in changes.items() if k not in {"id", "created_at"}}
        with self._conn() as conn:
            if changes:
                assignments = ", ".join(f"{col} = ?" for col in changes)
                cur = conn.execute(
                    f"UPDATE {self.table} SET {assignments} WHERE id = ?",
                    [*(_to_db(v) for v in changes.values()), item_id],
                )
                if cur.rowcount == 0:
                    return None
            return self._fetch_one(conn, item_id)

    def execute_for_row(self, sql: str, item_id: int) -> Optional[Any]:
        with self._conn() as conn:
            cur = conn.execute(sql, (item_id,))
            if cur.rowcount == 0:
                return None
            return self._fetch_one(conn, item_id)

    def remove(self, item_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (item_id,))
            return cur.rowcount > 0


def _diary_from_row(row: sqlite3.Row) -> DiaryEntryEntity:
    return {
        "id": int(row["id"]),
        "date": date.fromisoformat(row["date"]),
        "title": str(row["title"]),
        "content": str(row["content"]),
        "mood": str(row["mood"]),
        "tags": list(json.loads(row["tags"] or "[]")),
        "created_at": datetime.fromisoformat(row["created_at"]),
    }


def _expense_from_row(row: sqlite3.Row) -> ExpenseEntity:
    return {
        "id": int(row["id"]),
        "date": date.fromisoformat(row["date"]),
        "description": str(row["description"]),
        "amount": float(row["amount"]),
        "category": str(row["category"]),
        "created_at": datetime.fromisoformat(row["created_at"]),
    }


def _task_from_row(row: sqlite3.Row) -> TaskEntity:
    return {
        "id": int(row["id"]),
        "description": str(row["description"]),
        "due_date": date.fromisoformat(row["due_date"]),
        "completed": bool(row["completed"]),
        "created_at": datetime.fromisoformat(row["created_at"]),
    }


class _DiaryTable(_SQLiteTable):
    table = "diary_entries"
    order_by = "date DESC, id DESC"


class _ExpenseTable(_SQLiteTable):
    table = "expenses"
    order_by = "date DESC, id DESC"


class _TaskTable(_SQLiteTable):
    table = "tasks"
    order_by = "completed ASC, due_date ASC, id ASC"


class SQLiteDiaryRepository(DiaryRepository):
    """SQLite-backed diary storage."""

    def __init__(self, db_path: str) -> None:
        self._table = _DiaryTable(db_path, _diary_from_row)

    def create(self, data: DiaryEntryCreate) -> DiaryEntryEntity:
        return self._table.insert(data.model_dump())

    def get(self, entry_id: int) -> Optional[DiaryEntryEntity]:
        return self._table.get(entry_id)

    def get_by_date(self, day: date) -> Optional[DiaryEntryEntity]:
        rows = self._table.select("date = ?", (day.isoformat(),), order_by="id ASC")
        return rows[0] if rows else None

    def list_all(self) -> List[DiaryEntryEntity]:
        return self._table.select()

    def update(self, entry_id: int, data: DiaryEntryUpdate) -> Optional[DiaryEntryEntity]:
        return self._table.merge(entry_id, data.changes())

    def delete(self, entry_id: int) -> bool:
        return self._table.remove(entry_id)


class SQLiteExpenseRepository(ExpenseRepository):
    """SQLite-backed expense storage."""

    def __init__(self, db_path: str) -> None:
        self._table = _ExpenseTable(db_path, _expense_from_row)

    def create(self, data: ExpenseCreate) -> ExpenseEntity:
        return self._table.insert(data.model_dump())

    def get(self, expense_id: int) -> Optional[ExpenseEntity]:
        return self._table.get(expense_id)

    def list_by_date(self, day: date) -> List[ExpenseEntity]:
        return self._table.select("date = ?", (day.isoformat(),), order_by="id ASC")

    def list_all(self) -> List[ExpenseEntity]:
        return self._table.select()

    def update(self, expense_id: int, data: ExpenseUpdate) -> Optional[ExpenseEntity]:
        return self._table.merge(expense_id, data.changes())

    def delete(self, expense_id: int) -> bool:
        return self._table.remove(expense_id)


class SQLiteTaskRepository(TaskRepository):
    """SQLite-backed task storage."""

    def __init__(self, db_path: str) -> None:
        self._table = _TaskTable(db_path, _task_from_row)

    def create(self, data: TaskCreate) -> TaskEntity:
        return self._table.insert(data.model_dump())

    def get(self, task_id: int) -> Optional[TaskEntity]:
        return self._table.get(task_id)

    def list_by_date(self, day: date) -> List[TaskEntity]:
        return self._table.select("due_date = ?", (day.isoformat(),), order_by="id ASC")

    def list_all(self) -> List[TaskEntity]:
        return self._table.select()

    def update(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        return self._table.merge(task_id, data.changes())

    def toggle_completed(self, task_id: int) -> Optional[TaskEntity]:
        # single statement, so the flip is atomic at the row level
        return self._table.execute_for_row(
            "UPDATE tasks SET completed = 1 - completed WHERE id = ?", task_id
        )

    def delete(self, task_id: int) -> bool:
        return self._table.remove(task_id)


# PUBLIC_INTERFACE
def init_db(db_path: str) -> None:
    """Create the database file, its tables and indexes if missing."""
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        for statement in _SCHEMA:
            conn.execute(statement)
        conn.commit()
    finally:
        conn.close()


# PUBLIC_INTERFACE
def sqlite_storage(db_path: str) -> Storage:
    """Return a Storage whose repositories share the SQLite file at db_path."""
    if db_path == ":memory:":
        raise ValueError("An in-memory SQLite database does not persist across connections; use PERSISTENCE_BACKEND=memory")
    init_db(db_path)
    return Storage(
        backend="sqlite",
        diary=SQLiteDiaryRepository(db_path),
        expenses=SQLiteExpenseRepository(db_path),
        tasks=SQLiteTaskRepository(db_path),
    )
