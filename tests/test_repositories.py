from datetime import date

import pytest

from planner.db import sqlite_storage
from planner.repositories import create_storage, memory_storage
from planner.schemas import (
    DiaryEntryCreate,
    DiaryEntryUpdate,
    ExpenseCreate,
    ExpenseUpdate,
    TaskCreate,
    TaskUpdate,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return memory_storage()
    return sqlite_storage(str(tmp_path / "planner.db"))


def make_task(description="Buy cat food", due="2024-05-01", completed=False):
    return TaskCreate(description=description, due_date=due, completed=completed)


class TestCreate:
    def test_ids_unique_and_created_at_set(self, store):
        tasks = [store.tasks.create(make_task(description=f"t{i}")) for i in range(5)]
        ids = [t["id"] for t in tasks]
        assert len(set(ids)) == 5
        assert all(i > 0 for i in ids)
        assert all(t["created_at"] is not None for t in tasks)

    def test_diary_roundtrip(self, store):
        created = store.diary.create(
            DiaryEntryCreate(date="2024-05-01", title="T", content="C", mood="sad", tags=["x", "y"])
        )
        fetched = store.diary.get(created["id"])
        assert fetched == created
        assert fetched["date"] == date(2024, 5, 1)
        assert fetched["tags"] == ["x", "y"]
        assert fetched["mood"] == "sad"

    def test_expense_amount_is_exact(self, store):
        created = store.expenses.create(
            ExpenseCreate(date="2024-05-01", description="Lunch", amount=12.5, category="food")
        )
        assert store.expenses.get(created["id"])["amount"] == 12.5


class TestUpdate:
    def test_created_at_survives_updates(self, store):
        created = store.tasks.create(make_task())
        updated = store.tasks.update(created["id"], TaskUpdate(description="Buy dog food"))
        assert updated["description"] == "Buy dog food"
        assert updated["created_at"] == created["created_at"]
        assert updated["due_date"] == created["due_date"]

    def test_empty_update_returns_entity(self, store):
        created = store.expenses.create(
            ExpenseCreate(date="2024-05-01", description="Lunch", amount=3, category="food")
        )
        assert store.expenses.update(created["id"], ExpenseUpdate()) == created

    def test_update_unknown_id(self, store):
        assert store.diary.update(99, DiaryEntryUpdate(title="x")) is None
        assert store.expenses.update(99, ExpenseUpdate()) is None

    def test_returned_values_are_copies(self, store):
        created = store.diary.create(
            DiaryEntryCreate(date="2024-05-01", title="T", content="C", mood="happy", tags=["x"])
        )
        created["tags"].append("mutated")
        created["title"] = "mutated"
        fetched = store.diary.get(created["id"])
        assert fetched["tags"] == ["x"]
        assert fetched["title"] == "T"


class TestToggleAndDelete:
    def test_toggle_twice_restores_state(self, store):
        created = store.tasks.create(make_task())
        assert store.tasks.toggle_completed(created["id"])["completed"] is True
        assert store.tasks.toggle_completed(created["id"])["completed"] is False

    def test_toggle_unknown(self, store):
        assert store.tasks.toggle_completed(12345) is None

    def test_delete_unknown_removes_nothing(self, store):
        a = store.tasks.create(make_task(description="a"))
        b = store.tasks.create(make_task(description="b"))
        assert store.tasks.delete(9999) is False
        assert {t["id"] for t in store.tasks.list_all()} == {a["id"], b["id"]}
        assert store.tasks.delete(a["id"]) is True
        assert store.tasks.delete(a["id"]) is False
        assert [t["id"] for t in store.tasks.list_all()] == [b["id"]]


class TestOrdering:
    def test_task_order(self, store):
        store.tasks.create(make_task("done", "2024-01-01", True))
        store.tasks.create(make_task("later", "2024-03-01"))
        store.tasks.create(make_task("sooner", "2024-02-01"))
        store.tasks.create(make_task("done later", "2024-04-01", True))
        listed = store.tasks.list_all()
        assert [t["description"] for t in listed] == ["sooner", "later", "done", "done later"]

    def test_diary_newest_first_and_get_by_date(self, store):
        for day in ["2024-05-01", "2024-05-03", "2024-05-02"]:
            store.diary.create(DiaryEntryCreate(date=day, title=day, content="c", mood="neutral"))
        assert [e["date"].isoformat() for e in store.diary.list_all()] == ["2024-05-03", "2024-05-02", "2024-05-01"]
        assert store.diary.get_by_date(date(2024, 5, 2))["title"] == "2024-05-02"
        assert store.diary.get_by_date(date(2024, 6, 1)) is None

    def test_expenses_by_date(self, store):
        store.expenses.create(ExpenseCreate(date="2024-05-01", description="a", amount=1, category="food"))
        store.expenses.create(ExpenseCreate(date="2024-05-02", description="b", amount=2, category="other"))
        assert [e["description"] for e in store.expenses.list_by_date(date(2024, 5, 2))] == ["b"]
        assert store.expenses.list_by_date(date(2024, 5, 9)) == []


class TestSQLitePersistence:
    def test_data_survives_a_new_storage_instance(self, tmp_path):
        path = str(tmp_path / "nested" / "planner.db")
        first = sqlite_storage(path)
        created = first.tasks.create(make_task())
        second = sqlite_storage(path)
        assert second.tasks.get(created["id"]) == created

    def test_in_memory_sqlite_is_rejected(self):
        with pytest.raises(ValueError):
            sqlite_storage(":memory:")


class TestCreateStorage:
    def test_memory_is_default(self):
        assert create_storage("memory").backend == "memory"

    def test_sqlite_requires_database_url(self):
        with pytest.raises(RuntimeError, match="DATABASE_URL must be set"):
            create_storage("sqlite", None)

    def test_sqlite_from_url(self, tmp_path):
        storage = create_storage("sqlite", f"sqlite:///{tmp_path / 'x.db'}")
        assert storage.backend == "sqlite"
        assert storage.tasks.list_all() == []
