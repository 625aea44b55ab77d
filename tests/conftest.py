import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from planner.main import app  # noqa: E402
from planner.repositories import get_storage, memory_storage  # noqa: E402


@pytest.fixture
def storage():
    """A fresh, empty in-memory storage per test."""
    return memory_storage()


@pytest.fixture
def client(storage):
    """TestClient whose requests all hit the per-test storage."""
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def diary_payload(day="2024-05-01", title="A sunny day", content="Walked by the river.", mood="happy", tags=None):
    payload = {"date": day, "title": title, "content": content, "mood": mood}
    if tags is not None:
        payload["tags"] = tags
    return payload


def expense_payload(day="2024-05-01", description="Groceries", amount=12.5, category="food"):
    return {"date": day, "description": description, "amount": amount, "category": category}


def task_payload(description="Buy cat food", due="2024-05-01", completed=False):
    return {"description": description, "dueDate": due, "completed": completed}
