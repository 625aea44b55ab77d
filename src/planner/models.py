from __future__ import annotations

from datetime import date, datetime
from typing import List, TypedDict


# PUBLIC_INTERFACE
class DiaryEntryEntity(TypedDict):
    """
    A diary entry as held by the storage backends.

    Fields:
    - id: Unique integer identifier, never reused
    - date: Calendar day the entry is about
    - title: Short title (trimmed, non-empty)
    - content: Body text (trimmed, non-empty)
    - mood: One of the Mood labels
    - tags: Ordered list of tags
    - created_at: Creation timestamp, set once
    """

    id: int
    date: date
    title: str
    content: str
    mood: str
    tags: List[str]
    created_at: datetime


# PUBLIC_INTERFACE
class ExpenseEntity(TypedDict):
    """An expense as held by the storage backends."""

    id: int
    date: date
    description: str
    amount: float
    category: str
    created_at: datetime


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """A to-do task as held by the storage backends."""

    id: int
    description: str
    due_date: date
    completed: bool
    created_at: datetime
