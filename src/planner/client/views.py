from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Sequence, TypeVar

from ..dates import DAYS_OF_WEEK, DateLike, as_date, month_boundaries, month_grid, week_boundaries
from ..schemas import DiaryEntryOut, ExpenseOut, TaskOut

Dated = TypeVar("Dated", DiaryEntryOut, ExpenseOut)


class TaskFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


def sort_newest_first(items: Iterable[Dated]) -> List[Dated]:
    return sorted(items, key=lambda i: (i.date, i.id), reverse=True)


def diary_entry_for(entries: Iterable[DiaryEntryOut], day: DateLike) -> Optional[DiaryEntryOut]:
    """The entry written for `day`; the earliest one if several exist."""
    d = as_date(day)
    matches = [e for e in entries if e.date == d]
    return min(matches, key=lambda e: e.id) if matches else None


def expenses_on(expenses: Iterable[ExpenseOut], day: DateLike) -> List[ExpenseOut]:
    d = as_date(day)
    return [e for e in expenses if e.date == d]


def expenses_between(expenses: Iterable[ExpenseOut], start: date, end: date) -> List[ExpenseOut]:
    """Expenses dated within [start, end], both inclusive."""
    return [e for e in expenses if start <= e.date <= end]


def total(expenses: Iterable[ExpenseOut]) -> float:
    return math.fsum(e.amount for e in expenses)


def daily_total(expenses: Iterable[ExpenseOut], day: DateLike) -> float:
    return total(expenses_on(expenses, day))


def weekly_total(expenses: Iterable[ExpenseOut], day: DateLike) -> float:
    """Total of the Sunday-to-Saturday week containing `day`."""
    start, end = week_boundaries(day)
    return total(expenses_between(expenses, start, end))


def monthly_total(expenses: Iterable[ExpenseOut], day: DateLike) -> float:
    start, end = month_boundaries(day)
    return total(expenses_between(expenses, start, end))


# PUBLIC_INTERFACE
def filter_tasks(tasks: Iterable[TaskOut], which: TaskFilter = TaskFilter.ALL) -> List[TaskOut]:
    """
    Subset of tasks for the to-do view, earliest due date first.

    - all: every task
    - active: tasks not yet completed
    - completed: finished tasks
    """
    which = TaskFilter(which)
    if which is TaskFilter.ACTIVE:
        selected = [t for t in tasks if not t.completed]
    elif which is TaskFilter.COMPLETED:
        selected = [t for t in tasks if t.completed]
    else:
        selected = list(tasks)
    return sorted(selected, key=lambda t: (t.due_date, t.id))


def tasks_due_on(tasks: Iterable[TaskOut], day: DateLike) -> List[TaskOut]:
    d = as_date(day)
    return sorted((t for t in tasks if t.due_date == d), key=lambda t: t.id)


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the month grid."""

    day: date
    weekday: str
    in_month: bool
    is_selected: bool
    is_today: bool
    has_diary_entry: bool
    task_count: int
    open_task_count: int
    expense_total: float


# PUBLIC_INTERFACE
def calendar_month(
    month: DateLike,
    *,
    diary_entries: Sequence[DiaryEntryOut] = (),
    expenses: Sequence[ExpenseOut] = (),
    tasks: Sequence[TaskOut] = (),
    selected: Optional[DateLike] = None,
    today: Optional[DateLike] = None,
) -> List[CalendarDay]:
    """
    Build the 42-cell calendar for the month containing `month`, annotated with
    what happened on each day.
    """
    first, _ = month_boundaries(month)
    selected_day = as_date(selected) if selected is not None else None
    today_day = as_date(today) if today is not None else date.today()
    written = {e.date for e in diary_entries}

    cells = []
    for day in month_grid(first):
        due = [t for t in tasks if t.due_date == day]
        cells.append(
            CalendarDay(
                day=day,
                weekday=DAYS_OF_WEEK[(day.weekday() + 1) % 7],
                in_month=(day.year, day.month) == (first.year, first.month),
                is_selected=day == selected_day,
                is_today=day == today_day,
                has_diary_entry=day in written,
                task_count=len(due),
                open_task_count=sum(1 for t in due if not t.completed),
                expense_total=daily_total(expenses, day),
            )
        )
    return cells
