from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Optional, Sequence, Tuple

from ..dates import DateLike, add_months, as_date, first_of_month
from ..schemas import DiaryEntryOut, ExpenseOut, TaskOut


class View(str, Enum):
    DIARY = "diary"
    BUDGET = "budget"
    CALENDAR = "calendar"
    TODO = "todo"


class Resource(str, Enum):
    """API collections mirrored by the client; values double as cache keys."""

    DIARY = "/api/diary"
    EXPENSES = "/api/expenses"
    TASKS = "/api/tasks"


@dataclass(frozen=True)
class Toast:
    """A transient notification shown to the user."""

    title: str
    description: str
    variant: str = "default"  # or "destructive"


@dataclass(frozen=True)
class AppState:
    """
    The whole dashboard state. Instances are immutable; every transition below
    returns a new AppState and leaves the old one untouched.
    """

    view: View = View.DIARY
    selected_date: date = field(default_factory=date.today)
    current_month: date = field(default_factory=lambda: date.today().replace(day=1))
    show_assistant: bool = True
    assistant_message: str = ""
    diary_entries: Tuple[DiaryEntryOut, ...] = ()
    expenses: Tuple[ExpenseOut, ...] = ()
    tasks: Tuple[TaskOut, ...] = ()
    loading: bool = False
    toasts: Tuple[Toast, ...] = ()


# PUBLIC_INTERFACE
def initial_state(today: Optional[DateLike] = None, assistant_message: str = "") -> AppState:
    """Fresh state on the diary view with today selected."""
    day = as_date(today) if today is not None else date.today()
    return AppState(selected_date=day, current_month=first_of_month(day), assistant_message=assistant_message)


def select_view(state: AppState, view: View) -> AppState:
    return replace(state, view=View(view))


def select_date(state: AppState, day: DateLike) -> AppState:
    return replace(state, selected_date=as_date(day))


def set_current_month(state: AppState, day: DateLike) -> AppState:
    return replace(state, current_month=first_of_month(day))


def previous_month(state: AppState) -> AppState:
    return replace(state, current_month=add_months(state.current_month, -1))


def next_month(state: AppState) -> AppState:
    return replace(state, current_month=add_months(state.current_month, 1))


def show_assistant(state: AppState, visible: bool) -> AppState:
    return replace(state, show_assistant=visible)


def set_assistant_message(state: AppState, message: str) -> AppState:
    return replace(state, assistant_message=message)


def set_loading(state: AppState, loading: bool) -> AppState:
    return replace(state, loading=loading)


# PUBLIC_INTERFACE
def with_collection(state: AppState, resource: Resource, items: Sequence) -> AppState:
    """Replace one fetched collection."""
    resource = Resource(resource)
    if resource is Resource.DIARY:
        return replace(state, diary_entries=tuple(items))
    if resource is Resource.EXPENSES:
        return replace(state, expenses=tuple(items))
    return replace(state, tasks=tuple(items))


def add_toast(state: AppState, toast: Toast) -> AppState:
    return replace(state, toasts=state.toasts + (toast,))


def dismiss_toasts(state: AppState) -> AppState:
    return replace(state, toasts=())
