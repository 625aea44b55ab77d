"""
Dashboard-side building blocks: immutable application state, the API client
with its invalidate-and-refetch cache, view derivations and the assistant
message rotator.
"""

from .api import ApiError, Dashboard, PlannerAPI, QueryCache
from .assistant import ASSISTANT_MESSAGES, MessageRotator, random_message
from .state import AppState, Resource, Toast, View, initial_state
from .views import CalendarDay, TaskFilter, calendar_month, filter_tasks

__all__ = [
    "ASSISTANT_MESSAGES",
    "ApiError",
    "AppState",
    "CalendarDay",
    "Dashboard",
    "MessageRotator",
    "PlannerAPI",
    "QueryCache",
    "Resource",
    "TaskFilter",
    "Toast",
    "View",
    "calendar_month",
    "filter_tasks",
    "initial_state",
    "random_message",
]
