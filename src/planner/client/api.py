"""
HTTP access to the planner API plus the dashboard's invalidate-and-refetch cache.

PlannerAPI maps one method to one endpoint. QueryCache keeps the last fetched
copy of each collection until a mutation invalidates it. Dashboard runs a
mutation, invalidates the affected collection, refetches it and returns the
next AppState; failures leave the collections as they were and add an error
toast instead. There are no optimistic updates.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from ..schemas import (
    DiaryEntryCreate,
    DiaryEntryOut,
    DiaryEntryUpdate,
    ExpenseCreate,
    ExpenseOut,
    ExpenseUpdate,
    TaskCreate,
    TaskOut,
    TaskUpdate,
)
from .state import AppState, Resource, Toast, add_toast, set_loading, with_collection

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Payload = Union[BaseModel, Mapping[str, Any]]


class ApiError(Exception):
    """A non-2xx response from the planner API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _body(payload: Payload, model: Type[BaseModel], partial: bool) -> Dict[str, Any]:
    if not isinstance(payload, BaseModel):
        payload = model.model_validate(dict(payload))
    return payload.model_dump(mode="json", by_alias=True, exclude_unset=partial)


class PlannerAPI:
    """Thin synchronous client for the REST endpoints."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_url(cls, base_url: str, timeout: float = 10.0) -> "PlannerAPI":
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = self._client.request(method, path, json=json)
        if response.status_code >= 400:
            try:
                message = response.json().get("message") or response.text
            except ValueError:
                message = response.text or response.reason_phrase
            raise ApiError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _one(self, model: Type[M], method: str, path: str, json: Optional[Dict[str, Any]] = None) -> M:
        return model.model_validate(self._request(method, path, json))

    def _many(self, model: Type[M], path: str) -> List[M]:
        return [model.model_validate(item) for item in self._request("GET", path)]

    # diary
    def list_diary_entries(self) -> List[DiaryEntryOut]:
        return self._many(DiaryEntryOut, Resource.DIARY.value)

    def diary_entry_for(self, day: date) -> Optional[DiaryEntryOut]:
        try:
            return self._one(DiaryEntryOut, "GET", f"{Resource.DIARY.value}/{day.isoformat()}")
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise

    def create_diary_entry(self, payload: Payload) -> DiaryEntryOut:
        return self._one(DiaryEntryOut, "POST", Resource.DIARY.value, _body(payload, DiaryEntryCreate, False))

    def update_diary_entry(self, entry_id: int, changes: Payload) -> DiaryEntryOut:
        body = _body(changes, DiaryEntryUpdate, True)
        return self._one(DiaryEntryOut, "PUT", f"{Resource.DIARY.value}/{entry_id}", body)

    def delete_diary_entry(self, entry_id: int) -> None:
        self._request("DELETE", f"{Resource.DIARY.value}/{entry_id}")

    # expenses
    def list_expenses(self) -> List[ExpenseOut]:
        return self._many(ExpenseOut, Resource.EXPENSES.value)

    def expenses_on(self, day: date) -> List[ExpenseOut]:
        return self._many(ExpenseOut, f"{Resource.EXPENSES.value}/{day.isoformat()}")

    def create_expense(self, payload: Payload) -> ExpenseOut:
        return self._one(ExpenseOut, "POST", Resource.EXPENSES.value, _body(payload, ExpenseCreate, False))

    def update_expense(self, expense_id: int, changes: Payload) -> ExpenseOut:
        body = _body(changes, ExpenseUpdate, True)
        return self._one(ExpenseOut, "PUT", f"{Resource.EXPENSES.value}/{expense_id}", body)

    def delete_expense(self, expense_id: int) -> None:
        self._request("DELETE", f"{Resource.EXPENSES.value}/{expense_id}")

    # tasks
    def list_tasks(self) -> List[TaskOut]:
        return self._many(TaskOut, Resource.TASKS.value)

    def tasks_due_on(self, day: date) -> List[TaskOut]:
        return self._many(TaskOut, f"{Resource.TASKS.value}/{day.isoformat()}")

    def create_task(self, payload: Payload) -> TaskOut:
        return self._one(TaskOut, "POST", Resource.TASKS.value, _body(payload, TaskCreate, False))

    def update_task(self, task_id: int, changes: Payload) -> TaskOut:
        return self._one(TaskOut, "PUT", f"{Resource.TASKS.value}/{task_id}", _body(changes, TaskUpdate, True))

    def toggle_task(self, task_id: int) -> TaskOut:
        return self._one(TaskOut, "PATCH", f"{Resource.TASKS.value}/{task_id}/toggle")

    def delete_task(self, task_id: int) -> None:
        self._request("DELETE", f"{Resource.TASKS.value}/{task_id}")


class QueryCache:
    """Last fetched copy of each collection, keyed by resource path."""

    def __init__(self, api: PlannerAPI) -> None:
        self._fetchers: Dict[Resource, Callable[[], List[Any]]] = {
            Resource.DIARY: api.list_diary_entries,
            Resource.EXPENSES: api.list_expenses,
            Resource.TASKS: api.list_tasks,
        }
        self._entries: Dict[Resource, Tuple[Any, ...]] = {}
        self.fetch_count = 0

    def get(self, resource: Resource) -> Tuple[Any, ...]:
        """Return the cached collection, fetching it first if absent."""
        resource = Resource(resource)
        if resource not in self._entries:
            self._entries[resource] = tuple(self._fetchers[resource]())
            self.fetch_count += 1
        return self._entries[resource]

    def is_cached(self, resource: Resource) -> bool:
        return Resource(resource) in self._entries

    def invalidate(self, resource: Resource) -> None:
        self._entries.pop(Resource(resource), None)

    def invalidate_all(self) -> None:
        self._entries.clear()


# ValidationError covers payloads rejected before any request is sent
_ERRORS = (ApiError, httpx.HTTPError, ValidationError)


def _error_text(exc: Exception) -> str:
    return exc.message if isinstance(exc, ApiError) else str(exc) or "Unknown error"


class Dashboard:
    """
    Runs user actions against the API and produces the next AppState.

    Every mutation issues exactly one request, then invalidates and refetches
    the affected collection.
    """

    def __init__(self, api: PlannerAPI, cache: Optional[QueryCache] = None) -> None:
        self.api = api
        self.cache = cache or QueryCache(api)

    # PUBLIC_INTERFACE
    def load(self, state: AppState) -> AppState:
        """Populate all three collections from the cache, fetching what is missing."""
        state = set_loading(state, True)
        for resource, label in (
            (Resource.DIARY, "diary entries"),
            (Resource.EXPENSES, "expenses"),
            (Resource.TASKS, "tasks"),
        ):
            try:
                state = with_collection(state, resource, self.cache.get(resource))
            except _ERRORS as e:
                logger.warning("Fetching %s failed: %s", label, e, extra={"resource": resource.value})
                state = add_toast(state, Toast(f"Error fetching {label}", _error_text(e), "destructive"))
        return set_loading(state, False)

    def refresh(self, state: AppState) -> AppState:
        self.cache.invalidate_all()
        return self.load(state)

    def _mutate(
        self,
        state: AppState,
        resource: Resource,
        action: Callable[[], Any],
        success: str,
        failure: str,
    ) -> AppState:
        try:
            action()
        except _ERRORS as e:
            logger.warning("%s: %s", failure, e, extra={"resource": resource.value})
            return add_toast(state, Toast("Error", _error_text(e) or failure, "destructive"))
        self.cache.invalidate(resource)
        try:
            items = self.cache.get(resource)
        except _ERRORS as e:
            logger.warning("Refetch after mutation failed: %s", e, extra={"resource": resource.value})
            return add_toast(state, Toast("Error", _error_text(e), "destructive"))
        return add_toast(with_collection(state, resource, items), Toast("Success", success))

    # diary
    def save_diary_entry(self, state: AppState, payload: Payload, entry_id: Optional[int] = None) -> AppState:
        """Create a new entry, or update `entry_id` when editing an existing one."""
        if entry_id is None:
            return self._mutate(
                state, Resource.DIARY, lambda: self.api.create_diary_entry(payload),
                "Diary entry saved", "Failed to save diary entry",
            )
        return self._mutate(
            state, Resource.DIARY, lambda: self.api.update_diary_entry(entry_id, payload),
            "Diary entry updated", "Failed to update diary entry",
        )

    def delete_diary_entry(self, state: AppState, entry_id: int) -> AppState:
        return self._mutate(
            state, Resource.DIARY, lambda: self.api.delete_diary_entry(entry_id),
            "Diary entry deleted", "Failed to delete diary entry",
        )

    # expenses
    def add_expense(self, state: AppState, payload: Payload) -> AppState:
        return self._mutate(
            state, Resource.EXPENSES, lambda: self.api.create_expense(payload),
            "Expense added", "Failed to add expense",
        )

    def update_expense(self, state: AppState, expense_id: int, changes: Payload) -> AppState:
        return self._mutate(
            state, Resource.EXPENSES, lambda: self.api.update_expense(expense_id, changes),
            "Expense updated", "Failed to update expense",
        )

    def delete_expense(self, state: AppState, expense_id: int) -> AppState:
        return self._mutate(
            state, Resource.EXPENSES, lambda: self.api.delete_expense(expense_id),
            "Expense deleted", "Failed to delete expense",
        )

    # tasks
    def add_task(self, state: AppState, payload: Payload) -> AppState:
        return self._mutate(
            state, Resource.TASKS, lambda: self.api.create_task(payload),
            "Task added", "Failed to add task",
        )

    def update_task(self, state: AppState, task_id: int, changes: Payload) -> AppState:
        return self._mutate(
            state, Resource.TASKS, lambda: self.api.update_task(task_id, changes),
            "Task updated", "Failed to update task",
        )

    def toggle_task(self, state: AppState, task_id: int) -> AppState:
        return self._mutate(
            state, Resource.TASKS, lambda: self.api.toggle_task(task_id),
            "Task updated", "Failed to update task",
        )

    def delete_task(self, state: AppState, task_id: int) -> AppState:
        return self._mutate(
            state, Resource.TASKS, lambda: self.api.delete_task(task_id),
            "Task deleted", "Failed to delete task",
        )
