from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ..repositories import TaskRepository
from ..schemas import TaskCreate, TaskOut, TaskUpdate
from .common import failure_message, not_found, parse_day_param, task_repo

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description=(
        "List all tasks. Incomplete tasks come first ordered by ascending due date, "
        "followed by completed tasks."
    ),
)
def list_tasks(repo: TaskRepository = Depends(task_repo)) -> List[TaskOut]:
    with failure_message("Failed to fetch tasks", "tasks"):
        return [TaskOut(**t) for t in repo.list_all()]


# PUBLIC_INTERFACE
@router.get(
    "/{day}",
    response_model=List[TaskOut],
    summary="List Tasks Due On Day",
    description="List the tasks due on a calendar day (YYYY-MM-DD).",
    responses={400: {"description": "Invalid date format"}},
)
def list_tasks_for_day(day: str, repo: TaskRepository = Depends(task_repo)) -> List[TaskOut]:
    parsed = parse_day_param(day)
    with failure_message("Failed to fetch tasks", "tasks"):
        return [TaskOut(**t) for t in repo.list_by_date(parsed)]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    responses={400: {"description": "Validation error"}},
)
def create_task(payload: TaskCreate, repo: TaskRepository = Depends(task_repo)) -> TaskOut:
    with failure_message("Failed to create task", "tasks"):
        created = repo.create(payload)
    logger.info("Created task", extra={"resource": "tasks", "entity_id": created["id"]})
    return TaskOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Partially update a task; omitted fields are left unchanged.",
    responses={
        400: {"description": "Validation error"},
        404: {"description": "Task not found"},
    },
)
def update_task(task_id: int, payload: TaskUpdate, repo: TaskRepository = Depends(task_repo)) -> TaskOut:
    with failure_message("Failed to update task", "tasks"):
        updated = repo.update(task_id, payload)
    if updated is None:
        raise not_found("Task not found")
    logger.info("Updated task", extra={"resource": "tasks", "entity_id": task_id})
    return TaskOut(**updated)


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}/toggle",
    response_model=TaskOut,
    summary="Toggle Task Completion",
    description="Flip the completed flag of a task. Any request body is ignored.",
    responses={404: {"description": "Task not found"}},
)
def toggle_task(task_id: int, repo: TaskRepository = Depends(task_repo)) -> TaskOut:
    with failure_message("Failed to toggle task completion", "tasks"):
        toggled = repo.toggle_completed(task_id)
    if toggled is None:
        raise not_found("Task not found")
    logger.info("Toggled task", extra={"resource": "tasks", "entity_id": task_id})
    return TaskOut(**toggled)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    responses={404: {"description": "Task not found"}},
)
def delete_task(task_id: int, repo: TaskRepository = Depends(task_repo)) -> None:
    with failure_message("Failed to delete task", "tasks"):
        ok = repo.delete(task_id)
    if not ok:
        raise not_found("Task not found")
    logger.info("Deleted task", extra={"resource": "tasks", "entity_id": task_id})
    return None
