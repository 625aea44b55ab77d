from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from fastapi import Depends, HTTPException, status

from ..dates import InvalidDateError, parse_iso_date
from ..repositories import DiaryRepository, ExpenseRepository, Storage, TaskRepository, get_storage

logger = logging.getLogger(__name__)


def diary_repo(storage: Storage = Depends(get_storage)) -> DiaryRepository:
    return storage.diary


def expense_repo(storage: Storage = Depends(get_storage)) -> ExpenseRepository:
    return storage.expenses


def task_repo(storage: Storage = Depends(get_storage)) -> TaskRepository:
    return storage.tasks


# PUBLIC_INTERFACE
def parse_day_param(value: str) -> date:
    """
    Validate a YYYY-MM-DD path parameter.

    Raises:
        HTTPException(400) if the value is malformed or not a real calendar day.
    """
    try:
        return parse_iso_date(value)
    except InvalidDateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


def not_found(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


# PUBLIC_INTERFACE
@contextmanager
def failure_message(message: str, resource: str) -> Iterator[None]:
    """
    Turn unexpected storage failures into a generic 500 with `message`.

    HTTPExceptions raised inside the block pass through untouched; anything else
    is logged with its traceback and never reaches the client.
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(message, extra={"resource": resource})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message) from e
