from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ..repositories import ExpenseRepository
from ..schemas import ExpenseCreate, ExpenseOut, ExpenseUpdate
from .common import expense_repo, failure_message, not_found, parse_day_param

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/expenses",
    tags=["expenses"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[ExpenseOut],
    summary="List Expenses",
    description="List all expenses, newest date first.",
)
def list_expenses(repo: ExpenseRepository = Depends(expense_repo)) -> List[ExpenseOut]:
    with failure_message("Failed to fetch expenses", "expenses"):
        return [ExpenseOut(**e) for e in repo.list_all()]


# PUBLIC_INTERFACE
@router.get(
    "/{day}",
    response_model=List[ExpenseOut],
    summary="List Expenses For Day",
    description="List the expenses recorded on a calendar day (YYYY-MM-DD). An empty day yields an empty list.",
    responses={400: {"description": "Invalid date format"}},
)
def list_expenses_for_day(day: str, repo: ExpenseRepository = Depends(expense_repo)) -> List[ExpenseOut]:
    parsed = parse_day_param(day)
    with failure_message("Failed to fetch expenses", "expenses"):
        return [ExpenseOut(**e) for e in repo.list_by_date(parsed)]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ExpenseOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Expense",
    responses={400: {"description": "Validation error"}},
)
def create_expense(payload: ExpenseCreate, repo: ExpenseRepository = Depends(expense_repo)) -> ExpenseOut:
    with failure_message("Failed to create expense", "expenses"):
        created = repo.create(payload)
    logger.info("Created expense", extra={"resource": "expenses", "entity_id": created["id"]})
    return ExpenseOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{expense_id}",
    response_model=ExpenseOut,
    summary="Update Expense",
    description="Partially update an expense; omitted fields are left unchanged.",
    responses={
        400: {"description": "Validation error"},
        404: {"description": "Expense not found"},
    },
)
def update_expense(
    expense_id: int, payload: ExpenseUpdate, repo: ExpenseRepository = Depends(expense_repo)
) -> ExpenseOut:
    with failure_message("Failed to update expense", "expenses"):
        updated = repo.update(expense_id, payload)
    if updated is None:
        raise not_found("Expense not found")
    logger.info("Updated expense", extra={"resource": "expenses", "entity_id": expense_id})
    return ExpenseOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Expense",
    responses={404: {"description": "Expense not found"}},
)
def delete_expense(expense_id: int, repo: ExpenseRepository = Depends(expense_repo)) -> None:
    with failure_message("Failed to delete expense", "expenses"):
        ok = repo.delete(expense_id)
    if not ok:
        raise not_found("Expense not found")
    logger.info("Deleted expense", extra={"resource": "expenses", "entity_id": expense_id})
    return None
