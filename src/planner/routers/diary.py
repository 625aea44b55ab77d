from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ..repositories import DiaryRepository
from ..schemas import DiaryEntryCreate, DiaryEntryOut, DiaryEntryUpdate
from .common import diary_repo, failure_message, not_found, parse_day_param

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/diary",
    tags=["diary"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[DiaryEntryOut],
    summary="List Diary Entries",
    description="List all diary entries, newest date first.",
)
def list_entries(repo: DiaryRepository = Depends(diary_repo)) -> List[DiaryEntryOut]:
    with failure_message("Failed to fetch diary entries", "diary"):
        return [DiaryEntryOut(**e) for e in repo.list_all()]


# PUBLIC_INTERFACE
@router.get(
    "/{day}",
    response_model=DiaryEntryOut,
    summary="Get Diary Entry For Day",
    description="Get the diary entry written for a calendar day (YYYY-MM-DD).",
    responses={
        400: {"description": "Invalid date format"},
        404: {"description": "No diary entry for this date"},
    },
)
def get_entry_for_day(day: str, repo: DiaryRepository = Depends(diary_repo)) -> DiaryEntryOut:
    parsed = parse_day_param(day)
    with failure_message("Failed to fetch diary entry", "diary"):
        entry = repo.get_by_date(parsed)
        if entry is None:
            raise not_found("No diary entry found for this date")
        return DiaryEntryOut(**entry)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=DiaryEntryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Diary Entry",
    responses={400: {"description": "Validation error"}},
)
def create_entry(payload: DiaryEntryCreate, repo: DiaryRepository = Depends(diary_repo)) -> DiaryEntryOut:
    with failure_message("Failed to create diary entry", "diary"):
        created = repo.create(payload)
    logger.info("Created diary entry", extra={"resource": "diary", "entity_id": created["id"]})
    return DiaryEntryOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{entry_id}",
    response_model=DiaryEntryOut,
    summary="Update Diary Entry",
    description="Partially update a diary entry; omitted fields are left unchanged.",
    responses={
        400: {"description": "Validation error"},
        404: {"description": "Diary entry not found"},
    },
)
def update_entry(
    entry_id: int, payload: DiaryEntryUpdate, repo: DiaryRepository = Depends(diary_repo)
) -> DiaryEntryOut:
    with failure_message("Failed to update diary entry", "diary"):
        updated = repo.update(entry_id, payload)
    if updated is None:
        raise not_found("Diary entry not found")
    logger.info("Updated diary entry", extra={"resource": "diary", "entity_id": entry_id})
    return DiaryEntryOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Diary Entry",
    responses={404: {"description": "Diary entry not found"}},
)
def delete_entry(entry_id: int, repo: DiaryRepository = Depends(diary_repo)) -> None:
    with failure_message("Failed to delete diary entry", "diary"):
        ok = repo.delete(entry_id)
    if not ok:
        raise not_found("Diary entry not found")
    logger.info("Deleted diary entry", extra={"resource": "diary", "entity_id": entry_id})
    return None
