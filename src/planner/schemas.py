from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .dates import parse_iso_date

# Shared type for incoming day fields: a date or a strict YYYY-MM-DD string
DayInput = Union[dt.date, str]


class Mood(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    NEUTRAL = "neutral"
    ANGRY = "angry"
    TIRED = "tired"


class Category(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


def _parse_day(value: Optional[DayInput]) -> Optional[dt.date]:
    """
    Normalize a day field.
    - datetime values are truncated to their date
    - strings must be strict YYYY-MM-DD calendar days
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return parse_iso_date(value.strip())
    raise ValueError("Invalid type for date; expected a YYYY-MM-DD string.")


def _required_text(name: str, v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not s:
        raise ValueError(f"{name} must not be empty")
    return s


def _clean_tags(v: Optional[List[str]]) -> List[str]:
    # runs after pydantic has checked the value is a list of strings
    if v is None:
        return []
    return [t.strip() for t in v if t.strip()]


class _Schema(BaseModel):
    # camelCase on the wire, snake_case in Python; either is accepted on input
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class _PartialSchema(_Schema):
    """
    Base for partial-update payloads.

    Only fields present in the request are applied. Fields listed in
    ``nullable_fields`` may be sent as null; any other explicit null is rejected.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} may not be null")
        return self

    # PUBLIC_INTERFACE
    def changes(self) -> Dict[str, Any]:
        """Return only the fields that were provided, keyed by attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


# ---------------------------------------------------------------- diary


# PUBLIC_INTERFACE
class DiaryEntryCreate(_Schema):
    """
    Schema for creating a diary entry.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "date": "2024-05-01",
                "title": "A sunny day",
                "content": "Went for a long walk by the river.",
                "mood": "happy",
                "tags": ["walk", "outside"],
            }
        }
    )

    date: dt.date = Field(..., description="Calendar day of the entry (YYYY-MM-DD)")
    title: str = Field(..., description="Entry title", min_length=1)
    content: str = Field(..., description="Entry body", min_length=1)
    mood: Mood = Field(..., description="Mood label")
    tags: List[str] = Field(default_factory=list, description="Ordered list of tags")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Optional[DayInput]) -> Optional[dt.date]:
        return _parse_day(v)

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: str, info: ValidationInfo) -> str:
        return _required_text(info.field_name, v)

    @field_validator("tags", mode="before")
    @classmethod
    def null_tags(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)


# PUBLIC_INTERFACE
class DiaryEntryUpdate(_PartialSchema):
    """
    Schema for updating an existing diary entry.
    All fields are optional; only provided fields will be updated.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"tags"})

    date: Optional[dt.date] = Field(default=None, description="Calendar day of the entry (YYYY-MM-DD)")
    title: Optional[str] = Field(default=None, description="Entry title", min_length=1)
    content: Optional[str] = Field(default=None, description="Entry body", min_length=1)
    mood: Optional[Mood] = Field(default=None, description="Mood label")
    tags: Optional[List[str]] = Field(default=None, description="Ordered list of tags")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Optional[DayInput]) -> Optional[dt.date]:
        return _parse_day(v)

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _required_text(info.field_name, v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> List[str]:
        # null clears the tag list
        return _clean_tags(v)


# PUBLIC_INTERFACE
class DiaryEntryOut(_Schema):
    """Schema returned by the API for a diary entry."""

    id: int = Field(..., description="Unique identifier of the entry")
    date: dt.date
    title: str
    content: str
    mood: Mood
    tags: List[str] = Field(default_factory=list)
    created_at: dt.datetime = Field(..., description="Creation timestamp")


# ---------------------------------------------------------------- expenses


# PUBLIC_INTERFACE
class ExpenseCreate(_Schema):
    """
    Schema for recording an expense.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "date": "2024-05-01",
                "description": "Groceries",
                "amount": 12.5,
                "category": "food",
            }
        }
    )

    date: dt.date = Field(..., description="Day the money was spent (YYYY-MM-DD)")
    description: str = Field(..., description="What the money was spent on", min_length=1)
    amount: float = Field(..., ge=0, allow_inf_nan=False, description="Non-negative amount")
    category: Category = Field(..., description="Spending category")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Optional[DayInput]) -> Optional[dt.date]:
        return _parse_day(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _required_text("description", v)


# PUBLIC_INTERFACE
class ExpenseUpdate(_PartialSchema):
    """
    Schema for updating an existing expense.
    All fields are optional; only provided fields will be updated.
    """

    date: Optional[dt.date] = Field(default=None)
    description: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    category: Optional[Category] = Field(default=None)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Optional[DayInput]) -> Optional[dt.date]:
        return _parse_day(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _required_text("description", v)


# PUBLIC_INTERFACE
class ExpenseOut(_Schema):
    """Schema returned by the API for an expense."""

    id: int
    date: dt.date
    description: str
    amount: float
    category: Category
    created_at: dt.datetime


# ---------------------------------------------------------------- tasks


# PUBLIC_INTERFACE
class TaskCreate(_Schema):
    """
    Schema for creating a to-do task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "description": "Buy cat food",
                "dueDate": "2024-05-01",
                "completed": False,
            }
        }
    )

    description: str = Field(..., description="What needs doing", min_length=1)
    due_date: dt.date = Field(..., description="Day the task is due (YYYY-MM-DD)")
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DayInput]) -> Optional[dt.date]:
        return _parse_day(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _required_text("description", v)


# PUBLIC_INTERFACE
class TaskUpdate(_PartialSchema):
    """
    Schema for updating an existing task.
    All fields are optional; only provided fields will be updated.
    """

    description: Optional[str] = Field(default=None, min_length=1)
    due_date: Optional[dt.date] = Field(default=None)
    completed: Optional[bool] = Field(default=None)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DayInput]) -> Optional[dt.date]:
        return _parse_day(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _required_text("description", v)


# PUBLIC_INTERFACE
class TaskOut(_Schema):
    """Schema returned by the API for a task."""

    id: int
    description: str
    due_date: dt.date
    completed: bool
    created_at: dt.datetime
