"""Pydantic schemas for todo endpoints."""

from datetime import date, datetime, timezone
from typing import Literal

from pydantic import Field, field_validator

from todo_api.schemas.common import ApiModel, UtcDatetime

Status = Literal["pending", "in-progress", "completed"]
Priority = Literal["low", "medium", "high"]

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def parse_due_date(value: date | datetime | str | None) -> datetime | None:
    """Normalize a due date to a naive UTC datetime.

    Accepts datetimes, dates (promoted to midnight) and ISO8601 strings.
    """
    if value is None:
        return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            value = datetime.fromisoformat(s)
        except ValueError:
            try:
                value = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError("Invalid due date. Use an ISO8601 date or datetime (e.g. '2025-01-31')") from e

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    raise ValueError("Invalid due date type")


def _clean_title(v: str) -> str:
    s = v.strip()
    if not s:
        raise ValueError("Title cannot be empty")
    if len(s) > MAX_TITLE_LENGTH:
        raise ValueError(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")
    return s


def _clean_description(v: str | None) -> str | None:
    if v is None:
        return None
    s = v.strip()
    if len(s) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")
    return s or None


class TodoCreate(ApiModel):
    title: str
    description: str | None = None
    priority: Priority | None = None
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _clean_description(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v):
        return parse_due_date(v)


class TodoUpdate(ApiModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = None
    description: str | None = None
    status: Status | None = None
    priority: Priority | None = None
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Title cannot be empty")
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _clean_description(v)

    @field_validator("status", "priority")
    @classmethod
    def reject_null_enum(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Value cannot be null")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v):
        return parse_due_date(v)


class TodoResponse(ApiModel):
    id: int
    title: str
    description: str | None
    status: Status
    priority: Priority
    due_date: UtcDatetime | None
    user_id: int
    completed_at: UtcDatetime | None
    is_archived: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool
    limit: int


class TodoStats(ApiModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    high_priority: int = 0
    overdue: int = Field(default=0, description="Non-completed todos whose due date has passed")
