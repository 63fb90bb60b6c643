from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from models.task import TaskPriority
from schemas.common import require_body

TITLE_MAX_LENGTH = 255
TITLE_REQUIRED = "Task title is required."
TITLE_LENGTH = f"Task title must be between 1 and {TITLE_MAX_LENGTH} characters."
PRIORITY_INVALID = "Priority must be 1 (Low), 2 (Medium), or 3 (High)."
DUE_DATE_INVALID = "Due date must be a valid date (YYYY-MM-DD)."
DESCRIPTION_INVALID = "Task description must be a string."
COMPLETED_INVALID = "is_completed must be a boolean."


def _clean_title(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(TITLE_REQUIRED)
    value = value.strip()
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(TITLE_LENGTH)
    return value


def _clean_priority(value) -> int:
    # bool is an int subclass; True must not pass as priority 1
    if isinstance(value, bool) or not isinstance(value, int) or value not in {p.value for p in TaskPriority}:
        raise ValueError(PRIORITY_INVALID)
    return value


def _clean_due_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.split("T")[0])
        except ValueError:
            pass
    raise ValueError(DUE_DATE_INVALID)


def _clean_description(value) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(DESCRIPTION_INVALID)
    return value.strip()


class TaskCreate(BaseModel):
    title: str | None = Field(default=None, validate_default=True)
    description: str | None = None
    due_date: date | None = None
    priority: int = int(TaskPriority.MEDIUM)

    @model_validator(mode="before")
    @classmethod
    def _require_body(cls, data):
        return require_body(data)

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value):
        return _clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def _validate_description(cls, value):
        # an empty description is stored as NULL on creation
        return _clean_description(value) or None

    @field_validator("due_date", mode="before")
    @classmethod
    def _validate_due_date(cls, value):
        return _clean_due_date(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _validate_priority(cls, value):
        if value is None:
            return int(TaskPriority.MEDIUM)
        return _clean_priority(value)


class TaskUpdate(BaseModel):
    """Partial update: only the fields present in the request body change."""

    title: str | None = None
    description: str | None = None
    due_date: date | None = None
    priority: int | None = None
    is_completed: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _require_body(cls, data):
        return require_body(data)

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value):
        return _clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def _validate_description(cls, value):
        return _clean_description(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _validate_due_date(cls, value):
        return _clean_due_date(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _validate_priority(cls, value):
        return _clean_priority(value)

    @field_validator("is_completed", mode="before")
    @classmethod
    def _validate_is_completed(cls, value):
        if not isinstance(value, bool):
            raise ValueError(COMPLETED_INVALID)
        return value


class TaskResponse(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    description: str | None
    due_date: date | None
    priority: int
    is_completed: bool
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class TaskEnvelope(BaseModel):
    message: str
    task: TaskResponse


class TaskListResponse(BaseModel):
    message: str
    count: int
    tasks: list[TaskResponse]
