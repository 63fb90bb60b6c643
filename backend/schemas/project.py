import re
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from schemas.common import require_body

NAME_MAX_LENGTH = 255
NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_.]+$")


class ProjectCreate(BaseModel):
    name: str | None = Field(default=None, validate_default=True)

    @model_validator(mode="before")
    @classmethod
    def _require_body(cls, data):
        return require_body(data)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Project name is required.")
        value = value.strip()
        if len(value) > NAME_MAX_LENGTH:
            raise ValueError("Project name is too long.")
        if not NAME_PATTERN.match(value):
            raise ValueError("Project name contains invalid characters.")
        return value


class ProjectUpdate(ProjectCreate):
    pass


class ProjectResponse(BaseModel):
    id: UUID
    name: str
    user_id: UUID
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class ProjectEnvelope(BaseModel):
    message: str
    project: ProjectResponse


class ProjectListResponse(BaseModel):
    message: str
    count: int
    projects: list[ProjectResponse]


class MessageResponse(BaseModel):
    message: str
