import re
from uuid import UUID
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator, model_validator

from schemas.common import require_body

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6


def _blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str

    @model_validator(mode="before")
    @classmethod
    def _require_fields(cls, data):
        data = require_body(data)
        if isinstance(data, dict) and any(_blank(data.get(field)) for field in ("username", "email", "password")):
            raise ValueError("Please provide username, email, and password.")
        return data

    @field_validator("username")
    @classmethod
    def _validate_username(cls, value: str) -> str:
        value = value.strip()
        if not USERNAME_PATTERN.match(value):
            raise ValueError("Username can only contain letters, numbers, underscores, and hyphens.")
        if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
            raise ValueError(f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters.")
        return value

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        value = value.strip()
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Please provide a valid email address.")
        return value

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.")
        return value


class LoginRequest(BaseModel):
    email: str | None = None
    username: str | None = None
    password: str

    @model_validator(mode="before")
    @classmethod
    def _require_credentials(cls, data):
        data = require_body(data)
        if isinstance(data, dict):
            has_identifier = not _blank(data.get("email")) or not _blank(data.get("username"))
            if not has_identifier or _blank(data.get("password")):
                raise ValueError("Please provide email or username, and password.")
        return data

    @field_validator("email", "username")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return value.strip() if value else None


class RegisterResponse(BaseModel):
    message: str
    user_id: UUID = Field(alias="userId")

    model_config = {"populate_by_name": True}


class PublicUser(BaseModel):
    id: UUID
    username: str
    email: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    message: str
    token: str
    expires_at: int = Field(alias="expiresAt")
    user: PublicUser

    model_config = {"populate_by_name": True}


class UserResponse(BaseModel):
    id: UUID
    username: str
    email: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"from_attributes": True, "populate_by_name": True}
