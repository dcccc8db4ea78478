"""
User Schemas.

Account overlay request/response bodies (camelCase keys, as sent by
the notepad client).
"""

from datetime import datetime

from pydantic import Field, field_validator

from modules.backend.schemas.base import ApiResponse, CamelModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"


class _EmailNormalized(CamelModel):
    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def _lower_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class RegisterRequest(_EmailNormalized):
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=6, max_length=128)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class LoginRequest(_EmailNormalized):
    email: str = Field(max_length=255)
    password: str = Field(min_length=1, max_length=128)


class ProfileUpdateRequest(_EmailNormalized):
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    username: str | None = Field(default=None, min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    avatar: str | None = Field(default=None, max_length=1024)


class UserResponse(CamelModel):
    id: str
    email: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    created_at: datetime | None = None


class AuthResponse(ApiResponse):
    message: str
    token: str | None = None
    user: UserResponse | None = None
