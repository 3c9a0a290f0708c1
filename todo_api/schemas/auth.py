"""Pydantic schemas for authentication endpoints."""

import re

from pydantic import field_validator

from todo_api.schemas.common import ApiModel, UtcDatetime

EMAIL_PATTERN = re.compile(r"^[\w.+-]+@([\w-]+\.)+[\w-]{2,}$")
MIN_PASSWORD_LENGTH = 6


class LoginRequest(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class SignupRequest(ApiModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        s = v.strip()
        if len(s) < 2:
            raise ValueError("Name must be at least 2 characters long")
        if len(s) > 50:
            raise ValueError("Name cannot exceed 50 characters")
        return s

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        s = v.strip().lower()
        if not EMAIL_PATTERN.match(s):
            raise ValueError("Please provide a valid email")
        return s

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return v


class UserResponse(ApiModel):
    id: int
    name: str
    email: str


class ProfileResponse(UserResponse):
    created_at: UtcDatetime
    last_login: UtcDatetime | None = None


class AuthResponse(ApiModel):
    user: UserResponse
    access_token: str
