# schemas/auth_schemas.py
"""
Pydantic v2 schemas for registration, login and user profiles
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Please provide a valid email address")
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters long")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username is required")
        return value


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserPublic(BaseModel):
    """User without credentials"""
    id: str
    email: str
    username: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    token: str
    user: UserPublic


class CurrentUser(BaseModel):
    """Identity attached to an authenticated request"""
    user_id: str
    email: str
    username: str
