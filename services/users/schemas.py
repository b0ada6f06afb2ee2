"""Pydantic schemas for User Service request/response validation."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# At least one letter, one digit and one non-alphanumeric character
_PASSWORD_CLASSES = (
    re.compile(r"[A-Za-z]"),
    re.compile(r"\d"),
    re.compile(r"[\W_]"),
)


# --- User Schemas ---


class UserBase(BaseModel):
    """Base schema for User."""

    email: EmailStr
    name: str = Field(..., min_length=3, max_length=15)


class SignupRequest(UserBase):
    """Schema for creating a new user."""

    password: str

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        """Require 6-15 characters with a letter, a number and a special character."""
        if not 6 <= len(value) <= 15 or not all(p.search(value) for p in _PASSWORD_CLASSES):
            raise ValueError(
                "Password must be between 6 and 15 characters long, include at "
                "least one letter, one number, and one special character"
            )
        return value


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    created_at: datetime


class SignupResponse(BaseModel):
    """Schema for signup response."""

    result: UserResponse


# --- Authentication Schemas ---


class SigninRequest(BaseModel):
    """Schema for signin request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class SignedInUser(UserResponse):
    """User data returned on signin, including the bearer token."""

    token: str


class SigninResponse(BaseModel):
    """Schema for signin response."""

    message: str
    user: SignedInUser


# --- Response Schemas ---


class MessageResponse(BaseModel):
    """Generic message response schema."""

    message: str


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str
    broker: str
