"""Pydantic models for authentication requests."""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Login form payload."""

    email: EmailStr = Field(min_length=5, max_length=50)
    password: str = Field(min_length=1, max_length=50)
