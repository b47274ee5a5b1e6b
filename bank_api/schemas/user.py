"""
Pydantic schemas for User-related responses and updates.

hashed_password is never part of any response schema.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class ProfileResponse(BaseModel):
    identity_type: str
    identity_number: str
    address: str

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    """Public representation of a User (never includes password hash)."""
    id: int
    name: str
    email: EmailStr
    is_active: bool
    created_at: datetime
    profile: ProfileResponse | None

    model_config = {"from_attributes": True}


class UserUpdateRequest(BaseModel):
    """Request body for PATCH /users/me (all fields optional).

    email is deliberately absent: unknown fields are ignored.
    """
    name: str | None = Field(None, min_length=1, max_length=100)
    address: str | None = Field(None, min_length=1, max_length=255)
