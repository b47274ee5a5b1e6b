"""
Pydantic schemas for authentication endpoints (register and login).

Pydantic validates incoming data automatically: if a required field is
missing or the wrong type, the request is rejected with 400 before our
code runs.
"""

from pydantic import BaseModel, EmailStr, Field


class UserRegisterRequest(BaseModel):
    """Request body for POST /auth/register."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr                                # Validates email format
    password: str = Field(min_length=8)            # Minimum 8 characters
    identity_type: str = Field(min_length=1, max_length=50)
    identity_number: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=255)


class UserLoginRequest(BaseModel):
    """Request body for POST /auth/login."""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Response body for successful login, contains the JWT."""
    token: str
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    """Response body for successful registration: user info + JWT."""
    user_id: int
    email: str
    token: str
    token_type: str = "bearer"
