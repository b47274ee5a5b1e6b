"""
Authentication router — register, login and whoami.

Register and login are the only public (unauthenticated) endpoints in the
API besides /health. Everything else requires a valid JWT token.

Endpoints:
  POST /auth/register — Create a user + profile and get a token
  POST /auth/login    — Authenticate and get a token
  GET  /auth/whoami   — The user the presented token belongs to

Plaintext passwords exist only in memory during request processing; they
are hashed before any database operation and never logged.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.database import get_db
from bank_api.dependencies import get_current_user
from bank_api.models.user import User
from bank_api.schemas.auth import (
    RegisterResponse,
    TokenResponse,
    UserLoginRequest,
    UserRegisterRequest,
)
from bank_api.schemas.user import UserResponse
from bank_api.services import auth_service

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    request: UserRegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user.

    Creates the User (login identity) and its Profile (identity document
    and address) in a single transaction, and returns a JWT token so the
    user is immediately logged in.

    - **email**: Must be a valid email format and not already registered
    - **password**: Minimum 8 characters
    """
    user, token = await auth_service.signup(
        db=db,
        name=request.name,
        email=request.email,
        password=request.password,
        identity_type=request.identity_type,
        identity_number=request.identity_number,
        address=request.address,
    )

    return RegisterResponse(user_id=user.id, email=user.email, token=token)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: UserLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Include the returned token on subsequent requests:

        Authorization: Bearer <token>
    """
    _, token = await auth_service.login(
        db=db,
        email=request.email,
        password=request.password,
    )

    return TokenResponse(token=token)


@router.get(
    "/whoami",
    response_model=UserResponse,
    summary="Get the authenticated user",
)
async def whoami(user: User = Depends(get_current_user)):
    return user
