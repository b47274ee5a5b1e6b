"""
Users router — user directory and profile management.

Endpoints:
  GET   /users        — List users
  PATCH /users/me     — Update own name / address
  GET   /users/{id}   — Get one user with profile

/users/me is declared before /users/{user_id} so "me" is never parsed as
an id.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.database import get_db
from bank_api.dependencies import get_current_user
from bank_api.models.user import User
from bank_api.schemas.user import UserResponse, UserUpdateRequest
from bank_api.services import user_service

router = APIRouter()


@router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
)
async def list_users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_users(db, limit=limit, offset=offset)


@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Update your profile",
)
async def update_me(
    updates: UserUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update the authenticated user's name and/or address.

    Only provided fields are changed (PATCH semantics). Email cannot be
    changed here.
    """
    return await user_service.update_user(
        db, user, name=updates.name, address=updates.address
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
)
async def get_user(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)
