"""
User service — read and update user profiles.

Email and password are not editable here: email is the login identifier,
and changing it through a plain update would let a stolen token take over
the account.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.exceptions import UserNotFoundError
from bank_api.models.user import User


async def get_users(db: AsyncSession, limit: int = 50, offset: int = 0) -> list[User]:
    result = await db.execute(
        select(User).order_by(User.id).limit(limit).offset(offset)
    )
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: int) -> User:
    """
    Raises:
        UserNotFoundError: If no user has this id.
    """
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def update_user(
    db: AsyncSession,
    user: User,
    name: str | None = None,
    address: str | None = None,
) -> User:
    """Apply a partial update; None means "leave unchanged"."""
    if name is not None:
        user.name = name
    if address is not None:
        user.profile.address = address

    await db.flush()
    await db.refresh(user)
    return user
