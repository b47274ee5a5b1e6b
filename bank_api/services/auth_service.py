"""
Authentication service — registration and login business logic.

Registration flow:
  1. Check if email is already registered
  2. Hash the password with Argon2id
  3. Create User + Profile in a single database transaction
  4. Return a JWT token so the user is immediately logged in

Login flow:
  1. Look up user by email
  2. Verify password against stored hash
  3. Return a JWT token

Login returns the same error for "wrong password", "email not found" and
"deactivated" so responses can't be used to enumerate accounts.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.exceptions import DuplicateEmailError, InvalidCredentialsError
from bank_api.models.profile import Profile
from bank_api.models.user import User
from bank_api.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


async def signup(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
    identity_type: str,
    identity_number: str,
    address: str,
) -> tuple[User, str]:
    """
    Register a new user together with their identity profile.

    Both rows are flushed in the request's transaction; if either fails,
    neither is persisted.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise DuplicateEmailError(email)

    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
        profile=Profile(
            identity_type=identity_type,
            identity_number=identity_number,
            address=address,
        ),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        # A concurrent registration claimed the email after our check
        raise DuplicateEmailError(email) from exc

    # "sub" (subject) is the standard claim for user identity
    token = create_access_token(data={"sub": str(user.id)})
    logger.info("Registered user %s", user.id)

    return user, token


async def login(
    db: AsyncSession,
    email: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a JWT token.

    Raises:
        InvalidCredentialsError: If email doesn't exist, password is wrong,
            or the user is deactivated.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.hashed_password) or not user.is_active:
        logger.warning("Failed login attempt")
        raise InvalidCredentialsError()

    token = create_access_token(data={"sub": str(user.id)})
    return user, token
