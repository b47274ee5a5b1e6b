"""
FastAPI dependencies for authentication.

get_current_user turns the "Authorization: Bearer <token>" header into the
User it was issued for. Every protected endpoint declares it as a
parameter; if the token is missing, expired, tampered with, or names a
user that no longer exists (or is deactivated), the request is rejected
with 401 before the route handler runs.

Ownership of individual accounts and transactions is checked further
down, in the service layer, using the id of the user resolved here.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.database import get_db
from bank_api.models.user import User
from bank_api.security import decode_access_token


# tokenUrl points to the login endpoint (used by Swagger UI's "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract and validate the JWT token, then return the corresponding User.

    Raises:
        HTTPException 401: If the token is invalid or the user doesn't exist.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        user_id_str: str | None = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = int(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise credentials_exception

    return user
