"""
User model — the authentication identity.

Each User is a login credential (email + hashed password) plus a display
name. Identity documents and postal address live on the one-to-one
Profile, and the User owns zero or more bank Accounts:

    User (auth) --> Profile (identity details)
                --> Account(s) (banking)

The password is stored as an Argon2id hash, never in plaintext.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_api.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Email is the login identifier, unique and indexed for fast lookups
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # Argon2 hash of the password
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Soft-disable: deactivated users can't log in but their data is preserved
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    # lazy="selectin" so the profile is loaded eagerly; lazy loads are not
    # allowed on an AsyncSession.
    profile: Mapped["Profile"] = relationship(
        back_populates="user",
        uselist=False,
        lazy="selectin",
    )

    accounts: Mapped[list["Account"]] = relationship(
        back_populates="user",
    )
