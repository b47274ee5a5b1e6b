"""
Profile model — the identity details attached to a User.

A Profile stores the identity document used at registration (type and
number, e.g. "passport" / "X1234567") and the postal address.

One-to-one with User:
  The user_id column has a UNIQUE constraint, so each User maps to exactly
  one Profile. This is enforced at both the database level (unique
  constraint) and the ORM level (uselist=False on User.profile).
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_api.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Foreign key to User; UNIQUE enforces the one-to-one relationship
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
    )

    identity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    identity_number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    address: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

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
    user: Mapped["User"] = relationship(
        back_populates="profile",
    )
