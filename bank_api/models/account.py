"""
Account model — a bank account owned by a User.

Each account has:
  - A display bank name and an account number (opaque string, unique)
  - A balance in integer cents
  - The owning user

Balance management:
  `balance_cents` is only ever changed by a relative, conditional UPDATE
  issued inside a unit of work (see services/account_service.py), never by
  writing back a value computed in Python from an earlier read. That keeps
  concurrent deposits, withdrawals and transfers from losing updates.

  The bounds are part of that UPDATE's WHERE clause: a debit only matches
  the row while the balance still covers it, and a credit only matches
  while the result stays within MAX_BALANCE_CENTS. CHECK constraints at
  the database level enforce the same range as the final safety net.

  MAX_BALANCE_CENTS is the largest signed 64-bit integer. Above it SQLite
  silently stores arithmetic results as REAL, losing exact cents.

Why integer cents?
  Floating-point numbers introduce rounding errors in money arithmetic
  (0.1 + 0.2 != 0.3 in IEEE 754). Integer cents are exact: $10.99 is 1099.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_api.database import Base

MAX_BALANCE_CENTS = 2**63 - 1


class Account(Base):
    __tablename__ = "accounts"

    # Database-level constraints: balance can never be negative or leave int64
    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_accounts_non_negative_balance",
        ),
        CheckConstraint(
            f"balance_cents <= {MAX_BALANCE_CENTS}",
            name="ck_accounts_balance_within_int64",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Owner of this account
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    bank_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    bank_account_number: Mapped[str] = mapped_column(
        String(34),
        unique=True,
        nullable=False,
    )

    balance_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
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
    user: Mapped["User"] = relationship(
        back_populates="accounts",
    )
