"""
Transaction model — the ledger entry for a completed transfer.

A Transaction is written exactly once, inside the same database
transaction that debits the source account and credits the destination.
It has no status column: a row exists only if the transfer happened, and
nothing ever updates or deletes it.

Key fields:
  - amount_cents: Always positive
  - source_account_id: The debited account
  - destination_account_id: The credited account
  - created_at: Server-assigned UTC timestamp

Deposits and withdrawals change a single balance and are not transfers,
so they do not produce ledger rows.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bank_api.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
        CheckConstraint(
            "source_account_id <> destination_account_id",
            name="ck_transactions_distinct_accounts",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    amount_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    source_account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    destination_account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    # Indexed for newest-first listings
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
