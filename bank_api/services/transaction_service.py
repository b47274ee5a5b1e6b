"""
Transaction service — the transfer engine and the transaction ledger.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It handles:
  - Executing atomic transfers between two accounts
  - Balance enforcement (no negative balances)
  - Recording the immutable ledger entry for each completed transfer
  - Reading the ledger back, scoped to the requesting user

Atomicity:
  The debit, the credit and the ledger insert all run inside ONE unit of
  work (bank_api.database.unit_of_work). Either the unit commits and all
  three effects become visible together, or it rolls back and none of them
  does. There is no compensating "undo" code anywhere: a failure at any
  step, including a failed COMMIT, leaves both accounts and the ledger
  exactly as they were.

Balance check at write time:
  The sufficiency check is not a separate read. The debit is a conditional
  UPDATE (see account_service.apply_balance_delta) that only matches the
  row if the balance still covers the amount, so a concurrent withdrawal
  that committed a moment earlier is taken into account.

Deadlock prevention:
  Both accounts are read (and on PostgreSQL locked with FOR UPDATE) in
  ascending id order. Transfers A->B and B->A therefore always acquire
  their locks in the same order.

SQLite note:
  SQLite doesn't support SELECT ... FOR UPDATE; with_for_update() renders
  nothing there. SQLite instead serializes all writers on the database
  lock, and the conditional debit keeps the check and the write in one
  statement, which is sufficient.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.database import unit_of_work
from bank_api.exceptions import (
    AccountNotFoundError,
    BalanceLimitExceededError,
    InsufficientBalanceError,
    SameAccountTransferError,
    TransactionNotFoundError,
    UnauthorizedAccessError,
)
from bank_api.models.account import Account
from bank_api.models.transaction import Transaction
from bank_api.services import account_service

logger = logging.getLogger(__name__)


async def record_transfer(
    db: AsyncSession,
    amount_cents: int,
    source_account_id: int,
    destination_account_id: int,
) -> Transaction:
    """
    Append a ledger entry. Must be called inside the transfer's unit of work.

    The id and created_at are assigned on flush.
    """
    txn = Transaction(
        amount_cents=amount_cents,
        source_account_id=source_account_id,
        destination_account_id=destination_account_id,
    )
    db.add(txn)
    await db.flush()
    return txn


async def create_transfer(
    db: AsyncSession,
    amount_cents: int,
    source_account_id: int,
    destination_account_id: int,
    owner_id: int | None = None,
) -> Transaction:
    """
    Move amount_cents from the source account to the destination account.

    Preconditions are checked in this order:
      1. amount_cents is a positive integer, and the accounts differ
      2. both accounts exist
      3. the source belongs to owner_id (only when owner_id is given)
      4. the source balance covers the amount, at write time
      5. the destination balance stays within MAX_BALANCE_CENTS

    Args:
        db: Database session. The transfer commits it.
        amount_cents: Positive integer amount in cents.
        source_account_id: Account to debit.
        destination_account_id: Account to credit (can belong to anyone).
        owner_id: The authenticated user's id, or None for internal callers.

    Returns:
        The created Transaction, with its id and timestamp.

    Raises:
        InvalidAmountError: If amount_cents is not a positive integer.
        SameAccountTransferError: If source and destination are the same.
        AccountNotFoundError: If either account doesn't exist.
        UnauthorizedAccessError: If the source doesn't belong to owner_id.
        InsufficientBalanceError: If the source balance is below amount_cents.
        BalanceLimitExceededError: If the credit would push the destination
            balance past MAX_BALANCE_CENTS. The debit is rolled back too.
        StorageError: If the database aborts the unit. Not retried.
    """
    amount_cents = account_service.validate_amount(amount_cents)
    if source_account_id == destination_account_id:
        raise SameAccountTransferError(source_account_id)

    async with unit_of_work(db):
        # Lock accounts in consistent order (ascending id) to prevent deadlocks
        accounts: dict[int, Account | None] = {}
        for account_id in sorted((source_account_id, destination_account_id)):
            accounts[account_id] = await account_service.find_account(
                db, account_id, for_update=True
            )

        source = accounts[source_account_id]
        dest = accounts[destination_account_id]
        if source is None:
            raise AccountNotFoundError(source_account_id)
        if dest is None:
            raise AccountNotFoundError(destination_account_id)

        if owner_id is not None and source.user_id != owner_id:
            raise UnauthorizedAccessError("You do not have access to the source account")

        if not await account_service.apply_balance_delta(db, source_account_id, -amount_cents):
            await db.refresh(source)
            logger.warning(
                "Transfer of %s cents from account %s to %s refused (balance %s)",
                amount_cents, source_account_id, destination_account_id, source.balance_cents,
            )
            raise InsufficientBalanceError(
                account_id=source_account_id,
                requested_cents=amount_cents,
                available_cents=source.balance_cents,
            )

        if not await account_service.apply_balance_delta(db, destination_account_id, amount_cents):
            logger.warning(
                "Transfer of %s cents from account %s to %s refused (balance limit)",
                amount_cents, source_account_id, destination_account_id,
            )
            raise BalanceLimitExceededError(destination_account_id, amount_cents)

        txn = await record_transfer(db, amount_cents, source_account_id, destination_account_id)

        # Keep the session's copies in step with the database
        await db.refresh(source)
        await db.refresh(dest)

    logger.info(
        "Transfer %s: %s cents from account %s to %s",
        txn.id, amount_cents, source_account_id, destination_account_id,
    )
    return txn


# ---------------------------------------------------------------------------
# Ledger reads
# ---------------------------------------------------------------------------

async def get_transactions(
    db: AsyncSession,
    user_id: int,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """
    List transfers that touch any account owned by the user, newest first.
    """
    owned_accounts = select(Account.id).where(Account.user_id == user_id)
    result = await db.execute(
        select(Transaction)
        .where(
            or_(
                Transaction.source_account_id.in_(owned_accounts),
                Transaction.destination_account_id.in_(owned_accounts),
            )
        )
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def get_account_transactions(
    db: AsyncSession,
    account_id: int,
    user_id: int,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """
    List transfers into or out of one account, newest first.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
        UnauthorizedAccessError: If the account belongs to someone else.
    """
    await account_service.get_account(db, account_id, user_id)

    result = await db.execute(
        select(Transaction)
        .where(
            (Transaction.source_account_id == account_id)
            | (Transaction.destination_account_id == account_id)
        )
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def get_transaction(
    db: AsyncSession,
    transaction_id: int,
    user_id: int,
) -> Transaction:
    """
    Get a single transfer. The user must own its source or its destination.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist.
        UnauthorizedAccessError: If the user owns neither account.
    """
    result = await db.execute(
        select(Transaction).where(Transaction.id == transaction_id)
    )
    txn = result.scalar_one_or_none()

    if txn is None:
        raise TransactionNotFoundError(transaction_id)

    owners = await db.execute(
        select(Account.user_id).where(
            Account.id.in_([txn.source_account_id, txn.destination_account_id])
        )
    )
    if user_id not in owners.scalars().all():
        raise UnauthorizedAccessError("You do not have access to this transaction")

    return txn
