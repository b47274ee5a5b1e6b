"""
Account service — the account store and single-account balance operations.

This module handles:
  - Account creation (with unique account number generation)
  - Account retrieval (single or list, scoped to the owning user)
  - The balance primitive shared with the transfer engine
    (apply_balance_delta)
  - Deposits and withdrawals

Balance safety:
  Balances are never written back from a value computed in Python. Every
  change is a single relative, conditional statement:

      UPDATE accounts
         SET balance_cents = balance_cents + :delta
       WHERE id = :id AND balance_cents >= :amount           -- debit
       WHERE id = :id AND balance_cents <= :max - :amount    -- credit

  run inside a unit of work. The database evaluates the check against the
  row as it is at write time, so two concurrent withdrawals can never both
  succeed against a balance that only covers one of them. SQLite serializes
  writers with its database lock; on PostgreSQL the row is additionally
  locked with SELECT ... FOR UPDATE when it is first read.

  The credit bound keeps balances inside a signed 64-bit integer
  (MAX_BALANCE_CENTS); the bound is rearranged so that the database never
  has to compute a sum that could itself overflow.

Ownership enforcement:
  Query functions take the authenticated user's id and refuse to return
  another user's account (UnauthorizedAccessError). Balance operations take
  an optional owner_id for the same check; internal callers may omit it.
"""

import logging
import random
import string

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.database import unit_of_work
from bank_api.exceptions import (
    AccountNotFoundError,
    BalanceLimitExceededError,
    DuplicateAccountNumberError,
    InsufficientBalanceError,
    InvalidAmountError,
    UnauthorizedAccessError,
)
from bank_api.models.account import MAX_BALANCE_CENTS, Account

logger = logging.getLogger(__name__)


def validate_amount(amount_cents) -> int:
    """
    Return amount_cents if it is a positive integer number of cents that
    fits in a balance (at most MAX_BALANCE_CENTS).

    bool is rejected even though it subclasses int, and so are floats,
    strings and Decimals: callers convert at the boundary.

    Raises:
        InvalidAmountError: For anything else.
    """
    if (
        not isinstance(amount_cents, int)
        or isinstance(amount_cents, bool)
        or amount_cents <= 0
        or amount_cents > MAX_BALANCE_CENTS
    ):
        raise InvalidAmountError(amount_cents)
    return amount_cents


def _generate_account_number() -> str:
    """Generate a random 10-digit account number."""
    return "".join(random.choices(string.digits, k=10))


# ---------------------------------------------------------------------------
# Store primitives
# ---------------------------------------------------------------------------

async def find_account(
    db: AsyncSession,
    account_id: int,
    for_update: bool = False,
) -> Account | None:
    """
    Look up an account by id, or return None.

    With for_update=True the row is locked until the surrounding transaction
    ends (no-op on SQLite).
    """
    query = select(Account).where(Account.id == account_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def apply_balance_delta(
    db: AsyncSession,
    account_id: int,
    delta_cents: int,
) -> bool:
    """
    Add delta_cents (negative to debit) to an account's balance.

    The new balance is computed by the database from the balance it holds
    at write time, and the row is only touched if the result stays within
    0..MAX_BALANCE_CENTS.

    Returns:
        True if the row was updated; False if a debit would have driven
        the balance negative, a credit would have pushed it past
        MAX_BALANCE_CENTS, or the account no longer exists.
    """
    stmt = update(Account).where(Account.id == account_id)
    if delta_cents < 0:
        stmt = stmt.where(Account.balance_cents >= -delta_cents)
    else:
        stmt = stmt.where(Account.balance_cents <= MAX_BALANCE_CENTS - delta_cents)

    result = await db.execute(
        stmt
        .values(balance_cents=Account.balance_cents + delta_cents)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _load_account(
    db: AsyncSession,
    account_id: int,
    owner_id: int | None,
) -> Account:
    account = await find_account(db, account_id, for_update=True)
    if account is None:
        raise AccountNotFoundError(account_id)
    if owner_id is not None and account.user_id != owner_id:
        raise UnauthorizedAccessError("You do not have access to this account")
    return account


# ---------------------------------------------------------------------------
# Creation and lookup
# ---------------------------------------------------------------------------

async def create_account(
    db: AsyncSession,
    user_id: int,
    bank_name: str,
    bank_account_number: str | None = None,
    balance_cents: int = 0,
) -> Account:
    """
    Create a new bank account for a user.

    Args:
        db: Database session.
        user_id: The owner's user id.
        bank_name: Display name of the bank.
        bank_account_number: Optional account number. A random 10-digit
            number is generated when omitted.
        balance_cents: Opening balance, zero or more.

    Returns:
        The newly created Account instance.

    Raises:
        DuplicateAccountNumberError: If the requested number is taken,
            including by a concurrent request that inserted it first.
        InvalidAmountError: If the opening balance is negative, above
            MAX_BALANCE_CENTS, or not an int.
    """
    if balance_cents != 0:
        validate_amount(balance_cents)

    if bank_account_number is not None:
        existing = await db.execute(
            select(Account.id).where(Account.bank_account_number == bank_account_number)
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateAccountNumberError(bank_account_number)
    else:
        # Retry on collision, extremely unlikely with 10 random digits
        for _ in range(10):
            candidate = _generate_account_number()
            existing = await db.execute(
                select(Account.id).where(Account.bank_account_number == candidate)
            )
            if existing.scalar_one_or_none() is None:
                bank_account_number = candidate
                break
        else:
            raise RuntimeError("Failed to generate a unique account number")

    account = Account(
        user_id=user_id,
        bank_name=bank_name,
        bank_account_number=bank_account_number,
        balance_cents=balance_cents,
    )
    db.add(account)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Another request inserted the same number after our check
        raise DuplicateAccountNumberError(bank_account_number) from exc
    logger.info("Account %s opened for user %s", account.id, user_id)
    return account


async def get_accounts(db: AsyncSession, user_id: int) -> list[Account]:
    """List all accounts belonging to a user."""
    result = await db.execute(
        select(Account).where(Account.user_id == user_id).order_by(Account.id)
    )
    return list(result.scalars().all())


async def get_account(
    db: AsyncSession,
    account_id: int,
    user_id: int,
) -> Account:
    """
    Get a single account, verifying ownership.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
        UnauthorizedAccessError: If the account belongs to someone else.
    """
    account = await find_account(db, account_id)

    if account is None:
        raise AccountNotFoundError(account_id)

    if account.user_id != user_id:
        raise UnauthorizedAccessError("You do not have access to this account")

    return account


# ---------------------------------------------------------------------------
# Balance operations
# ---------------------------------------------------------------------------

async def deposit(
    db: AsyncSession,
    account_id: int,
    amount_cents: int,
    owner_id: int | None = None,
) -> Account:
    """
    Credit an account.

    Returns:
        The account with its updated balance.

    Raises:
        InvalidAmountError: If amount_cents is not a positive integer.
        AccountNotFoundError: If the account doesn't exist.
        UnauthorizedAccessError: If owner_id is given and doesn't own it.
        BalanceLimitExceededError: If the new balance would exceed MAX_BALANCE_CENTS.
        StorageError: If the database aborts the unit.
    """
    amount_cents = validate_amount(amount_cents)

    async with unit_of_work(db):
        account = await _load_account(db, account_id, owner_id)
        if not await apply_balance_delta(db, account_id, amount_cents):
            logger.warning(
                "Deposit of %s cents to account %s refused (balance limit)",
                amount_cents, account_id,
            )
            raise BalanceLimitExceededError(account_id, amount_cents)
        await db.refresh(account)

    logger.info(
        "Deposited %s cents to account %s (balance %s)",
        amount_cents, account_id, account.balance_cents,
    )
    return account


async def withdraw(
    db: AsyncSession,
    account_id: int,
    amount_cents: int,
    owner_id: int | None = None,
) -> Account:
    """
    Debit an account. Withdrawing the full balance is allowed and leaves 0.

    Returns:
        The account with its updated balance.

    Raises:
        InvalidAmountError: If amount_cents is not a positive integer.
        AccountNotFoundError: If the account doesn't exist.
        UnauthorizedAccessError: If owner_id is given and doesn't own it.
        InsufficientBalanceError: If the balance at write time is below amount_cents.
        StorageError: If the database aborts the unit.
    """
    amount_cents = validate_amount(amount_cents)

    async with unit_of_work(db):
        account = await _load_account(db, account_id, owner_id)
        if not await apply_balance_delta(db, account_id, -amount_cents):
            await db.refresh(account)
            logger.warning(
                "Withdrawal of %s cents from account %s refused (balance %s)",
                amount_cents, account_id, account.balance_cents,
            )
            raise InsufficientBalanceError(
                account_id=account_id,
                requested_cents=amount_cents,
                available_cents=account.balance_cents,
            )
        await db.refresh(account)

    logger.info(
        "Withdrew %s cents from account %s (balance %s)",
        amount_cents, account_id, account.balance_cents,
    )
    return account
