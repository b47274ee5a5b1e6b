"""
Service-level tests for unique account numbers and e-mails under races.

The services check for an existing row before inserting, but two requests
can both pass that check. These tests verify that the database's unique
constraint then surfaces as the same domain error as the early check
(409), never as a raw IntegrityError:
  - The lookup is made to miss, so the insert itself hits the constraint
  - Two sessions on a file-backed database create the same number at once
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import func, select

from bank_api.database import make_session_factory
from bank_api.exceptions import DuplicateAccountNumberError, DuplicateEmailError
from bank_api.models.account import Account
from bank_api.models.user import User
from bank_api.services import account_service, auth_service


def lookup_misses():
    """An execute() replacement whose SELECT never finds an existing row."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = None
    return AsyncMock(return_value=result)


class TestAccountNumberRace:

    async def test_constraint_violation_becomes_duplicate_error(self, db_session, make_account):
        existing = await db_session.get(Account, await make_account(db_session))
        number = existing.bank_account_number
        user_id = existing.user_id

        with patch.object(db_session, "execute", lookup_misses()):
            with pytest.raises(DuplicateAccountNumberError) as exc_info:
                await account_service.create_account(
                    db_session, user_id, "Second Bank", bank_account_number=number
                )

        assert exc_info.value.account_number == number
        assert exc_info.value.status_code == 409
        await db_session.rollback()

        count = await db_session.execute(
            select(func.count()).select_from(Account).where(
                Account.bank_account_number == number
            )
        )
        assert count.scalar_one() == 1

    async def test_concurrent_creates_with_same_number(self, file_engine, make_account):
        sessions = make_session_factory(file_engine)
        async with sessions() as session:
            owner_id = (await session.get(Account, await make_account(session))).user_id

        async def create():
            async with sessions() as session:
                account = await account_service.create_account(
                    session, owner_id, "First Bank", bank_account_number="GB0000000001"
                )
                await session.commit()
                return account

        results = await asyncio.gather(create(), create(), return_exceptions=True)

        created = [r for r in results if isinstance(r, Account)]
        refused = [r for r in results if isinstance(r, DuplicateAccountNumberError)]
        assert len(created) == 1, results
        assert len(refused) == 1, results

        async with sessions() as session:
            count = await session.execute(
                select(func.count()).select_from(Account).where(
                    Account.bank_account_number == "GB0000000001"
                )
            )
            assert count.scalar_one() == 1


class TestEmailRace:

    async def test_constraint_violation_becomes_duplicate_error(self, db_session, make_account):
        await make_account(db_session)
        email = "owner1@example.com"

        with patch.object(db_session, "execute", lookup_misses()):
            with pytest.raises(DuplicateEmailError) as exc_info:
                await auth_service.signup(
                    db_session,
                    name="Late Comer",
                    email=email,
                    password="SecurePass123!",
                    identity_type="passport",
                    identity_number="P9999999",
                    address="2 Test Street",
                )

        assert exc_info.value.email == email
        await db_session.rollback()

        count = await db_session.execute(
            select(func.count()).select_from(User).where(User.email == email)
        )
        assert count.scalar_one() == 1
