"""
Accounts router — bank account management endpoints.

All endpoints require a JWT and are scoped to the authenticated user's
accounts:

    POST /accounts                              — Open a new account
    GET  /accounts                              — List own accounts
    GET  /accounts/{account_id}                 — Get own account details
    PUT  /accounts/{account_id}/deposit         — Deposit into own account
    PUT  /accounts/{account_id}/withdraw        — Withdraw from own account
    GET  /accounts/{account_id}/transactions    — Transfers in/out of the account

Accessing another user's account returns 403; an unknown id returns 404.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.database import get_db
from bank_api.dependencies import get_current_user
from bank_api.models.user import User
from bank_api.schemas.account import AccountCreateRequest, AccountResponse, AmountRequest
from bank_api.schemas.transaction import TransactionResponse
from bank_api.services import account_service, transaction_service

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a new bank account",
)
async def create_account(
    request: AccountCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Open an account owned by the authenticated user.

    - **bank_name**: Required
    - **bank_account_number**: Optional, generated when omitted
    - **balance_cents**: Optional opening balance, defaults to 0
    """
    return await account_service.create_account(
        db=db,
        user_id=user.id,
        bank_name=request.bank_name,
        bank_account_number=request.bank_account_number,
        balance_cents=request.balance_cents,
    )


@router.get(
    "",
    response_model=list[AccountResponse],
    summary="List your accounts",
)
async def list_accounts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.get_accounts(db, user.id)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(
    account_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.get_account(db, account_id, user.id)


@router.put(
    "/{account_id}/deposit",
    response_model=AccountResponse,
    summary="Deposit money into an account",
)
async def deposit(
    account_id: int,
    request: AmountRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Add **amount_cents** to the account balance. Returns the updated account.
    """
    return await account_service.deposit(
        db, account_id, request.amount_cents, owner_id=user.id
    )


@router.put(
    "/{account_id}/withdraw",
    response_model=AccountResponse,
    summary="Withdraw money from an account",
)
async def withdraw(
    account_id: int,
    request: AmountRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Subtract **amount_cents** from the account balance.

    Rejected with 400 if the balance doesn't cover the amount; withdrawing
    the exact balance is allowed and leaves 0.
    """
    return await account_service.withdraw(
        db, account_id, request.amount_cents, owner_id=user.id
    )


@router.get(
    "/{account_id}/transactions",
    response_model=list[TransactionResponse],
    summary="List transfers for an account",
)
async def list_account_transactions(
    account_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.get_account_transactions(
        db, account_id, user.id, limit=limit, offset=offset
    )
