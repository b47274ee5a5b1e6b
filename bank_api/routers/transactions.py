"""
Transactions router — transfers between accounts and the ledger.

Endpoints:
  POST /transactions                  — Transfer money between two accounts
  GET  /transactions                  — List transfers touching own accounts
  GET  /transactions/{transaction_id} — Get a single transfer

The source account of a transfer must belong to the authenticated user;
the destination can belong to anyone (enabling inter-user transfers).
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_api.database import get_db
from bank_api.dependencies import get_current_user
from bank_api.models.user import User
from bank_api.schemas.transaction import TransactionResponse, TransferRequest
from bank_api.services import transaction_service

router = APIRouter()


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Transfer money between accounts",
)
async def create_transfer(
    request: TransferRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Transfer money from one account to another.

    This is an atomic operation: the debit, the credit and the ledger entry
    are committed together or not at all.

    - **source_account_id**: Must belong to the authenticated user
    - **destination_account_id**: Can belong to any user, must differ from the source
    - **amount_cents**: Positive integer in cents (e.g., $50.00 = 5000)

    Errors: 404 unknown account, 403 foreign source account, 400 insufficient
    balance or invalid input, 500 if the database aborted the transfer.
    """
    return await transaction_service.create_transfer(
        db=db,
        amount_cents=request.amount_cents,
        source_account_id=request.source_account_id,
        destination_account_id=request.destination_account_id,
        owner_id=user.id,
    )


@router.get(
    "",
    response_model=list[TransactionResponse],
    summary="List your transfers",
)
async def list_transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List transfers into or out of any of your accounts, newest first."""
    return await transaction_service.get_transactions(
        db, user.id, limit=limit, offset=offset
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a transfer",
)
async def get_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.get_transaction(db, transaction_id, user.id)
