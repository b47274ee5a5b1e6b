"""
Pydantic schemas for Account endpoints.

All monetary amounts are expressed in integer cents.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from bank_api.models.account import MAX_BALANCE_CENTS


class AccountCreateRequest(BaseModel):
    """Request body for POST /accounts. The owner is the authenticated user."""
    bank_name: str = Field(min_length=1, max_length=100)
    bank_account_number: str | None = Field(
        None,
        min_length=1,
        max_length=34,
        description="Optional; a random 10-digit number is generated when omitted",
    )
    balance_cents: int = Field(
        default=0, ge=0, le=MAX_BALANCE_CENTS, description="Opening balance in cents"
    )


class AccountResponse(BaseModel):
    """Public representation of a bank account."""
    id: int
    user_id: int
    bank_name: str
    bank_account_number: str
    balance_cents: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AmountRequest(BaseModel):
    """Request body for PUT /accounts/{id}/deposit and /withdraw."""
    amount_cents: int = Field(
        gt=0, le=MAX_BALANCE_CENTS, description="Amount in cents (must be positive)"
    )
