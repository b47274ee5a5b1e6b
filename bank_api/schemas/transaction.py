"""
Pydantic schemas for Transaction (transfer) endpoints.

All monetary amounts are in integer cents (e.g., $10.50 = 1050).
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from bank_api.models.account import MAX_BALANCE_CENTS


class TransferRequest(BaseModel):
    """Request body for POST /transactions."""
    amount_cents: int = Field(
        gt=0, le=MAX_BALANCE_CENTS, description="Amount in cents (must be positive)"
    )
    source_account_id: int
    destination_account_id: int

    @model_validator(mode="after")
    def accounts_must_differ(self):
        """Cannot transfer money to the same account."""
        if self.source_account_id == self.destination_account_id:
            raise ValueError("Cannot transfer to the same account")
        return self


class TransactionResponse(BaseModel):
    """Public representation of a ledger entry."""
    id: int
    amount_cents: int
    source_account_id: int
    destination_account_id: int
    created_at: datetime

    model_config = {"from_attributes": True}
