"""
Custom exception classes and FastAPI exception handlers.

Why custom exceptions?
  The service layer raises domain-specific errors (like
  InsufficientBalanceError) without importing HTTP concepts. The handlers
  registered here translate them into HTTP responses.

  This separation means:
    - Service code is testable without HTTP
    - Error responses are consistent across all endpoints
    - Adding new error types is a matter of one subclass

Exception hierarchy:
    BankAPIError (base)
    ├── AccountNotFoundError        — referenced account doesn't exist       (404)
    ├── InvalidAmountError          — amount out of range or non-integer     (400)
    ├── SameAccountTransferError    — source and destination are equal       (400)
    ├── InsufficientBalanceError    — debit would make the balance negative  (400)
    ├── BalanceLimitExceededError   — credit would overflow the balance      (400)
    ├── StorageError                — the atomic unit could not be committed (500)
    ├── UnauthorizedAccessError     — resource belongs to someone else       (403)
    ├── DuplicateEmailError         — e-mail already registered              (409)
    ├── DuplicateAccountNumberError — account number already taken           (409)
    ├── InvalidCredentialsError     — login failed                           (401)
    ├── UserNotFoundError           — referenced user doesn't exist          (404)
    └── TransactionNotFoundError    — referenced transaction doesn't exist   (404)

Every response body has the shape {"detail": "...", "error_type": "..."}.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankAPIError(Exception):
    """Base exception for all Bank API domain errors."""

    status_code = 400
    error_type = "bank_api_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)

    def to_content(self) -> dict:
        return {"detail": self.detail, "error_type": self.error_type}


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class AccountNotFoundError(BankAPIError):
    """Raised when a referenced account does not exist."""

    status_code = 404
    error_type = "account_not_found"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class InvalidAmountError(BankAPIError):
    """Raised when an amount is zero, negative, too large, or not an integer number of cents."""

    status_code = 400
    error_type = "invalid_amount"

    def __init__(self, amount):
        self.amount = amount
        super().__init__(
            f"Invalid amount {amount!r}: must be a positive integer of cents "
            f"no larger than 2**63 - 1"
        )


class SameAccountTransferError(BankAPIError):
    """Raised when a transfer names the same account as source and destination."""

    status_code = 400
    error_type = "same_account_transfer"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__("Cannot transfer to the same account")


class InsufficientBalanceError(BankAPIError):
    """
    Raised when a withdrawal or transfer would cause a negative balance.

    Attributes:
        account_id: The account that lacks sufficient funds.
        requested_cents: The amount the caller tried to debit.
        available_cents: The balance of the account when the debit was refused.
    """

    status_code = 400
    error_type = "insufficient_balance"

    def __init__(self, account_id: int, requested_cents: int, available_cents: int):
        self.account_id = account_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient balance: requested {requested_cents} cents, "
            f"available {available_cents} cents"
        )

    def to_content(self) -> dict:
        content = super().to_content()
        content["requested_cents"] = self.requested_cents
        content["available_cents"] = self.available_cents
        return content


class BalanceLimitExceededError(BankAPIError):
    """Raised when a credit would push a balance past MAX_BALANCE_CENTS."""

    status_code = 400
    error_type = "balance_limit_exceeded"

    def __init__(self, account_id: int, amount_cents: int):
        self.account_id = account_id
        self.amount_cents = amount_cents
        super().__init__(
            f"Crediting {amount_cents} cents would exceed the maximum balance "
            f"of account {account_id}"
        )


class StorageError(BankAPIError):
    """
    Raised when the database aborts an atomic unit (conflict, lock timeout,
    constraint violation, lost connection). The cause is chained as
    __cause__; its details are deliberately kept out of the response.
    """

    status_code = 500
    error_type = "storage_error"

    def __init__(self, detail: str = "The operation could not be completed, please retry"):
        super().__init__(detail)


class UnauthorizedAccessError(BankAPIError):
    """Raised when a user attempts to access a resource they don't own."""

    status_code = 403
    error_type = "unauthorized_access"

    def __init__(self, detail: str = "You do not have access to this resource"):
        super().__init__(detail)


class DuplicateEmailError(BankAPIError):
    """Raised when attempting to register with an email that's already in use."""

    status_code = 409
    error_type = "duplicate_email"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class DuplicateAccountNumberError(BankAPIError):
    """Raised when an explicitly requested account number is already taken."""

    status_code = 409
    error_type = "duplicate_account_number"

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Account number {account_number} is already in use")


class InvalidCredentialsError(BankAPIError):
    """Raised when login credentials are incorrect."""

    status_code = 401
    error_type = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid email or password")


class UserNotFoundError(BankAPIError):
    status_code = 404
    error_type = "user_not_found"

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class TransactionNotFoundError(BankAPIError):
    status_code = 404
    error_type = "transaction_not_found"

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Domain errors map to their class's status_code and error_type. Request
    body validation failures are reported as 400 Bad Request (rather than
    FastAPI's default 422) so every client input problem shares one status.

    This is called once during app construction in main.py.
    """

    @app.exception_handler(BankAPIError)
    async def bank_api_error_handler(
        request: Request, exc: BankAPIError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "detail": jsonable_encoder(exc.errors()),
                "error_type": "validation_error",
            },
        )
