"""
Exception hierarchy for the bank ledger.

Every error raised by the ledger engine derives from BankingError so callers
can tell expected refusals apart from programming errors.
"""

from decimal import Decimal


class BankingError(Exception):
    """Base exception for all ledger errors."""


class InvalidAmountError(BankingError):
    """Raised when a non-positive or malformed amount is supplied."""


class AccountNotFoundError(BankingError):
    """Raised when a referenced account does not exist."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class DuplicateAccountError(BankingError):
    """Raised when an account id is already taken."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account already exists: {account_id}")


class InsufficientFundsError(BankingError):
    """Raised when a withdrawal or transfer exceeds the available balance."""

    def __init__(self, account_id: str, requested: Decimal, available: Decimal):
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds in account {account_id}. "
            f"Requested: {requested}, Available: {available}"
        )


class OperationFailedError(BankingError):
    """Raised when the store fails mid-operation; the operation was rolled back."""


class ConfigurationError(BankingError):
    """Raised when configuration is invalid."""


class AuthorizationError(BankingError):
    """Raised when an administrative command is given the wrong secret."""


class InvalidAccountIdError(BankingError):
    """Raised when a caller supplied account id is blank."""
