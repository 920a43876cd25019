"""
Data models for the bank ledger.

This module contains the account and transaction record types together with
the money helpers used to keep every amount an exact two-place Decimal.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from .exceptions import InsufficientFundsError, InvalidAmountError

CENT = Decimal('0.01')
# Largest balance or amount that fits a signed 64-bit cents column
MAX_CENTS = 2 ** 63 - 1
MAX_AMOUNT = Decimal(MAX_CENTS).scaleb(-2)


class AccountVariant(Enum):
    """Kinds of bank accounts."""
    SAVINGS = "savings"
    CHECKING = "checking"


def to_decimal(value) -> Decimal:
    """Coerce a user supplied amount into an exact Decimal."""
    if isinstance(value, float):
        # str() keeps the literal digits of a float
        value = str(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if abs(amount) > MAX_AMOUNT:
        raise InvalidAmountError(f"Amount out of range: {amount}")

    try:
        rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if amount != rounded:
        raise InvalidAmountError(f"Amount has more than two decimal places: {amount}")

    return rounded


def to_cents(amount: Decimal) -> int:
    """Convert a Decimal amount to integer cents for storage.

    Raises InvalidAmountError when the result does not fit the store.
    """
    cents = int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))
    if abs(cents) > MAX_CENTS:
        raise InvalidAmountError(f"Amount out of range: {amount}")
    return cents


def from_cents(cents: int) -> Decimal:
    """Convert stored integer cents back to a Decimal amount."""
    return (Decimal(cents) / 100).quantize(CENT)


def require_positive(amount: Decimal, operation: str) -> Decimal:
    """Validate that an amount is a positive money value."""
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidAmountError(f"{operation} amount must be positive")
    return amount


@dataclass
class Account:
    """Represents a bank account.

    Savings accounts carry an interest rate, checking accounts a flat monthly
    fee. The three balance operations dispatch on the variant tag.
    """

    account_id: str
    variant: AccountVariant
    balance: Decimal = Decimal('0.00')
    interest_rate: Optional[Decimal] = None
    monthly_fee: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize account after creation."""
        if self.created_at is None:
            self.created_at = datetime.now()

        if not isinstance(self.balance, Decimal):
            self.balance = Decimal(str(self.balance))

        if self.variant is AccountVariant.SAVINGS:
            if self.interest_rate is None:
                raise ValueError("Savings account requires an interest rate")
            if not isinstance(self.interest_rate, Decimal):
                self.interest_rate = Decimal(str(self.interest_rate))
            self.monthly_fee = None
        else:
            if self.monthly_fee is None:
                raise ValueError("Checking account requires a monthly fee")
            if not isinstance(self.monthly_fee, Decimal):
                self.monthly_fee = Decimal(str(self.monthly_fee))
            self.interest_rate = None

    def deposit(self, amount: Decimal) -> None:
        """Deposit money to account."""
        amount = require_positive(amount, "Deposit")
        self.balance += amount

    def withdraw(self, amount: Decimal) -> None:
        """Withdraw money from account."""
        amount = require_positive(amount, "Withdrawal")
        if self.balance < amount:
            raise InsufficientFundsError(self.account_id, amount, self.balance)
        self.balance -= amount

    def apply_monthly_adjustment(self) -> Decimal:
        """Credit interest or charge the monthly fee; return the delta applied.

        Fees are charged even when they drive a checking balance negative.
        """
        old_balance = self.balance
        if self.variant is AccountVariant.SAVINGS:
            interest = (self.balance * self.interest_rate).quantize(CENT, rounding=ROUND_HALF_UP)
            self.balance += interest
        elif self.variant is AccountVariant.CHECKING:
            self.balance -= self.monthly_fee
        else:
            raise ValueError(f"Unknown account variant: {self.variant}")
        return self.balance - old_balance

    def view(self) -> 'AccountView':
        """Build a read-only snapshot of this account."""
        return AccountView(
            account_id=self.account_id,
            variant=self.variant,
            balance=self.balance,
            interest_rate=self.interest_rate,
            monthly_fee=self.monthly_fee,
        )


@dataclass(frozen=True)
class AccountView:
    """Read-only projection of an account handed to callers."""

    account_id: str
    variant: AccountVariant
    balance: Decimal
    interest_rate: Optional[Decimal] = None
    monthly_fee: Optional[Decimal] = None

    @property
    def variant_detail(self) -> str:
        """Human readable variant specific attribute."""
        if self.variant is AccountVariant.SAVINGS:
            return f"interest rate {self.interest_rate} per month"
        return f"monthly fee {self.monthly_fee}"


@dataclass(frozen=True)
class TransactionRecord:
    """Immutable entry of the transaction log."""

    account_id: str
    amount: Decimal
    timestamp: datetime
    record_id: Optional[int] = None
