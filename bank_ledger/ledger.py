"""
Ledger engine for the bank ledger.

This module contains the business logic for moving money. It is the only
place that pairs a balance change with a transaction record, and it does so
inside a single database transaction so the two always land together.
"""

import uuid
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from .account_store import AccountStore
from .config import LedgerConfig
from .database import DatabaseManager
from .exceptions import (
    AccountNotFoundError, BankingError, InvalidAccountIdError, InvalidAmountError,
)
from .models import (
    Account, AccountVariant, AccountView, TransactionRecord,
    require_positive, to_decimal,
)
from .reporting import Reporting
from .transaction_log import TransactionLog


class LedgerEngine:
    """Enforces balance invariants for deposits, withdrawals and transfers."""

    def __init__(self, db_manager: DatabaseManager, config: Optional[LedgerConfig] = None):
        """Initialize the engine with an explicitly constructed store handle."""
        self.db = db_manager
        self.config = config or LedgerConfig(db_path=db_manager.db_path)
        self.accounts = AccountStore(db_manager)
        self.log = TransactionLog(db_manager)
        self.reports = Reporting(self.accounts)
        self.logger = logging.getLogger(__name__)

    def generate_account_id(self) -> str:
        """Generate a unique account id."""
        # Format: BANK-YYYYMMDD-XXXXXXXX
        date_str = datetime.now().strftime("%Y%m%d")
        unique_id = str(uuid.uuid4())[:8].upper()
        return f"BANK-{date_str}-{unique_id}"

    @staticmethod
    def _parse_rate(value) -> Decimal:
        try:
            rate = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError(f"Invalid interest rate: {value!r}")
        if not rate.is_finite():
            raise InvalidAmountError(f"Invalid interest rate: {value!r}")
        return rate

    def create_account(self, variant: AccountVariant, initial_balance=Decimal('0.00'),
                       account_id: Optional[str] = None,
                       interest_rate: Optional[Decimal] = None,
                       monthly_fee: Optional[Decimal] = None) -> str:
        """Open a new account and return its id.

        A positive opening balance is logged as the account's first record,
        in the same transaction as the insert.
        """
        variant = AccountVariant(variant)
        initial_balance = to_decimal(initial_balance)
        if initial_balance < 0:
            raise InvalidAmountError("Initial balance cannot be negative")

        if account_id is not None:
            account_id = account_id.strip()
            if not account_id:
                raise InvalidAccountIdError("Account id cannot be empty")

        if variant is AccountVariant.SAVINGS:
            rate = self._parse_rate(interest_rate) if interest_rate is not None \
                else self.config.savings_interest_rate
            if rate < 0:
                raise InvalidAmountError("Interest rate cannot be negative")
            account_kwargs = {'interest_rate': rate}
        else:
            fee = to_decimal(monthly_fee) if monthly_fee is not None \
                else self.config.checking_monthly_fee
            if fee < 0:
                raise InvalidAmountError("Monthly fee cannot be negative")
            account_kwargs = {'monthly_fee': fee}

        with self.db.transaction() as conn:
            if account_id is None:
                account_id = self.generate_account_id()
                # Ensure account id is unique
                while self.accounts.exists(account_id, conn):
                    account_id = self.generate_account_id()

            account = Account(
                account_id=account_id,
                variant=variant,
                balance=initial_balance,
                **account_kwargs
            )
            self.accounts.insert(account, conn)

            if initial_balance > 0:
                self.log.append(account_id, initial_balance, conn)

        self.logger.info(
            f"Opened {variant.value} account {account_id} with balance {initial_balance}"
        )
        return account_id

    def deposit(self, account_id: str, amount) -> Decimal:
        """Deposit money to an account and return the new balance."""
        amount = require_positive(amount, "Deposit")

        with self.db.transaction() as conn:
            account = self.accounts.get(account_id, conn)
            account.deposit(amount)
            self.accounts.set_balance(account_id, account.balance, conn)
            self.log.append(account_id, amount, conn)

        self.logger.info(f"Deposited {amount} to {account_id}, balance {account.balance}")
        return account.balance

    def withdraw(self, account_id: str, amount) -> Decimal:
        """Withdraw money from an account and return the new balance."""
        amount = require_positive(amount, "Withdrawal")

        try:
            with self.db.transaction() as conn:
                # Check and write under the same write lock
                account = self.accounts.get(account_id, conn)
                account.withdraw(amount)
                self.accounts.set_balance(account_id, account.balance, conn)
                self.log.append(account_id, -amount, conn)
        except BankingError as e:
            self.logger.warning(f"Withdrawal of {amount} from {account_id} refused: {e}")
            raise

        self.logger.info(f"Withdrew {amount} from {account_id}, balance {account.balance}")
        return account.balance

    def transfer(self, from_account_id: str, to_account_id: str, amount) -> None:
        """Move money between two accounts as one atomic unit.

        The source is debited and checked before the destination is read, so an
        insufficient balance never touches the destination. A transfer to the
        same account is allowed and logs both legs.
        """
        amount = require_positive(amount, "Transfer")

        try:
            with self.db.transaction() as conn:
                source = self.accounts.get(from_account_id, conn)
                source.withdraw(amount)
                self.accounts.set_balance(from_account_id, source.balance, conn)
                self.log.append(from_account_id, -amount, conn)

                # Re-read after the debit so a self-transfer sees it
                destination = self.accounts.get(to_account_id, conn)
                destination.deposit(amount)
                self.accounts.set_balance(to_account_id, destination.balance, conn)
                self.log.append(to_account_id, amount, conn)
        except BankingError as e:
            self.logger.warning(
                f"Transfer of {amount} from {from_account_id} to {to_account_id} refused: {e}"
            )
            raise

        self.logger.info(f"Transferred {amount} from {from_account_id} to {to_account_id}")

    def find_account(self, account_id: str) -> AccountView:
        """Get a read-only view of an account."""
        if not account_id:
            raise AccountNotFoundError(account_id)
        return self.accounts.get(account_id).view()

    def apply_monthly_adjustments(self) -> dict:
        """Credit interest to savings and charge fees to checking accounts.

        Each account is adjusted in its own transaction. A failure on one
        account is logged and the run moves on to the next.
        """
        processed = []
        failed = []

        for snapshot in self.accounts.list_all():
            account_id = snapshot.account_id
            try:
                with self.db.transaction() as conn:
                    account = self.accounts.get(account_id, conn)
                    old_balance = account.balance
                    account.apply_monthly_adjustment()
                    delta = account.balance - old_balance
                    self.accounts.set_balance(account_id, account.balance, conn)
                    self.log.append(account_id, delta, conn)
            except Exception as e:
                # Any failure is confined to this account's transaction
                self.logger.exception(f"Monthly adjustment failed for {account_id}: {e}")
                failed.append({'account_id': account_id, 'error': str(e)})
                continue

            processed.append({'account_id': account_id, 'delta': delta,
                              'balance': account.balance})

        self.logger.info(
            f"Monthly adjustments applied: {len(processed)} processed, {len(failed)} failed"
        )
        return {
            'processed_count': len(processed),
            'failed_count': len(failed),
            'processed': processed,
            'failed': failed,
        }

    def transaction_history(self, account_id: str, limit: Optional[int] = None) -> List[TransactionRecord]:
        """Get account transaction history, most recent first."""
        return self.log.history_for(account_id, limit)

    def all_transactions(self) -> List[TransactionRecord]:
        return self.log.all_records()

    def list_accounts(self) -> List[AccountView]:
        return [account.view() for account in self.accounts.list_all()]

    def total_balance(self) -> Decimal:
        return self.reports.total_balance()

    def account_count(self) -> int:
        return self.reports.account_count()

    def minimum_balance_account(self) -> Optional[AccountView]:
        return self.reports.minimum_balance_account()

    def accounts_by_balance_ascending(self) -> List[AccountView]:
        return self.reports.accounts_by_balance_ascending()

    def reset_all_accounts(self) -> int:
        """Delete every account. Transaction history is kept."""
        return self.accounts.clear()

    def reset_all_transactions(self) -> int:
        """Delete the whole transaction log. Accounts are kept."""
        return self.log.clear_all()
