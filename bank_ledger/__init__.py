"""
Bank Ledger

Savings and checking accounts, money movements between them and an
append-only transaction log, backed by a local SQLite store.
"""

__version__ = "0.1.0"

from typing import Optional

from .models import Account, AccountVariant, AccountView, TransactionRecord
from .config import LedgerConfig
from .database import DatabaseManager
from .ledger import LedgerEngine
from .exceptions import (
    BankingError,
    InvalidAmountError,
    InvalidAccountIdError,
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientFundsError,
    OperationFailedError,
    ConfigurationError,
)


def create_ledger_engine(db_path: str = "bank.db",
                         config: Optional[LedgerConfig] = None) -> LedgerEngine:
    """
    Create a LedgerEngine instance with database.

    Args:
        db_path: Path to the database file
        config: Engine settings; defaults are used when omitted

    Returns:
        LedgerEngine instance
    """
    config = config or LedgerConfig(db_path=db_path)
    db_manager = DatabaseManager(db_path, timeout=config.db_timeout)
    return LedgerEngine(db_manager, config)


__all__ = [
    "Account",
    "AccountVariant",
    "AccountView",
    "TransactionRecord",
    "LedgerConfig",
    "DatabaseManager",
    "LedgerEngine",
    "BankingError",
    "InvalidAmountError",
    "InvalidAccountIdError",
    "AccountNotFoundError",
    "DuplicateAccountError",
    "InsufficientFundsError",
    "OperationFailedError",
    "ConfigurationError",
    "create_ledger_engine",
]
