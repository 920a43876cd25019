"""
Account store for the bank ledger.

Keyed persistence of account records. Every method takes an optional open
connection so the ledger engine can chain several calls inside one
transaction; without one, each call runs in its own unit of work.
"""

import sqlite3
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from .database import DatabaseManager
from .exceptions import AccountNotFoundError, DuplicateAccountError
from .models import Account, AccountVariant, from_cents, to_cents

ACCOUNT_COLUMNS = "account_id, variant, balance_cents, interest_rate, monthly_fee_cents, created_at"


def _row_to_account(row: sqlite3.Row) -> Account:
    return Account(
        account_id=row["account_id"],
        variant=AccountVariant(row["variant"]),
        balance=from_cents(row["balance_cents"]),
        interest_rate=Decimal(row["interest_rate"]) if row["interest_rate"] is not None else None,
        monthly_fee=from_cents(row["monthly_fee_cents"]) if row["monthly_fee_cents"] is not None else None,
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class AccountStore:
    """Persists Account records in the ``accounts`` table."""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = logging.getLogger(__name__)

    def insert(self, account: Account, conn: Optional[sqlite3.Connection] = None) -> None:
        """Insert a new account; the id must be unused."""
        with self.db.connection(conn) as c:
            try:
                c.execute(f"""
                    INSERT INTO accounts ({ACCOUNT_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    account.account_id,
                    account.variant.value,
                    to_cents(account.balance),
                    str(account.interest_rate) if account.interest_rate is not None else None,
                    to_cents(account.monthly_fee) if account.monthly_fee is not None else None,
                    account.created_at.isoformat(timespec='microseconds'),
                ))
            except sqlite3.IntegrityError as e:
                raise DuplicateAccountError(account.account_id) from e

    def get(self, account_id: str, conn: Optional[sqlite3.Connection] = None) -> Account:
        """Get account by ID."""
        with self.db.connection(conn, immediate=False) as c:
            row = c.execute(
                f"SELECT {ACCOUNT_COLUMNS} FROM accounts WHERE account_id = ?",
                (account_id,)
            ).fetchone()

        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)

    def exists(self, account_id: str, conn: Optional[sqlite3.Connection] = None) -> bool:
        with self.db.connection(conn, immediate=False) as c:
            row = c.execute(
                "SELECT 1 FROM accounts WHERE account_id = ?", (account_id,)
            ).fetchone()
        return row is not None

    def set_balance(self, account_id: str, new_balance: Decimal,
                    conn: Optional[sqlite3.Connection] = None) -> None:
        """Overwrite the stored balance; the row must exist."""
        with self.db.connection(conn) as c:
            cursor = c.execute(
                "UPDATE accounts SET balance_cents = ? WHERE account_id = ?",
                (to_cents(new_balance), account_id)
            )
            if cursor.rowcount == 0:
                raise AccountNotFoundError(account_id)

    def list_all(self, conn: Optional[sqlite3.Connection] = None) -> List[Account]:
        """Get all accounts in creation order."""
        with self.db.connection(conn, immediate=False) as c:
            rows = c.execute(
                f"SELECT {ACCOUNT_COLUMNS} FROM accounts ORDER BY created_at, rowid"
            ).fetchall()
        return [_row_to_account(row) for row in rows]

    def list_by_balance(self, conn: Optional[sqlite3.Connection] = None) -> List[Account]:
        """Get all accounts ordered by ascending balance."""
        with self.db.connection(conn, immediate=False) as c:
            rows = c.execute(
                f"SELECT {ACCOUNT_COLUMNS} FROM accounts ORDER BY balance_cents ASC, rowid"
            ).fetchall()
        return [_row_to_account(row) for row in rows]

    def total_balance(self, conn: Optional[sqlite3.Connection] = None) -> Decimal:
        with self.db.connection(conn, immediate=False) as c:
            row = c.execute("SELECT COALESCE(SUM(balance_cents), 0) FROM accounts").fetchone()
        return from_cents(row[0])

    def count(self, conn: Optional[sqlite3.Connection] = None) -> int:
        with self.db.connection(conn, immediate=False) as c:
            row = c.execute("SELECT COUNT(*) FROM accounts").fetchone()
        return row[0]

    def min_balance(self, conn: Optional[sqlite3.Connection] = None) -> Optional[Account]:
        """Get the account with the lowest balance, or None if there are none."""
        with self.db.connection(conn, immediate=False) as c:
            row = c.execute(
                f"SELECT {ACCOUNT_COLUMNS} FROM accounts ORDER BY balance_cents ASC, rowid LIMIT 1"
            ).fetchone()
        return _row_to_account(row) if row is not None else None

    def clear(self, conn: Optional[sqlite3.Connection] = None) -> int:
        """Delete every account. Transaction history is left untouched."""
        with self.db.connection(conn) as c:
            cursor = c.execute("DELETE FROM accounts")
            deleted = cursor.rowcount
        self.logger.warning(f"Cleared {deleted} accounts")
        return deleted
