"""
Database manager for the bank ledger.

This module owns the SQLite schema and the unit of work every ledger
operation runs in.
"""

import sqlite3
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from .exceptions import BankingError, OperationFailedError


class DatabaseManager:
    """Manages the SQLite store of record for accounts and transactions."""

    def __init__(self, db_path: str = "bank.db", timeout: float = 5.0):
        """Initialize database manager."""
        self.db_path = db_path
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        # Autocommit mode; transaction boundaries are issued explicitly below
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_database(self):
        """Initialize database tables."""
        with self.transaction() as conn:
            # Money columns hold integer cents so SUM/MIN/ORDER BY stay exact
            conn.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    account_id TEXT PRIMARY KEY,
                    variant TEXT NOT NULL CHECK(variant IN ('savings', 'checking')),
                    balance_cents INTEGER NOT NULL DEFAULT 0,
                    interest_rate TEXT,
                    monthly_fee_cents INTEGER,
                    created_at TEXT NOT NULL
                )
            """)

            # No foreign key on account_id: the two tables are
            # cleared independently
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    record_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    account_id TEXT NOT NULL,
                    amount_cents INTEGER NOT NULL,
                    timestamp TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_transactions_account_time
                ON transactions (account_id, timestamp DESC, record_id DESC)
            """)

    @contextmanager
    def transaction(self, immediate: bool = True) -> Iterator[sqlite3.Connection]:
        """Run a block inside one SQLite transaction.

        With ``immediate`` the write lock is taken before the first read, so a
        balance check and the write that follows it cannot interleave with
        another writer. Commits on normal exit, rolls back on any exception.
        Storage errors surface as OperationFailedError, ledger errors as-is.
        """
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            self.logger.error(f"Cannot open database {self.db_path}: {e}")
            raise OperationFailedError(f"Cannot open database: {e}") from e

        try:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except BankingError:
            self._rollback(conn)
            raise
        except sqlite3.Error as e:
            self._rollback(conn)
            self.logger.error(f"Database error, transaction rolled back: {e}", exc_info=True)
            raise OperationFailedError(f"Database operation failed: {e}") from e
        except Exception:
            self._rollback(conn)
            raise
        finally:
            conn.close()

    @contextmanager
    def connection(self, conn: Optional[sqlite3.Connection] = None,
                   immediate: bool = True) -> Iterator[sqlite3.Connection]:
        """Reuse the caller's open transaction or start a new one."""
        if conn is not None:
            yield conn
            return

        with self.transaction(immediate=immediate) as new_conn:
            yield new_conn

    def _rollback(self, conn: sqlite3.Connection):
        if conn.in_transaction:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error as e:
                self.logger.error(f"Rollback failed: {e}")
