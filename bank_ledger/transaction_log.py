"""
Append-only transaction log for the bank ledger.

Records are never updated; the log only grows or is bulk cleared by an
administrator. Business rules are checked by the ledger engine, not here.
"""

import sqlite3
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from .database import DatabaseManager
from .models import TransactionRecord, from_cents, to_cents

RECORD_COLUMNS = "record_id, account_id, amount_cents, timestamp"


def _row_to_record(row: sqlite3.Row) -> TransactionRecord:
    return TransactionRecord(
        record_id=row["record_id"],
        account_id=row["account_id"],
        amount=from_cents(row["amount_cents"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
    )


class TransactionLog:
    """Writes and reads the ``transactions`` table."""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.logger = logging.getLogger(__name__)

    def append(self, account_id: str, amount: Decimal,
               conn: Optional[sqlite3.Connection] = None) -> TransactionRecord:
        """Append a signed amount for an account."""
        timestamp = datetime.now()
        with self.db.connection(conn) as c:
            cursor = c.execute("""
                INSERT INTO transactions (account_id, amount_cents, timestamp)
                VALUES (?, ?, ?)
            """, (account_id, to_cents(amount), timestamp.isoformat(timespec='microseconds')))
            record_id = cursor.lastrowid

        return TransactionRecord(
            account_id=account_id,
            amount=amount,
            timestamp=timestamp,
            record_id=record_id,
        )

    def history_for(self, account_id: str, limit: Optional[int] = None,
                    conn: Optional[sqlite3.Connection] = None) -> List[TransactionRecord]:
        """Get records for an account, most recent first."""
        sql = f"""
            SELECT {RECORD_COLUMNS}
            FROM transactions
            WHERE account_id = ?
            ORDER BY timestamp DESC, record_id DESC
        """
        params = [account_id]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self.db.connection(conn, immediate=False) as c:
            rows = c.execute(sql, params).fetchall()
        return [_row_to_record(row) for row in rows]

    def all_records(self, conn: Optional[sqlite3.Connection] = None) -> List[TransactionRecord]:
        """Get the whole log, oldest first."""
        with self.db.connection(conn, immediate=False) as c:
            rows = c.execute(
                f"SELECT {RECORD_COLUMNS} FROM transactions ORDER BY timestamp, record_id"
            ).fetchall()
        return [_row_to_record(row) for row in rows]

    def clear_all(self, conn: Optional[sqlite3.Connection] = None) -> int:
        """Delete every record. Accounts are left untouched."""
        with self.db.connection(conn) as c:
            cursor = c.execute("DELETE FROM transactions")
            deleted = cursor.rowcount
        self.logger.warning(f"Cleared {deleted} transaction records")
        return deleted
