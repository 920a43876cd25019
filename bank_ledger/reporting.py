"""
Read-only reports over the account store.
"""

from decimal import Decimal
from typing import List, Optional

from .account_store import AccountStore
from .models import AccountView


class Reporting:
    """Aggregate views derived from stored accounts. Never mutates state."""

    def __init__(self, store: AccountStore):
        self.store = store

    def total_balance(self) -> Decimal:
        """Sum of all balances; zero when there are no accounts."""
        return self.store.total_balance()

    def account_count(self) -> int:
        return self.store.count()

    def minimum_balance_account(self) -> Optional[AccountView]:
        """Account with the lowest balance, or None. Ties go to the oldest row."""
        account = self.store.min_balance()
        return account.view() if account else None

    def accounts_by_balance_ascending(self) -> List[AccountView]:
        return [account.view() for account in self.store.list_by_balance()]

    def summary(self) -> dict:
        """Bundle the headline figures in one read transaction."""
        with self.store.db.transaction(immediate=False) as conn:
            total = self.store.total_balance(conn)
            count = self.store.count(conn)
            minimum = self.store.min_balance(conn)

        return {
            'total_balance': total,
            'account_count': count,
            'minimum_balance_account': minimum.view() if minimum else None,
        }
