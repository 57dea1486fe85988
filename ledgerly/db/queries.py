"""
Queries repository module for balance calculations and analytics.

Handles all derived, read-only views of the ledger including:
- Per-account balances (raw and from the owner's point of view)
- Net worth across internal accounts
- Income and expense totals

Nothing here is cached; every call folds over the transaction log again.
"""

import logging
from typing import Optional

from ledgerly.models import AccountWithBalance, TransactionFilter
from ledgerly.services.classify import (
    calculate_income_and_expenses,
    to_entity_balance,
)

from .accounts import AccountRepository
from .base import BaseRepository
from .transactions import TransactionRepository

logger = logging.getLogger(__name__)


class QueryRepository(BaseRepository):
    """
    Repository for balance calculations and analytics queries.

    Provides read-only query operations for analyzing ledger data.
    """

    # =========================================================================
    # Balance Queries
    # =========================================================================

    def get_balance(self, account_id: str) -> int:
        """
        Raw balance of an account: everything received minus everything sent.

        For an internal account this is the money it holds. For an external
        account it is the net flow into that counterparty; see
        ``get_entity_balance`` for the owner's view.

        Args:
            account_id: Account ID

        Returns:
            Balance in minor units, 0 when the account has no transactions
        """
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    """
                    SELECT
                        COALESCE(SUM(
                            CASE WHEN to_account_id = ? THEN amount ELSE 0 END
                        ), 0) -
                        COALESCE(SUM(
                            CASE WHEN from_account_id = ? THEN amount ELSE 0 END
                        ), 0) as balance
                    FROM transactions
                    WHERE from_account_id = ? OR to_account_id = ?
                    """,
                    (account_id, account_id, account_id, account_id),
                ).fetchone()
                balance = row["balance"] if row and row["balance"] is not None else 0
                logger.debug(f"Balance for account {account_id}: {balance}")
                return balance
        except Exception as e:
            logger.error(
                f"Error getting balance for account {account_id}: {e}", exc_info=True
            )
            raise

    def get_entity_balance(self, account_id: str) -> Optional[int]:
        """
        Balance of an account from the ledger owner's point of view.

        Returns:
            Balance in minor units, or None if the account does not exist
        """
        account = AccountRepository(self.store).get_account(account_id)
        if account is None:
            return None
        return to_entity_balance(self.get_balance(account_id), account.account_type)

    def get_net_worth(self) -> int:
        """
        Sum of balances over internal, non-archived accounts.

        External accounts never count, whatever their archived state.

        Returns:
            Net worth in minor units
        """
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    """
                    SELECT COALESCE(SUM(
                        (SELECT
                            COALESCE(SUM(
                                CASE WHEN t.to_account_id = a.id THEN t.amount ELSE 0 END
                            ), 0) -
                            COALESCE(SUM(
                                CASE WHEN t.from_account_id = a.id THEN t.amount ELSE 0 END
                            ), 0)
                         FROM transactions t
                         WHERE t.from_account_id = a.id OR t.to_account_id = a.id)
                    ), 0) as net_worth
                    FROM accounts a
                    WHERE a.type = 'internal' AND a.archived = 0
                    """
                ).fetchone()
                net_worth = row["net_worth"] if row and row["net_worth"] is not None else 0
                logger.debug(f"Net worth: {net_worth}")
                return net_worth
        except Exception as e:
            logger.error(f"Error calculating net worth: {e}", exc_info=True)
            raise

    def get_accounts_with_balances(
        self, include_archived: bool = False
    ) -> list[AccountWithBalance]:
        """
        List accounts (ordered by name) with their owner's-view balances.

        Args:
            include_archived: Include archived accounts

        Returns:
            List of AccountWithBalance
        """
        accounts = AccountRepository(self.store).list_accounts(
            include_archived=include_archived
        )

        result = []
        for account in accounts:
            raw = self.get_balance(account.id)
            result.append(
                AccountWithBalance(
                    account=account,
                    balance=to_entity_balance(raw, account.account_type),
                    raw_balance=raw,
                )
            )
        return result

    # =========================================================================
    # Income / Expense Queries
    # =========================================================================

    def get_income_and_expenses(
        self, filters: Optional[TransactionFilter] = None
    ) -> dict[str, int]:
        """
        Income and expense totals over the transactions matching ``filters``.

        Internal transfers are excluded from both totals.

        Returns:
            Dictionary with ``income``, ``expenses`` and ``net`` in minor units
        """
        transactions = TransactionRepository(self.store).list_transactions(filters)
        accounts = {
            account.id: account
            for account in AccountRepository(self.store).list_accounts(
                include_archived=True
            )
        }
        totals = calculate_income_and_expenses(transactions, accounts)
        logger.debug(
            f"Income/expenses over {len(transactions)} transactions: {totals}"
        )
        return totals
