"""
Transactions repository module for transaction CRUD operations.

Handles all transaction-related database operations including:
- Appending transactions
- Reading single transactions and filtered listings
- Constrained in-place updates
- Reversals (the sanctioned correction: a new offsetting transaction)
- Hard deletes

Caller preconditions (positive integer amount, distinct and existing accounts)
are checked one layer up in ``LedgerRepository`` and are not repeated here.
"""

import logging
from typing import Optional

from ledgerly.config import DEFAULT_RECENT_LIMIT, REVERSAL_NOTE_TEMPLATE
from ledgerly.errors import NotFoundError
from ledgerly.models import (
    Transaction,
    TransactionFilter,
    TransactionPatch,
    encode_tags,
)
from ledgerly.timeutil import now_ms

from .base import BaseRepository, new_id
from .schema import TRANSACTION_COLUMNS

logger = logging.getLogger(__name__)

# TransactionPatch attribute -> transactions column
_PATCH_COLUMNS = {
    "date": "date",
    "from_account_id": "from_account_id",
    "to_account_id": "to_account_id",
    "amount": "amount",
    "tags": "tags",
    "note": "note",
}


class TransactionRepository(BaseRepository):
    """
    Repository for managing transactions.

    The transaction log is the only source of truth for balances, so every
    method here is a direct read or a single write against the log.
    """

    # =========================================================================
    # Create Operations
    # =========================================================================

    def create_transaction(
        self,
        date: int,
        from_account_id: str,
        to_account_id: str,
        amount: int,
        tags: Optional[list[str]] = None,
        note: Optional[str] = None,
    ) -> Transaction:
        """
        Append a new transaction to the log.

        Args:
            date: Economic date of the transfer (epoch ms)
            from_account_id: Account the value leaves
            to_account_id: Account the value enters
            amount: Positive amount in minor units
            tags: Optional labels, defaults to no tags
            note: Optional free text

        Returns:
            The created Transaction
        """
        transaction = Transaction(
            id=new_id(),
            date=date,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            tags=list(tags) if tags else [],
            note=note,
            created_at=now_ms(),
        )

        try:
            with self._get_connection() as conn:
                conn.execute(
                    f"""
                    INSERT INTO transactions ({TRANSACTION_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        transaction.id,
                        transaction.date,
                        transaction.from_account_id,
                        transaction.to_account_id,
                        transaction.amount,
                        encode_tags(transaction.tags),
                        transaction.note,
                        transaction.created_at,
                    ),
                )

            logger.info(
                f"Inserted transaction {transaction.id}: "
                f"{from_account_id} -> {to_account_id} = {amount}"
            )
            return transaction
        except Exception as e:
            logger.error(f"Error inserting transaction: {e}", exc_info=True)
            raise

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """
        Get a transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction, or None if not found
        """
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id = ?",
                (transaction_id,),
            ).fetchone()
            return Transaction.from_row(tuple(row)) if row else None

    def list_transactions(
        self, filters: Optional[TransactionFilter] = None
    ) -> list[Transaction]:
        """
        List transactions matching every supplied filter field.

        Results are ordered by ``date`` descending, then ``created_at``
        descending, so entries on the same date show the newest-created first.

        Args:
            filters: Constraints to apply; None lists the whole log

        Returns:
            List of Transaction objects
        """
        filters = filters or TransactionFilter()
        conditions: list[str] = []
        params: list = []

        if filters.account_id is not None:
            conditions.append("(from_account_id = ? OR to_account_id = ?)")
            params.extend([filters.account_id, filters.account_id])

        if filters.start_date is not None:
            conditions.append("date >= ?")
            params.append(filters.start_date)

        if filters.end_date is not None:
            conditions.append("date <= ?")
            params.append(filters.end_date)

        for tag in filters.tags or []:
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(transactions.tags) "
                "WHERE json_each.value = ?)"
            )
            params.append(tag)

        query = f"SELECT {TRANSACTION_COLUMNS} FROM transactions"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY date DESC, created_at DESC, rowid DESC"

        if filters.limit is not None:
            query += " LIMIT ?"
            params.append(filters.limit)
        elif filters.offset is not None:
            # SQLite only accepts OFFSET after a LIMIT clause
            query += " LIMIT -1"

        if filters.offset is not None:
            query += " OFFSET ?"
            params.append(filters.offset)

        try:
            with self._get_connection() as conn:
                transactions = [
                    Transaction.from_row(tuple(row))
                    for row in conn.execute(query, params).fetchall()
                ]
            logger.debug(f"Retrieved {len(transactions)} transactions")
            return transactions
        except Exception as e:
            logger.error(f"Error listing transactions: {e}", exc_info=True)
            raise

    def recent_transactions(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Transaction]:
        """Get the most recent transactions by date."""
        return self.list_transactions(TransactionFilter(limit=limit))

    # =========================================================================
    # Update Operations
    # =========================================================================

    def update_transaction(
        self, transaction_id: str, patch: TransactionPatch
    ) -> Optional[Transaction]:
        """
        Change fields of an existing transaction in place.

        This rewrites history and is meant for typo-level fixes. Economic
        corrections should use ``reverse_transaction`` instead. An empty patch
        writes nothing and reads the transaction back.

        Args:
            transaction_id: Transaction ID to update
            patch: Fields to change; ``note=None`` clears the note

        Returns:
            Updated Transaction, or None if not found
        """
        changes = patch.supplied()
        if not changes:
            return self.get_transaction(transaction_id)

        assignments = []
        params: list = []
        for attr, value in changes.items():
            assignments.append(f"{_PATCH_COLUMNS[attr]} = ?")
            params.append(encode_tags(value) if attr == "tags" else value)
        params.append(transaction_id)

        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    f"UPDATE transactions SET {', '.join(assignments)} WHERE id = ?",
                    params,
                )
                if cursor.rowcount == 0:
                    logger.warning(f"Transaction {transaction_id} not found for update")
                    return None

                logger.info(
                    f"Updated transaction {transaction_id}: "
                    f"{', '.join(sorted(changes))}"
                )
                return self.get_transaction(transaction_id)
        except Exception as e:
            logger.error(
                f"Error updating transaction {transaction_id}: {e}", exc_info=True
            )
            raise

    def reverse_transaction(
        self, transaction_id: str, note: Optional[str] = None
    ) -> Transaction:
        """
        Offset a transaction by appending its mirror image.

        The original row is left untouched. The new transaction swaps from and
        to, keeps the amount and tags, is dated now, and by default notes which
        transaction it reverses.

        Args:
            transaction_id: Transaction to reverse
            note: Note for the reversal, defaults to a reference to the original

        Returns:
            The new reversing Transaction

        Raises:
            NotFoundError: If the original transaction does not exist
        """
        with self._get_connection():
            original = self.get_transaction(transaction_id)
            if original is None:
                raise NotFoundError("Transaction", transaction_id)

            reversal = self.create_transaction(
                date=now_ms(),
                from_account_id=original.to_account_id,
                to_account_id=original.from_account_id,
                amount=original.amount,
                tags=original.tags,
                note=(
                    note
                    if note is not None
                    else REVERSAL_NOTE_TEMPLATE.format(transaction_id=transaction_id)
                ),
            )

        logger.info(f"Reversed transaction {transaction_id} with {reversal.id}")
        return reversal

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete_transaction(self, transaction_id: str) -> bool:
        """
        Permanently remove a transaction.

        Returns:
            True if a row was deleted, False if it did not exist
        """
        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM transactions WHERE id = ?", (transaction_id,)
                )
                deleted = cursor.rowcount > 0

            if deleted:
                logger.warning(f"Hard-deleted transaction {transaction_id}")
            return deleted
        except Exception as e:
            logger.error(
                f"Error deleting transaction {transaction_id}: {e}", exc_info=True
            )
            raise
