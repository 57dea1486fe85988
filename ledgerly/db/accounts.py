"""
Accounts repository module for account CRUD and lifecycle operations.

Handles all account-related database operations including:
- Creating and reading accounts
- Partial updates (name, type, currency)
- Archiving and unarchiving
- Checking whether an account has transaction history

Accounts are never deleted, only archived, so every transaction keeps both
of its accounts.
"""

import logging
from typing import Optional

from ledgerly.config import DEFAULT_CURRENCY
from ledgerly.models import Account, AccountPatch, AccountType
from ledgerly.timeutil import now_ms

from .base import BaseRepository, new_id
from .schema import ACCOUNT_COLUMNS

logger = logging.getLogger(__name__)

# AccountPatch attribute -> accounts column
_PATCH_COLUMNS = {
    "name": "name",
    "account_type": "type",
    "currency": "currency",
}


class AccountRepository(BaseRepository):
    """
    Repository for managing accounts.

    The repository applies changes mechanically. Rules such as "type and
    currency are frozen once an account has transactions" are enforced by the
    caller (see ``LedgerRepository.update_account``) using ``has_transactions``.
    """

    # =========================================================================
    # Create Operations
    # =========================================================================

    def create_account(
        self,
        name: str,
        account_type: AccountType,
        currency: Optional[str] = None,
    ) -> Account:
        """
        Create a new account.

        Args:
            name: Display name (not required to be unique)
            account_type: Internal or external
            currency: Currency code, defaults to USD

        Returns:
            The created Account
        """
        account = Account(
            id=new_id(),
            name=name,
            account_type=AccountType(account_type),
            currency=currency or DEFAULT_CURRENCY,
            created_at=now_ms(),
            archived=False,
        )

        try:
            with self._get_connection() as conn:
                conn.execute(
                    f"""
                    INSERT INTO accounts ({ACCOUNT_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, 0)
                    """,
                    (
                        account.id,
                        account.name,
                        account.account_type.value,
                        account.currency,
                        account.created_at,
                    ),
                )

            logger.info(
                f"Created account '{account.name}' ({account.id}, "
                f"type: {account.account_type.value}, currency: {account.currency})"
            )
            return account
        except Exception as e:
            logger.error(f"Error creating account '{name}': {e}", exc_info=True)
            raise

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get an account by ID, or None if it does not exist."""
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {ACCOUNT_COLUMNS} FROM accounts WHERE id = ?",
                (account_id,),
            ).fetchone()
            return Account.from_row(tuple(row)) if row else None

    def list_accounts(
        self,
        include_archived: bool = False,
        account_type: Optional[AccountType] = None,
    ) -> list[Account]:
        """
        List accounts ordered by name.

        Args:
            include_archived: Include archived accounts
            account_type: Only return accounts of this type

        Returns:
            List of Account objects
        """
        conditions: list[str] = []
        params: list = []

        if not include_archived:
            conditions.append("archived = 0")
        if account_type is not None:
            conditions.append("type = ?")
            params.append(AccountType(account_type).value)

        query = f"SELECT {ACCOUNT_COLUMNS} FROM accounts"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY name ASC"

        try:
            with self._get_connection() as conn:
                accounts = [
                    Account.from_row(tuple(row))
                    for row in conn.execute(query, params).fetchall()
                ]
            logger.debug(f"Retrieved {len(accounts)} accounts")
            return accounts
        except Exception as e:
            logger.error(f"Error listing accounts: {e}", exc_info=True)
            raise

    def has_transactions(self, account_id: str) -> bool:
        """True if the account is the from or to side of any transaction."""
        with self._get_connection() as conn:
            row = conn.execute(
                """
                SELECT EXISTS (
                    SELECT 1 FROM transactions
                    WHERE from_account_id = ? OR to_account_id = ?
                )
                """,
                (account_id, account_id),
            ).fetchone()
            return bool(row[0])

    # =========================================================================
    # Update Operations
    # =========================================================================

    def update_account(
        self, account_id: str, patch: AccountPatch
    ) -> Optional[Account]:
        """
        Apply the supplied fields of ``patch`` to an account.

        An empty patch writes nothing and simply reads the account back.

        Args:
            account_id: Account ID to update
            patch: Fields to change

        Returns:
            The account after the update, or None if it does not exist
        """
        changes = patch.supplied()
        if not changes:
            return self.get_account(account_id)

        assignments = []
        params: list = []
        for attr, value in changes.items():
            assignments.append(f"{_PATCH_COLUMNS[attr]} = ?")
            params.append(value.value if isinstance(value, AccountType) else value)
        params.append(account_id)

        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    f"UPDATE accounts SET {', '.join(assignments)} WHERE id = ?",
                    params,
                )
                if cursor.rowcount == 0:
                    logger.warning(f"Account {account_id} not found for update")
                    return None

                logger.info(
                    f"Updated account {account_id}: {', '.join(sorted(changes))}"
                )
                return self.get_account(account_id)
        except Exception as e:
            logger.error(f"Error updating account {account_id}: {e}", exc_info=True)
            raise

    def archive_account(self, account_id: str):
        """Hide an account from default listings. Idempotent."""
        self._set_archived(account_id, True)

    def unarchive_account(self, account_id: str):
        """Return an archived account to default listings. Idempotent."""
        self._set_archived(account_id, False)

    def _set_archived(self, account_id: str, archived: bool):
        with self._get_connection() as conn:
            conn.execute(
                "UPDATE accounts SET archived = ? WHERE id = ?",
                (1 if archived else 0, account_id),
            )
        logger.info(
            f"{'Archived' if archived else 'Unarchived'} account {account_id}"
        )
