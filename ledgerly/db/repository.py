"""
Main ledger repository facade.

``LedgerRepository`` is the surface callers use. It composes the account,
transaction and query repositories, checks caller preconditions before any
statement reaches storage, and enforces the ledger's history rules:

- amounts are positive integers in minor units
- a transaction moves value between two different, existing accounts
- an account's type and currency are frozen once it has transactions
- hard deletes must be explicitly acknowledged
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from ledgerly.config import (
    DEFAULT_RECENT_LIMIT,
    MAX_ACCOUNT_NAME_LENGTH,
    MAX_CURRENCY_LENGTH,
    MAX_NOTE_LENGTH,
    MAX_TAG_LENGTH,
)
from ledgerly.errors import ValidationError
from ledgerly.models import (
    Account,
    AccountPatch,
    AccountType,
    AccountWithBalance,
    Transaction,
    TransactionFilter,
    TransactionPatch,
    is_set,
)

from .accounts import AccountRepository
from .base import Store
from .queries import QueryRepository
from .transactions import TransactionRepository

logger = logging.getLogger(__name__)


# =============================================================================
# Input validation
# =============================================================================


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Account name cannot be empty")
    name = name.strip()
    if len(name) > MAX_ACCOUNT_NAME_LENGTH:
        raise ValidationError(
            f"Account name must be at most {MAX_ACCOUNT_NAME_LENGTH} characters"
        )
    return name


def _validate_account_type(account_type: Any) -> AccountType:
    try:
        return AccountType(account_type)
    except ValueError:
        raise ValidationError(f"Invalid account type: {account_type!r}") from None


def _validate_currency(currency: Any) -> str:
    if not isinstance(currency, str) or not currency.strip():
        raise ValidationError("Currency code cannot be empty")
    currency = currency.strip().upper()
    if len(currency) > MAX_CURRENCY_LENGTH or not currency.isalnum():
        raise ValidationError(f"Invalid currency code: {currency!r}")
    return currency


def _validate_amount(amount: Any) -> int:
    # bool is an int subclass; floats are never valid money
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(
            f"Amount must be an integer number of minor units, got {amount!r}"
        )
    if amount <= 0:
        raise ValidationError(f"Amount must be positive, got {amount}")
    return amount


def _validate_timestamp(value: Any, field_name: str = "date") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{field_name} must be epoch milliseconds as an integer, got {value!r}"
        )
    return value


def _validate_tags(tags: Any) -> list[str]:
    """Strip tags, drop blanks and repeats, keep first-seen order."""
    if tags is None:
        return []
    if isinstance(tags, str):
        raise ValidationError("Tags must be a list of strings, not a single string")

    cleaned: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError(f"Tag must be a string, got {tag!r}")
        tag = tag.strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValidationError(f"Tag must be at most {MAX_TAG_LENGTH} characters")
        if tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _validate_note(note: Any) -> Optional[str]:
    if note is None:
        return None
    if not isinstance(note, str):
        raise ValidationError(f"Note must be text, got {note!r}")
    if len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"Note must be at most {MAX_NOTE_LENGTH} characters")
    return note


class LedgerRepository:
    """
    Facade over all ledger repositories sharing one store.

    Reads are passed straight through. Writes are validated first, so a
    rejected request never produces a statement against the store.
    """

    def __init__(self, store: Store):
        """
        Initialize the ledger repository.

        Args:
            store: The shared store handle
        """
        self.store = store
        self.accounts = AccountRepository(store)
        self.transactions = TransactionRepository(store)
        self.queries = QueryRepository(store)

    # =========================================================================
    # Accounts
    # =========================================================================

    def create_account(
        self,
        name: str,
        account_type: Union[AccountType, str],
        currency: Optional[str] = None,
    ) -> Account:
        """
        Create a new account.

        Args:
            name: Display name
            account_type: "internal" or "external"
            currency: Currency code, defaults to USD

        Returns:
            The created Account

        Raises:
            ValidationError: If the name, type or currency is invalid
        """
        return self.accounts.create_account(
            name=_validate_name(name),
            account_type=_validate_account_type(account_type),
            currency=_validate_currency(currency) if currency is not None else None,
        )

    def get_account(self, account_id: str) -> Optional[Account]:
        return self.accounts.get_account(account_id)

    def list_accounts(
        self,
        include_archived: bool = False,
        account_type: Optional[Union[AccountType, str]] = None,
    ) -> list[Account]:
        return self.accounts.list_accounts(
            include_archived=include_archived,
            account_type=(
                _validate_account_type(account_type)
                if account_type is not None
                else None
            ),
        )

    def has_transactions(self, account_id: str) -> bool:
        return self.accounts.has_transactions(account_id)

    def update_account(
        self, account_id: str, patch: AccountPatch
    ) -> Optional[Account]:
        """
        Update an account, refusing type/currency changes once it has history.

        The history check and the write run under one write-locked
        transaction, so no transaction can be added in between.

        Args:
            account_id: Account ID to update
            patch: Fields to change

        Returns:
            The updated Account, or None if it does not exist

        Raises:
            ValidationError: If a field is invalid, or type/currency would
                             change on an account that has transactions
        """
        patch = AccountPatch(
            name=_validate_name(patch.name) if is_set(patch.name) else patch.name,
            account_type=(
                _validate_account_type(patch.account_type)
                if is_set(patch.account_type)
                else patch.account_type
            ),
            currency=(
                _validate_currency(patch.currency)
                if is_set(patch.currency)
                else patch.currency
            ),
        )

        with self.store.transaction(immediate=True):
            account = self.accounts.get_account(account_id)
            if account is None:
                return None

            if patch.changes_history_locked_fields(
                account
            ) and self.accounts.has_transactions(account_id):
                logger.warning(
                    f"Rejected type/currency change on account {account_id} "
                    f"with transaction history"
                )
                raise ValidationError(
                    "Account type and currency cannot change once the account "
                    "has transactions"
                )

            return self.accounts.update_account(account_id, patch)

    def archive_account(self, account_id: str):
        self.accounts.archive_account(account_id)

    def unarchive_account(self, account_id: str):
        self.accounts.unarchive_account(account_id)

    # =========================================================================
    # Transactions
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
        Record a transfer of ``amount`` from one account to another.

        Args:
            date: Economic date (epoch ms)
            from_account_id: Account the value leaves
            to_account_id: Account the value enters
            amount: Positive integer in minor units
            tags: Optional labels
            note: Optional free text

        Returns:
            The created Transaction

        Raises:
            ValidationError: If any precondition fails; nothing is written
        """
        date = _validate_timestamp(date)
        amount = _validate_amount(amount)
        tags = _validate_tags(tags)
        note = _validate_note(note)
        if from_account_id == to_account_id:
            raise ValidationError("From and to accounts must be different")

        with self.store.transaction(immediate=True):
            self._require_accounts(from_account_id, to_account_id)
            return self.transactions.create_transaction(
                date=date,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount,
                tags=tags,
                note=note,
            )

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.transactions.get_transaction(transaction_id)

    def list_transactions(
        self, filters: Optional[TransactionFilter] = None
    ) -> list[Transaction]:
        return self.transactions.list_transactions(filters)

    def recent_transactions(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Transaction]:
        return self.transactions.recent_transactions(limit)

    def update_transaction(
        self, transaction_id: str, patch: TransactionPatch
    ) -> Optional[Transaction]:
        """
        Correct fields of a transaction in place.

        Prefer ``reverse_transaction`` for economic corrections; this is for
        fixing mistakes such as a mistyped date or note.

        Args:
            transaction_id: Transaction ID to update
            patch: Fields to change

        Returns:
            The updated Transaction, or None if it does not exist

        Raises:
            ValidationError: If a supplied field is invalid or the result would
                             move value from an account to itself
        """
        patch = TransactionPatch(
            date=_validate_timestamp(patch.date) if is_set(patch.date) else patch.date,
            from_account_id=patch.from_account_id,
            to_account_id=patch.to_account_id,
            amount=(
                _validate_amount(patch.amount) if is_set(patch.amount) else patch.amount
            ),
            tags=_validate_tags(patch.tags) if is_set(patch.tags) else patch.tags,
            note=_validate_note(patch.note) if is_set(patch.note) else patch.note,
        )

        with self.store.transaction(immediate=True):
            current = self.transactions.get_transaction(transaction_id)
            if current is None:
                return None

            from_id = (
                patch.from_account_id
                if is_set(patch.from_account_id)
                else current.from_account_id
            )
            to_id = (
                patch.to_account_id
                if is_set(patch.to_account_id)
                else current.to_account_id
            )
            if from_id == to_id:
                raise ValidationError("From and to accounts must be different")

            changed_ids = [
                account_id
                for account_id in (patch.from_account_id, patch.to_account_id)
                if is_set(account_id)
            ]
            self._require_accounts(*changed_ids)

            return self.transactions.update_transaction(transaction_id, patch)

    def reverse_transaction(
        self, transaction_id: str, note: Optional[str] = None
    ) -> Transaction:
        """
        Correct a transaction by appending an offsetting one.

        Raises:
            NotFoundError: If the transaction does not exist
            ValidationError: If the note is invalid
        """
        return self.transactions.reverse_transaction(
            transaction_id, note=_validate_note(note)
        )

    def delete_transaction(
        self, transaction_id: str, acknowledge_history_loss: bool = False
    ) -> bool:
        """
        Permanently delete a transaction.

        The ledger is meant to be append-only; mistakes should be corrected
        with ``reverse_transaction``. Deleting is reserved for junk data and
        must be requested explicitly.

        Args:
            transaction_id: Transaction ID to delete
            acknowledge_history_loss: Must be True to proceed

        Returns:
            True if a row was deleted

        Raises:
            ValidationError: If the deletion was not acknowledged
        """
        if not acknowledge_history_loss:
            raise ValidationError(
                "Deleting a transaction erases history; pass "
                "acknowledge_history_loss=True or reverse it instead"
            )
        return self.transactions.delete_transaction(transaction_id)

    # =========================================================================
    # Derived views
    # =========================================================================

    def get_balance(self, account_id: str) -> int:
        return self.queries.get_balance(account_id)

    def get_entity_balance(self, account_id: str) -> Optional[int]:
        return self.queries.get_entity_balance(account_id)

    def get_net_worth(self) -> int:
        return self.queries.get_net_worth()

    def get_accounts_with_balances(
        self, include_archived: bool = False
    ) -> list[AccountWithBalance]:
        return self.queries.get_accounts_with_balances(include_archived)

    def get_income_and_expenses(
        self, filters: Optional[TransactionFilter] = None
    ) -> dict[str, int]:
        return self.queries.get_income_and_expenses(filters)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_accounts(self, *account_ids: str):
        for account_id in account_ids:
            if self.accounts.get_account(account_id) is None:
                raise ValidationError(f"Account {account_id} does not exist")


@contextmanager
def open_ledger(db_path: Optional[Union[Path, str]] = None) -> Iterator[LedgerRepository]:
    """
    Open a store, yield a LedgerRepository over it, and close it afterwards.

    Args:
        db_path: Database file, ":memory:", or None for the configured default
    """
    store = Store(db_path)
    store.open()
    try:
        yield LedgerRepository(store)
    finally:
        store.close()
