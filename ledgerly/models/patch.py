"""
Partial-update structures for accounts and transactions.

Each patch field defaults to ``UNSET``, meaning "leave this column alone".
Any other value, including ``None`` or an empty string, is written. This keeps
"clear the note" (``note=None``) distinct from "don't touch the note".
"""

from dataclasses import dataclass, fields
from typing import Any, Optional, Union

from .account import Account, AccountType


class _Unset:
    """Marker type for a patch field that was not supplied."""

    _instance: Optional["_Unset"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    """True when a patch field carries a value to write."""
    return value is not UNSET


class _Patch:
    def supplied(self) -> dict[str, Any]:
        """Fields that were supplied, keyed by attribute name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
            if is_set(getattr(self, f.name))
        }

    def is_empty(self) -> bool:
        return not self.supplied()


@dataclass
class AccountPatch(_Patch):
    """Changes to apply to an account. Archival has its own operations."""

    name: Union[str, _Unset] = UNSET
    account_type: Union[AccountType, _Unset] = UNSET
    currency: Union[str, _Unset] = UNSET

    def changes_history_locked_fields(self, account: Account) -> bool:
        """True if applying this patch would alter the account's type or currency."""
        return (
            is_set(self.account_type) and self.account_type != account.account_type
        ) or (is_set(self.currency) and self.currency != account.currency)


@dataclass
class TransactionPatch(_Patch):
    """Changes to apply to an existing transaction in place."""

    date: Union[int, _Unset] = UNSET
    from_account_id: Union[str, _Unset] = UNSET
    to_account_id: Union[str, _Unset] = UNSET
    amount: Union[int, _Unset] = UNSET
    tags: Union[list[str], _Unset] = UNSET
    note: Union[Optional[str], _Unset] = UNSET
