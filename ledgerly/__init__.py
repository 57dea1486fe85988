"""
Ledgerly - Personal Ledger

An append-only record of value transfers between accounts. Balances, net
worth and income/expense totals are always computed from the transaction log.
"""

from .db import LedgerRepository, Store, open_ledger
from .errors import (
    LedgerError,
    MigrationError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .models import (
    Account,
    AccountPatch,
    AccountType,
    Transaction,
    TransactionFilter,
    TransactionPatch,
)

__version__ = "0.1.0"

__all__ = [
    "Account",
    "AccountPatch",
    "AccountType",
    "LedgerError",
    "LedgerRepository",
    "MigrationError",
    "NotFoundError",
    "Store",
    "StoreError",
    "Transaction",
    "TransactionFilter",
    "TransactionPatch",
    "ValidationError",
    "open_ledger",
]
