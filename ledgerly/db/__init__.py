"""
Database module for the Ledgerly ledger.

This module provides the storage and query engine: an append-only log of
transfers between accounts, from which every balance is derived.

Structure:
- base.py: Store handle (connection lifecycle) and BaseRepository
- schema.py: Table and index definitions
- migrations.py: Versioned schema migrations, applied when the store opens
- accounts.py: Account CRUD and archival
- transactions.py: Transaction append, listing, update, reversal, delete
- queries.py: Balances, net worth and income/expense totals
- repository.py: Main facade that validates input and composes the repositories
"""

from .accounts import AccountRepository
from .base import BaseRepository, Store
from .migrations import get_schema_version, run_migrations
from .queries import QueryRepository
from .repository import LedgerRepository, open_ledger
from .schema import SCHEMA_VERSION
from .transactions import TransactionRepository

__all__ = [
    # Base
    "BaseRepository",
    "SCHEMA_VERSION",
    "Store",
    # Migrations
    "get_schema_version",
    "run_migrations",
    # Repositories
    "AccountRepository",
    "LedgerRepository",
    "QueryRepository",
    "TransactionRepository",
    # Utilities
    "open_ledger",
]
