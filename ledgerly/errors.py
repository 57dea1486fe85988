"""
Exception types raised by the ledger core.

Reads return ``None`` for missing records; these exceptions cover operations
that need a target to exist, caller precondition failures, and failures of the
underlying SQLite store.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""


class NotFoundError(LedgerError, LookupError):
    """A record required by the operation does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class ValidationError(LedgerError, ValueError):
    """A caller-side precondition was violated before reaching storage."""


class StoreError(LedgerError):
    """A statement failed inside the SQLite store."""


class MigrationError(StoreError):
    """The schema could not be brought to the current version."""
