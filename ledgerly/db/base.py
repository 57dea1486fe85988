"""
Store handle and base repository.

Provides the foundation for all database operations in the ledger. A single
``Store`` owns one SQLite connection for the life of the process; repositories
receive the store explicitly rather than reaching for a module-level instance.
"""

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from ledgerly.config import DB_TIMEOUT, DEFAULT_DB_PATH, IN_MEMORY_DB
from ledgerly.errors import MigrationError, StoreError

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Generate a fresh record identifier."""
    return str(uuid.uuid4())


class Store:
    """
    Process-wide handle on the ledger database.

    The connection is opened lazily on first use, migrated once, and reused by
    every repository until ``close()`` is called. Use it as a context manager to
    tie its lifetime to a block:

        with Store(path) as store:
            ledger = LedgerRepository(store)
            ...

    Only one mutation stream may use a store at a time.
    """

    def __init__(
        self,
        db_path: Optional[Union[Path, str]] = None,
        timeout: float = DB_TIMEOUT,
        migrate: bool = True,
    ):
        """
        Initialize the store handle without connecting.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
                     Defaults to data/ledger.db
            timeout: Seconds to wait on a locked database
            migrate: Whether to run schema migrations when the connection opens
        """
        self.db_path = db_path if db_path is not None else DEFAULT_DB_PATH
        self.timeout = timeout
        self.migrate = migrate
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        """The live connection, opened (and migrated) on first access."""
        if self._conn is None:
            self.open()
        assert self._conn is not None
        return self._conn

    def _ensure_db_directory(self):
        """Ensure the database directory exists."""
        if str(self.db_path) == IN_MEMORY_DB:
            return
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {Path(self.db_path).parent}")
        except Exception as e:
            logger.error(f"Failed to create database directory: {e}", exc_info=True)
            raise

    def open(self) -> "Store":
        """
        Connect to the database and bring its schema up to date.

        Calling ``open`` on an already open store does nothing.

        Raises:
            StoreError: If the connection cannot be established
            MigrationError: If the schema cannot be migrated; the store stays closed
        """
        if self._conn is not None:
            return self

        self._ensure_db_directory()
        try:
            # Autocommit mode; transactions are opened explicitly in transaction()
            conn = sqlite3.connect(
                str(self.db_path), timeout=self.timeout, isolation_level=None
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            logger.error(f"Failed to open database {self.db_path}: {e}", exc_info=True)
            raise StoreError(f"Failed to open database {self.db_path}: {e}") from e

        if self.migrate:
            from .migrations import run_migrations

            try:
                run_migrations(conn)
            except MigrationError:
                conn.close()
                raise

        self._conn = conn
        logger.info(f"Opened ledger store at {self.db_path}")
        return self

    def close(self):
        """Release the connection. The store may be reopened later."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info(f"Closed ledger store at {self.db_path}")

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @contextmanager
    def transaction(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """
        Run a block of statements as one SQLite transaction.

        Commits when the block finishes, rolls back if it raises. A block nested
        inside an already open transaction joins the outer one.

        Args:
            immediate: Take the write lock up front (BEGIN IMMEDIATE) so a
                       read-then-write block cannot interleave with another writer

        Raises:
            StoreError: If a statement fails
        """
        conn = self.connection
        if conn.in_transaction:
            yield conn
        else:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield conn
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                logger.error(f"Database error: {e}", exc_info=True)
                self._rollback(conn)
                raise StoreError(str(e)) from e
            except Exception:
                self._rollback(conn)
                raise

    @staticmethod
    def _rollback(conn: sqlite3.Connection):
        if conn.in_transaction:
            conn.execute("ROLLBACK")


class BaseRepository:
    """
    Base repository class sharing a Store.

    Subclasses run their statements through ``_get_connection`` so every
    operation is one transaction against the shared handle.
    """

    def __init__(self, store: Store):
        """
        Initialize the base repository.

        Args:
            store: The shared store handle
        """
        self.store = store

    def _get_connection(self, immediate: bool = False):
        """Context manager yielding the connection inside a transaction."""
        return self.store.transaction(immediate=immediate)
