"""
Schema migrations for the ledger database.

Each schema version has one migration function. On open, the store reads the
recorded version and applies every later migration in order, then records the
target version. All of it runs in one SQLite transaction, so a failure leaves
the database exactly as it was.
"""

import logging
import sqlite3
from typing import Callable

from ledgerly.errors import MigrationError

from .schema import (
    CREATE_ACCOUNTS_TABLE,
    CREATE_SCHEMA_VERSION_TABLE,
    CREATE_TRANSACTIONS_TABLE,
    SCHEMA_VERSION,
    TRANSACTION_INDEXES,
)

logger = logging.getLogger(__name__)


def _migrate_to_v1(conn: sqlite3.Connection):
    """Create the accounts and transactions tables with their indexes."""
    conn.execute(CREATE_ACCOUNTS_TABLE)
    conn.execute(CREATE_TRANSACTIONS_TABLE)

    for index_name, table, columns in TRANSACTION_INDEXES:
        conn.execute(f"""
            CREATE INDEX IF NOT EXISTS {index_name}
            ON {table}({columns})
        """)


MIGRATIONS: dict[int, Callable[[sqlite3.Connection], None]] = {
    1: _migrate_to_v1,
}


def get_schema_version(conn: sqlite3.Connection) -> int:
    """
    Read the recorded schema version.

    A missing or unreadable marker is treated as version 0 (fresh database).
    """
    try:
        conn.execute(CREATE_SCHEMA_VERSION_TABLE)
        row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
        return row[0] if row and row[0] is not None else 0
    except sqlite3.Error as e:
        logger.warning(f"Could not read schema version, assuming 0: {e}")
        return 0


def set_schema_version(conn: sqlite3.Connection, version: int):
    """Record the schema version, keeping exactly one row in the marker table."""
    conn.execute("DELETE FROM schema_version")
    conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))


def run_migrations(conn: sqlite3.Connection, target: int = SCHEMA_VERSION) -> int:
    """
    Bring the database schema up to ``target``.

    Args:
        conn: An autocommit-mode connection not inside a transaction
        target: The version to migrate to

    Returns:
        The schema version after migrating

    Raises:
        MigrationError: If the database is newer than ``target`` or any
                        migration step fails
    """
    current = get_schema_version(conn)

    if current > target:
        raise MigrationError(
            f"Database schema version {current} is newer than supported version {target}"
        )

    try:
        conn.execute("BEGIN IMMEDIATE")
        for version in range(current + 1, target + 1):
            migration = MIGRATIONS.get(version)
            if migration is None:
                raise MigrationError(f"No migration registered for version {version}")
            logger.info(f"Applying schema migration to version {version}")
            migration(conn)
        set_schema_version(conn, target)
        conn.execute("COMMIT")
    except Exception as e:
        logger.error(f"Schema migration failed: {e}", exc_info=True)
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        if isinstance(e, MigrationError):
            raise
        raise MigrationError(f"Schema migration failed: {e}") from e

    if current != target:
        logger.info(f"Schema migrated from version {current} to {target}")
    else:
        logger.debug(f"Schema already at version {target}")
    return target
