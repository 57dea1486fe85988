"""
SQL definitions for the ledger schema.

The column layout here is the on-disk contract other tools read and write:
ids are TEXT, timestamps are INTEGER epoch milliseconds, amounts are INTEGER
minor units and ``tags`` is a JSON array of strings.
"""

SCHEMA_VERSION = 1

CREATE_SCHEMA_VERSION_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY
    )
"""

CREATE_ACCOUNTS_TABLE = """
    CREATE TABLE IF NOT EXISTS accounts (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('internal', 'external')),
        currency TEXT DEFAULT 'USD',
        created_at INTEGER NOT NULL,
        archived INTEGER DEFAULT 0
    )
"""

CREATE_TRANSACTIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS transactions (
        id TEXT PRIMARY KEY,
        date INTEGER NOT NULL,
        from_account_id TEXT NOT NULL REFERENCES accounts(id),
        to_account_id TEXT NOT NULL REFERENCES accounts(id),
        amount INTEGER NOT NULL CHECK(amount > 0),
        tags TEXT DEFAULT '[]',
        note TEXT,
        created_at INTEGER NOT NULL
    )
"""

# (index name, table, columns)
TRANSACTION_INDEXES = [
    ("idx_transactions_date", "transactions", "date"),
    ("idx_transactions_from", "transactions", "from_account_id"),
    ("idx_transactions_to", "transactions", "to_account_id"),
]

ACCOUNT_COLUMNS = "id, name, type, currency, created_at, archived"

TRANSACTION_COLUMNS = (
    "id, date, from_account_id, to_account_id, amount, tags, note, created_at"
)
