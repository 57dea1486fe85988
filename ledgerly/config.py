"""
Configuration module for Ledgerly.

Contains constants, settings, and configuration values used throughout the application.
"""

import os
from pathlib import Path

# Version
VERSION = "0.1.0"

# Application paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOG_DIR = PROJECT_ROOT / "logs"

# Database configuration
DEFAULT_DB_PATH = Path(os.getenv("LEDGERLY_DB_PATH", str(DATA_DIR / "ledger.db")))
DB_TIMEOUT = 10.0  # seconds
IN_MEMORY_DB = ":memory:"

# Accounts
DEFAULT_CURRENCY = "USD"
MAX_ACCOUNT_NAME_LENGTH = 100
MAX_CURRENCY_LENGTH = 8

# Transactions
MAX_NOTE_LENGTH = 500
MAX_TAG_LENGTH = 50
REVERSAL_NOTE_TEMPLATE = "Reversal of transaction {transaction_id}"

# Money (minor units per major unit)
MINOR_UNIT_EXPONENT = 2

# Database query limits
DEFAULT_RECENT_LIMIT = 10

# Export configuration
EXPORT_PAGE_SIZE = 5000  # rows fetched per query while exporting
EXPORT_FORMATS = ["xlsx", "csv"]

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "ledgerly.log"
DEFAULT_LOG_LEVEL = "INFO"

# Error messages
ERROR_MESSAGES = {
    "store_error": "Could not read or write the ledger. Please try again.",
    "validation_error": "Invalid input. Please check your values and try again.",
    "not_found": "That record no longer exists.",
    "migration_error": "The ledger database could not be upgraded.",
}


def ensure_directories():
    """Ensure required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def get_log_level():
    """Get the log level named by the LOG_LEVEL environment variable."""
    import logging

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
    return level_map.get(level.upper(), logging.INFO)
