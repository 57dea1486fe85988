"""
Command-line runner for Ledgerly.

This module handles configuration loading, logging setup and the store
lifecycle for one invocation:

    python -m ledgerly.runner                 # net worth and balances
    python -m ledgerly.runner export out.xlsx # transaction history export
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ledgerly import config
from ledgerly.db import LedgerRepository, open_ledger
from ledgerly.errors import LedgerError, MigrationError, NotFoundError, StoreError
from ledgerly.services import ExportFormat, ExportService, from_minor_units

logger = logging.getLogger(__name__)


def configure_logging():
    """Log to the configured file and to stdout."""
    config.ensure_directories()
    logging.basicConfig(
        level=config.get_log_level(),
        format=config.LOG_FORMAT,
        handlers=[
            logging.FileHandler(config.LOG_DIR / config.LOG_FILE),
            logging.StreamHandler(sys.stdout),
        ],
    )


def load_environment() -> Optional[Path]:
    """Load a .env file from the project root if there is one, returning its path."""
    env_path = config.PROJECT_ROOT / ".env"
    if not env_path.exists():
        return None
    load_dotenv(env_path)
    return env_path


def _user_message(error: LedgerError) -> str:
    if isinstance(error, MigrationError):
        return config.ERROR_MESSAGES["migration_error"]
    if isinstance(error, StoreError):
        return config.ERROR_MESSAGES["store_error"]
    if isinstance(error, NotFoundError):
        return config.ERROR_MESSAGES["not_found"]
    return f"{config.ERROR_MESSAGES['validation_error']} ({error})"


def print_summary(ledger: LedgerRepository):
    """Print net worth and each account's balance."""
    print(f"Net worth: {from_minor_units(ledger.get_net_worth()):,.2f}")
    print("")
    for item in ledger.get_accounts_with_balances():
        account = item.account
        print(
            f"  {account.name:<30} {account.account_type.value:<9} "
            f"{from_minor_units(item.balance):>14,.2f} {account.currency}"
        )


def export_history(ledger: LedgerRepository, output: Path):
    """Write the full transaction history to ``output`` (format from its suffix)."""
    suffix = output.suffix.lstrip(".").lower()
    if suffix not in config.EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format '{suffix}', expected one of "
            f"{', '.join(config.EXPORT_FORMATS)}"
        )

    buffer = ExportService(ledger).export(ExportFormat(suffix))
    output.write_bytes(buffer.getvalue())
    logger.info(f"Exported transaction history to {output}")
    print(f"Exported transaction history to {output}")


def run(argv: Optional[list[str]] = None):
    """Run the command-line entry point with error handling."""
    argv = sys.argv[1:] if argv is None else argv

    env_path = load_environment()
    configure_logging()
    if env_path is not None:
        logger.info(f"Loaded environment from {env_path}")
    else:
        logger.debug(".env file not found, using process environment")

    db_path = Path(os.getenv("LEDGERLY_DB_PATH", str(config.DEFAULT_DB_PATH)))

    try:
        with open_ledger(db_path) as ledger:
            if not argv:
                print_summary(ledger)
            elif argv[0] == "export" and len(argv) == 2:
                export_history(ledger, Path(argv[1]))
            else:
                print("Usage: python -m ledgerly.runner [export <file.csv|file.xlsx>]")
                sys.exit(2)
    except LedgerError as e:
        logger.error(f"Ledger error: {e}", exc_info=True)
        print(f"\nError: {_user_message(e)}")
        print(f"Check {config.LOG_FILE} for more details.")
        sys.exit(1)
    except ValueError as e:
        print(f"\nError: {e}")
        sys.exit(2)


if __name__ == "__main__":
    run()
