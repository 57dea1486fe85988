"""
Account models for the personal ledger.

An account is either owned by the ledger's user (internal) or a counterparty
outside the user's control (external). Balances are never stored on an
account; they are derived from the transaction log.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ledgerly.config import DEFAULT_CURRENCY


class AccountType(str, Enum):
    """
    Ownership side of an account.

    - INTERNAL: Held by the ledger owner (bank, cash, savings). Counts toward net worth.
    - EXTERNAL: Counterparty (employer, landlord, shop). Never counts toward net worth.
    """

    INTERNAL = "internal"
    EXTERNAL = "external"


@dataclass
class Account:
    """
    Represents an account in the ledger.

    Attributes:
        id: UUID string, generated once and never reused
        name: Free-text label, not unique
        account_type: Internal or external
        currency: Currency code, defaults to USD
        created_at: Creation time in epoch milliseconds (UTC)
        archived: Hidden from default listings when True
    """

    id: str
    name: str
    account_type: AccountType
    currency: str = DEFAULT_CURRENCY
    created_at: int = 0
    archived: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "account_type": self.account_type.value,
            "currency": self.currency,
            "created_at": self.created_at,
            "archived": self.archived,
        }

    @classmethod
    def from_row(cls, row: tuple) -> "Account":
        """Create an Account from a database row."""
        return cls(
            id=row[0],
            name=row[1],
            account_type=AccountType(row[2]),
            currency=row[3] or DEFAULT_CURRENCY,
            created_at=row[4],
            archived=bool(row[5]),
        )


@dataclass
class AccountWithBalance:
    """An account paired with its balance from the ledger owner's viewpoint."""

    account: Account
    balance: int
    raw_balance: Optional[int] = None

    def to_dict(self) -> dict:
        data = self.account.to_dict()
        data["balance"] = self.balance
        data["raw_balance"] = self.raw_balance
        return data
