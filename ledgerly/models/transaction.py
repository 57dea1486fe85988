import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ledgerly.errors import ValidationError


class TransactionCategory(str, Enum):
    """How a transfer looks from the ledger owner's books."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class TransactionPerspective(str, Enum):
    """Display side of a transaction for a given viewing account."""

    FROM = "from"
    TO = "to"
    NEUTRAL = "neutral"


def encode_tags(tags: list[str]) -> str:
    """Serialize tags to the JSON array stored in the ``tags`` column."""
    return json.dumps(list(tags))


def decode_tags(raw: Optional[str]) -> list[str]:
    """Parse the ``tags`` column, treating NULL as no tags."""
    if not raw:
        return []
    return list(json.loads(raw))


@dataclass
class Transaction:
    """
    A single transfer of value between two accounts.

    The amount is always positive and in minor currency units (cents).
    Direction is carried only by which account is ``from`` and which is ``to``.
    """

    id: str
    date: int  # economic date, epoch ms
    from_account_id: str
    to_account_id: str
    amount: int
    tags: list[str] = field(default_factory=list)
    note: Optional[str] = None
    created_at: int = 0  # insertion time, epoch ms

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "date": self.date,
            "from_account_id": self.from_account_id,
            "to_account_id": self.to_account_id,
            "amount": self.amount,
            "tags": list(self.tags),
            "note": self.note,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: tuple) -> "Transaction":
        """Create a Transaction from a database row."""
        return cls(
            id=row[0],
            date=row[1],
            from_account_id=row[2],
            to_account_id=row[3],
            amount=row[4],
            tags=decode_tags(row[5]),
            note=row[6],
            created_at=row[7],
        )


@dataclass
class TransactionFilter:
    """
    Optional constraints for listing transactions.

    Every field left as None means "no constraint on that dimension".
    Supplied fields combine with AND semantics.

    Attributes:
        account_id: Match when the account is either the from or to side
        start_date: Inclusive lower bound on ``date`` (epoch ms)
        end_date: Inclusive upper bound on ``date`` (epoch ms)
        tags: Match only transactions carrying every listed tag
        limit: Maximum number of rows to return
        offset: Number of rows to skip
    """

    account_id: Optional[str] = None
    start_date: Optional[int] = None
    end_date: Optional[int] = None
    tags: Optional[list[str]] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def __post_init__(self):
        if self.limit is not None and self.limit < 0:
            raise ValidationError(f"limit must not be negative, got {self.limit}")
        if self.offset is not None and self.offset < 0:
            raise ValidationError(f"offset must not be negative, got {self.offset}")
