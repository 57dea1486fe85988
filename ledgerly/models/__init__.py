from .account import Account, AccountType, AccountWithBalance
from .patch import UNSET, AccountPatch, TransactionPatch, is_set
from .transaction import (
    Transaction,
    TransactionCategory,
    TransactionFilter,
    TransactionPerspective,
    decode_tags,
    encode_tags,
)

__all__ = [
    "AccountType",
    "Account",
    "AccountWithBalance",
    "AccountPatch",
    "Transaction",
    "TransactionCategory",
    "TransactionFilter",
    "TransactionPatch",
    "TransactionPerspective",
    "UNSET",
    "decode_tags",
    "encode_tags",
    "is_set",
]
