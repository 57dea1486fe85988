"""
Classification of transactions from the ledger owner's point of view.

These functions are pure: they take account types (and ids) and say whether a
transfer is income, expense or an internal move, and which side of it a
given account should display.
"""

from typing import Iterable, Mapping

from ledgerly.models import (
    Account,
    AccountType,
    Transaction,
    TransactionCategory,
    TransactionPerspective,
)


def categorize(
    from_type: AccountType, to_type: AccountType
) -> TransactionCategory:
    """
    Categorize a transfer by the account types on each side.

    - external -> internal: income (value enters the owner's books)
    - internal -> external: expense (value leaves the owner's books)
    - anything else: transfer (no effect on income or expense totals)
    """
    if from_type == AccountType.EXTERNAL and to_type == AccountType.INTERNAL:
        return TransactionCategory.INCOME
    if from_type == AccountType.INTERNAL and to_type == AccountType.EXTERNAL:
        return TransactionCategory.EXPENSE
    return TransactionCategory.TRANSFER


def perspective(
    viewer_account_id: str,
    viewer_type: AccountType,
    from_account_id: str,
    from_type: AccountType,
    to_type: AccountType,
) -> TransactionPerspective:
    """
    Decide which side of a transaction a viewing account should display.

    For an internal viewer this follows the money: ``FROM`` when it left the
    viewer, ``TO`` otherwise. For an external viewer it follows the owner's
    books instead: income shows as ``TO``, expense as ``FROM``, anything else
    as ``NEUTRAL``.
    """
    if viewer_type == AccountType.INTERNAL:
        if to_type == AccountType.INTERNAL and from_account_id != viewer_account_id:
            return TransactionPerspective.TO
        if from_account_id == viewer_account_id:
            return TransactionPerspective.FROM
        return TransactionPerspective.TO

    category = categorize(from_type, to_type)
    if category == TransactionCategory.INCOME:
        return TransactionPerspective.TO
    if category == TransactionCategory.EXPENSE:
        return TransactionPerspective.FROM
    return TransactionPerspective.NEUTRAL


def to_entity_balance(raw_balance: int, account_type: AccountType) -> int:
    """
    Express a raw balance from the ledger owner's point of view.

    An external account's raw balance is the net flow into that counterparty,
    so it is negated: positive then means the owner received money from it.
    """
    return -raw_balance if account_type == AccountType.EXTERNAL else raw_balance


def calculate_income_and_expenses(
    transactions: Iterable[Transaction],
    accounts: Mapping[str, Account],
) -> dict[str, int]:
    """
    Total income and expenses over a set of transactions.

    Transfers count toward neither total. Transactions whose accounts can't be
    resolved in ``accounts`` are skipped.

    Returns:
        Dictionary with ``income``, ``expenses`` and ``net`` in minor units
    """
    income = 0
    expenses = 0

    for txn in transactions:
        from_account = accounts.get(txn.from_account_id)
        to_account = accounts.get(txn.to_account_id)
        if from_account is None or to_account is None:
            continue

        category = categorize(from_account.account_type, to_account.account_type)
        if category == TransactionCategory.INCOME:
            income += txn.amount
        elif category == TransactionCategory.EXPENSE:
            expenses += txn.amount

    return {"income": income, "expenses": expenses, "net": income - expenses}
