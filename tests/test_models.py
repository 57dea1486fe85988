"""Tests for models, patches and timestamp helpers."""

from datetime import datetime, timezone

import pytest

from ledgerly.errors import NotFoundError, ValidationError
from ledgerly.models import (
    UNSET,
    Account,
    AccountPatch,
    AccountType,
    AccountWithBalance,
    TransactionFilter,
    TransactionPatch,
    decode_tags,
    encode_tags,
    is_set,
)
from ledgerly.timeutil import end_of_day, from_datetime, start_of_day, to_datetime

from .conftest import DAY, T0


class TestPatches:
    """Tests for UNSET-aware partial updates."""

    def test_unset_is_falsy_singleton(self):
        assert not UNSET
        assert repr(UNSET) == "UNSET"
        assert is_set(UNSET) is False
        assert is_set(None) is True

    def test_supplied_only_includes_set_fields(self):
        patch = TransactionPatch(amount=10, note=None)
        assert patch.supplied() == {"amount": 10, "note": None}
        assert TransactionPatch().is_empty()

    def test_history_locked_fields_compare_values(self):
        bank = Account(id="b", name="Bank", account_type=AccountType.INTERNAL, currency="USD")
        assert AccountPatch(name="x").changes_history_locked_fields(bank) is False
        assert AccountPatch(currency="USD").changes_history_locked_fields(bank) is False
        assert (
            AccountPatch(account_type=AccountType.INTERNAL).changes_history_locked_fields(bank)
            is False
        )
        assert AccountPatch(currency="EUR").changes_history_locked_fields(bank) is True
        assert (
            AccountPatch(account_type=AccountType.EXTERNAL).changes_history_locked_fields(bank)
            is True
        )


class TestModels:
    def test_account_from_row(self):
        account = Account.from_row(("a1", "Cash", "internal", None, 5, 1))
        assert account.account_type == AccountType.INTERNAL
        assert account.currency == "USD"
        assert account.archived is True

    def test_account_with_balance_dict(self):
        account = Account(id="e", name="Employer", account_type=AccountType.EXTERNAL)
        data = AccountWithBalance(account, balance=500, raw_balance=-500).to_dict()
        assert data["account_type"] == "external"
        assert data["balance"] == 500
        assert data["raw_balance"] == -500

    def test_tags_codec(self):
        assert decode_tags(encode_tags(["rent", "home"])) == ["rent", "home"]
        assert decode_tags(None) == []

    @pytest.mark.parametrize("kwargs", [{"limit": -1}, {"offset": -3}])
    def test_filter_rejects_negative_paging(self, kwargs):
        with pytest.raises(ValidationError):
            TransactionFilter(**kwargs)


class TestErrors:
    def test_not_found_message(self):
        error = NotFoundError("Transaction", "abc")
        assert str(error) == "Transaction abc not found"
        assert isinstance(error, LookupError)

    def test_validation_is_value_error(self):
        assert issubclass(ValidationError, ValueError)


class TestTimeutil:
    """Tests for epoch-millisecond helpers."""

    def test_round_trip(self):
        assert from_datetime(to_datetime(T0)) == T0

    def test_naive_is_utc(self):
        naive = datetime(2023, 11, 14, 22, 13, 20)
        aware = naive.replace(tzinfo=timezone.utc)
        assert from_datetime(naive) == from_datetime(aware) == T0

    def test_day_bounds(self):
        start = start_of_day(T0)
        end = end_of_day(T0)
        assert to_datetime(start) == datetime(2023, 11, 14, tzinfo=timezone.utc)
        assert end - start == DAY - 1
        assert start <= T0 <= end
