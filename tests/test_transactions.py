"""Tests for the transaction repository."""

import sqlite3

import pytest

from ledgerly.db import TransactionRepository
from ledgerly.errors import NotFoundError, StoreError
from ledgerly.models import TransactionFilter, TransactionPatch
from ledgerly.timeutil import now_ms

from .conftest import DAY, T0


@pytest.fixture
def transactions(store):
    return TransactionRepository(store)


class TestCreateTransaction:
    """Tests for appending transactions."""

    def test_defaults(self, transactions, employer, checking):
        txn = transactions.create_transaction(T0, employer.id, checking.id, 500000)
        assert txn.date == T0
        assert txn.from_account_id == employer.id
        assert txn.to_account_id == checking.id
        assert txn.amount == 500000
        assert txn.tags == []
        assert txn.note is None
        assert txn.created_at > 0

    def test_round_trip_with_tags_and_note(self, transactions, checking, landlord):
        txn = transactions.create_transaction(
            T0, checking.id, landlord.id, 150000, tags=["rent", "home"], note="March"
        )
        assert transactions.get_transaction(txn.id) == txn

    def test_tags_stored_as_json(self, store, transactions, checking, landlord):
        txn = transactions.create_transaction(T0, checking.id, landlord.id, 1)
        raw = store.connection.execute(
            "SELECT tags FROM transactions WHERE id = ?", (txn.id,)
        ).fetchone()[0]
        assert raw == "[]"

    def test_get_missing_returns_none(self, transactions):
        assert transactions.get_transaction("missing") is None


class TestListTransactions:
    """Tests for filtered, ordered listings."""

    @pytest.fixture
    def history(self, transactions, employer, checking, savings, landlord):
        return {
            "salary": transactions.create_transaction(
                T0, employer.id, checking.id, 500000, tags=["salary"]
            ),
            "rent": transactions.create_transaction(
                T0 + DAY, checking.id, landlord.id, 150000, tags=["rent", "home"]
            ),
            "save": transactions.create_transaction(
                T0 + 2 * DAY, checking.id, savings.id, 100000, tags=["home"]
            ),
        }

    def test_no_filter_lists_all_newest_first(self, transactions, history):
        result = transactions.list_transactions()
        assert [t.id for t in result] == [
            history["save"].id,
            history["rent"].id,
            history["salary"].id,
        ]

    def test_same_date_newest_created_first(self, transactions, checking, landlord):
        first = transactions.create_transaction(T0, checking.id, landlord.id, 1)
        second = transactions.create_transaction(T0, checking.id, landlord.id, 2)
        result = transactions.list_transactions()
        assert [t.id for t in result] == [second.id, first.id]

    def test_account_matches_either_side(self, transactions, history, savings, landlord):
        assert [
            t.id for t in transactions.list_transactions(TransactionFilter(account_id=savings.id))
        ] == [history["save"].id]
        assert [
            t.id for t in transactions.list_transactions(TransactionFilter(account_id=landlord.id))
        ] == [history["rent"].id]

    def test_date_bounds_inclusive(self, transactions, history):
        result = transactions.list_transactions(
            TransactionFilter(start_date=T0 + DAY, end_date=T0 + 2 * DAY)
        )
        assert [t.id for t in result] == [history["save"].id, history["rent"].id]

    def test_filters_combine_with_and(self, transactions, history, checking):
        result = transactions.list_transactions(
            TransactionFilter(account_id=checking.id, start_date=T0, end_date=T0 + DAY)
        )
        assert [t.id for t in result] == [history["rent"].id, history["salary"].id]

    def test_tag_filter_requires_every_tag(self, transactions, history):
        home = transactions.list_transactions(TransactionFilter(tags=["home"]))
        assert {t.id for t in home} == {history["rent"].id, history["save"].id}

        both = transactions.list_transactions(TransactionFilter(tags=["home", "rent"]))
        assert [t.id for t in both] == [history["rent"].id]

    def test_limit_and_offset(self, transactions, history):
        result = transactions.list_transactions(TransactionFilter(limit=1, offset=1))
        assert [t.id for t in result] == [history["rent"].id]

    def test_offset_without_limit(self, transactions, history):
        result = transactions.list_transactions(TransactionFilter(offset=2))
        assert [t.id for t in result] == [history["salary"].id]

    def test_empty_range(self, transactions, history):
        assert transactions.list_transactions(TransactionFilter(start_date=T0 + 10 * DAY)) == []

    def test_recent(self, transactions, history):
        assert [t.id for t in transactions.recent_transactions(2)] == [
            history["save"].id,
            history["rent"].id,
        ]


class TestUpdateTransaction:
    """Tests for in-place corrections."""

    def test_update_single_field(self, transactions, checking, landlord):
        txn = transactions.create_transaction(T0, checking.id, landlord.id, 100, tags=["a"])
        updated = transactions.update_transaction(txn.id, TransactionPatch(amount=250))
        assert updated.amount == 250
        assert updated.tags == ["a"]
        assert updated.date == T0
        assert updated.created_at == txn.created_at

    def test_update_tags_and_accounts(self, transactions, checking, savings, landlord):
        txn = transactions.create_transaction(T0, checking.id, landlord.id, 100)
        updated = transactions.update_transaction(
            txn.id,
            TransactionPatch(from_account_id=savings.id, tags=["fixed", "typo"]),
        )
        assert updated.from_account_id == savings.id
        assert updated.to_account_id == landlord.id
        assert updated.tags == ["fixed", "typo"]

    def test_clear_note_with_none(self, transactions, checking, landlord):
        txn = transactions.create_transaction(T0, checking.id, landlord.id, 100, note="x")
        assert transactions.update_transaction(txn.id, TransactionPatch(note=None)).note is None

    def test_empty_string_note_is_kept(self, transactions, checking, landlord):
        txn = transactions.create_transaction(T0, checking.id, landlord.id, 100, note="x")
        assert transactions.update_transaction(txn.id, TransactionPatch(note="")).note == ""

    def test_empty_patch_reads_back(self, transactions, checking, landlord):
        txn = transactions.create_transaction(T0, checking.id, landlord.id, 100)
        assert transactions.update_transaction(txn.id, TransactionPatch()) == txn

    def test_missing_returns_none(self, transactions):
        assert transactions.update_transaction("missing", TransactionPatch(amount=5)) is None


class TestReverseTransaction:
    """Tests for reversal, the append-only correction."""

    def test_reversal_swaps_sides(self, transactions, checking, landlord):
        original = transactions.create_transaction(
            T0, checking.id, landlord.id, 150000, tags=["rent"]
        )
        before = now_ms()
        reversal = transactions.reverse_transaction(original.id)

        assert reversal.id != original.id
        assert reversal.from_account_id == landlord.id
        assert reversal.to_account_id == checking.id
        assert reversal.amount == 150000
        assert reversal.tags == ["rent"]
        assert reversal.date >= before
        assert original.id in reversal.note

    def test_original_untouched(self, transactions, checking, landlord):
        original = transactions.create_transaction(T0, checking.id, landlord.id, 100)
        snapshot = transactions.get_transaction(original.id)
        transactions.reverse_transaction(original.id)
        assert transactions.get_transaction(original.id) == snapshot
        assert len(transactions.list_transactions()) == 2

    def test_custom_note(self, transactions, checking, landlord):
        original = transactions.create_transaction(T0, checking.id, landlord.id, 100)
        assert transactions.reverse_transaction(original.id, note="refund").note == "refund"

    def test_missing_raises(self, transactions):
        with pytest.raises(NotFoundError):
            transactions.reverse_transaction("missing")
        assert transactions.list_transactions() == []


class TestDeleteTransaction:
    """Tests for hard delete."""

    def test_delete_existing(self, transactions, checking, landlord):
        txn = transactions.create_transaction(T0, checking.id, landlord.id, 100)
        assert transactions.delete_transaction(txn.id) is True
        assert transactions.get_transaction(txn.id) is None

    def test_delete_missing(self, transactions):
        assert transactions.delete_transaction("missing") is False


class TestStoreFailures:
    """Statements rejected by SQLite surface as StoreError."""

    def test_unknown_account_violates_foreign_key(self, transactions, checking):
        with pytest.raises(StoreError) as exc:
            transactions.create_transaction(T0, "ghost", checking.id, 5)
        assert isinstance(exc.value.__cause__, sqlite3.IntegrityError)
        assert transactions.list_transactions() == []
