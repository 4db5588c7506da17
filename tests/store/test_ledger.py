"""Tests for pocketbook.store.ledger.LedgerStore."""

import itertools
from datetime import datetime
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from pocketbook.domain.models import BudgetPeriod, EntryType, default_categories
from pocketbook.domain.stats import monthly_expenses_by_category, total_expense, total_income
from pocketbook.errors import CategoryInUseError, ProtectedCategoryError, ValidationError
from pocketbook.store.ledger import (
    BUDGETS_KEY,
    CATEGORIES_KEY,
    TRANSACTIONS_KEY,
    LedgerStore,
    new_id,
)
from pocketbook.store.storage import JsonStorage

NOW = datetime(2025, 3, 15, 12, 0)


def reopen(storage: JsonStorage) -> LedgerStore:
    return LedgerStore(storage).init()


class TestInit:
    """Tests for loading state."""

    def test_first_run_defaults(self, store: LedgerStore) -> None:
        """Should seed default categories and empty collections."""
        assert list(store.categories) == default_categories()
        assert store.transactions == ()
        assert store.budgets == ()
        assert store.dirty == frozenset()

    def test_malformed_records_fall_back_to_default(self, storage: JsonStorage) -> None:
        """Should use defaults when no stored record is usable."""
        storage.save(CATEGORIES_KEY, [{"id": "x"}])
        storage.save(BUDGETS_KEY, {"not": "a list"})

        with capture_logs() as logs:
            store = reopen(storage)

        assert list(store.categories) == default_categories()
        assert store.budgets == ()
        assert [log["key"] for log in logs if log["event"] == "record_skipped"] == [CATEGORIES_KEY]
        assert [log["key"] for log in logs if log["event"] == "collection_malformed"] == [BUDGETS_KEY]

    def test_bad_records_are_skipped(self, store: LedgerStore) -> None:
        """Should keep the valid records when some cannot be converted."""
        kept = store.add_transaction("expense", "10", "餐饮")
        records = store.storage.load(TRANSACTIONS_KEY, None)
        records.append({"id": "broken", "type": "expense"})
        records.append({**records[0], "id": "bad-date", "date": "yesterday"})
        store.storage.save(TRANSACTIONS_KEY, records)

        with capture_logs() as logs:
            reloaded = reopen(store.storage)

        assert reloaded.transactions == (kept,)
        assert [log["index"] for log in logs if log["event"] == "record_skipped"] == [1, 2]

    def test_skipped_records_survive_next_write(self, store: LedgerStore) -> None:
        """Should back up a damaged document before the next autosave replaces it."""
        kept = store.add_transaction("expense", "10", "餐饮")
        records = store.storage.load(TRANSACTIONS_KEY, None)
        records.append({"id": "broken"})
        store.storage.save(TRANSACTIONS_KEY, records)
        damaged = store.storage.path_for(TRANSACTIONS_KEY).read_text(encoding="utf-8")

        reloaded = reopen(store.storage)
        added = reloaded.add_transaction("income", "5", "工资")

        assert reopen(store.storage).transactions == (added, kept)
        (backup,) = store.storage.directory.glob(f"{TRANSACTIONS_KEY}.*.bak")
        assert backup.read_text(encoding="utf-8") == damaged

    def test_corrupt_transactions_document(self, storage: JsonStorage) -> None:
        """Should start empty when the transactions document is unreadable, keeping a copy."""
        storage.directory.mkdir(parents=True)
        storage.path_for(TRANSACTIONS_KEY).write_text("[{", encoding="utf-8")

        assert reopen(storage).transactions == ()
        (backup,) = storage.directory.glob(f"{TRANSACTIONS_KEY}.*.bak")
        assert backup.read_text(encoding="utf-8") == "[{"

    def test_backup_not_repeated(self, storage: JsonStorage) -> None:
        """Should back up the same damaged document only once."""
        storage.save(BUDGETS_KEY, {"not": "a list"})
        reopen(storage)
        reopen(storage)
        assert len(list(storage.directory.glob(f"{BUDGETS_KEY}.*.bak"))) == 1


class TestTransactions:
    """Tests for add_transaction and delete_transaction."""

    def test_add_prepends_and_grows_by_one(self, store: LedgerStore) -> None:
        """Should put each new transaction first."""
        first = store.add_transaction("expense", "10", "餐饮")
        second = store.add_transaction("income", "20", "工资")

        assert len(store.transactions) == 2
        assert store.transactions[0] == second
        assert store.transactions[1] == first

    def test_defaults(self, store: LedgerStore) -> None:
        """Should default the note to the category and the date to now."""
        txn = store.add_transaction(EntryType.EXPENSE, 12.5, " 餐饮 ", note="   ")
        assert txn.category == "餐饮"
        assert txn.note == "餐饮"
        assert txn.date == NOW
        assert txn.amount == Decimal("12.5")

    def test_missing_note_falls_back_to_category(self, store: LedgerStore) -> None:
        """Should treat a None note like a blank one."""
        txn = store.add_transaction("expense", "3", "购物", note=None)
        assert txn.note == "购物"

    @pytest.mark.parametrize("amount", ["0.10000000000000000001", "1e-400", "1e5000"])
    def test_rejects_amounts_storage_cannot_keep(self, store: LedgerStore, amount: str) -> None:
        """Should refuse amounts that would not reload unchanged."""
        with pytest.raises(ValidationError):
            store.add_transaction("expense", amount, "餐饮")
        assert store.transactions == ()
        assert not store.storage.exists(TRANSACTIONS_KEY)

    def test_explicit_note_and_date(self, store: LedgerStore) -> None:
        """Should keep a given note and date."""
        when = datetime(2024, 12, 31, 23, 0)
        txn = store.add_transaction("expense", "3", "购物", note="纸巾", date=when)
        assert txn.note == "纸巾"
        assert txn.date == when

    @pytest.mark.parametrize(
        "type_, amount, category",
        [
            ("expense", "0", "餐饮"),
            ("expense", "-5", "餐饮"),
            ("expense", "abc", "餐饮"),
            ("expense", "5", "  "),
            ("gift", "5", "餐饮"),
        ],
    )
    def test_invalid_input_rejected(self, store: LedgerStore, type_, amount, category) -> None:
        """Should validate inside the store and leave state untouched."""
        with pytest.raises(ValidationError):
            store.add_transaction(type_, amount, category)
        assert store.transactions == ()
        assert not store.storage.exists(TRANSACTIONS_KEY)

    def test_unique_ids_under_rapid_calls(self, store: LedgerStore) -> None:
        """Should never reuse an identifier."""
        for _ in range(200):
            store.add_transaction("expense", "1", "餐饮")
        assert len({t.id for t in store.transactions}) == 200

    def test_delete(self, store: LedgerStore) -> None:
        """Should remove the matching transaction."""
        keep = store.add_transaction("expense", "1", "餐饮")
        gone = store.add_transaction("expense", "2", "餐饮")

        assert store.delete_transaction(gone.id) is True
        assert store.transactions == (keep,)

    def test_delete_unknown_is_noop(self, store: LedgerStore) -> None:
        """Should leave the collection unchanged for an unknown id."""
        store.add_transaction("expense", "1", "餐饮")
        assert store.delete_transaction("missing") is False
        assert len(store.transactions) == 1

    def test_signed_sum(self, store: LedgerStore) -> None:
        """Should keep income minus expense equal to the signed sum of additions."""
        store.add_transaction("income", "1000", "工资")
        store.add_transaction("expense", "250.40", "居住")
        store.add_transaction("expense", "49.60", "餐饮")
        store.add_transaction("income", "0.01", "其他")

        assert total_income(store.transactions) - total_expense(store.transactions) == Decimal("700.01")

    def test_scenario_single_expense(self, store: LedgerStore) -> None:
        """Should report one expense across every aggregate."""
        store.add_transaction("expense", 50, "餐饮")

        assert monthly_expenses_by_category(store.transactions, "2025-03") == {"餐饮": Decimal("50")}
        assert total_expense(store.transactions) == 50
        assert total_income(store.transactions) == 0


class TestCategories:
    """Tests for add_category and delete_category."""

    def test_add_appends_user_category(self, store: LedgerStore) -> None:
        """Should append a non-default category."""
        category = store.add_category(" 交通 ", "expense", icon="bus")

        assert store.categories[-1] == category
        assert category.name == "交通"
        assert category.icon == "bus"
        assert category.is_default is False

    def test_duplicate_names_allowed(self, store: LedgerStore) -> None:
        """Should not enforce unique names."""
        store.add_category("餐饮", "expense")
        assert [c.name for c in store.categories].count("餐饮") == 2

    def test_empty_name_rejected(self, store: LedgerStore) -> None:
        """Should reject blank names."""
        with pytest.raises(ValidationError):
            store.add_category(" ", "income")

    def test_delete_unused(self, store: LedgerStore) -> None:
        """Should remove an unreferenced user category."""
        category = store.add_category("交通", "expense")
        assert store.delete_category(category.id) is True
        assert store.get_category(category.id) is None

    def test_delete_unknown_is_noop(self, store: LedgerStore) -> None:
        """Should return False and keep the collection for an unknown id."""
        before = store.categories
        assert store.delete_category("missing") is False
        assert store.categories == before

    def test_default_category_protected(self, store: LedgerStore) -> None:
        """Should refuse to delete seed categories."""
        with pytest.raises(ProtectedCategoryError):
            store.delete_category("1")
        assert store.get_category("1") is not None

    def test_referenced_category_requires_force(self, store: LedgerStore) -> None:
        """Should refuse while transactions or budgets use the name."""
        category = store.add_category("交通", "expense")
        store.add_transaction("expense", "4", "交通")
        store.add_budget("交通", "100")

        with pytest.raises(CategoryInUseError) as exc_info:
            store.delete_category(category.id)

        assert exc_info.value.transactions == 1
        assert exc_info.value.budgets == 1
        assert store.get_category(category.id) is not None

    def test_force_leaves_references_dangling(self, store: LedgerStore) -> None:
        """Should delete with force and keep referencing records as they are."""
        category = store.add_category("交通", "expense")
        txn = store.add_transaction("expense", "4", "交通")
        budget = store.add_budget("交通", "100")

        assert store.delete_category(category.id, force=True) is True
        assert store.transactions == (txn,)
        assert store.budgets == (budget,)

    def test_same_name_other_type_not_a_reference(self, store: LedgerStore) -> None:
        """Should only count references of the category's own type."""
        category = store.add_category("奖金", "income")
        store.add_transaction("expense", "4", "奖金")
        assert store.delete_category(category.id) is True


class TestBudgets:
    """Tests for budget operations."""

    def test_add(self, store: LedgerStore) -> None:
        """Should append a monthly budget by default."""
        budget = store.add_budget("餐饮", "300")
        assert store.budgets == (budget,)
        assert budget.period == BudgetPeriod.MONTHLY

    def test_duplicates_allowed(self, store: LedgerStore) -> None:
        """Should allow two budgets for the same category at this layer."""
        store.add_budget("餐饮", "300")
        store.add_budget("餐饮", "200")
        assert len(store.budgets) == 2

    def test_invalid_amount(self, store: LedgerStore) -> None:
        """Should reject non-positive budget amounts."""
        with pytest.raises(ValidationError):
            store.add_budget("餐饮", 0)

    def test_update_replaces_amount_only(self, store: LedgerStore) -> None:
        """Should keep id, category, period and position."""
        first = store.add_budget("餐饮", "300")
        second = store.add_budget("购物", "100", "yearly")

        updated = store.update_budget(second.id, "150")

        assert updated is not None
        assert updated.amount == Decimal("150")
        assert updated.category == "购物"
        assert updated.period == BudgetPeriod.YEARLY
        assert store.budgets == (first, updated)

    def test_update_unknown(self, store: LedgerStore) -> None:
        """Should return None for an unknown id."""
        assert store.update_budget("missing", "10") is None

    def test_update_invalid_amount(self, store: LedgerStore) -> None:
        """Should reject invalid amounts and keep the old one."""
        budget = store.add_budget("餐饮", "300")
        with pytest.raises(ValidationError):
            store.update_budget(budget.id, "-1")
        assert store.get_budget(budget.id) == budget

    def test_delete(self, store: LedgerStore) -> None:
        """Should remove the budget, and ignore unknown ids."""
        budget = store.add_budget("餐饮", "300")
        assert store.delete_budget("missing") is False
        assert len(store.budgets) == 1
        assert store.delete_budget(budget.id) is True
        assert store.budgets == ()


class TestPersistence:
    """Tests for autosave, flush and reload."""

    def test_autosave_writes_each_mutation(self, store: LedgerStore) -> None:
        """Should persist immediately and reload identically."""
        txn = store.add_transaction("expense", "12.34", "餐饮", date=datetime(2025, 3, 1, 8, 0))
        category = store.add_category("交通", "expense")
        budget = store.add_budget("餐饮", "300")

        reloaded = reopen(store.storage)

        assert reloaded.transactions == (txn,)
        assert reloaded.categories[-1] == category
        assert reloaded.budgets == (budget,)
        assert store.dirty == frozenset()

    @pytest.mark.parametrize("amount", ["123456789012.345", "0.00000001", "999999999999999", "0.1", "1e14"])
    def test_amounts_reload_exactly(self, store: LedgerStore, amount: str) -> None:
        """Should reload every accepted amount with the same value."""
        txn = store.add_transaction("expense", amount, "餐饮")
        store.add_budget("餐饮", amount)

        reloaded = reopen(store.storage)

        assert reloaded.transactions[0].amount == Decimal(amount)
        assert reloaded.budgets[0].amount == Decimal(amount)
        assert reloaded.transactions == (txn,)

    def test_deferred_writes_until_flush(self, storage: JsonStorage) -> None:
        """Should only mark collections dirty when autosave is off."""
        store = LedgerStore(storage, autosave=False).init()
        store.add_transaction("expense", "1", "餐饮")
        store.add_budget("餐饮", "10")

        assert store.dirty == {TRANSACTIONS_KEY, BUDGETS_KEY}
        assert not storage.exists(TRANSACTIONS_KEY)

        assert store.flush() == [BUDGETS_KEY, TRANSACTIONS_KEY]
        assert store.dirty == frozenset()
        assert len(reopen(storage).transactions) == 1
        assert store.flush() == []

    def test_failed_write_keeps_dirty(self, tmp_path) -> None:
        """Should propagate write errors and keep the collection pending."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = LedgerStore(JsonStorage(blocker / "data"), autosave=False).init()
        store.add_budget("餐饮", "10")

        with pytest.raises(OSError):
            store.flush()
        assert store.dirty == {BUDGETS_KEY}

    def test_custom_id_factory(self, storage: JsonStorage) -> None:
        """Should use the injected identifier generator."""
        counter = itertools.count(1)
        store = LedgerStore(storage, id_factory=lambda: f"id-{next(counter)}").init()
        assert store.add_budget("餐饮", "1").id == "id-1"
        assert store.add_category("x", "income").id == "id-2"

    def test_new_id_is_random(self) -> None:
        """Should produce distinct identifiers."""
        assert new_id() != new_id()

    def test_mutations_are_logged(self, store: LedgerStore) -> None:
        """Should emit a structured event per mutation."""
        with capture_logs() as logs:
            budget = store.add_budget("餐饮", "300")
            store.delete_budget(budget.id)

        events = [log["event"] for log in logs if log["log_level"] == "info"]
        assert events == ["budget_added", "budget_deleted"]


class TestResetAll:
    """Tests for reset_all."""

    def test_restores_defaults_and_round_trips(self, store: LedgerStore) -> None:
        """Should restore seed categories, empty the rest, and persist that state."""
        store.add_transaction("expense", "5", "餐饮")
        store.add_category("交通", "expense")
        store.add_budget("餐饮", "300")

        store.reset_all()

        assert list(store.categories) == default_categories()
        assert store.transactions == ()
        assert store.budgets == ()

        reloaded = reopen(store.storage)
        assert list(reloaded.categories) == default_categories()
        assert reloaded.transactions == ()
        assert reloaded.budgets == ()

    def test_deferred_reset(self, storage: JsonStorage) -> None:
        """Should remove stored documents and wait for flush to rewrite them."""
        store = LedgerStore(storage, autosave=False).init()
        store.add_budget("餐饮", "300")
        store.flush()

        store.reset_all()

        assert not storage.exists(BUDGETS_KEY)
        assert store.dirty == {CATEGORIES_KEY, BUDGETS_KEY, TRANSACTIONS_KEY}
        store.flush()
        assert reopen(storage).budgets == ()
