"""In-memory ledger owning the transaction, category and budget collections.

The store is the only writer of the three collections. Every mutation is
validated here, then either written straight through to storage (autosave)
or marked dirty until flush().
"""

import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from pocketbook.domain.models import (
    Budget,
    BudgetPeriod,
    Category,
    EntryType,
    Transaction,
    default_categories,
)
from pocketbook.domain.validation import (
    validate_amount,
    validate_entry_type,
    validate_name,
    validate_period,
)
from pocketbook.errors import CategoryInUseError, ProtectedCategoryError
from pocketbook.store.storage import JsonStorage, revive_dates

logger = structlog.get_logger(__name__)

TRANSACTIONS_KEY = "transactions"
CATEGORIES_KEY = "categories"
BUDGETS_KEY = "budgets"

ALL_KEYS = (CATEGORIES_KEY, BUDGETS_KEY, TRANSACTIONS_KEY)


def new_id() -> str:
    """Generate a collision-resistant record identifier."""
    return uuid.uuid4().hex


def _load_records(
    storage: JsonStorage,
    key: str,
    default: list[Any],
    parse: Callable[[dict[str, Any]], Any],
    date_fields: tuple[str, ...] = (),
) -> list[Any]:
    """Load a collection and convert each stored record.

    Records that cannot be converted are skipped. Falls back to `default`
    when the document is missing, unreadable, not a list, or has no usable
    records left. A damaged document is backed up before it can be
    overwritten by the next write.
    """
    raw = storage.load(key, None)
    if raw is None:
        if storage.exists(key):
            storage.backup(key)
        return list(default)
    if not isinstance(raw, list):
        logger.warning("collection_malformed", key=key, error="document is not a list")
        storage.backup(key)
        return list(default)

    records = []
    for index, record in enumerate(raw):
        try:
            (record,) = revive_dates([record], date_fields)
            records.append(parse(record))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.warning("record_skipped", key=key, index=index, error=str(e))

    if len(records) < len(raw):
        storage.backup(key)
        if not records:
            return list(default)
    return records


class LedgerStore:
    """Owner of the ledger's collections and their persistence.

    Args:
        storage: Where collections are persisted.
        autosave: Write each affected collection immediately after a
            mutation. When False, writes wait for flush().
        clock: Source of "now" for transactions recorded without a date.
        id_factory: Generator for new record identifiers.
    """

    def __init__(
        self,
        storage: JsonStorage,
        autosave: bool = True,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.storage = storage
        self.autosave = autosave
        self._clock = clock
        self._new_id = id_factory
        self._transactions: list[Transaction] = []
        self._categories: list[Category] = default_categories()
        self._budgets: list[Budget] = []
        self._dirty: set[str] = set()

    # Lifecycle

    def init(self) -> "LedgerStore":
        """Load all collections from storage, replacing in-memory state."""
        self._categories = _load_records(
            self.storage, CATEGORIES_KEY, default_categories(), Category.from_record
        )
        self._budgets = _load_records(self.storage, BUDGETS_KEY, [], Budget.from_record)
        self._transactions = _load_records(
            self.storage, TRANSACTIONS_KEY, [], Transaction.from_record, ("date",)
        )
        self._dirty.clear()
        logger.debug(
            "ledger_loaded",
            transactions=len(self._transactions),
            categories=len(self._categories),
            budgets=len(self._budgets),
        )
        return self

    def flush(self) -> list[str]:
        """Write every collection changed since the last write.

        Returns:
            Keys that were written, in a fixed order.

        Raises:
            OSError: If storage cannot be written. Unwritten keys stay dirty.
        """
        written = []
        for key in ALL_KEYS:
            if key in self._dirty:
                self._write(key)
                written.append(key)
        return written

    @property
    def dirty(self) -> frozenset[str]:
        return frozenset(self._dirty)

    def _records(self, key: str) -> list[dict[str, Any]]:
        if key == TRANSACTIONS_KEY:
            return [t.to_record() for t in self._transactions]
        if key == CATEGORIES_KEY:
            return [c.to_record() for c in self._categories]
        return [b.to_record() for b in self._budgets]

    def _write(self, key: str) -> None:
        self.storage.save(key, self._records(key))
        self._dirty.discard(key)

    def _changed(self, key: str) -> None:
        self._dirty.add(key)
        if self.autosave:
            self._write(key)

    # Read access

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Transactions, most recent first."""
        return tuple(self._transactions)

    @property
    def categories(self) -> tuple[Category, ...]:
        return tuple(self._categories)

    @property
    def budgets(self) -> tuple[Budget, ...]:
        return tuple(self._budgets)

    def get_transaction(self, txn_id: str) -> Transaction | None:
        return next((t for t in self._transactions if t.id == txn_id), None)

    def get_category(self, category_id: str) -> Category | None:
        return next((c for c in self._categories if c.id == category_id), None)

    def get_budget(self, budget_id: str) -> Budget | None:
        return next((b for b in self._budgets if b.id == budget_id), None)

    # Transactions

    def add_transaction(
        self,
        type: EntryType | str,
        amount: Any,
        category: str,
        note: str | None = "",
        date: datetime | None = None,
    ) -> Transaction:
        """Record a transaction at the front of the collection.

        Args:
            type: "income" or "expense".
            amount: Positive amount.
            category: Category name. Not checked against existing categories.
            note: Free text. Blank or missing notes fall back to the category name.
            date: When it happened. Defaults to now.

        Returns:
            The created Transaction.

        Raises:
            ValidationError: If type, amount or category is invalid.
        """
        entry_type = validate_entry_type(type)
        money = validate_amount(amount)
        name = validate_name(category)

        txn = Transaction(
            id=self._new_id(),
            type=entry_type,
            amount=money,
            category=name,
            note=(note or "").strip() or name,
            date=date if date is not None else self._clock(),
        )
        self._transactions.insert(0, txn)
        logger.info("transaction_added", id=txn.id, type=entry_type.value, amount=str(money), category=name)
        self._changed(TRANSACTIONS_KEY)
        return txn

    def delete_transaction(self, txn_id: str) -> bool:
        """Remove a transaction. Returns False if no transaction has that id."""
        remaining = [t for t in self._transactions if t.id != txn_id]
        if len(remaining) == len(self._transactions):
            return False

        self._transactions = remaining
        logger.info("transaction_deleted", id=txn_id)
        self._changed(TRANSACTIONS_KEY)
        return True

    # Categories

    def add_category(self, name: str, type: EntryType | str, icon: str | None = None) -> Category:
        """Append a user category. Names need not be unique.

        Raises:
            ValidationError: If the name is empty or the type is invalid.
        """
        category = Category(
            id=self._new_id(),
            name=validate_name(name),
            type=validate_entry_type(type),
            icon=icon,
            is_default=False,
        )
        self._categories.append(category)
        logger.info("category_added", id=category.id, name=category.name, type=category.type.value)
        self._changed(CATEGORIES_KEY)
        return category

    def category_references(self, category: Category) -> tuple[int, int]:
        """Count transactions and budgets that name a category.

        Transactions only count when their type matches the category's type,
        since income and expense categories may share a name. Budgets only
        apply to expense categories.
        """
        transactions = sum(
            1 for t in self._transactions if t.category == category.name and t.type == category.type
        )
        budgets = 0
        if category.type == EntryType.EXPENSE:
            budgets = sum(1 for b in self._budgets if b.category == category.name)
        return transactions, budgets

    def delete_category(self, category_id: str, force: bool = False) -> bool:
        """Remove a user category.

        Args:
            category_id: Category to remove.
            force: Delete even if transactions or budgets still reference the
                name. Those references are left dangling.

        Returns:
            True if removed, False if no category has that id.

        Raises:
            ProtectedCategoryError: If the category is a default category.
            CategoryInUseError: If referenced and `force` is False.
        """
        category = self.get_category(category_id)
        if category is None:
            return False
        if category.is_default:
            raise ProtectedCategoryError(category.name)

        transactions, budgets = self.category_references(category)
        if (transactions or budgets) and not force:
            raise CategoryInUseError(category.name, transactions, budgets)

        self._categories = [c for c in self._categories if c.id != category_id]
        logger.info(
            "category_deleted",
            id=category_id,
            name=category.name,
            dangling_transactions=transactions,
            dangling_budgets=budgets,
        )
        self._changed(CATEGORIES_KEY)
        return True

    # Budgets

    def add_budget(
        self, category: str, amount: Any, period: BudgetPeriod | str = BudgetPeriod.MONTHLY
    ) -> Budget:
        """Append a budget. More than one budget per category is allowed here.

        Raises:
            ValidationError: If the category, amount or period is invalid.
        """
        budget = Budget(
            id=self._new_id(),
            category=validate_name(category),
            amount=validate_amount(amount),
            period=validate_period(period),
        )
        self._budgets.append(budget)
        logger.info("budget_added", id=budget.id, category=budget.category, amount=str(budget.amount))
        self._changed(BUDGETS_KEY)
        return budget

    def update_budget(self, budget_id: str, amount: Any) -> Budget | None:
        """Replace a budget's amount, keeping its position.

        Returns:
            The updated Budget, or None if no budget has that id.

        Raises:
            ValidationError: If the amount is invalid.
        """
        money = validate_amount(amount)
        for index, budget in enumerate(self._budgets):
            if budget.id == budget_id:
                updated = budget.with_amount(money)
                self._budgets[index] = updated
                logger.info("budget_updated", id=budget_id, amount=str(money))
                self._changed(BUDGETS_KEY)
                return updated
        return None

    def delete_budget(self, budget_id: str) -> bool:
        """Remove a budget. Returns False if no budget has that id."""
        remaining = [b for b in self._budgets if b.id != budget_id]
        if len(remaining) == len(self._budgets):
            return False

        self._budgets = remaining
        logger.info("budget_deleted", id=budget_id)
        self._changed(BUDGETS_KEY)
        return True

    # Reset

    def reset_all(self) -> None:
        """Erase all stored data and return to first-run state.

        Irreversible: the stored documents are removed before the defaults
        are restored.
        """
        for key in ALL_KEYS:
            self.storage.remove(key)

        self._categories = default_categories()
        self._budgets = []
        self._transactions = []
        logger.warning("ledger_reset")

        for key in ALL_KEYS:
            self._changed(key)
