"""Exceptions raised by the pocketbook store and domain layers."""


class PocketbookError(Exception):
    """Base class for all pocketbook errors."""


class ValidationError(PocketbookError, ValueError):
    """Input failed a presence, positivity or enumeration check."""


class ProtectedCategoryError(PocketbookError):
    """Attempt to delete a default (seed) category."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Category '{name}' is a default category and cannot be deleted")
        self.name = name


class CategoryInUseError(PocketbookError):
    """Attempt to delete a category still referenced by transactions or budgets."""

    def __init__(self, name: str, transactions: int, budgets: int) -> None:
        super().__init__(
            f"Category '{name}' is still used by {transactions} transaction(s) and {budgets} budget(s)"
        )
        self.name = name
        self.transactions = transactions
        self.budgets = budgets
