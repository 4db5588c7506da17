"""Pure input checks shared by the store and the command layer.

Each function returns the normalized value or raises ValidationError.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pocketbook.domain.models import BudgetPeriod, CategoryName, EntryType, Money, to_money
from pocketbook.errors import ValidationError


# Amounts are stored as JSON numbers, which keep about 15 significant digits
MAX_SIGNIFICANT_DIGITS = 15
MIN_EXPONENT = -8
MAX_EXPONENT = 14


def validate_amount(amount: Any) -> Money:
    """Check that an amount is a finite number greater than zero.

    Amounts must also fit in storage exactly: at most 15 significant digits,
    below 10**15 and no finer than 10**-8.

    Args:
        amount: Decimal, int, float or numeric string.

    Returns:
        Amount as Money.

    Raises:
        ValidationError: If the amount is not numeric, not positive or out of range.
    """
    try:
        money = to_money(amount)
    except (TypeError, InvalidOperation) as e:
        raise ValidationError(f"Invalid amount: {amount!r}") from e

    if not money.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")
    if money <= Decimal(0):
        raise ValidationError("Amount must be positive")

    normalized = money.normalize()
    if not MIN_EXPONENT <= normalized.adjusted() <= MAX_EXPONENT:
        raise ValidationError(f"Amount out of range: {amount!r}")
    if len(normalized.as_tuple().digits) > MAX_SIGNIFICANT_DIGITS:
        raise ValidationError(f"Amount has too many digits: {amount!r}")
    return money


def validate_name(name: Any, what: str = "Category") -> CategoryName:
    """Check that a category name is present once surrounding whitespace is removed."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{what} name must not be empty")
    return CategoryName(name.strip())


def validate_entry_type(value: Any) -> EntryType:
    try:
        return EntryType(value)
    except ValueError as e:
        raise ValidationError(f"Type must be 'income' or 'expense', got {value!r}") from e


def validate_period(value: Any) -> BudgetPeriod:
    try:
        return BudgetPeriod(value)
    except ValueError as e:
        raise ValidationError(f"Period must be 'monthly' or 'yearly', got {value!r}") from e


def parse_amount(amount_str: str) -> Money | None:
    """Parse a user-entered amount.

    Args:
        amount_str: String containing the amount in currency units.

    Returns:
        Money amount, or None if invalid or not positive.
    """
    try:
        return validate_amount(amount_str.strip())
    except ValidationError:
        return None
