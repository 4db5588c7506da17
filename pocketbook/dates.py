"""Date utilities for pocketbook.

Pure functions for month arithmetic and formatting.
"""

from datetime import date, datetime

from pocketbook.domain.models import Month


def month_of(moment: date) -> Month:
    """Return the calendar month a date or timestamp falls in."""
    return Month(f"{moment.year:04d}-{moment.month:02d}")


def parse_month(month: str) -> tuple[int, int]:
    """Split a YYYY-MM month into (year, month).

    Raises:
        ValueError: If the month is not a valid YYYY-MM string.
    """
    dt = datetime.strptime(month, "%Y-%m")
    return dt.year, dt.month


def shift_month(month: Month, offset: int) -> Month:
    """Step a month forward (positive offset) or backward (negative offset).

    Args:
        month: Month in YYYY-MM format.
        offset: Number of calendar months to move.

    Returns:
        The shifted month, crossing year boundaries as needed.
    """
    year, month_int = parse_month(month)
    index = year * 12 + (month_int - 1) + offset
    return Month(f"{index // 12:04d}-{index % 12 + 1:02d}")


def trailing_months(month: Month, count: int = 6) -> list[Month]:
    """List `count` months ending at `month` (inclusive), oldest first."""
    return [shift_month(month, -i) for i in range(count - 1, -1, -1)]


def month_label(month: Month) -> str:
    """Human-readable month, e.g. "January 2025"."""
    year, month_int = parse_month(month)
    return date(year, month_int, 1).strftime("%B %Y")


def short_month_label(month: Month) -> str:
    """Compact month label for chart axes, e.g. "Jan"."""
    year, month_int = parse_month(month)
    return date(year, month_int, 1).strftime("%b")
