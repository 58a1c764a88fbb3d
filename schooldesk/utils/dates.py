"""Month arithmetic for monthly fee dates."""

from datetime import date


def first_of_month(value: date) -> date:
    """Normalize a date to the first day of its month."""
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """Shift a first-of-month date by a number of months.

    Args:
        value: Date to shift (day is reset to 1)
        months: Months to add, may be negative

    Returns:
        First day of the resulting month
    """
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_range(start: date, count: int) -> list[date]:
    """First-of-month dates for count consecutive months starting at start."""
    begin = first_of_month(start)
    return [add_months(begin, i) for i in range(max(count, 0))]
