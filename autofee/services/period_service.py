"""Calendar helpers for monthly billing periods."""

from typing import Iterator


def previous_period(year: int, month: int) -> tuple[int, int]:
    """Return the immediately preceding calendar month.

    January rolls back to December of the previous year.
    """
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_period(year: int, month: int) -> tuple[int, int]:
    """Return the following calendar month."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def iter_periods(start: tuple[int, int], end: tuple[int, int]) -> Iterator[tuple[int, int]]:
    """Yield every (year, month) from start to end inclusive, oldest first.

    Yields nothing when start is after end.
    """
    current = start
    while current <= end:
        yield current
        current = next_period(*current)


def format_period(year: int, month: int) -> str:
    """Format a period as 'YYYY-MM'."""
    return f"{year:04d}-{month:02d}"
