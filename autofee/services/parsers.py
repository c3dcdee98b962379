"""Input parsing for amounts, meter values and billing periods.

Everything the administrator types passes through here before it reaches
a service. Rejected input raises ValidationError with a readable message.

Example:
    >>> parse_amount("47,440", "total_electricity_cost")
    47440.0

    >>> parse_period(2024, 2)
    (2024, 2)

    >>> parse_year_month("2024-02")
    (2024, 2)
"""

import math
from decimal import Decimal

from babel.numbers import NumberFormatError

from autofee.services.errors import ValidationError
from autofee.services.locale_service import parse_decimal

MIN_YEAR = 1900
MAX_YEAR = 9999


def parse_amount(value: object, field: str) -> float:
    """
    Parse a non-negative number from user input.

    Args:
        value: int, float, Decimal or numeric string (locale grouping allowed)
        field: Field name used in the error message

    Returns:
        Value as float

    Raises:
        ValidationError: If value is empty, non-numeric, negative or not finite
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, (int, float, Decimal)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        if not value.strip():
            raise ValidationError(f"{field} is required")
        try:
            number = parse_decimal(value)
        except (NumberFormatError, ValueError) as e:
            raise ValidationError(f"{field} must be a number, got {value!r}") from e
    else:
        raise ValidationError(f"{field} must be a number")

    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if number < 0:
        raise ValidationError(f"{field} must not be negative")

    return float(number)


def parse_area(value: object) -> float:
    """Parse a unit floor area; must be strictly positive."""
    area = parse_amount(value, "area")
    if area <= 0:
        raise ValidationError("area must be greater than zero")
    return area


def _parse_whole_number(value: object, field: str) -> int:
    """Accept ints, whole floats or Decimals, and digit strings; never truncate."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if not math.isfinite(value) or value != int(value):
            raise ValidationError(f"{field} must be a whole number, got {value!r}")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise ValidationError(f"{field} must be a whole number, got {value!r}") from e
    raise ValidationError(f"{field} must be a whole number")


def parse_period(year: object, month: object) -> tuple[int, int]:
    """
    Validate a billing period.

    Raises:
        ValidationError: If year or month is not a whole number in range
    """
    year_int = _parse_whole_number(year, "Year")
    month_int = _parse_whole_number(month, "Month")

    if not MIN_YEAR <= year_int <= MAX_YEAR:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {year_int}")
    if not 1 <= month_int <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month_int}")

    return year_int, month_int


def parse_year_month(value: str) -> tuple[int, int]:
    """Parse 'YYYY-MM' into a validated (year, month) pair."""
    if not value or "-" not in value:
        raise ValidationError(f"Period must look like YYYY-MM, got {value!r}")
    year_str, _, month_str = value.strip().partition("-")
    return parse_period(year_str, month_str)


def parse_required_text(value: object, field: str) -> str:
    """Strip a text field and reject it when empty."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()
