"""Money and number formatting for statements, via babel.

LOCALE (default ko_KR) picks digit grouping and the currency, which is the
main currency of the locale's territory (KRW for ko_KR).
"""

import logging
import os
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.numbers import format_currency, format_decimal, get_territory_currencies
from babel.numbers import parse_decimal as babel_parse_decimal

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "ko_KR"
DEFAULT_CURRENCY = "KRW"


def _load_locale(name: str) -> Locale:
    try:
        return Locale.parse(name)
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Unusable LOCALE {name!r} ({e}); using {DEFAULT_LOCALE}")
        return Locale.parse(DEFAULT_LOCALE)


def _territory_currency(locale: Locale) -> str:
    if not locale.territory:
        return DEFAULT_CURRENCY
    currencies = get_territory_currencies(locale.territory)
    return currencies[0] if currencies else DEFAULT_CURRENCY


LOCALE = _load_locale(os.getenv("LOCALE", DEFAULT_LOCALE))
CURRENCY = _territory_currency(LOCALE)


def format_amount(amount: float | Decimal, include_symbol: bool = True) -> str:
    """Money with the currency's own fraction digits, e.g. '₩47,440' or '47,440'."""
    if include_symbol:
        return format_currency(amount, CURRENCY, locale=LOCALE)
    return format_decimal(amount, locale=LOCALE)


def format_number(value: float | Decimal) -> str:
    """Meter value or usage with grouping, e.g. '30,734' or '93.36'."""
    return format_decimal(value, locale=LOCALE)


def parse_decimal(value: str) -> Decimal:
    """Parse locale-formatted input such as '223,630'.

    Raises:
        NumberFormatError: If value is not a number in this locale
    """
    return babel_parse_decimal(value.strip(), locale=LOCALE)
