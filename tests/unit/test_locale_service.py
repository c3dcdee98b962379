"""Tests for locale formatting (LOCALE pinned to ko_KR in conftest)."""

from decimal import Decimal

from autofee.services.locale_service import (
    CURRENCY,
    _load_locale,
    format_amount,
    format_number,
    parse_decimal,
)


class TestLocaleService:
    def test_currency_from_territory(self):
        assert CURRENCY == "KRW"

    def test_format_amount_has_no_fraction_digits(self):
        assert format_amount(47440) == "₩47,440"

    def test_format_amount_without_symbol(self):
        assert format_amount(288510, include_symbol=False) == "288,510"

    def test_format_number(self):
        assert format_number(30734) == "30,734"
        assert format_number(93.36) == "93.36"

    def test_parse_decimal_with_grouping(self):
        assert parse_decimal("223,630") == Decimal("223630")

    def test_unusable_locale_falls_back_to_korean(self):
        assert str(_load_locale("zz_NOWHERE")) == "ko_KR"
