"""Tests for billing period helpers."""

from autofee.services.period_service import (
    format_period,
    iter_periods,
    next_period,
    previous_period,
)


class TestPeriods:
    def test_previous_period_same_year(self):
        assert previous_period(2024, 2) == (2024, 1)

    def test_previous_period_january_rolls_back_year(self):
        assert previous_period(2024, 1) == (2023, 12)

    def test_next_period_december_rolls_forward(self):
        assert next_period(2023, 12) == (2024, 1)

    def test_iter_periods_across_year_boundary(self):
        assert list(iter_periods((2023, 11), (2024, 2))) == [
            (2023, 11),
            (2023, 12),
            (2024, 1),
            (2024, 2),
        ]

    def test_iter_periods_single_month(self):
        assert list(iter_periods((2024, 5), (2024, 5))) == [(2024, 5)]

    def test_iter_periods_reversed_is_empty(self):
        assert list(iter_periods((2024, 5), (2024, 4))) == []

    def test_format_period(self):
        assert format_period(2024, 2) == "2024-02"
