"""Unit tests for allocation service."""

from types import SimpleNamespace

import pytest

from autofee.services.allocation_service import AllocationService


def unit(unit_id, area):
    return SimpleNamespace(id=unit_id, area=area)


def reading(unit_id, electricity, water):
    return SimpleNamespace(unit_id=unit_id, electricity_reading=electricity, water_reading=water)


class TestUsage:
    """Test usage derivation from cumulative readings."""

    @pytest.fixture
    def service(self):
        return AllocationService()

    def test_usage_is_difference(self, service):
        assert service.calculate_usage(2123, 1923) == 200

    def test_usage_without_previous_is_zero(self, service):
        assert service.calculate_usage(2123, None) == 0

    def test_usage_clamped_at_zero_on_counter_reset(self, service):
        assert service.calculate_usage(5, 30000) == 0

    def test_usage_details_defaults_previous_to_zero(self, service):
        details = service.usage_details(reading("601A", 2123, 93.36), None)

        assert details.current_electricity == 2123
        assert details.previous_electricity == 0
        assert details.electricity_usage == 0
        assert details.current_water == 93.36
        assert details.previous_water == 0
        assert details.water_usage == 0

    def test_usage_details_with_previous(self, service):
        details = service.usage_details(reading("601A", 2123, 93.36), reading("601A", 1923, 89.7))

        assert details.previous_electricity == 1923
        assert details.electricity_usage == 200
        assert details.water_usage == pytest.approx(3.66)


class TestAllocation:
    """Test proportional splitting."""

    @pytest.fixture
    def service(self):
        return AllocationService()

    def test_allocate_by_usage(self, service):
        result = service.allocate_by_usage(120.0, {"A": 100, "B": 200, "C": 200})

        assert result["A"] == pytest.approx(24.0)
        assert result["B"] == pytest.approx(48.0)
        assert result["C"] == pytest.approx(48.0)

    def test_allocate_by_usage_zero_total(self, service):
        result = service.allocate_by_usage(47440.0, {"A": 0, "B": 0})

        assert result == {"A": 0.0, "B": 0.0}

    def test_allocate_by_area_uses_given_total_area(self, service):
        # Unit B is registered (area counts) but not billed
        result = service.allocate_by_area(300.0, {"A": 50}, total_area=150)

        assert result == {"A": pytest.approx(100.0)}

    def test_allocate_by_area_zero_total_area(self, service):
        assert service.allocate_by_area(300.0, {"A": 0}, total_area=0) == {"A": 0.0}

    @pytest.mark.parametrize(
        "amount,expected",
        [(0.4, 0), (0.5, 1), (1.5, 2), (2.5, 3), (31732.44, 31732), (15707.56, 15708)],
    )
    def test_round_currency_half_up(self, service, amount, expected):
        assert service.round_currency(amount) == expected


class TestComputeUnitBills:
    """Test the full per-period computation."""

    @pytest.fixture
    def service(self):
        return AllocationService()

    @pytest.fixture
    def sample_inputs(self):
        units = [unit("601A", 60.0), unit("601B", 120.0)]
        current = [reading("601A", 2123, 93.36), reading("601B", 30734, 93.36)]
        previous = [reading("601A", 1923, 89.7), reading("601B", 30635, 89.7)]
        return units, current, previous

    def test_sample_period(self, service, sample_inputs):
        units, current, previous = sample_inputs

        results = service.compute_unit_bills(
            2024, 2, 47440, 17440, 223630, units, current, previous
        )
        by_unit = {r.unit_id: r for r in results}

        assert by_unit["601A"].electricity_usage == 200
        assert by_unit["601B"].electricity_usage == 99
        assert by_unit["601A"].electricity_cost == 31732
        assert by_unit["601B"].electricity_cost == 15708
        assert by_unit["601A"].water_cost == 8720
        assert by_unit["601B"].water_cost == 8720
        assert by_unit["601A"].management_cost == 74543
        assert by_unit["601B"].management_cost == 149087
        assert by_unit["601A"].total_cost == 114995
        assert by_unit["601B"].total_cost == 173515

    def test_unrounded_shares_reconcile_with_totals(self, service, sample_inputs):
        units, current, previous = sample_inputs

        results = service.compute_unit_bills(
            2024, 2, 47440, 17440, 223630, units, current, previous
        )

        assert sum(r.electricity_share for r in results) == pytest.approx(47440)
        assert sum(r.water_share for r in results) == pytest.approx(17440)
        assert sum(r.management_share for r in results) == pytest.approx(223630)

    def test_total_is_sum_of_rounded_components(self, service):
        results = service.compute_unit_bills(
            2024,
            2,
            10.5,
            10.5,
            10.5,
            [unit("A", 10.0)],
            [reading("A", 20, 20)],
            [reading("A", 10, 10)],
        )

        # Each component rounds 10.5 -> 11; rounding the sum once would give 32
        assert results[0].electricity_cost == 11
        assert results[0].water_cost == 11
        assert results[0].management_cost == 11
        assert results[0].total_cost == 33

    def test_unit_without_current_reading_is_skipped(self, service):
        results = service.compute_unit_bills(
            2024,
            2,
            1000,
            1000,
            3000,
            [unit("A", 100.0), unit("B", 200.0)],
            [reading("A", 20, 20)],
            [reading("A", 10, 10), reading("B", 10, 10)],
        )

        assert [r.unit_id for r in results] == ["A"]
        # Management still uses the area of every registered unit
        assert results[0].management_cost == 1000

    def test_first_period_unit_pays_only_management(self, service):
        results = service.compute_unit_bills(
            2024,
            2,
            1000,
            500,
            900,
            [unit("A", 100.0), unit("NEW", 200.0)],
            [reading("A", 20, 20), reading("NEW", 500, 50)],
            [reading("A", 10, 10)],
        )
        by_unit = {r.unit_id: r for r in results}

        assert by_unit["NEW"].electricity_usage == 0
        assert by_unit["NEW"].electricity_cost == 0
        assert by_unit["NEW"].water_cost == 0
        assert by_unit["NEW"].management_cost == 600
        assert by_unit["A"].electricity_cost == 1000
        assert by_unit["A"].water_cost == 500

    def test_all_zero_usage_gives_zero_utility_costs(self, service):
        results = service.compute_unit_bills(
            2024,
            1,
            1000,
            500,
            900,
            [unit("A", 1.0)],
            [reading("A", 10, 10)],
            [],
        )

        assert results[0].electricity_cost == 0
        assert results[0].water_cost == 0
        assert results[0].management_cost == 900

    def test_management_cost_monotonic_in_area(self, service):
        units = [unit("S", 33.3), unit("M", 58.1), unit("L", 120.7), unit("XL", 121.0)]
        readings = [reading(u.id, 1, 1) for u in units]

        results = service.compute_unit_bills(
            2024, 5, 0, 0, 123457, units, readings, readings
        )
        costs = [r.management_cost for r in results]

        assert costs == sorted(costs)

    def test_no_readings_returns_empty(self, service):
        assert service.compute_unit_bills(2024, 2, 1, 1, 1, [unit("A", 1.0)], [], []) == []
