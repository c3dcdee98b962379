"""Integration tests for meter reading storage."""

import pytest

from autofee.services.errors import NotFoundError, ValidationError


class TestMeterReadings:
    def test_save_and_get(self, ctx):
        reading = ctx.readings.save_reading("601A", 2024, 2, "2,123", 93.36)

        assert reading.unit_id == "601A"
        assert reading.electricity_reading == 2123
        assert reading.water_reading == 93.36

    def test_save_is_upsert(self, ctx):
        ctx.readings.save_reading("601A", 2024, 2, 100, 10)
        ctx.readings.save_reading("601A", 2024, 2, 200, 20)

        readings = ctx.readings.get_readings(2024, 2)
        assert len(readings) == 1
        assert readings[0].electricity_reading == 200
        assert readings[0].water_reading == 20

    def test_bulk_save(self, ctx):
        saved = ctx.readings.save_readings(2024, 2, {"601A": (1, 2), "601B": (3, 4)})

        assert saved == 2
        assert [r.unit_id for r in ctx.readings.get_readings(2024, 2)] == ["601A", "601B"]

    def test_bulk_save_is_all_or_nothing(self, ctx):
        with pytest.raises(ValidationError):
            ctx.readings.save_readings(2024, 2, {"601A": (1, 2), "601B": (3, "bad")})

        assert ctx.readings.get_readings(2024, 2) == []

    def test_unknown_unit(self, ctx):
        with pytest.raises(NotFoundError, match="999"):
            ctx.readings.save_readings(2024, 2, {"601A": (1, 2), "999": (3, 4)})

        assert ctx.readings.get_readings(2024, 2) == []

    @pytest.mark.parametrize("electricity,water", [(-1, 1), (1, -0.1), ("x", 1)])
    def test_invalid_values(self, ctx, electricity, water):
        with pytest.raises(ValidationError):
            ctx.readings.save_reading("601A", 2024, 2, electricity, water)

    def test_invalid_month(self, ctx):
        with pytest.raises(ValidationError):
            ctx.readings.save_reading("601A", 2024, 13, 1, 1)

    def test_previous_month_reading(self, sample_ctx):
        previous = sample_ctx.readings.get_previous_month_reading("601A", 2024, 2)

        assert (previous.year, previous.month) == (2024, 1)
        assert previous.electricity_reading == 1923

    def test_previous_month_only_immediate(self, ctx):
        ctx.readings.save_reading("601A", 2023, 11, 10, 1)

        assert ctx.readings.get_previous_month_reading("601A", 2024, 1) is None

    def test_previous_month_of_january(self, ctx):
        ctx.readings.save_reading("601A", 2023, 12, 10, 1)

        previous = ctx.readings.get_previous_month_reading("601A", 2024, 1)
        assert (previous.year, previous.month) == (2023, 12)

    def test_unit_history_is_chronological(self, ctx):
        ctx.readings.save_reading("601A", 2024, 2, 30, 3)
        ctx.readings.save_reading("601A", 2023, 12, 10, 1)
        ctx.readings.save_reading("601A", 2024, 1, 20, 2)

        history = ctx.readings.get_unit_history("601A")

        assert [(r.year, r.month) for r in history] == [(2023, 12), (2024, 1), (2024, 2)]

    def test_has_readings(self, sample_ctx):
        assert sample_ctx.readings.has_readings(2024, 2)
        assert not sample_ctx.readings.has_readings(2024, 3)
