"""Service for monthly bill calculation and bill queries."""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert

from autofee.models.meter_reading import MeterReading
from autofee.models.monthly_bill import MonthlyBill
from autofee.models.unit import Unit
from autofee.models.unit_bill import UnitBill
from autofee.services.allocation_service import AllocationService, UsageDetails
from autofee.services.errors import PreconditionError, ValidationError
from autofee.services.parsers import parse_amount, parse_period
from autofee.services.period_service import iter_periods, previous_period
from autofee.services.reading_service import MeterReadingService
from autofee.services.store import BillingStore

logger = logging.getLogger(__name__)


def derive_management_cost(total_fee: object, electricity_cost: object, water_cost: object) -> float:
    """Shared management cost = total fee minus the metered utility costs.

    Raises:
        ValidationError: If an input is invalid or the utilities exceed the total fee
    """
    total = parse_amount(total_fee, "total_fee")
    electricity = parse_amount(electricity_cost, "total_electricity_cost")
    water = parse_amount(water_cost, "total_water_cost")
    management = total - electricity - water
    if management < 0:
        raise ValidationError(
            f"Utility costs ({electricity + water:g}) exceed the total fee ({total:g})"
        )
    return management


class BillsService:
    """Service for bill calculation and bill database operations.

    Loads units and readings, runs the allocation engine and upserts the
    resulting MonthlyBill and UnitBill rows.
    """

    def __init__(self, store: BillingStore, allocation: AllocationService | None = None):
        """Initialize with the billing store handle."""
        self.store = store
        self.allocation = allocation or AllocationService()
        self.readings = MeterReadingService(store)

    def ensure_calculable(self, year: int, month: int) -> None:
        """Check that a period has readings before calculating it.

        Raises:
            PreconditionError: If no meter readings exist for the period
        """
        if not self.readings.has_readings(year, month):
            raise PreconditionError(
                f"No meter readings for {year}-{month:02d}; enter readings before calculating"
            )

    def calculate_and_save_bills(
        self,
        year: object,
        month: object,
        total_electricity_cost: object,
        total_water_cost: object,
        total_management_cost: object,
    ) -> list[UnitBill]:
        """Calculate every unit's bill for a period and store the results.

        Inputs are validated and the period is checked for readings before
        anything is written. Recalculating overwrites the previous rows.

        Returns:
            Stored UnitBill rows, ordered by unit id

        Raises:
            ValidationError: If the period or a cost is invalid
            PreconditionError: If the period has no readings
        """
        year, month = parse_period(year, month)
        electricity = parse_amount(total_electricity_cost, "total_electricity_cost")
        water = parse_amount(total_water_cost, "total_water_cost")
        management = parse_amount(total_management_cost, "total_management_cost")

        prev_year, prev_month = previous_period(year, month)

        with self.store.transaction() as session:
            self.ensure_calculable(year, month)
            units = session.scalars(select(Unit).order_by(Unit.id)).all()
            current_readings = session.scalars(
                select(MeterReading).where(MeterReading.year == year, MeterReading.month == month)
            ).all()
            previous_readings = session.scalars(
                select(MeterReading).where(
                    MeterReading.year == prev_year, MeterReading.month == prev_month
                )
            ).all()

            results = self.allocation.compute_unit_bills(
                year,
                month,
                electricity,
                water,
                management,
                units,
                current_readings,
                previous_readings,
            )

            monthly_stmt = insert(MonthlyBill).values(
                year=year,
                month=month,
                total_electricity_cost=electricity,
                total_water_cost=water,
                total_management_cost=management,
            )
            session.execute(
                monthly_stmt.on_conflict_do_update(
                    index_elements=[MonthlyBill.year, MonthlyBill.month],
                    set_={
                        "total_electricity_cost": monthly_stmt.excluded.total_electricity_cost,
                        "total_water_cost": monthly_stmt.excluded.total_water_cost,
                        "total_management_cost": monthly_stmt.excluded.total_management_cost,
                    },
                )
            )

            for result in results:
                bill_stmt = insert(UnitBill).values(
                    unit_id=result.unit_id,
                    year=year,
                    month=month,
                    electricity_cost=result.electricity_cost,
                    water_cost=result.water_cost,
                    management_cost=result.management_cost,
                    total_cost=result.total_cost,
                )
                session.execute(
                    bill_stmt.on_conflict_do_update(
                        index_elements=[UnitBill.unit_id, UnitBill.year, UnitBill.month],
                        set_={
                            "electricity_cost": bill_stmt.excluded.electricity_cost,
                            "water_cost": bill_stmt.excluded.water_cost,
                            "management_cost": bill_stmt.excluded.management_cost,
                            "total_cost": bill_stmt.excluded.total_cost,
                        },
                    )
                )

        logger.info(
            f"Calculated {len(results)} unit bills for {year}-{month:02d} "
            f"(electricity={electricity:g}, water={water:g}, management={management:g})"
        )
        return self.get_unit_bills(year, month)

    def get_monthly_bill(self, year: int, month: int) -> MonthlyBill | None:
        """Get the building totals entered for a period."""
        with self.store.session() as session:
            stmt = select(MonthlyBill).where(MonthlyBill.year == year, MonthlyBill.month == month)
            return session.scalars(stmt).first()

    def get_unit_bills(self, year: int, month: int) -> list[UnitBill]:
        """Get all unit bills of a period ordered by unit id."""
        with self.store.session() as session:
            stmt = (
                select(UnitBill)
                .where(UnitBill.year == year, UnitBill.month == month)
                .order_by(UnitBill.unit_id)
            )
            return list(session.scalars(stmt).all())

    def get_unit_bill(self, unit_id: str, year: int, month: int) -> UnitBill | None:
        """Get one unit's bill for a period, or None."""
        with self.store.session() as session:
            stmt = select(UnitBill).where(
                UnitBill.unit_id == unit_id, UnitBill.year == year, UnitBill.month == month
            )
            return session.scalars(stmt).first()

    def get_bills_in_range(
        self,
        start: tuple[int, int],
        end: tuple[int, int],
        unit_id: str | None = None,
    ) -> list[tuple[tuple[int, int], list[UnitBill]]]:
        """Get unit bills for every month from start to end inclusive.

        Months without bills are left out.

        Returns:
            List of ((year, month), bills) in chronological order
        """
        with self.store.session() as session:
            month_index = UnitBill.year * 12 + UnitBill.month
            stmt = select(UnitBill).where(
                month_index.between(start[0] * 12 + start[1], end[0] * 12 + end[1])
            )
            if unit_id is not None:
                stmt = stmt.where(UnitBill.unit_id == unit_id)
            bills = session.scalars(stmt.order_by(UnitBill.unit_id)).all()

        by_period: dict[tuple[int, int], list[UnitBill]] = {}
        for bill in bills:
            by_period.setdefault((bill.year, bill.month), []).append(bill)

        return [
            (period, by_period[period]) for period in iter_periods(start, end) if period in by_period
        ]

    def get_usage_details(self, unit_id: str, year: int, month: int) -> UsageDetails | None:
        """Get meter values and usage of a unit for display.

        Returns:
            UsageDetails, or None when the unit has no reading for the period
        """
        current = self.readings.get_reading(unit_id, year, month)
        if current is None:
            return None
        previous = self.readings.get_previous_month_reading(unit_id, year, month)
        return self.allocation.usage_details(current, previous)
