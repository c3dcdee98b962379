"""Allocation engine for splitting building-wide costs across units.

Two bases are used:
- USAGE: electricity and water split by each unit's metered consumption
- AREA: shared management cost split by each unit's floor area

Each component is rounded to a whole currency unit on its own, and the unit
total is the sum of the rounded components. Per-unit totals can therefore
differ from the building totals by a few units of currency.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Protocol


class ReadingLike(Protocol):
    unit_id: str
    electricity_reading: float
    water_reading: float


class UnitLike(Protocol):
    id: str
    area: float


@dataclass(frozen=True)
class UsageDetails:
    """Meter values and derived usage of one unit for one period."""

    current_electricity: float
    previous_electricity: float
    electricity_usage: float
    current_water: float
    previous_water: float
    water_usage: float


@dataclass(frozen=True)
class UnitBillResult:
    """Computed charges of one unit; *_share fields are the unrounded amounts."""

    unit_id: str
    year: int
    month: int
    electricity_usage: float
    water_usage: float
    electricity_share: float
    water_share: float
    management_share: float
    electricity_cost: int
    water_cost: int
    management_cost: int
    total_cost: int


class AllocationService:
    """Cost allocation engine. Holds no state and touches no storage."""

    @staticmethod
    def round_currency(amount: float) -> int:
        """Round to the nearest whole currency unit, halves away from zero."""
        return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def calculate_usage(self, current: float, previous: float | None) -> float:
        """Calculate consumption from two cumulative readings.

        Args:
            current: Reading of the billed month
            previous: Reading of the month before, None if not recorded

        Returns:
            current - previous floored at 0; 0 when there is no previous reading
        """
        if previous is None:
            return 0.0
        return max(0.0, current - previous)

    def usage_details(
        self,
        current_reading: ReadingLike,
        previous_reading: ReadingLike | None,
    ) -> UsageDetails:
        """Derive usage for display with the same rules used for billing.

        Missing previous values are shown as 0.
        """
        previous_electricity = previous_reading.electricity_reading if previous_reading else None
        previous_water = previous_reading.water_reading if previous_reading else None
        return UsageDetails(
            current_electricity=current_reading.electricity_reading,
            previous_electricity=previous_electricity or 0.0,
            electricity_usage=self.calculate_usage(
                current_reading.electricity_reading, previous_electricity
            ),
            current_water=current_reading.water_reading,
            previous_water=previous_water or 0.0,
            water_usage=self.calculate_usage(current_reading.water_reading, previous_water),
        )

    def allocate_by_usage(
        self,
        total_cost: float,
        usage_by_unit: Dict[str, float],
    ) -> Dict[str, float]:
        """Allocate a cost in proportion to consumption.

        Args:
            total_cost: Cost to split
            usage_by_unit: Dict mapping unit_id to consumption

        Returns:
            Dict mapping unit_id to unrounded share (all 0 when total usage is 0)
        """
        total_usage = sum(usage_by_unit.values())
        if total_usage <= 0:
            return {unit_id: 0.0 for unit_id in usage_by_unit}
        return {
            unit_id: usage / total_usage * total_cost for unit_id, usage in usage_by_unit.items()
        }

    def allocate_by_area(
        self,
        total_cost: float,
        area_by_unit: Dict[str, float],
        total_area: float,
    ) -> Dict[str, float]:
        """Allocate a cost in proportion to floor area.

        total_area is passed separately because it covers every registered unit,
        including units that are not billed this period.
        """
        if total_area <= 0:
            return {unit_id: 0.0 for unit_id in area_by_unit}
        return {unit_id: area / total_area * total_cost for unit_id, area in area_by_unit.items()}

    def compute_unit_bills(
        self,
        year: int,
        month: int,
        total_electricity_cost: float,
        total_water_cost: float,
        total_management_cost: float,
        units: Iterable[UnitLike],
        current_readings: Iterable[ReadingLike],
        previous_readings: Iterable[ReadingLike],
    ) -> list[UnitBillResult]:
        """Compute every unit's bill for a period.

        Algorithm:
        1. Usage per unit with a current reading: max(0, current - previous), 0 without previous
        2. Sum usage across billed units
        3. Electricity and water shares by usage
        4. Management share by area over the total area of all units
        5. Round each component, total = sum of rounded components
        6. Units without a current reading get no bill

        Missing data contributes zero; nothing is raised here.

        Returns:
            One UnitBillResult per billed unit, in unit order
        """
        units = list(units)
        current_by_unit = {r.unit_id: r for r in current_readings}
        previous_by_unit = {r.unit_id: r for r in previous_readings}

        billed = [unit for unit in units if unit.id in current_by_unit]
        total_area = sum(unit.area for unit in units)

        electricity_usage: Dict[str, float] = {}
        water_usage: Dict[str, float] = {}
        for unit in billed:
            details = self.usage_details(current_by_unit[unit.id], previous_by_unit.get(unit.id))
            electricity_usage[unit.id] = details.electricity_usage
            water_usage[unit.id] = details.water_usage

        electricity_shares = self.allocate_by_usage(total_electricity_cost, electricity_usage)
        water_shares = self.allocate_by_usage(total_water_cost, water_usage)
        management_shares = self.allocate_by_area(
            total_management_cost, {unit.id: unit.area for unit in billed}, total_area
        )

        results = []
        for unit in billed:
            electricity_cost = self.round_currency(electricity_shares[unit.id])
            water_cost = self.round_currency(water_shares[unit.id])
            management_cost = self.round_currency(management_shares[unit.id])
            results.append(
                UnitBillResult(
                    unit_id=unit.id,
                    year=year,
                    month=month,
                    electricity_usage=electricity_usage[unit.id],
                    water_usage=water_usage[unit.id],
                    electricity_share=electricity_shares[unit.id],
                    water_share=water_shares[unit.id],
                    management_share=management_shares[unit.id],
                    electricity_cost=electricity_cost,
                    water_cost=water_cost,
                    management_cost=management_cost,
                    total_cost=electricity_cost + water_cost + management_cost,
                )
            )

        return results
