"""Unit registry service: add, edit, delete and list units."""

import logging

from sqlalchemy import delete, func, select

from autofee.models.meter_reading import MeterReading
from autofee.models.unit import Unit
from autofee.models.unit_bill import UnitBill
from autofee.services.errors import NotFoundError, ValidationError
from autofee.services.parsers import parse_area, parse_required_text
from autofee.services.store import BillingStore

logger = logging.getLogger(__name__)


class UnitService:
    """Service for unit registry operations.

    Every write is committed and then auto-saved to local storage.
    """

    def __init__(self, store: BillingStore):
        """Initialize with the billing store handle."""
        self.store = store

    def list_units(self) -> list[Unit]:
        """Get all units ordered by id."""
        with self.store.session() as session:
            return list(session.scalars(select(Unit).order_by(Unit.id)).all())

    def get_unit(self, unit_id: str) -> Unit | None:
        """Get unit by id, or None if it does not exist."""
        with self.store.session() as session:
            return session.get(Unit, unit_id)

    def require_unit(self, unit_id: str) -> Unit:
        """Get unit by id.

        Raises:
            NotFoundError: If the unit does not exist
        """
        unit = self.get_unit(unit_id)
        if unit is None:
            raise NotFoundError(f"Unit {unit_id!r} not found")
        return unit

    def add_unit(self, unit_id: object, name: object, area: object) -> Unit:
        """Register a new unit.

        Args:
            unit_id: Unique unit identifier (e.g., '601A')
            name: Display name
            area: Floor area in m², must be positive

        Returns:
            Created Unit

        Raises:
            ValidationError: If a field is empty or invalid, or the id already exists
        """
        unit_id = parse_required_text(unit_id, "id")
        name = parse_required_text(name, "name")
        area = parse_area(area)

        with self.store.transaction() as session:
            if session.get(Unit, unit_id) is not None:
                raise ValidationError(f"Unit {unit_id!r} already exists")
            unit = Unit(id=unit_id, name=name, area=area)
            session.add(unit)

        logger.info(f"Added unit {unit_id} ({name}, {area} m²)")
        return unit

    def update_unit(self, unit_id: str, name: object, area: object) -> Unit:
        """Change a unit's name and area.

        Raises:
            NotFoundError: If the unit does not exist
            ValidationError: If name is empty or area is not positive
        """
        name = parse_required_text(name, "name")
        area = parse_area(area)

        with self.store.transaction() as session:
            unit = session.get(Unit, unit_id)
            if unit is None:
                raise NotFoundError(f"Unit {unit_id!r} not found")
            unit.name = name
            unit.area = area

        logger.info(f"Updated unit {unit_id} ({name}, {area} m²)")
        return unit

    def delete_unit(self, unit_id: str) -> None:
        """Delete a unit together with its meter readings and unit bills.

        Raises:
            NotFoundError: If the unit does not exist
        """
        with self.store.transaction() as session:
            unit = session.get(Unit, unit_id)
            if unit is None:
                raise NotFoundError(f"Unit {unit_id!r} not found")
            readings = session.execute(delete(MeterReading).where(MeterReading.unit_id == unit_id))
            bills = session.execute(delete(UnitBill).where(UnitBill.unit_id == unit_id))
            session.delete(unit)

        logger.info(
            f"Deleted unit {unit_id} with {readings.rowcount} readings and {bills.rowcount} bills"
        )

    def total_area(self) -> float:
        """Sum of all unit areas."""
        with self.store.session() as session:
            return float(session.scalar(select(func.coalesce(func.sum(Unit.area), 0.0))))

    def area_ratio(self, unit: Unit, total_area: float | None = None) -> float:
        """Percentage of total area held by unit (0 when total area is 0)."""
        if total_area is None:
            total_area = self.total_area()
        if total_area <= 0:
            return 0.0
        return unit.area / total_area * 100
