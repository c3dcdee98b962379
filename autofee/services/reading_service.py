"""Service for monthly meter readings (cumulative electricity and water counters)."""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert

from autofee.models.meter_reading import MeterReading
from autofee.models.unit import Unit
from autofee.services.errors import NotFoundError
from autofee.services.parsers import parse_amount, parse_period
from autofee.services.period_service import previous_period
from autofee.services.store import BillingStore

logger = logging.getLogger(__name__)


class MeterReadingService:
    """Service for saving and querying meter readings."""

    def __init__(self, store: BillingStore):
        """Initialize with the billing store handle."""
        self.store = store

    @staticmethod
    def _upsert_statement(row: dict):
        stmt = insert(MeterReading).values(row)
        return stmt.on_conflict_do_update(
            index_elements=[MeterReading.unit_id, MeterReading.year, MeterReading.month],
            set_={
                "electricity_reading": stmt.excluded.electricity_reading,
                "water_reading": stmt.excluded.water_reading,
            },
        )

    def save_readings(
        self,
        year: object,
        month: object,
        readings: dict[str, tuple[object, object]],
    ) -> int:
        """Save (upsert) readings for several units of one period.

        All values are validated before anything is written.

        Args:
            year: Reading year
            month: Reading month (1-12)
            readings: Mapping unit_id -> (electricity_reading, water_reading)

        Returns:
            Number of readings saved

        Raises:
            ValidationError: If the period or any value is invalid
            NotFoundError: If a unit does not exist
        """
        year, month = parse_period(year, month)
        rows = []
        for unit_id, (electricity, water) in readings.items():
            rows.append(
                {
                    "unit_id": unit_id,
                    "year": year,
                    "month": month,
                    "electricity_reading": parse_amount(electricity, f"{unit_id} electricity"),
                    "water_reading": parse_amount(water, f"{unit_id} water"),
                }
            )

        if not rows:
            return 0

        with self.store.transaction() as session:
            known = set(
                session.scalars(
                    select(Unit.id).where(Unit.id.in_([r["unit_id"] for r in rows]))
                ).all()
            )
            unknown = sorted({r["unit_id"] for r in rows} - known)
            if unknown:
                raise NotFoundError(f"Unknown unit(s): {', '.join(unknown)}")
            for row in rows:
                session.execute(self._upsert_statement(row))

        logger.info(f"Saved {len(rows)} meter readings for {year}-{month:02d}")
        return len(rows)

    def save_reading(
        self,
        unit_id: str,
        year: object,
        month: object,
        electricity_reading: object,
        water_reading: object,
    ) -> MeterReading:
        """Save (upsert) one unit's reading for a period.

        Returns:
            Stored MeterReading
        """
        self.save_readings(year, month, {unit_id: (electricity_reading, water_reading)})
        year, month = parse_period(year, month)
        return self.get_reading(unit_id, year, month)

    def get_readings(self, year: int, month: int) -> list[MeterReading]:
        """Get all readings for a period ordered by unit id."""
        with self.store.session() as session:
            stmt = (
                select(MeterReading)
                .where(MeterReading.year == year, MeterReading.month == month)
                .order_by(MeterReading.unit_id)
            )
            return list(session.scalars(stmt).all())

    def get_reading(self, unit_id: str, year: int, month: int) -> MeterReading | None:
        """Get one unit's reading for a period, or None."""
        with self.store.session() as session:
            stmt = select(MeterReading).where(
                MeterReading.unit_id == unit_id,
                MeterReading.year == year,
                MeterReading.month == month,
            )
            return session.scalars(stmt).first()

    def get_previous_month_reading(
        self, unit_id: str, year: int, month: int
    ) -> MeterReading | None:
        """Get the unit's reading for the calendar month before (year, month).

        Only the immediately preceding month counts; older readings are ignored.
        """
        prev_year, prev_month = previous_period(year, month)
        return self.get_reading(unit_id, prev_year, prev_month)

    def get_unit_history(self, unit_id: str) -> list[MeterReading]:
        """Get all readings of a unit, oldest first."""
        with self.store.session() as session:
            stmt = (
                select(MeterReading)
                .where(MeterReading.unit_id == unit_id)
                .order_by(MeterReading.year, MeterReading.month)
            )
            return list(session.scalars(stmt).all())

    def has_readings(self, year: int, month: int) -> bool:
        """Whether at least one reading exists for the period."""
        with self.store.session() as session:
            stmt = (
                select(MeterReading.id)
                .where(MeterReading.year == year, MeterReading.month == month)
                .limit(1)
            )
            return session.scalar(stmt) is not None
