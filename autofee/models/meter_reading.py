"""Meter reading ORM model for cumulative electricity and water counters."""

from sqlalchemy import Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autofee.models import Base, BaseModel


class MeterReading(Base, BaseModel):
    """Cumulative meter values captured once per unit per month.

    Values are counters, not deltas. Usage for a month is the difference to the
    previous calendar month's reading of the same unit.
    """

    __tablename__ = "meter_readings"

    unit_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    # kWh
    electricity_reading: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )

    # m³
    water_reading: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )

    unit: Mapped["Unit"] = relationship(  # noqa: F821
        "Unit",
        back_populates="readings",
    )

    __table_args__ = (
        UniqueConstraint("unit_id", "year", "month", name="uq_reading_unit_period"),
        Index("idx_reading_period", "year", "month"),
    )

    def __repr__(self) -> str:
        return (
            f"<MeterReading(unit_id={self.unit_id!r}, year={self.year}, month={self.month}, "
            f"electricity_reading={self.electricity_reading}, water_reading={self.water_reading})>"
        )


__all__ = ["MeterReading"]
