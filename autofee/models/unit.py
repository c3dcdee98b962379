"""Unit ORM model: a billable apartment with the floor area used for shared costs."""

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autofee.models import Base, TimestampMixin


class Unit(Base, TimestampMixin):
    """Model representing one unit of the building.

    The area field drives the shared-management split: each unit pays
    area / total_area of the management cost regardless of metered usage.
    Deleting a unit removes its meter readings and unit bills.
    """

    __tablename__ = "units"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Floor area in m²
    area: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )

    # Relationships
    readings: Mapped[list["MeterReading"]] = relationship(  # noqa: F821
        "MeterReading",
        back_populates="unit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    bills: Mapped[list["UnitBill"]] = relationship(  # noqa: F821
        "UnitBill",
        back_populates="unit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id!r}, name={self.name!r}, area={self.area})>"


__all__ = ["Unit"]
