"""Unit bill ORM model: computed per-unit charge breakdown for one period."""

from sqlalchemy import Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autofee.models import Base, BaseModel


class UnitBill(Base, BaseModel):
    """Per-unit charges derived from units, readings and the monthly bill.

    Rows are overwritten on recalculation. Every cost column holds a whole
    currency amount; total_cost is the sum of the three rounded components.
    """

    __tablename__ = "unit_bills"

    unit_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    electricity_cost: Mapped[float] = mapped_column(Float, nullable=False)
    water_cost: Mapped[float] = mapped_column(Float, nullable=False)
    management_cost: Mapped[float] = mapped_column(Float, nullable=False)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False)

    unit: Mapped["Unit"] = relationship(  # noqa: F821
        "Unit",
        back_populates="bills",
    )

    __table_args__ = (
        UniqueConstraint("unit_id", "year", "month", name="uq_unit_bill_period"),
        Index("idx_unit_bill_period", "year", "month"),
    )

    def __repr__(self) -> str:
        return (
            f"<UnitBill(unit_id={self.unit_id!r}, year={self.year}, month={self.month}, "
            f"electricity_cost={self.electricity_cost}, water_cost={self.water_cost}, "
            f"management_cost={self.management_cost}, total_cost={self.total_cost})>"
        )


__all__ = ["UnitBill"]
