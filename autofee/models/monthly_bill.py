"""Monthly bill ORM model: whole-building costs entered by the administrator."""

from sqlalchemy import Float, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from autofee.models import Base, BaseModel


class MonthlyBill(Base, BaseModel):
    """Aggregate costs for one billing period (input, not computed)."""

    __tablename__ = "monthly_bills"

    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    total_electricity_cost: Mapped[float] = mapped_column(Float, nullable=False)
    total_water_cost: Mapped[float] = mapped_column(Float, nullable=False)
    total_management_cost: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (UniqueConstraint("year", "month", name="uq_monthly_bill_period"),)

    def __repr__(self) -> str:
        return (
            f"<MonthlyBill(year={self.year}, month={self.month}, "
            f"total_electricity_cost={self.total_electricity_cost}, "
            f"total_water_cost={self.total_water_cost}, "
            f"total_management_cost={self.total_management_cost})>"
        )


__all__ = ["MonthlyBill"]
