"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class TimestampMixin:
    """Creation timestamp shared by all tables."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class BaseModel(TimestampMixin):
    """Base model with surrogate integer key and creation timestamp."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from autofee.models.meter_reading import MeterReading  # noqa: E402
from autofee.models.monthly_bill import MonthlyBill  # noqa: E402
from autofee.models.unit import Unit  # noqa: E402
from autofee.models.unit_bill import UnitBill  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "Unit",
    "MeterReading",
    "MonthlyBill",
    "UnitBill",
]
