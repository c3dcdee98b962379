"""Sample data for trying the tool: two months of readings for the default units."""

import logging

from autofee.services.reading_service import MeterReadingService
from autofee.services.store import BillingStore

logger = logging.getLogger(__name__)

# January 2024 is the baseline month; February 2024 is the month to bill
SAMPLE_READINGS = {
    (2024, 1): {
        "601A": (1923, 89.7),
        "601B": (30635, 89.7),
    },
    (2024, 2): {
        "601A": (2123, 93.36),  # 200 kWh, 3.66 m³
        "601B": (30734, 93.36),  # 99 kWh, 3.66 m³
    },
}


def insert_sample_data(store: BillingStore) -> int:
    """Save the sample readings (units 601A and 601B must exist).

    Returns:
        Number of readings saved
    """
    service = MeterReadingService(store)
    saved = 0
    for (year, month), readings in SAMPLE_READINGS.items():
        saved += service.save_readings(year, month, readings)
    logger.info(f"Inserted {saved} sample meter readings")
    return saved


def get_sample_bill_data() -> dict:
    """Building totals for February 2024.

    The management cost is whatever remains of the total fee after electricity
    and water: 288510 - 47440 - 17440 = 223630.
    """
    return {
        "year": 2024,
        "month": 2,
        "total_management_fee": 288510,
        "total_electricity_cost": 47440,
        "total_water_cost": 17440,
    }
