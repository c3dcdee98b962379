"""Service layer and the context object that threads the store through it."""

from dataclasses import dataclass

from autofee.services.allocation_service import AllocationService
from autofee.services.bills_service import BillsService
from autofee.services.local_storage import LocalStorage
from autofee.services.reading_service import MeterReadingService
from autofee.services.statement_service import StatementService
from autofee.services.store import BillingStore, open_store
from autofee.services.unit_service import UnitService


@dataclass
class BillingContext:
    """Store handle plus the services bound to it."""

    store: BillingStore
    units: UnitService
    readings: MeterReadingService
    bills: BillsService
    statements: StatementService


def create_context(store: BillingStore) -> BillingContext:
    """Bind every service to one store."""
    units = UnitService(store)
    bills = BillsService(store, AllocationService())
    return BillingContext(
        store=store,
        units=units,
        readings=MeterReadingService(store),
        bills=bills,
        statements=StatementService(bills, units),
    )


__all__ = [
    "BillingContext",
    "BillingStore",
    "LocalStorage",
    "create_context",
    "open_store",
]
