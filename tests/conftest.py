"""Pytest configuration: fresh in-memory stores and temporary local storage."""

import os

# Pin formatting locale BEFORE any imports from autofee
os.environ["LOCALE"] = "ko_KR"

import pytest  # noqa: E402

from autofee.services import BillingContext, create_context  # noqa: E402
from autofee.services.local_storage import LocalStorage  # noqa: E402
from autofee.services.sample_data import insert_sample_data  # noqa: E402
from autofee.services.store import BillingStore  # noqa: E402


@pytest.fixture
def store():
    """In-memory store with the default units 601A and 601B, no auto-save."""
    billing_store = BillingStore()
    billing_store.initialize()
    yield billing_store
    billing_store.close()


@pytest.fixture
def local_storage(tmp_path) -> LocalStorage:
    """Local storage in a temporary directory."""
    return LocalStorage(tmp_path / "storage")


@pytest.fixture
def persistent_store(local_storage):
    """Store that auto-saves into temporary local storage."""
    billing_store = BillingStore(local_storage)
    billing_store.initialize()
    yield billing_store
    billing_store.close()


@pytest.fixture
def ctx(store) -> BillingContext:
    """Services bound to the in-memory store."""
    return create_context(store)


@pytest.fixture
def sample_ctx(ctx) -> BillingContext:
    """Context with January and February 2024 sample readings."""
    insert_sample_data(ctx.store)
    return ctx


@pytest.fixture
def february_bills(sample_ctx):
    """Sample February 2024 period calculated with the sample totals."""
    return sample_ctx.bills.calculate_and_save_bills(2024, 2, 47440, 17440, 223630)
