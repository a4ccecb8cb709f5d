"""Pytest configuration and fixtures for service layer tests."""

import pytest

from pantry_tracker.services.category_service import CategoryService
from pantry_tracker.services.collection_service import CollectionService
from pantry_tracker.services.database import Database
from pantry_tracker.services.dto import NewCollection, NewInventoryItem
from pantry_tracker.services.inventory_item_service import InventoryItemService
from pantry_tracker.services.price_history_service import PriceHistoryService
from pantry_tracker.services.purchase_ledger import PurchaseLedger
from pantry_tracker.utils.config import reset_config


@pytest.fixture(scope="function")
def db():
    """Provide a clean, migrated in-memory database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database (StaticPool, one connection)
    2. Applies all schema migrations, including the default categories
    3. Provides the Database handle to the test
    4. Disposes of the engine after the test completes
    """
    database = Database("sqlite:///:memory:")
    database.initialize()

    yield database

    database.close()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep tests away from the user's real configuration and database."""
    monkeypatch.delenv("PANTRY_TRACKER_ENV", raising=False)
    monkeypatch.delenv("PANTRY_TRACKER_DB", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def item_service(db):
    return InventoryItemService(db)


@pytest.fixture
def collection_service(db):
    return CollectionService(db)


@pytest.fixture
def category_service(db):
    return CategoryService(db)


@pytest.fixture
def price_history_service(db):
    return PriceHistoryService(db)


@pytest.fixture
def ledger(db):
    return PurchaseLedger(db)


@pytest.fixture
def sample_category(category_service):
    """Provide a sample category id for tests."""
    return category_service.add_category("Test Staples")


@pytest.fixture
def rice(item_service, sample_category):
    """Provide a rice item kept in kg with a reference price of 100."""
    return item_service.add_item(
        NewInventoryItem(
            name="Rice",
            unit="kg",
            category_id=sample_category,
            quantity=1.0,
            last_price=100.0,
        )
    )


@pytest.fixture
def sunflower_oil(item_service):
    """Provide an oil item kept in liters with no category."""
    return item_service.add_item(NewInventoryItem(name="Sunflower Oil", unit="l"))


@pytest.fixture
def weekly_collection(collection_service):
    """Provide an empty collection."""
    return collection_service.add_collection(NewCollection(name="Weekly groceries"))
