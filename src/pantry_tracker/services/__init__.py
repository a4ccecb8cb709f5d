"""Services package - Business logic layer for Pantry Tracker.

This package contains all service modules that provide business logic
and database operations for the application.

Architecture:
- Services: Classes constructed with a Database handle, one per domain
- Transactions: Managed via Database.session_scope(); every method also
  accepts an optional caller session
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Pre-checks run before any mutating statement

Service Modules:
- inventory_item_service: Inventory item catalog and stock flags
- collection_service: Purchase events and their lines
- category_service: Item categories
- price_history_service: Price history reads and reference prices
- dashboard_service: Summary statistics
- purchase_ledger: The atomic purchase line write

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Database handle and session management
- unit_converter: Unit conversion table
- price_normalizer: Purchase line normalization
"""

from . import (
    database,
    unit_converter,
    price_normalizer,
    purchase_ledger,
    inventory_item_service,
    collection_service,
    category_service,
    price_history_service,
    dashboard_service,
)

from .database import Database, open_database
from .category_service import CategoryService
from .collection_service import CollectionService
from .dashboard_service import DashboardService
from .inventory_item_service import InventoryItemService
from .price_history_service import PriceHistoryService, ReferencePrice
from .purchase_ledger import PurchaseLedger

from .exceptions import (
    ServiceError,
    NotFound,
    InventoryItemNotFound,
    CollectionNotFound,
    CategoryNotFound,
    DuplicateName,
    ValidationError,
    InvalidQuantity,
    UnsupportedConversion,
    ReferentialConflict,
    StorageError,
)

__all__ = [
    # Modules
    "database",
    "unit_converter",
    "price_normalizer",
    "purchase_ledger",
    "inventory_item_service",
    "collection_service",
    "category_service",
    "price_history_service",
    "dashboard_service",
    # Services
    "Database",
    "open_database",
    "CategoryService",
    "CollectionService",
    "DashboardService",
    "InventoryItemService",
    "PriceHistoryService",
    "ReferencePrice",
    "PurchaseLedger",
    # Exceptions
    "ServiceError",
    "NotFound",
    "InventoryItemNotFound",
    "CollectionNotFound",
    "CategoryNotFound",
    "DuplicateName",
    "ValidationError",
    "InvalidQuantity",
    "UnsupportedConversion",
    "ReferentialConflict",
    "StorageError",
]
