"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .category import Category
from .inventory_item import InventoryItem
from .collection import Collection, CollectionItem
from .price_history import PriceHistory

__all__ = [
    "Base",
    "BaseModel",
    "Category",
    "InventoryItem",
    "Collection",
    "CollectionItem",
    "PriceHistory",
]
