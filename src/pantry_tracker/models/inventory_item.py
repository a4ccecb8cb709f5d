"""
InventoryItem model for tracking stock on hand.

Each record is one stocked good. Stock is always held in the item's own
canonical ``unit``; purchase lines recorded in other units are converted
before they are added.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel
from pantry_tracker.utils.datetime_utils import utc_now


class InventoryItem(BaseModel):
    """
    InventoryItem model representing a stocked good.

    Attributes:
        name: Item name (unique case-insensitively, checked in the service layer)
        category_id: Optional foreign key to Category
        quantity: Quantity on hand, in ``unit``
        unit: Canonical unit for this item (e.g. "kg", "pcs")
        last_price: Reference price per canonical unit, edited only by the user
        last_spent_price: Total price of the most recent purchase line
        is_empty: Set by mark-as-empty, cleared by a recorded purchase
        last_updated: Last modification timestamp
        created_at: When the item was created

    Relationships:
        category: The Category this item belongs to
        collection_items: Purchase lines for this item
        price_history: Price history entries for this item
    """

    __tablename__ = "inventory_items"

    name = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(String, nullable=True)

    last_price = Column(Float, nullable=True)
    last_spent_price = Column(Float, nullable=True)
    is_empty = Column(Boolean, nullable=False, default=False)

    last_updated = Column(DateTime, nullable=True, default=utc_now)

    category = relationship("Category", back_populates="items")
    collection_items = relationship("CollectionItem", back_populates="item")
    price_history = relationship("PriceHistory", back_populates="item")

    def __repr__(self) -> str:
        """String representation of inventory item."""
        return (
            f"InventoryItem(id={self.id}, "
            f"name='{self.name}', "
            f"quantity={self.quantity}, "
            f"unit='{self.unit}')"
        )
