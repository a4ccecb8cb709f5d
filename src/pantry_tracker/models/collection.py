"""
Collection and CollectionItem models (purchase events and their lines).

A Collection is one shopping trip. Its ``total_amount`` is derived from
its lines and is recomputed from scratch after every line insert.
CollectionItem rows are immutable: they are only inserted by the purchase
ledger and removed together with their collection.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel
from pantry_tracker.utils.datetime_utils import utc_now


class Collection(BaseModel):
    """
    Collection model representing a purchase event.

    Attributes:
        name: Display name (e.g. "Weekly groceries")
        purchase_date: When the purchase happened
        total_amount: Sum of line prices
        notes: Optional notes
        created_at: When this record was created

    Relationships:
        lines: CollectionItem rows belonging to this collection
    """

    __tablename__ = "collections"

    name = Column(String, nullable=False)
    purchase_date = Column(DateTime, nullable=True, default=utc_now)
    total_amount = Column(Float, nullable=True, default=0.0)
    notes = Column(Text, nullable=True)

    lines = relationship("CollectionItem", back_populates="collection")


class CollectionItem(BaseModel):
    """
    CollectionItem model representing one purchase line.

    Attributes:
        collection_id: Foreign key to Collection
        item_id: Foreign key to InventoryItem
        quantity: Quantity bought, in ``unit`` (the purchase unit)
        price: Total price paid for the line (not a unit price)
        unit: Unit the purchase was made in
        created_at: When the line was recorded
    """

    __tablename__ = "collection_items"

    collection_id = Column(Integer, ForeignKey("collections.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    quantity = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    unit = Column(String, nullable=True)

    collection = relationship("Collection", back_populates="lines")
    item = relationship("InventoryItem", back_populates="collection_items")

    def __repr__(self) -> str:
        """String representation of a purchase line."""
        return (
            f"CollectionItem(id={self.id}, "
            f"collection_id={self.collection_id}, "
            f"item_id={self.item_id}, "
            f"quantity={self.quantity} {self.unit}, "
            f"price={self.price})"
        )
