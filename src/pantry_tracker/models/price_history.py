"""
PriceHistory model - append-only pricing record per purchase line.

This model is IMMUTABLE after creation: rows are never updated or deleted
by the application. It keeps both the raw purchase-unit figures and the
standardized figures so purchases made in different units can be compared.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel
from pantry_tracker.utils.datetime_utils import utc_now


class PriceHistory(BaseModel):
    """
    PriceHistory model.

    Attributes:
        item_id: Foreign key to InventoryItem
        collection_id: Collection the entry came from (None for manual entries;
            may name a collection that has since been deleted)
        price: Total price paid
        quantity: Quantity bought, in ``unit``
        unit: Purchase unit
        unit_price: price / quantity, per purchase unit
        standard_unit: Unit the standard price is expressed in
        standard_unit_price: Price per ``standard_unit``
        recorded_at: When the entry was appended
    """

    __tablename__ = "price_history"

    # price_history has recorded_at instead of created_at
    created_at = None

    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    collection_id = Column(Integer, nullable=True)
    price = Column(Float, nullable=False)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)
    unit = Column(String, nullable=True)
    standard_unit = Column(String, nullable=True)
    standard_unit_price = Column(Float, nullable=True)
    recorded_at = Column(DateTime, nullable=False, default=utc_now)

    item = relationship("InventoryItem", back_populates="price_history")

    def __repr__(self) -> str:
        """String representation of price history entry."""
        return (
            f"PriceHistory(id={self.id}, "
            f"item_id={self.item_id}, "
            f"price={self.price}, "
            f"quantity={self.quantity} {self.unit})"
        )
