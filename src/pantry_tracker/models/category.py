"""
Category model for grouping inventory items.

Categories are a flat list of names. A category cannot be deleted while
any inventory item references it; that guard lives in CategoryService,
not in a database cascade.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class Category(BaseModel):
    """
    Category model.

    Attributes:
        name: Unique category name
        created_at: When the category was created

    Relationships:
        items: InventoryItem records in this category
    """

    __tablename__ = "categories"

    name = Column(String, nullable=False, unique=True)

    items = relationship("InventoryItem", back_populates="category")
