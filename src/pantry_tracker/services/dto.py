"""Data Transfer Objects for the service layer.

Typed inputs for creating and partially updating records. Partial updates
mark untouched fields with the ``UNSET`` sentinel so that "leave alone" and
"set to None" stay distinguishable, and only the fields each dataclass
declares can ever reach an UPDATE statement.

Examples:
    # Rename an item and clear its category, leave everything else alone
    update = InventoryItemUpdate(name="Basmati Rice", category_id=None)
    update.changes()  # {"name": "Basmati Rice", "category_id": None}
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Optional, Union


class _Unset:
    """Marker type for fields a partial update leaves untouched."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class _PartialUpdate:
    """Mixin turning a dataclass of optional fields into a change set."""

    def changes(self) -> Dict[str, Any]:
        """Return the fields that were explicitly set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def has_changes(self) -> bool:
        """True if at least one field was set."""
        return bool(self.changes())


@dataclass
class NewInventoryItem:
    """Fields for creating an inventory item.

    Attributes:
        name: Item name (unique, case-insensitive)
        unit: Canonical unit stock is kept in
        category_id: Optional category
        quantity: Opening stock (default 0)
        last_price: Optional reference price per ``unit``
    """

    name: str
    unit: Optional[str] = None
    category_id: Optional[int] = None
    quantity: float = 0.0
    last_price: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate item fields."""
        if not self.name or not self.name.strip():
            raise ValueError("name is required")
        if self.quantity is None:
            self.quantity = 0.0
        if self.quantity < 0:
            raise ValueError("quantity must be >= 0")


@dataclass
class InventoryItemUpdate(_PartialUpdate):
    """Editable inventory item fields; anything left UNSET is not changed."""

    name: Union[str, Any] = UNSET
    category_id: Union[Optional[int], Any] = UNSET
    quantity: Union[float, Any] = UNSET
    unit: Union[Optional[str], Any] = UNSET
    last_price: Union[Optional[float], Any] = UNSET
    is_empty: Union[bool, Any] = UNSET

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryItemUpdate":
        """Build an update from loose input, ignoring keys that are not editable."""
        allowed = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in allowed})


@dataclass
class InventoryFilters:
    """Optional filters for listing inventory items.

    Attributes:
        name: Case-insensitive substring of the item name
        category_id: Only items in this category
        is_empty: Only empty (True) or non-empty (False) items
    """

    name: Optional[str] = None
    category_id: Optional[int] = None
    is_empty: Optional[bool] = None


@dataclass
class NewCollection:
    """Fields for creating a collection (purchase event).

    Attributes:
        name: Display name
        purchase_date: When the purchase happened (defaults to now)
        notes: Optional notes
        total_amount: Opening total; recomputed once lines are added
    """

    name: str
    purchase_date: Optional[datetime] = None
    notes: Optional[str] = None
    total_amount: float = 0.0

    def __post_init__(self) -> None:
        """Validate collection fields."""
        if not self.name or not self.name.strip():
            raise ValueError("name is required")


@dataclass
class CollectionUpdate(_PartialUpdate):
    """Editable collection fields; anything left UNSET is not changed.

    ``total_amount`` is only honored while the collection has no lines.
    """

    name: Union[str, Any] = UNSET
    purchase_date: Union[Optional[datetime], Any] = UNSET
    notes: Union[Optional[str], Any] = UNSET
    total_amount: Union[float, Any] = UNSET

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CollectionUpdate":
        """Build an update from loose input, ignoring keys that are not editable."""
        allowed = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in allowed})
