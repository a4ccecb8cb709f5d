"""Inventory Item Service - catalog of stocked goods.

This module provides record-level access to inventory items: listing with
filters, enriched reads, creation, partial updates, mark-as-empty and
guarded deletion. Stock increases from purchases go through
PurchaseLedger, not through this service.

Rules enforced here, before any mutating statement:
- Item names are unique case-insensitively ("Rice" and "rice" collide)
- Only the fields declared on InventoryItemUpdate can be changed
- An item referenced by purchase lines or price history cannot be deleted

Example Usage:
    >>> service = InventoryItemService(db)
    >>> item_id = service.add_item(NewInventoryItem(name="Rice", unit="kg", last_price=100))
    >>> service.update_item(item_id, InventoryItemUpdate(last_price=95))
    True
    >>> service.mark_as_empty(item_id)
    True
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

from ..models import Category, CollectionItem, InventoryItem, PriceHistory
from ..utils.datetime_utils import utc_now
from .database import Database, run_in_session
from .dto import InventoryFilters, InventoryItemUpdate, NewInventoryItem
from .exceptions import CategoryNotFound, DuplicateName, ReferentialConflict, ValidationError
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


def _item_to_dict(item: InventoryItem) -> Dict[str, Any]:
    data = item.to_dict()
    data["category_name"] = item.category.name if item.category else None
    return data


class InventoryItemService:
    """Record-level operations on inventory items."""

    def __init__(self, db: Database):
        self.db = db

    def _name_taken(self, sess: Session, name: str, exclude_id: Optional[int] = None) -> bool:
        q = sess.query(InventoryItem.id).filter(
            func.lower(InventoryItem.name) == name.strip().lower()
        )
        if exclude_id is not None:
            q = q.filter(InventoryItem.id != exclude_id)
        return q.first() is not None

    def _check_category(self, sess: Session, category_id: Optional[int]) -> None:
        if category_id is not None and sess.get(Category, category_id) is None:
            raise CategoryNotFound(category_id)

    def list_items(
        self, filters: Optional[InventoryFilters] = None, session: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """List inventory items ordered by name.

        Args:
            filters: Optional name substring / category / empty-status filters
            session: Optional database session

        Returns:
            List of item dicts, each with ``category_name``
        """
        filters = filters or InventoryFilters()

        def _impl(sess: Session) -> List[Dict[str, Any]]:
            q = sess.query(InventoryItem).options(joinedload(InventoryItem.category))

            if filters.category_id is not None:
                q = q.filter(InventoryItem.category_id == filters.category_id)
            if filters.is_empty is not None:
                q = q.filter(InventoryItem.is_empty == filters.is_empty)
            if filters.name and filters.name.strip():
                q = q.filter(InventoryItem.name.ilike(f"%{filters.name.strip()}%"))

            return [_item_to_dict(item) for item in q.order_by(InventoryItem.name.asc()).all()]

        return run_in_session(self.db, session, _impl, "list inventory items")

    def get_item(self, item_id: int, session: Optional[Session] = None) -> Optional[Dict[str, Any]]:
        """Get one item with its category name, or None if it doesn't exist."""

        def _impl(sess: Session) -> Optional[Dict[str, Any]]:
            item = (
                sess.query(InventoryItem)
                .options(joinedload(InventoryItem.category))
                .filter(InventoryItem.id == item_id)
                .first()
            )
            return _item_to_dict(item) if item else None

        return run_in_session(self.db, session, _impl, "get inventory item")

    def add_item(self, new_item: NewInventoryItem, session: Optional[Session] = None) -> int:
        """Create an inventory item.

        Args:
            new_item: Item fields
            session: Optional database session for transaction composability

        Returns:
            ID of the new item

        Raises:
            DuplicateName: If an item with the same name (any case) exists
            CategoryNotFound: If category_id names no category
            StorageError: If the database operation fails
        """
        name = new_item.name.strip()

        def _impl(sess: Session) -> int:
            if self._name_taken(sess, name):
                raise DuplicateName("Inventory item", name)
            self._check_category(sess, new_item.category_id)

            item = InventoryItem(
                name=name,
                category_id=new_item.category_id,
                quantity=new_item.quantity,
                unit=new_item.unit,
                last_price=new_item.last_price,
                is_empty=False,
                last_updated=utc_now(),
            )
            sess.add(item)
            sess.flush()
            return item.id

        item_id = run_in_session(self.db, session, _impl, "add inventory item")
        log_operation(logger, operation="add_item", outcome="success", item_id=item_id)
        return item_id

    def update_item(
        self, item_id: int, changes: InventoryItemUpdate, session: Optional[Session] = None
    ) -> bool:
        """Apply a partial update to an item.

        ``last_updated`` is refreshed on every update. This is the only path
        that changes ``last_price``.

        Args:
            item_id: Item to update
            changes: Fields to change; UNSET fields are left alone
            session: Optional database session

        Returns:
            True if a row was changed, False if the item doesn't exist

        Raises:
            ValidationError: If the new name is blank or the quantity is missing or negative
            DuplicateName: If renaming onto another item's name (any case)
            CategoryNotFound: If category_id names no category
        """
        values = changes.changes()
        if "name" in values:
            if not values["name"] or not values["name"].strip():
                raise ValidationError(["Item name is required"])
            values["name"] = values["name"].strip()
        if "quantity" in values and (values["quantity"] is None or values["quantity"] < 0):
            raise ValidationError(["Quantity must be >= 0"])

        def _impl(sess: Session) -> bool:
            if values.get("name") and self._name_taken(sess, values["name"], exclude_id=item_id):
                raise DuplicateName("Inventory item", values["name"])
            if "category_id" in values:
                self._check_category(sess, values["category_id"])

            result = sess.execute(
                update(InventoryItem)
                .where(InventoryItem.id == item_id)
                .values(**values, last_updated=utc_now())
            )
            return result.rowcount > 0

        changed = run_in_session(self.db, session, _impl, "update inventory item")
        log_operation(
            logger,
            operation="update_item",
            outcome="success" if changed else "not_found",
            item_id=item_id,
            fields=sorted(values),
        )
        return changed

    def mark_as_empty(self, item_id: int, session: Optional[Session] = None) -> bool:
        """Zero an item's stock and flag it empty in one statement.

        Returns:
            True if the item exists and was updated
        """

        def _impl(sess: Session) -> bool:
            result = sess.execute(
                update(InventoryItem)
                .where(InventoryItem.id == item_id)
                .values(is_empty=True, quantity=0.0, last_updated=utc_now())
            )
            return result.rowcount > 0

        changed = run_in_session(self.db, session, _impl, "mark inventory item empty")
        log_operation(
            logger,
            operation="mark_as_empty",
            outcome="success" if changed else "not_found",
            item_id=item_id,
        )
        return changed

    def get_dependencies(self, item_id: int, session: Optional[Session] = None) -> Dict[str, int]:
        """Count the records referencing an item.

        Returns:
            {"collection_items": n, "price_history": m}
        """

        def _impl(sess: Session) -> Dict[str, int]:
            return {
                "collection_items": sess.query(CollectionItem)
                .filter(CollectionItem.item_id == item_id)
                .count(),
                "price_history": sess.query(PriceHistory)
                .filter(PriceHistory.item_id == item_id)
                .count(),
            }

        return run_in_session(self.db, session, _impl, "count inventory item dependencies")

    def delete_item(self, item_id: int, session: Optional[Session] = None) -> bool:
        """Delete an item that no purchase record references.

        Returns:
            True if deleted, False if the item doesn't exist

        Raises:
            ReferentialConflict: If purchase lines or price history reference the item
        """

        def _impl(sess: Session) -> bool:
            deps = self.get_dependencies(item_id, session=sess)
            if any(deps.values()):
                raise ReferentialConflict("Inventory item", item_id, deps)

            deleted = sess.query(InventoryItem).filter(InventoryItem.id == item_id).delete()
            return deleted > 0

        deleted = run_in_session(self.db, session, _impl, "delete inventory item")
        log_operation(
            logger,
            operation="delete_item",
            outcome="success" if deleted else "not_found",
            item_id=item_id,
        )
        return deleted
