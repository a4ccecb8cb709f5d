"""Collection Service - purchase events and their lines.

A collection is one shopping trip. Its lines are added only through
PurchaseLedger (``add_item`` delegates to it) so that stock, price history
and the collection total move together. Deleting a collection removes its
lines first and then the collection, in one transaction.

Example Usage:
    >>> collections = CollectionService(db)
    >>> collection_id = collections.add_collection(NewCollection(name="Weekly groceries"))
    >>> collections.add_item(collection_id, item_id=12, quantity=2, unit="kg", price=180)
    >>> collections.get_collection(collection_id)["total_amount"]
    180.0
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Category, Collection, CollectionItem, InventoryItem
from ..utils.datetime_utils import utc_now
from .database import Database, run_in_session
from .dto import CollectionUpdate, NewCollection
from .logging_utils import get_service_logger, log_operation
from .price_history_service import PriceHistoryService
from .purchase_ledger import PurchaseLedger

logger = get_service_logger(__name__)


class CollectionService:
    """Record-level operations on collections plus purchase line recording."""

    def __init__(self, db: Database):
        self.db = db
        self.ledger = PurchaseLedger(db)
        self.price_history = PriceHistoryService(db)

    def _with_aggregates(self, sess: Session):
        return (
            sess.query(
                Collection,
                func.count(CollectionItem.id).label("item_count"),
                func.sum(CollectionItem.price).label("actual_total"),
            )
            .outerjoin(CollectionItem, CollectionItem.collection_id == Collection.id)
            .group_by(Collection.id)
        )

    @staticmethod
    def _row_to_dict(row) -> Dict[str, Any]:
        collection, item_count, actual_total = row
        return {
            **collection.to_dict(),
            "item_count": item_count,
            "actual_total": actual_total or 0.0,
        }

    def list_collections(self, session: Optional[Session] = None) -> List[Dict[str, Any]]:
        """List collections, most recent purchase first, with line count and line total."""

        def _impl(sess: Session) -> List[Dict[str, Any]]:
            rows = self._with_aggregates(sess).order_by(Collection.purchase_date.desc()).all()
            return [self._row_to_dict(row) for row in rows]

        return run_in_session(self.db, session, _impl, "list collections")

    def get_collection(
        self, collection_id: int, session: Optional[Session] = None
    ) -> Optional[Dict[str, Any]]:
        """Get one collection with ``item_count`` and ``actual_total``, or None."""

        def _impl(sess: Session) -> Optional[Dict[str, Any]]:
            row = self._with_aggregates(sess).filter(Collection.id == collection_id).first()
            return self._row_to_dict(row) if row else None

        return run_in_session(self.db, session, _impl, "get collection")

    def get_collection_items(
        self, collection_id: int, session: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """List a collection's lines with item and category names, by item name."""

        def _impl(sess: Session) -> List[Dict[str, Any]]:
            rows = (
                sess.query(CollectionItem, InventoryItem.name, Category.name)
                .join(InventoryItem, CollectionItem.item_id == InventoryItem.id)
                .outerjoin(Category, InventoryItem.category_id == Category.id)
                .filter(CollectionItem.collection_id == collection_id)
                .order_by(InventoryItem.name.asc())
                .all()
            )
            return [
                {**line.to_dict(), "name": item_name, "category_name": category_name}
                for line, item_name, category_name in rows
            ]

        return run_in_session(self.db, session, _impl, "list collection items")

    def add_collection(self, new_collection: NewCollection, session: Optional[Session] = None) -> int:
        """Create a collection.

        Returns:
            ID of the new collection
        """

        def _impl(sess: Session) -> int:
            collection = Collection(
                name=new_collection.name.strip(),
                purchase_date=new_collection.purchase_date or utc_now(),
                total_amount=new_collection.total_amount or 0.0,
                notes=new_collection.notes,
            )
            sess.add(collection)
            sess.flush()
            return collection.id

        collection_id = run_in_session(self.db, session, _impl, "add collection")
        log_operation(
            logger, operation="add_collection", outcome="success", collection_id=collection_id
        )
        return collection_id

    def add_item(
        self,
        collection_id: int,
        item_id: int,
        quantity: float,
        price: float,
        unit: Optional[str] = None,
        standard_unit: Optional[str] = None,
        standard_unit_price: Optional[float] = None,
        session: Optional[Session] = None,
    ) -> int:
        """Record a purchase line in a collection.

        See PurchaseLedger.record_purchase_line for the full contract.

        Returns:
            ID of the new collection line
        """
        return self.ledger.record_purchase_line(
            collection_id=collection_id,
            item_id=item_id,
            purchased_quantity=quantity,
            purchased_unit=unit,
            total_price=price,
            standard_unit=standard_unit,
            standard_unit_price=standard_unit_price,
            session=session,
        )

    def update_collection(
        self, collection_id: int, changes: CollectionUpdate, session: Optional[Session] = None
    ) -> bool:
        """Apply a partial update to a collection.

        ``total_amount`` is derived from the lines once any exist; a
        requested total is dropped in that case.

        Returns:
            True if a row was changed; False if nothing was requested or the
            collection doesn't exist
        """
        values = changes.changes()

        def _impl(sess: Session) -> bool:
            if "total_amount" in values:
                has_lines = (
                    sess.query(CollectionItem.id)
                    .filter(CollectionItem.collection_id == collection_id)
                    .first()
                )
                if has_lines:
                    logger.info(
                        f"Ignoring total_amount for collection {collection_id}: "
                        f"it is derived from its items"
                    )
                    values.pop("total_amount")

            if not values:
                return False

            updated = (
                sess.query(Collection).filter(Collection.id == collection_id).update(values)
            )
            return updated > 0

        return run_in_session(self.db, session, _impl, "update collection")

    def delete_collection(self, collection_id: int, session: Optional[Session] = None) -> bool:
        """Delete a collection and its lines.

        Price history entries are kept; they are an audit trail.

        Returns:
            True if the collection existed and was deleted
        """

        def _impl(sess: Session) -> bool:
            sess.query(CollectionItem).filter(
                CollectionItem.collection_id == collection_id
            ).delete()
            deleted = sess.query(Collection).filter(Collection.id == collection_id).delete()
            return deleted > 0

        deleted = run_in_session(self.db, session, _impl, "delete collection")
        log_operation(
            logger,
            operation="delete_collection",
            outcome="success" if deleted else "not_found",
            collection_id=collection_id,
        )
        return deleted

    def get_item_price_history(
        self, item_id: int, session: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """Price history for an item, newest first (empty list if none)."""
        return self.price_history.get_item_price_history(item_id, session=session)
