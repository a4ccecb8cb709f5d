"""Purchase Ledger - atomic recording of purchase lines.

Recording one purchase line touches four tables. All of it happens in a
single transaction, so a collection line never exists without its price
history entry, its stock update and a matching collection total:

1. Insert the CollectionItem (purchase unit figures as entered)
2. Append a PriceHistory entry (raw and standardized figures)
3. Add the converted quantity to the InventoryItem, set last_spent_price
   to the line total and clear is_empty. last_price is never touched here:
   it is the user's reference price and changes only through an item edit.
4. Recompute the Collection total as the SUM of its line prices

Missing records and invalid quantities are detected before the first
write. Any failure rolls the whole unit of work back and the original
error reaches the caller.

Example Usage:
    >>> ledger = PurchaseLedger(db)
    >>> line_id = ledger.record_purchase_line(
    ...     collection_id=3,
    ...     item_id=12,
    ...     purchased_quantity=500,
    ...     purchased_unit="g",
    ...     total_price=60.0,
    ... )
"""

import logging
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from ..models import Collection, CollectionItem, InventoryItem, PriceHistory
from ..utils.datetime_utils import utc_now
from .database import Database, run_in_session
from .exceptions import CollectionNotFound, InventoryItemNotFound, ServiceError
from .logging_utils import get_service_logger, log_operation
from .price_normalizer import NormalizedLine, PurchaseLineRequest, normalize_purchase_line

logger = get_service_logger(__name__)


class PurchaseLedger:
    """Writes purchase lines and everything derived from them."""

    def __init__(self, db: Database):
        self.db = db

    def record_purchase_line(
        self,
        collection_id: int,
        item_id: int,
        purchased_quantity: float,
        purchased_unit: Optional[str],
        total_price: float,
        standard_unit: Optional[str] = None,
        standard_unit_price: Optional[float] = None,
        session: Optional[Session] = None,
    ) -> int:
        """Record one purchase line atomically.

        Args:
            collection_id: Collection (purchase event) the line belongs to
            item_id: Inventory item bought
            purchased_quantity: Quantity in ``purchased_unit`` (must be > 0)
            purchased_unit: Unit bought in; None or "" means the item's unit
            total_price: Total paid for the line (not a unit price)
            standard_unit: Optional caller-computed standard unit
            standard_unit_price: Optional caller-computed price per standard unit
            session: Optional database session for transaction composability.
                When given, the caller owns commit and rollback.

        Returns:
            ID of the new CollectionItem

        Raises:
            CollectionNotFound: If collection_id doesn't exist
            InventoryItemNotFound: If item_id doesn't exist
            InvalidQuantity: If purchased_quantity is not a positive finite number
            UnsupportedConversion: If the purchase unit and item unit measure
                different things (e.g. ml against a kg item)
            ValidationError: If total_price is negative or not finite
            StorageError: If the database fails at any step
        """
        request = PurchaseLineRequest(
            item_id=item_id,
            purchased_quantity=purchased_quantity,
            purchased_unit=purchased_unit,
            total_price=total_price,
            standard_unit=standard_unit,
            standard_unit_price=standard_unit_price,
        )

        def _record_impl(sess: Session) -> int:
            collection = sess.get(Collection, collection_id)
            if collection is None:
                raise CollectionNotFound(collection_id)

            item = sess.get(InventoryItem, item_id)
            if item is None:
                raise InventoryItemNotFound(item_id)

            normalized = normalize_purchase_line(request, item.unit)

            line = self._insert_line(sess, collection_id, request)
            self._append_price_history(sess, collection_id, request, normalized)
            self._apply_stock(sess, item_id, normalized.quantity_to_add, total_price)
            self._recompute_total(sess, collection_id)
            return line.id

        try:
            line_id = run_in_session(self.db, session, _record_impl, "record purchase line")
        except ServiceError as e:
            log_operation(
                logger,
                operation="record_purchase_line",
                outcome="rolled_back",
                level=logging.WARNING,
                collection_id=collection_id,
                item_id=item_id,
                error=str(e),
            )
            raise

        log_operation(
            logger,
            operation="record_purchase_line",
            outcome="success",
            collection_item_id=line_id,
            collection_id=collection_id,
            item_id=item_id,
            total_price=total_price,
        )
        return line_id

    def _insert_line(
        self, sess: Session, collection_id: int, request: PurchaseLineRequest
    ) -> CollectionItem:
        line = CollectionItem(
            collection_id=collection_id,
            item_id=request.item_id,
            quantity=request.purchased_quantity,
            price=request.total_price,
            unit=request.purchased_unit,
        )
        sess.add(line)
        sess.flush()
        return line

    def _append_price_history(
        self,
        sess: Session,
        collection_id: int,
        request: PurchaseLineRequest,
        normalized: NormalizedLine,
    ) -> PriceHistory:
        entry = PriceHistory(
            item_id=request.item_id,
            collection_id=collection_id,
            price=request.total_price,
            quantity=request.purchased_quantity,
            unit=request.purchased_unit,
            unit_price=normalized.unit_price,
            standard_unit=normalized.standard_unit,
            standard_unit_price=normalized.standard_unit_price,
            recorded_at=utc_now(),
        )
        sess.add(entry)
        sess.flush()
        return entry

    def _apply_stock(
        self, sess: Session, item_id: int, quantity_to_add: float, total_price: float
    ) -> None:
        result = sess.execute(
            update(InventoryItem)
            .where(InventoryItem.id == item_id)
            .values(
                quantity=InventoryItem.quantity + quantity_to_add,
                last_spent_price=total_price,
                is_empty=False,
                last_updated=utc_now(),
            )
        )
        if result.rowcount == 0:
            raise InventoryItemNotFound(item_id)

    def _recompute_total(self, sess: Session, collection_id: int) -> float:
        total = (
            sess.query(func.coalesce(func.sum(CollectionItem.price), 0.0))
            .filter(CollectionItem.collection_id == collection_id)
            .scalar()
        )
        sess.execute(
            update(Collection).where(Collection.id == collection_id).values(total_amount=total)
        )
        return total
