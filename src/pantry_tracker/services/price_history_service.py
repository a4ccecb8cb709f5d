"""Price History Service - read side of the purchase price ledger.

Price history is supplementary display data. Reads here never block a
purchase workflow: a missing item id, a missing ``price_history`` table or
a storage failure all produce an empty result (logged) instead of an
exception.

Key Features:
- Per-item price history, newest first, with the collection it came from
- Reference price suggestion for pre-filling a standardized unit price
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models import Collection, InventoryItem, PriceHistory
from ..utils.constants import REFERENCE_PRICE_UNITS
from .database import Database, run_in_session
from .exceptions import StorageError
from .logging_utils import get_service_logger

logger = get_service_logger(__name__)


@dataclass(frozen=True)
class ReferencePrice:
    """A suggested unit price and the unit it is expressed in.

    Attributes:
        price: Price per ``unit``
        unit: Unit of the price
        source: "standard_purchase", "latest_purchase" or "item_last_price"
    """

    price: float
    unit: Optional[str]
    source: str


class PriceHistoryService:
    """Reads over the append-only price history."""

    def __init__(self, db: Database):
        self.db = db

    def get_item_price_history(
        self, item_id: Optional[int], session: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """List an item's price history, newest first.

        Each entry carries ``collection_name`` and ``purchase_date`` from its
        collection (None for entries without one).

        Args:
            item_id: Inventory item
            session: Optional database session

        Returns:
            List of entry dicts; empty if there is no history, the id is
            falsy, the table is missing or the read fails
        """
        if not item_id:
            logger.warning(f"Invalid item ID provided for price history: {item_id!r}")
            return []

        def _impl(sess: Session) -> List[Dict[str, Any]]:
            if not self.db.table_exists(PriceHistory.__tablename__, session=sess):
                logger.warning("price_history table does not exist")
                return []

            rows = (
                sess.query(PriceHistory, Collection.name, Collection.purchase_date)
                .outerjoin(Collection, PriceHistory.collection_id == Collection.id)
                .filter(PriceHistory.item_id == item_id)
                .order_by(PriceHistory.recorded_at.desc(), PriceHistory.id.desc())
                .all()
            )

            history = []
            for entry, collection_name, purchase_date in rows:
                data = entry.to_dict()
                data["collection_name"] = collection_name
                data["purchase_date"] = purchase_date.isoformat() if purchase_date else None
                history.append(data)
            return history

        try:
            history = run_in_session(self.db, session, _impl, "read price history")
        except StorageError as e:
            logger.error(f"Error getting price history for item {item_id}: {e}")
            return []

        logger.debug(f"Found {len(history)} price history records for item {item_id}")
        return history

    def get_reference_price(
        self, item_id: int, session: Optional[Session] = None
    ) -> Optional[ReferencePrice]:
        """Suggest a unit price for a new purchase of an item.

        Preference order:
        1. The most recent purchase of exactly 1 kg / l / bottle / unit
        2. The most recent purchase of any size
        3. The item's own last_price, per the item's unit

        Returns:
            ReferencePrice, or None if nothing is known
        """
        history = self.get_item_price_history(item_id, session=session)

        for entry in history:
            unit = (entry.get("unit") or "").lower()
            if entry.get("quantity") == 1 and unit in REFERENCE_PRICE_UNITS:
                return ReferencePrice(entry["unit_price"], entry["unit"], "standard_purchase")

        def _item_fallback(sess: Session) -> Optional[InventoryItem]:
            return sess.get(InventoryItem, item_id)

        item = run_in_session(self.db, session, _item_fallback, "read inventory item")

        if history:
            latest = history[0]
            unit = latest.get("unit") or (item.unit if item else None)
            return ReferencePrice(latest["unit_price"], unit, "latest_purchase")

        if item is not None and item.last_price:
            return ReferencePrice(item.last_price, item.unit, "item_last_price")

        return None
