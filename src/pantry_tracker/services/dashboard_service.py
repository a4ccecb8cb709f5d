"""Dashboard Service - read-only summary of the pantry.

Aggregates counts and spend across the catalog and purchase history for
the home screen and the ``summary`` CLI command.
"""

from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Category, Collection, InventoryItem
from .database import Database, run_in_session
from .logging_utils import get_service_logger

logger = get_service_logger(__name__)

RECENT_COLLECTIONS_LIMIT = 5


class DashboardService:
    """Summary statistics over the whole database."""

    def __init__(self, db: Database):
        self.db = db

    def get_summary(
        self, recent_limit: int = RECENT_COLLECTIONS_LIMIT, session: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Compute dashboard totals.

        Args:
            recent_limit: Number of recent collections to include
            session: Optional database session

        Returns:
            Dictionary with keys total_items, empty_items, total_categories,
            total_collections, total_spent and recent_collections (newest
            purchase first)
        """

        def _impl(sess: Session) -> Dict[str, Any]:
            recent = (
                sess.query(Collection)
                .order_by(Collection.purchase_date.desc(), Collection.id.desc())
                .limit(recent_limit)
                .all()
            )
            return {
                "total_items": sess.query(func.count(InventoryItem.id)).scalar(),
                "empty_items": sess.query(func.count(InventoryItem.id))
                .filter(InventoryItem.is_empty.is_(True))
                .scalar(),
                "total_categories": sess.query(func.count(Category.id)).scalar(),
                "total_collections": sess.query(func.count(Collection.id)).scalar(),
                "total_spent": sess.query(
                    func.coalesce(func.sum(Collection.total_amount), 0.0)
                ).scalar(),
                "recent_collections": [c.to_dict() for c in recent],
            }

        summary = run_in_session(self.db, session, _impl, "compute dashboard summary")
        logger.debug(
            f"Dashboard: {summary['total_items']} items, "
            f"{summary['total_collections']} collections"
        )
        return summary
