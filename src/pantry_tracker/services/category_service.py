"""Category Service - flat list of item categories.

Deleting a category is refused (returns False, nothing raised) while any
inventory item still references it. The check runs before the DELETE, so
a refusal never needs a rollback.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Category, InventoryItem
from .database import Database, run_in_session
from .exceptions import DuplicateName, ValidationError
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


class CategoryService:
    """Record-level operations on categories."""

    def __init__(self, db: Database):
        self.db = db

    def _with_counts(self, sess: Session):
        return (
            sess.query(Category, func.count(InventoryItem.id).label("item_count"))
            .outerjoin(InventoryItem, InventoryItem.category_id == Category.id)
            .group_by(Category.id)
        )

    @staticmethod
    def _clean_name(name: str) -> str:
        if not name or not name.strip():
            raise ValidationError(["Category name is required"])
        return name.strip()

    def list_categories(self, session: Optional[Session] = None) -> List[Dict[str, Any]]:
        """List categories by name, each with the number of items using it."""

        def _impl(sess: Session) -> List[Dict[str, Any]]:
            rows = self._with_counts(sess).order_by(Category.name.asc()).all()
            return [{**category.to_dict(), "item_count": count} for category, count in rows]

        return run_in_session(self.db, session, _impl, "list categories")

    def get_category(
        self, category_id: int, session: Optional[Session] = None
    ) -> Optional[Dict[str, Any]]:
        """Get one category with its item count, or None."""

        def _impl(sess: Session) -> Optional[Dict[str, Any]]:
            row = self._with_counts(sess).filter(Category.id == category_id).first()
            if row is None:
                return None
            category, count = row
            return {**category.to_dict(), "item_count": count}

        return run_in_session(self.db, session, _impl, "get category")

    def add_category(self, name: str, session: Optional[Session] = None) -> int:
        """Create a category.

        Returns:
            ID of the new category

        Raises:
            ValidationError: If the name is blank
            DuplicateName: If a category with this name exists
        """
        name = self._clean_name(name)

        def _impl(sess: Session) -> int:
            if sess.query(Category.id).filter(Category.name == name).first():
                raise DuplicateName("Category", name)
            category = Category(name=name)
            sess.add(category)
            sess.flush()
            return category.id

        category_id = run_in_session(self.db, session, _impl, "add category")
        log_operation(logger, operation="add_category", outcome="success", category_id=category_id)
        return category_id

    def update_category(self, category_id: int, name: str, session: Optional[Session] = None) -> bool:
        """Rename a category.

        Returns:
            True if renamed, False if the category doesn't exist

        Raises:
            DuplicateName: If another category already has the name
        """
        name = self._clean_name(name)

        def _impl(sess: Session) -> bool:
            clash = (
                sess.query(Category.id)
                .filter(Category.name == name, Category.id != category_id)
                .first()
            )
            if clash:
                raise DuplicateName("Category", name)
            updated = sess.query(Category).filter(Category.id == category_id).update({"name": name})
            return updated > 0

        return run_in_session(self.db, session, _impl, "update category")

    def delete_category(self, category_id: int, session: Optional[Session] = None) -> bool:
        """Delete a category nobody uses.

        Returns:
            True if deleted; False if items still reference it (the category
            is left intact) or it doesn't exist
        """

        def _impl(sess: Session) -> bool:
            in_use = (
                sess.query(InventoryItem).filter(InventoryItem.category_id == category_id).count()
            )
            if in_use > 0:
                log_operation(
                    logger,
                    operation="delete_category",
                    outcome="refused",
                    category_id=category_id,
                    item_count=in_use,
                )
                return False

            deleted = sess.query(Category).filter(Category.id == category_id).delete()
            return deleted > 0

        return run_in_session(self.db, session, _impl, "delete category")
