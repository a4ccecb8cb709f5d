"""
Tests for the category service.

Tests cover:
- Default categories present after initialization
- Creation, renaming and duplicate rejection
- Item counts
- Delete refused while items reference the category
"""

import pytest

from pantry_tracker.services.dto import InventoryItemUpdate, NewInventoryItem
from pantry_tracker.services.exceptions import DuplicateName, ValidationError
from pantry_tracker.utils.constants import DEFAULT_CATEGORIES


class TestListCategories:
    def test_defaults_seeded(self, category_service):
        names = {category["name"] for category in category_service.list_categories()}
        assert set(DEFAULT_CATEGORIES) <= names

    def test_ordered_by_name_with_counts(self, category_service, sample_category, rice):
        categories = category_service.list_categories()

        names = [category["name"] for category in categories]
        assert names == sorted(names)

        by_id = {category["id"]: category for category in categories}
        assert by_id[sample_category]["item_count"] == 1


class TestAddCategory:
    def test_add_and_get(self, category_service):
        category_id = category_service.add_category(" Baking ")

        category = category_service.get_category(category_id)
        assert category["name"] == "Baking"
        assert category["item_count"] == 0

    def test_duplicate_rejected(self, category_service):
        with pytest.raises(DuplicateName):
            category_service.add_category("Spices")

    def test_blank_rejected(self, category_service):
        with pytest.raises(ValidationError):
            category_service.add_category("  ")

    def test_missing_category_is_none(self, category_service):
        assert category_service.get_category(999) is None


class TestUpdateCategory:
    def test_rename(self, category_service, sample_category):
        assert category_service.update_category(sample_category, "Staples") is True
        assert category_service.get_category(sample_category)["name"] == "Staples"

    def test_rename_onto_existing_rejected(self, category_service, sample_category):
        with pytest.raises(DuplicateName):
            category_service.update_category(sample_category, "Spices")

    def test_missing(self, category_service):
        assert category_service.update_category(999, "Anything") is False


class TestDeleteCategory:
    """Test the in-use guard on deletion."""

    def test_delete_unused(self, category_service):
        category_id = category_service.add_category("Seasonal")

        assert category_service.delete_category(category_id) is True
        assert category_service.get_category(category_id) is None

    def test_delete_in_use_refused(self, category_service, item_service, sample_category, rice):
        assert category_service.delete_category(sample_category) is False

        assert category_service.get_category(sample_category) is not None
        assert item_service.get_item(rice)["category_id"] == sample_category

    def test_delete_after_items_move(self, category_service, item_service, sample_category, rice):
        item_service.update_item(rice, InventoryItemUpdate(category_id=None))
        assert category_service.delete_category(sample_category) is True

    def test_delete_missing(self, category_service):
        assert category_service.delete_category(999) is False

    def test_one_item_is_enough_to_refuse(self, category_service, item_service):
        category_id = category_service.add_category("Frozen")
        item_service.add_item(NewInventoryItem(name="Peas", unit="kg", category_id=category_id))

        assert category_service.delete_category(category_id) is False
