"""
Tests for the inventory item service.

Tests cover:
- Creation and case-insensitive duplicate name rejection
- Listing with name, category and empty-status filters
- Partial updates limited to editable fields, with quantity and category checks
- Mark as empty
- Deletion guarded by purchase references
"""

import pytest

from pantry_tracker.services.dto import (
    InventoryFilters,
    InventoryItemUpdate,
    NewInventoryItem,
)
from pantry_tracker.services.exceptions import (
    CategoryNotFound,
    DuplicateName,
    ReferentialConflict,
    ValidationError,
)


class TestAddItem:
    def test_add_item_returns_id(self, item_service, sample_category):
        item_id = item_service.add_item(
            NewInventoryItem(name="  Basmati Rice ", unit="kg", category_id=sample_category)
        )

        item = item_service.get_item(item_id)
        assert item["name"] == "Basmati Rice"
        assert item["unit"] == "kg"
        assert item["quantity"] == 0.0
        assert item["is_empty"] is False
        assert item["category_name"] == "Test Staples"
        assert item["last_updated"] is not None

    def test_duplicate_name_any_case(self, item_service, rice):
        with pytest.raises(DuplicateName) as exc_info:
            item_service.add_item(NewInventoryItem(name="rice", unit="kg"))
        assert exc_info.value.name == "rice"

        assert len(item_service.list_items()) == 1

    def test_duplicate_check_ignores_whitespace(self, item_service, rice):
        with pytest.raises(DuplicateName):
            item_service.add_item(NewInventoryItem(name=" RICE "))

    def test_blank_name_rejected_by_dto(self):
        with pytest.raises(ValueError):
            NewInventoryItem(name="   ")

    def test_unknown_category_rejected(self, item_service):
        with pytest.raises(CategoryNotFound) as exc_info:
            item_service.add_item(NewInventoryItem(name="Salt", category_id=999))

        assert exc_info.value.category_id == 999
        assert item_service.list_items() == []


class TestGetItem:
    def test_missing_item_is_none(self, item_service):
        assert item_service.get_item(999) is None

    def test_item_without_category(self, item_service, sunflower_oil):
        assert item_service.get_item(sunflower_oil)["category_name"] is None


class TestListItems:
    """Test listing and filtering."""

    @pytest.fixture
    def stocked(self, item_service, sample_category, rice, sunflower_oil):
        lentils = item_service.add_item(
            NewInventoryItem(name="Red Lentils", unit="kg", category_id=sample_category)
        )
        item_service.mark_as_empty(lentils)
        return {"rice": rice, "oil": sunflower_oil, "lentils": lentils}

    def test_ordered_by_name(self, item_service, stocked):
        names = [item["name"] for item in item_service.list_items()]
        assert names == ["Red Lentils", "Rice", "Sunflower Oil"]

    def test_name_substring_case_insensitive(self, item_service, stocked):
        items = item_service.list_items(InventoryFilters(name="OIL"))
        assert [item["id"] for item in items] == [stocked["oil"]]

    def test_blank_name_filter_ignored(self, item_service, stocked):
        assert len(item_service.list_items(InventoryFilters(name="  "))) == 3

    def test_category_filter(self, item_service, stocked, sample_category):
        items = item_service.list_items(InventoryFilters(category_id=sample_category))
        assert {item["id"] for item in items} == {stocked["rice"], stocked["lentils"]}

    def test_empty_filter(self, item_service, stocked):
        empty = item_service.list_items(InventoryFilters(is_empty=True))
        not_empty = item_service.list_items(InventoryFilters(is_empty=False))

        assert [item["id"] for item in empty] == [stocked["lentils"]]
        assert {item["id"] for item in not_empty} == {stocked["rice"], stocked["oil"]}

    def test_combined_filters(self, item_service, stocked, sample_category):
        items = item_service.list_items(
            InventoryFilters(name="ri", category_id=sample_category, is_empty=False)
        )
        assert [item["id"] for item in items] == [stocked["rice"]]


class TestUpdateItem:
    """Test partial updates."""

    def test_partial_update(self, item_service, rice):
        assert item_service.update_item(rice, InventoryItemUpdate(last_price=95.0)) is True

        item = item_service.get_item(rice)
        assert item["last_price"] == 95.0
        assert item["name"] == "Rice"
        assert item["quantity"] == 1.0

    def test_clear_category(self, item_service, rice):
        item_service.update_item(rice, InventoryItemUpdate(category_id=None))
        assert item_service.get_item(rice)["category_id"] is None

    def test_refreshes_last_updated(self, item_service, rice):
        before = item_service.get_item(rice)["last_updated"]
        item_service.update_item(rice, InventoryItemUpdate(quantity=4.0))
        assert item_service.get_item(rice)["last_updated"] >= before

    def test_from_dict_drops_unknown_fields(self, item_service, rice):
        changes = InventoryItemUpdate.from_dict(
            {"quantity": 3.0, "last_spent_price": 1.0, "id": 77}
        )
        assert changes.changes() == {"quantity": 3.0}

        item_service.update_item(rice, changes)
        item = item_service.get_item(rice)
        assert item["id"] == rice
        assert item["quantity"] == 3.0
        assert item["last_spent_price"] is None

    def test_rename_to_taken_name_rejected(self, item_service, rice, sunflower_oil):
        with pytest.raises(DuplicateName):
            item_service.update_item(sunflower_oil, InventoryItemUpdate(name="RICE"))
        assert item_service.get_item(sunflower_oil)["name"] == "Sunflower Oil"

    def test_rename_to_own_name_with_new_case(self, item_service, rice):
        assert item_service.update_item(rice, InventoryItemUpdate(name="RICE")) is True
        assert item_service.get_item(rice)["name"] == "RICE"

    def test_blank_rename_rejected(self, item_service, rice):
        with pytest.raises(ValidationError):
            item_service.update_item(rice, InventoryItemUpdate(name="  "))

    @pytest.mark.parametrize("quantity", [-5.0, None])
    def test_negative_or_missing_quantity_rejected(self, item_service, rice, quantity):
        with pytest.raises(ValidationError):
            item_service.update_item(rice, InventoryItemUpdate(quantity=quantity))
        assert item_service.get_item(rice)["quantity"] == 1.0

    def test_zero_quantity_allowed(self, item_service, rice):
        assert item_service.update_item(rice, InventoryItemUpdate(quantity=0.0)) is True
        assert item_service.get_item(rice)["quantity"] == 0.0

    def test_unknown_category_rejected(self, item_service, rice, sample_category):
        with pytest.raises(CategoryNotFound):
            item_service.update_item(rice, InventoryItemUpdate(category_id=999))
        assert item_service.get_item(rice)["category_id"] == sample_category

    def test_missing_item(self, item_service):
        assert item_service.update_item(999, InventoryItemUpdate(quantity=1.0)) is False


class TestMarkAsEmpty:
    def test_zeroes_stock_and_flags(self, item_service, rice):
        assert item_service.mark_as_empty(rice) is True

        item = item_service.get_item(rice)
        assert item["quantity"] == 0.0
        assert item["is_empty"] is True

    def test_missing_item(self, item_service):
        assert item_service.mark_as_empty(999) is False


class TestDeleteItem:
    def test_delete_unreferenced(self, item_service, sunflower_oil):
        assert item_service.delete_item(sunflower_oil) is True
        assert item_service.get_item(sunflower_oil) is None

    def test_delete_missing(self, item_service):
        assert item_service.delete_item(999) is False

    def test_referenced_item_cannot_be_deleted(
        self, item_service, ledger, weekly_collection, rice
    ):
        ledger.record_purchase_line(weekly_collection, rice, 1, "kg", 90.0)

        assert item_service.get_dependencies(rice) == {"collection_items": 1, "price_history": 1}
        with pytest.raises(ReferentialConflict) as exc_info:
            item_service.delete_item(rice)

        assert exc_info.value.dependencies["collection_items"] == 1
        assert item_service.get_item(rice) is not None
