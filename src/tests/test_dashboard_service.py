"""Tests for the dashboard summary."""

from datetime import datetime

from pantry_tracker.services.dashboard_service import DashboardService
from pantry_tracker.services.dto import NewCollection
from pantry_tracker.utils.constants import DEFAULT_CATEGORIES


def test_empty_database(db):
    summary = DashboardService(db).get_summary()

    assert summary["total_items"] == 0
    assert summary["empty_items"] == 0
    assert summary["total_categories"] == len(DEFAULT_CATEGORIES)
    assert summary["total_collections"] == 0
    assert summary["total_spent"] == 0.0
    assert summary["recent_collections"] == []


def test_counts_and_spend(db, item_service, collection_service, weekly_collection, rice, sunflower_oil):
    collection_service.add_item(weekly_collection, rice, 1, 90.0, unit="kg")
    collection_service.add_item(weekly_collection, sunflower_oil, 1, 45.5, unit="l")
    item_service.mark_as_empty(rice)

    summary = DashboardService(db).get_summary()

    assert summary["total_items"] == 2
    assert summary["empty_items"] == 1
    # sample category plus the defaults
    assert summary["total_categories"] == len(DEFAULT_CATEGORIES) + 1
    assert summary["total_collections"] == 1
    assert summary["total_spent"] == 135.5


def test_recent_collections_limited_and_ordered(db, collection_service):
    ids = [
        collection_service.add_collection(
            NewCollection(name=f"Trip {day}", purchase_date=datetime(2026, 5, day))
        )
        for day in range(1, 8)
    ]

    summary = DashboardService(db).get_summary(recent_limit=3)

    assert [c["id"] for c in summary["recent_collections"]] == list(reversed(ids))[:3]
    assert summary["total_collections"] == 7
