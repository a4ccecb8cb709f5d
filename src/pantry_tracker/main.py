"""
Pantry Tracker command-line interface.

Opens the application database (applying pending migrations), runs one
command against the services, and closes the database again.

Usage Examples:
    # Create or upgrade the database
    pantry-tracker init

    # Dashboard totals
    pantry-tracker summary

    # Items whose name contains "rice"
    pantry-tracker items --name rice

    # Create an item kept in kg, a collection, then record a purchase
    pantry-tracker add-item Rice --unit kg --category 2
    pantry-tracker add-collection "Weekly groceries" --date 2024-03-01

    # Record a purchase of 500 g of an item (id 3) into collection 1 for 60
    pantry-tracker record-purchase 1 3 500 60 --unit g

    # Price history of item 3
    pantry-tracker history 3

    # Item 3 ran out
    pantry-tracker mark-empty 3
"""

import argparse
from datetime import datetime
import logging
import sys
from typing import List, Optional

from pantry_tracker.services import (
    CategoryService,
    CollectionService,
    DashboardService,
    InventoryItemService,
    PriceHistoryService,
    ServiceError,
    open_database,
)
from pantry_tracker.services.database import Database
from pantry_tracker.services.dto import InventoryFilters, NewCollection, NewInventoryItem
from pantry_tracker.utils.config import Config, get_config

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}' (expected YYYY-MM-DD)")


def _fmt(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def show_summary(db: Database) -> int:
    """Print dashboard totals and the most recent collections."""
    summary = DashboardService(db).get_summary()

    print("\nPantry Summary")
    print("--------------")
    print(f"Items: {summary['total_items']} ({summary['empty_items']} empty)")
    print(f"Categories: {summary['total_categories']}")
    print(f"Collections: {summary['total_collections']}")
    print(f"Total spent: {_fmt(summary['total_spent'])}")

    if summary["recent_collections"]:
        print("\nRecent collections:")
        for collection in summary["recent_collections"]:
            print(
                f"  [{collection['id']}] {collection['name']} "
                f"{_fmt(collection['purchase_date'])} {_fmt(collection['total_amount'])}"
            )
    return 0


def list_items(db: Database, name: Optional[str], category_id: Optional[int], empty: bool) -> int:
    """Print inventory items matching the filters."""
    filters = InventoryFilters(name=name, category_id=category_id, is_empty=True if empty else None)
    items = InventoryItemService(db).list_items(filters)

    for item in items:
        flag = " (empty)" if item["is_empty"] else ""
        print(
            f"  [{item['id']}] {item['name']}: {_fmt(item['quantity'])} {_fmt(item['unit'])} "
            f"category={_fmt(item['category_name'])} last_price={_fmt(item['last_price'])}{flag}"
        )
    print(f"{len(items)} item(s)")
    return 0


def list_categories(db: Database) -> int:
    """Print categories with their item counts."""
    for category in CategoryService(db).list_categories():
        print(f"  [{category['id']}] {category['name']} ({category['item_count']} items)")
    return 0


def list_collections(db: Database) -> int:
    """Print collections, newest purchase first."""
    for collection in CollectionService(db).list_collections():
        print(
            f"  [{collection['id']}] {collection['name']} {_fmt(collection['purchase_date'])} "
            f"lines={collection['item_count']} total={_fmt(collection['total_amount'])}"
        )
    return 0


def show_history(db: Database, item_id: int) -> int:
    """Print an item's price history and suggested reference price."""
    prices = PriceHistoryService(db)
    history = prices.get_item_price_history(item_id)

    if not history:
        print(f"No price history for item {item_id}")
    for entry in history:
        print(
            f"  {entry['recorded_at']} {_fmt(entry['quantity'])} {_fmt(entry['unit'])} "
            f"for {_fmt(entry['price'])} ({_fmt(entry['unit_price'])}/unit) "
            f"collection={_fmt(entry['collection_name'])}"
        )

    reference = prices.get_reference_price(item_id)
    if reference is not None:
        print(f"Reference price: {_fmt(reference.price)} per {_fmt(reference.unit)} ({reference.source})")
    return 0


def record_purchase(db: Database, args: argparse.Namespace) -> int:
    """Record one purchase line and print the updated collection total."""
    collections = CollectionService(db)
    line_id = collections.add_item(
        collection_id=args.collection_id,
        item_id=args.item_id,
        quantity=args.quantity,
        price=args.price,
        unit=args.unit,
        standard_unit=args.standard_unit,
        standard_unit_price=args.standard_unit_price,
    )
    collection = collections.get_collection(args.collection_id)
    print(f"Recorded line {line_id}; collection total is now {_fmt(collection['total_amount'])}")
    return 0


def add_item(db: Database, args: argparse.Namespace) -> int:
    """Create an inventory item and print its ID."""
    try:
        new_item = NewInventoryItem(
            name=args.name,
            unit=args.unit,
            category_id=args.category_id,
            quantity=args.quantity,
            last_price=args.last_price,
        )
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    item_id = InventoryItemService(db).add_item(new_item)
    print(f"Added item {item_id}: {new_item.name.strip()}")
    return 0


def add_category(db: Database, name: str) -> int:
    """Create a category and print its ID."""
    category_id = CategoryService(db).add_category(name)
    print(f"Added category {category_id}: {name.strip()}")
    return 0


def add_collection(db: Database, args: argparse.Namespace) -> int:
    """Create a collection and print its ID."""
    try:
        new_collection = NewCollection(
            name=args.name, purchase_date=args.purchase_date, notes=args.notes
        )
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    collection_id = CollectionService(db).add_collection(new_collection)
    print(f"Added collection {collection_id}: {new_collection.name.strip()}")
    return 0


def mark_empty(db: Database, item_id: int) -> int:
    """Zero an item's stock and flag it empty."""
    if not InventoryItemService(db).mark_as_empty(item_id):
        print(f"ERROR: Inventory item with ID {item_id} not found")
        return 1
    print(f"Item {item_id} marked empty")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        prog="pantry-tracker",
        description="Inventory and purchase price tracking for a household or small shop",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db", dest="database_path", help="Database file (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init", help="Create or upgrade the database")
    subparsers.add_parser("summary", help="Show dashboard totals")

    items_parser = subparsers.add_parser("items", help="List inventory items")
    items_parser.add_argument("--name", help="Name substring (case-insensitive)")
    items_parser.add_argument("--category", dest="category_id", type=int, help="Category ID")
    items_parser.add_argument("--empty", action="store_true", help="Only items marked empty")

    subparsers.add_parser("categories", help="List categories")
    subparsers.add_parser("collections", help="List collections")

    history_parser = subparsers.add_parser("history", help="Show an item's price history")
    history_parser.add_argument("item_id", type=int, help="Inventory item ID")

    purchase_parser = subparsers.add_parser("record-purchase", help="Record a purchase line")
    purchase_parser.add_argument("collection_id", type=int, help="Collection ID")
    purchase_parser.add_argument("item_id", type=int, help="Inventory item ID")
    purchase_parser.add_argument("quantity", type=float, help="Quantity bought")
    purchase_parser.add_argument("price", type=float, help="Total price paid for the line")
    purchase_parser.add_argument("--unit", help="Unit the quantity is in (default: item unit)")
    purchase_parser.add_argument("--standard-unit", dest="standard_unit", help="Standard unit")
    purchase_parser.add_argument(
        "--standard-unit-price",
        dest="standard_unit_price",
        type=float,
        help="Price per standard unit",
    )

    add_item_parser = subparsers.add_parser("add-item", help="Create an inventory item")
    add_item_parser.add_argument("name", help="Item name (unique, any case)")
    add_item_parser.add_argument("--unit", help="Unit stock is kept in (e.g. kg, l, pcs)")
    add_item_parser.add_argument("--category", dest="category_id", type=int, help="Category ID")
    add_item_parser.add_argument("--quantity", type=float, default=0.0, help="Opening stock")
    add_item_parser.add_argument(
        "--last-price", dest="last_price", type=float, help="Reference price per unit"
    )

    add_category_parser = subparsers.add_parser("add-category", help="Create a category")
    add_category_parser.add_argument("name", help="Category name")

    add_collection_parser = subparsers.add_parser("add-collection", help="Create a collection")
    add_collection_parser.add_argument("name", help="Collection name")
    add_collection_parser.add_argument(
        "--date",
        dest="purchase_date",
        type=_parse_date,
        help="Purchase date as YYYY-MM-DD (default: now)",
    )
    add_collection_parser.add_argument("--notes", help="Free-form notes")

    mark_empty_parser = subparsers.add_parser("mark-empty", help="Zero an item's stock")
    mark_empty_parser.add_argument("item_id", type=int, help="Inventory item ID")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    _configure_logging(args.verbose)

    config = get_config()
    if args.database_path:
        config = Config(config.environment, database_path=args.database_path)

    try:
        db = open_database(config)
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1

    try:
        if args.command == "init":
            print(f"{config.app_name} {config.app_version}")
            print(
                f"Database ready at {config.database_path} "
                f"(schema version {config.database_version})"
            )
            return 0
        elif args.command == "summary":
            return show_summary(db)
        elif args.command == "items":
            return list_items(db, args.name, args.category_id, args.empty)
        elif args.command == "categories":
            return list_categories(db)
        elif args.command == "collections":
            return list_collections(db)
        elif args.command == "history":
            return show_history(db, args.item_id)
        elif args.command == "record-purchase":
            return record_purchase(db, args)
        elif args.command == "add-item":
            return add_item(db, args)
        elif args.command == "add-category":
            return add_category(db, args.name)
        elif args.command == "add-collection":
            return add_collection(db, args)
        elif args.command == "mark-empty":
            return mark_empty(db, args.item_id)
        else:
            print(f"Unknown command: {args.command}")
            return 1
    except ServiceError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
