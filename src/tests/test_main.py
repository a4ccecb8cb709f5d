"""Tests for the command-line interface against a temporary database file."""

import pytest

from pantry_tracker.main import build_parser, main
from pantry_tracker.services.collection_service import CollectionService
from pantry_tracker.services.database import Database
from pantry_tracker.services.dto import NewCollection, NewInventoryItem
from pantry_tracker.services.inventory_item_service import InventoryItemService
from pantry_tracker.utils.constants import APP_NAME, DATABASE_VERSION


@pytest.fixture
def db_file(tmp_path):
    return tmp_path / "pantry.sqlite"


@pytest.fixture
def seeded(db_file):
    """Initialize the file database with one item and one collection."""
    assert main(["--db", str(db_file), "init"]) == 0

    database = Database(f"sqlite:///{db_file.as_posix()}")
    try:
        item_id = InventoryItemService(database).add_item(
            NewInventoryItem(name="Rice", unit="kg", last_price=100.0)
        )
        collection_id = CollectionService(database).add_collection(NewCollection(name="Weekly"))
    finally:
        database.close()
    return {"item_id": item_id, "collection_id": collection_id}


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_init_creates_database(db_file, capsys):
    assert main(["--db", str(db_file), "init"]) == 0
    assert db_file.exists()
    out = capsys.readouterr().out
    assert APP_NAME in out
    assert "Database ready" in out
    assert f"schema version {DATABASE_VERSION}" in out


def test_record_purchase_and_history(db_file, seeded, capsys):
    args = [
        "--db",
        str(db_file),
        "record-purchase",
        str(seeded["collection_id"]),
        str(seeded["item_id"]),
        "500",
        "60",
        "--unit",
        "g",
    ]
    assert main(args) == 0
    assert "collection total is now 60.00" in capsys.readouterr().out

    assert main(["--db", str(db_file), "history", str(seeded["item_id"])]) == 0
    out = capsys.readouterr().out
    assert "Weekly" in out
    assert "Reference price: 0.12 per g" in out


def test_service_error_reported(db_file, seeded, capsys):
    args = ["--db", str(db_file), "record-purchase", "999", str(seeded["item_id"]), "1", "10"]
    assert main(args) == 1
    assert "ERROR: Collection with ID 999 not found" in capsys.readouterr().out


@pytest.mark.parametrize("command", ["summary", "items", "categories", "collections"])
def test_listing_commands(db_file, seeded, command, capsys):
    assert main(["--db", str(db_file), command]) == 0
    assert capsys.readouterr().out


def test_items_filters_parsed():
    args = build_parser().parse_args(["items", "--name", "rice", "--category", "2", "--empty"])
    assert args.name == "rice"
    assert args.category_id == 2
    assert args.empty is True


def _new_id(out):
    """Pull the ID out of an "Added <entity> <id>: <name>" line."""
    return out.split(":")[0].split()[-1]


def test_fresh_database_workflow(db_file, capsys):
    db = ["--db", str(db_file)]
    assert main(db + ["init"]) == 0
    capsys.readouterr()

    assert main(db + ["add-category", "Baking"]) == 0
    category_id = _new_id(capsys.readouterr().out)

    args = ["add-item", "Rice", "--unit", "kg", "--category", category_id, "--last-price", "100"]
    assert main(db + args) == 0
    item_id = _new_id(capsys.readouterr().out)

    assert main(db + ["add-collection", "Weekly", "--date", "2024-03-01", "--notes", "market"]) == 0
    collection_id = _new_id(capsys.readouterr().out)

    assert main(db + ["record-purchase", collection_id, item_id, "500", "60", "--unit", "g"]) == 0
    assert "collection total is now 60.00" in capsys.readouterr().out

    assert main(db + ["items", "--name", "rice"]) == 0
    out = capsys.readouterr().out
    assert "Rice: 0.50 kg" in out
    assert "category=Baking" in out

    assert main(db + ["mark-empty", item_id]) == 0
    assert f"Item {item_id} marked empty" in capsys.readouterr().out

    assert main(db + ["items", "--empty"]) == 0
    assert "Rice: 0.00 kg" in capsys.readouterr().out

    assert main(db + ["collections"]) == 0
    assert "Weekly 2024-03-01" in capsys.readouterr().out


def test_add_item_with_unknown_category(db_file, seeded, capsys):
    assert main(["--db", str(db_file), "add-item", "Salt", "--category", "999"]) == 1
    assert "ERROR: Category with ID 999 not found" in capsys.readouterr().out


def test_add_item_duplicate_name(db_file, seeded, capsys):
    assert main(["--db", str(db_file), "add-item", "RICE"]) == 1
    assert "ERROR:" in capsys.readouterr().out


def test_add_item_blank_name(db_file, seeded, capsys):
    assert main(["--db", str(db_file), "add-item", "  "]) == 1
    assert "ERROR: name is required" in capsys.readouterr().out


def test_add_category_duplicate_name(db_file, seeded, capsys):
    assert main(["--db", str(db_file), "add-category", "Baking"]) == 0
    assert main(["--db", str(db_file), "add-category", "Baking"]) == 1
    assert "ERROR:" in capsys.readouterr().out


def test_mark_empty_missing_item(db_file, seeded, capsys):
    assert main(["--db", str(db_file), "mark-empty", "999"]) == 1
    assert "ERROR: Inventory item with ID 999 not found" in capsys.readouterr().out


def test_add_collection_date_parsed():
    args = build_parser().parse_args(["add-collection", "Weekly", "--date", "2024-03-01"])
    assert args.purchase_date.year == 2024
    assert args.purchase_date.day == 1


def test_add_collection_bad_date_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["add-collection", "Weekly", "--date", "01/03/2024"])
