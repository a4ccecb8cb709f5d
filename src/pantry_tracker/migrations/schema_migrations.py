"""
Numbered schema migrations for the Pantry Tracker database.

Each migration runs in its own transaction and is recorded in the
``schema_migrations`` table, so re-running ``apply_migrations`` against an
initialized database is a no-op. Databases created by older releases
(which patched columns in place at startup) already carry some of the
columns added here; the column migrations check before altering.
"""

from dataclasses import dataclass
import logging
from typing import Callable, List, Set

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from ..utils.constants import DEFAULT_CATEGORIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    """One schema change.

    Attributes:
        version: Sequence number, applied in ascending order
        description: Short human-readable summary
        upgrade: Callable applying the change on an open connection
    """

    version: int
    description: str
    upgrade: Callable[[Connection], None]


def _column_exists(conn: Connection, table: str, column: str) -> bool:
    rows = conn.execute(text(f"PRAGMA table_info({table})")).fetchall()
    return any(row[1] == column for row in rows)


def _add_column(conn: Connection, table: str, column: str, ddl_type: str) -> None:
    if _column_exists(conn, table, column):
        logger.debug(f"Column {table}.{column} already present")
        return
    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))


def _create_base_tables(conn: Connection) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
    )
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS inventory_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                category_id INTEGER,
                quantity REAL DEFAULT 0,
                unit TEXT,
                last_price REAL,
                is_empty BOOLEAN DEFAULT 0,
                last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (category_id) REFERENCES categories (id)
            )
            """
        )
    )
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS collections (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                purchase_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                total_amount REAL,
                notes TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
    )
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS collection_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                collection_id INTEGER NOT NULL,
                item_id INTEGER NOT NULL,
                quantity REAL NOT NULL,
                price REAL NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (collection_id) REFERENCES collections (id),
                FOREIGN KEY (item_id) REFERENCES inventory_items (id)
            )
            """
        )
    )


def _add_last_spent_price(conn: Connection) -> None:
    _add_column(conn, "inventory_items", "last_spent_price", "REAL")


def _add_collection_item_unit(conn: Connection) -> None:
    _add_column(conn, "collection_items", "unit", "TEXT")


# collection_id is a soft reference: history entries outlive a deleted collection
_PRICE_HISTORY_DDL = """
    CREATE TABLE {name} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_id INTEGER NOT NULL,
        price REAL NOT NULL,
        quantity REAL NOT NULL,
        unit_price REAL NOT NULL,
        unit TEXT,
        collection_id INTEGER,
        standard_unit TEXT,
        standard_unit_price REAL,
        recorded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (item_id) REFERENCES inventory_items (id)
    )
"""

_PRICE_HISTORY_COLUMNS = (
    "id, item_id, price, quantity, unit_price, unit, collection_id, "
    "standard_unit, standard_unit_price, recorded_at"
)


def _references_collections(conn: Connection, table: str) -> bool:
    rows = conn.execute(text(f"PRAGMA foreign_key_list({table})")).fetchall()
    return any(row[2] == "collections" for row in rows)


def _create_price_history(conn: Connection) -> None:
    exists = conn.execute(
        text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'price_history'")
    ).first()

    if not exists:
        conn.execute(text(_PRICE_HISTORY_DDL.format(name="price_history")))
        return

    if not _references_collections(conn, "price_history"):
        return

    # Older databases declared a hard foreign key to collections; rebuild without it
    logger.info("Rebuilding price_history without the collections foreign key")
    conn.execute(text(_PRICE_HISTORY_DDL.format(name="price_history_new")))
    conn.execute(
        text(
            f"INSERT INTO price_history_new ({_PRICE_HISTORY_COLUMNS}) "
            f"SELECT {_PRICE_HISTORY_COLUMNS} FROM price_history"
        )
    )
    conn.execute(text("DROP TABLE price_history"))
    conn.execute(text("ALTER TABLE price_history_new RENAME TO price_history"))


def _seed_default_categories(conn: Connection) -> None:
    for name in DEFAULT_CATEGORIES:
        conn.execute(text("INSERT OR IGNORE INTO categories (name) VALUES (:name)"), {"name": name})


def _create_indexes(conn: Connection) -> None:
    statements = [
        "CREATE INDEX IF NOT EXISTS idx_inventory_category ON inventory_items (category_id)",
        "CREATE INDEX IF NOT EXISTS idx_collection_items_collection "
        "ON collection_items (collection_id)",
        "CREATE INDEX IF NOT EXISTS idx_collection_items_item ON collection_items (item_id)",
        "CREATE INDEX IF NOT EXISTS idx_price_history_item_recorded "
        "ON price_history (item_id, recorded_at)",
    ]
    for statement in statements:
        conn.execute(text(statement))


MIGRATIONS: List[Migration] = [
    Migration(1, "create base tables", _create_base_tables),
    Migration(2, "add inventory_items.last_spent_price", _add_last_spent_price),
    Migration(3, "add collection_items.unit", _add_collection_item_unit),
    Migration(4, "create price_history", _create_price_history),
    Migration(5, "seed default categories", _seed_default_categories),
    Migration(6, "create foreign key and history indexes", _create_indexes),
]


def _ensure_version_table(engine: Engine) -> None:
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    description TEXT NOT NULL,
                    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        )


def get_applied_versions(engine: Engine) -> Set[int]:
    """
    Read the set of applied migration versions.

    Args:
        engine: Database engine

    Returns:
        Set of applied version numbers
    """
    _ensure_version_table(engine)
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT version FROM schema_migrations")).fetchall()
    return {row[0] for row in rows}


def apply_migrations(engine: Engine) -> List[int]:
    """
    Apply all pending migrations in version order.

    Each migration and its bookkeeping row commit together; a failing
    migration rolls back alone and the error propagates, leaving earlier
    versions applied.

    Args:
        engine: Database engine

    Returns:
        Versions applied by this call, in order
    """
    applied = get_applied_versions(engine)
    newly_applied = []

    for migration in sorted(MIGRATIONS, key=lambda m: m.version):
        if migration.version in applied:
            continue

        logger.info(f"Applying migration {migration.version}: {migration.description}")
        with engine.begin() as conn:
            migration.upgrade(conn)
            conn.execute(
                text("INSERT INTO schema_migrations (version, description) VALUES (:v, :d)"),
                {"v": migration.version, "d": migration.description},
            )
        newly_applied.append(migration.version)

    if newly_applied:
        logger.info(f"Applied {len(newly_applied)} migration(s): {newly_applied}")
    return newly_applied
