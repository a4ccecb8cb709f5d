"""
Database connection and session management for Pantry Tracker.

This module provides:
- Database engine creation and configuration
- The Database handle owning an engine and its session factory
- Transactional session scope with explicit BEGIN/COMMIT/ROLLBACK
- Schema initialization through the numbered migrations
- WAL mode and foreign key enforcement

The application shell opens one Database at startup, passes it to every
service, and closes it at shutdown. Nothing in this package keeps a
module-level connection.
"""

from contextlib import contextmanager
import logging
from typing import Callable, Iterator, List, Optional, TypeVar

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..utils.config import Config, get_config
from .exceptions import ServiceError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fragments SQLite uses when another connection holds the write lock
_BUSY_MESSAGES = ("database is locked", "database is busy", "database table is locked")


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Set SQLite pragmas on connection.

    This event listener is called for every new database connection.
    It enables foreign key constraints and sets WAL mode.
    """
    cursor = dbapi_connection.cursor()

    # Enable foreign key constraints (critical for referential integrity)
    cursor.execute("PRAGMA foreign_keys=ON")

    # Set WAL (Write-Ahead Logging) mode for durability with one writer
    cursor.execute("PRAGMA journal_mode=WAL")

    # Set synchronous mode for better performance while maintaining safety
    cursor.execute("PRAGMA synchronous=NORMAL")

    cursor.close()


def _use_explicit_transactions(engine: Engine) -> None:
    """Make every SQLAlchemy transaction emit its own BEGIN.

    The sqlite3 driver otherwise opens transactions lazily on the first
    write, which leaves the reads of a unit of work outside it.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: Optional database URL. If None, uses config default.
        echo: If True, log all SQL statements (useful for debugging)

    Returns:
        Configured SQLAlchemy Engine
    """
    if database_url is None:
        database_url = get_config().database_url

    logger.info(f"Creating database engine: {database_url}")

    if ":memory:" in database_url or "mode=memory" in database_url:
        # For in-memory databases (testing), use StaticPool
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    _use_explicit_transactions(engine)
    return engine


def is_busy_error(error: Exception) -> bool:
    """Return True if the engine reported a busy/locked database."""
    if not isinstance(error, OperationalError):
        return False
    message = str(error.orig if error.orig is not None else error).lower()
    return any(fragment in message for fragment in _BUSY_MESSAGES)


def to_storage_error(message: str, error: Exception) -> StorageError:
    """
    Wrap an engine-level exception in a StorageError.

    Args:
        message: Description of the failed operation
        error: The original exception

    Returns:
        StorageError, marked retryable for busy/locked failures
    """
    return StorageError(message, original_error=error, retryable=is_busy_error(error))


class Database:
    """
    Storage handle: one engine plus its session factory.

    Example:
        db = Database("sqlite:///pantry.sqlite")
        db.initialize()
        with db.session_scope() as session:
            session.add(Category(name="Spices"))
        db.close()
    """

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        """
        Create the engine for a database.

        Args:
            database_url: SQLAlchemy URL. If None, uses config default.
            echo: If True, log all SQL statements
        """
        self.database_url = database_url or get_config().database_url
        self.engine = create_database_engine(self.database_url, echo=echo)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def get_session(self) -> Session:
        """
        Create a new database session.

        Returns:
            New Session instance; the caller owns commit/rollback/close
        """
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope for database operations.

        This context manager handles session lifecycle automatically:
        - Creates a new session
        - Commits on success
        - Rolls back on exception
        - Always closes the session

        Yields:
            Database session

        Example:
            with db.session_scope() as session:
                session.add(InventoryItem(name="Rice", unit="kg"))
                # Commit happens automatically if no exception
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def initialize(self) -> List[int]:
        """
        Bring the schema up to date.

        Safe to call on every start - applied migrations are skipped.

        Returns:
            Versions applied by this call (empty if already current)
        """
        from ..migrations import apply_migrations

        logger.info("Initializing database schema")
        applied = apply_migrations(self.engine)
        logger.info("Database schema is current")
        return applied

    def table_exists(self, table_name: str, session: Optional[Session] = None) -> bool:
        """
        Check whether a table exists.

        Args:
            table_name: Name of the table
            session: Optional session whose connection should be inspected

        Returns:
            True if the table exists
        """
        if session is not None:
            return inspect(session.connection()).has_table(table_name)
        return inspect(self.engine).has_table(table_name)

    def close(self) -> None:
        """
        Close all database connections.

        Useful for cleanup or before application exit.
        """
        self.engine.dispose()
        logger.info("Database connections closed")

    def __repr__(self) -> str:
        return f"Database(url='{self.database_url}')"


def run_in_session(
    db: Database,
    session: Optional[Session],
    impl: Callable[[Session], T],
    operation: str,
) -> T:
    """
    Run a unit of work in the caller's session or a fresh transaction.

    Domain errors (ServiceError) propagate untouched; engine errors are
    wrapped in StorageError. When ``session`` is given the caller owns the
    transaction and nothing is committed here.

    Args:
        db: Database handle used when no session is supplied
        session: Optional database session for transaction composability
        impl: Callable doing the work with a session
        operation: Description used in the StorageError message

    Returns:
        Whatever ``impl`` returns
    """
    try:
        if session is not None:
            return impl(session)
        with db.session_scope() as sess:
            return impl(sess)
    except ServiceError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"{operation} failed: {e}")
        raise to_storage_error(f"Failed to {operation}", e)


def open_database(config: Optional[Config] = None) -> Database:
    """
    Open and initialize the application database.

    This is the main entry point for setting up the database when the app
    starts. It creates the database file and schema if they don't exist.

    Args:
        config: Optional configuration; uses the global config if None

    Returns:
        Initialized Database handle
    """
    config = config or get_config()

    if not config.database_exists():
        logger.info(f"Creating new database at: {config.database_path}")
    else:
        logger.info(f"Using existing database at: {config.database_path}")

    config.ensure_directories()
    db = Database(config.database_url)
    db.initialize()
    return db
