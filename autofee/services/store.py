"""Billing store: the in-memory SQLite database and its persistence.

The store is an explicit handle passed to every service. It owns one SQLite
database held in memory (a single shared connection through StaticPool), and
can serialize the whole database to bytes and back. Those bytes are kept
base64-encoded in LocalStorage after every write, or written to a raw backup file.

All access to the shared connection is serialized by the store's lock, so API
handlers running on worker threads never interleave their sessions.
"""

import base64
import binascii
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from autofee.models import Base, Unit
from autofee.services.config import DEFAULT_STORAGE_KEY
from autofee.services.errors import StorageError
from autofee.services.local_storage import LocalStorage

logger = logging.getLogger(__name__)

REQUIRED_TABLES = {"units", "meter_readings", "monthly_bills", "unit_bills"}

# Units present in a freshly created store
DEFAULT_UNITS = [
    {"id": "601A", "name": "601A호", "area": 60.0},
    {"id": "601B", "name": "601B호", "area": 120.0},
]


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _create_engine() -> Engine:
    """Create an engine bound to a private in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


@contextmanager
def _driver_connection(engine: Engine) -> Generator[sqlite3.Connection, None, None]:
    """Check out the single sqlite3 connection shared through StaticPool."""
    pool_connection = engine.raw_connection()
    try:
        yield pool_connection.driver_connection
    finally:
        pool_connection.close()


class BillingStore:
    """Relational store for units, readings and bills.

    Usage:
        store = BillingStore(LocalStorage("./data"))
        if not store.load_from_local_storage():
            store.initialize()
        with store.session() as session:
            ...
    """

    def __init__(
        self,
        local_storage: LocalStorage | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        """Create an unopened store.

        Args:
            local_storage: Where auto-save writes the database (None disables auto-save)
            storage_key: Key used in local storage
        """
        self.local_storage = local_storage
        self.storage_key = storage_key
        self.engine: Engine | None = None
        self._session_factory: sessionmaker | None = None
        # Reentrant: a write holds it across commit and autosave, which exports
        self.lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    def _attach(self, engine: Engine) -> None:
        """Swap in a new engine, disposing the previous one."""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )

    def initialize(self, with_defaults: bool = True) -> None:
        """Create a fresh database with all tables.

        Args:
            with_defaults: Insert the default units 601A and 601B
        """
        engine = _create_engine()
        Base.metadata.create_all(engine)
        if with_defaults:
            with engine.begin() as conn:
                stmt = insert(Unit)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Unit.id],
                    set_={"name": stmt.excluded.name, "area": stmt.excluded.area},
                )
                conn.execute(stmt, DEFAULT_UNITS)
        with self.lock:
            self._attach(engine)
        logger.info("Initialized new billing database")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a session that commits on success and rolls back on error.

        The store lock is held until the session is closed.

        Raises:
            StorageError: If the store has not been initialized or loaded
        """
        with self.lock:
            if self._session_factory is None:
                raise StorageError("Database not initialized")

            session = self._session_factory()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Session for a write: commit, then autosave, with no other access in between."""
        with self.lock:
            with self.session() as session:
                yield session
            self.autosave()

    def export(self) -> bytes:
        """Serialize the whole database into a SQLite image."""
        with self.lock:
            if self.engine is None:
                raise StorageError("Database not initialized")
            with _driver_connection(self.engine) as conn:
                return conn.serialize()

    def import_bytes(self, data: bytes) -> None:
        """Replace the current database with a serialized image.

        The previous database stays in place when the image is rejected.

        Raises:
            StorageError: If data is empty, not a SQLite image, or lacks billing tables
        """
        if not data:
            raise StorageError("Backup is empty")

        engine = _create_engine()
        try:
            with _driver_connection(engine) as conn:
                conn.deserialize(bytes(data))
                conn.execute("PRAGMA foreign_keys=ON")
            tables = set(inspect(engine).get_table_names())
        except (sqlite3.Error, SQLAlchemyError) as e:
            engine.dispose()
            raise StorageError(f"Not a valid database image: {e}") from e

        missing = REQUIRED_TABLES - tables
        if missing:
            engine.dispose()
            raise StorageError(f"Backup is missing tables: {', '.join(sorted(missing))}")

        with self.lock:
            self._attach(engine)
        logger.info(f"Loaded database image ({len(data)} bytes)")

    def restore(self, data: bytes) -> None:
        """Replace the database with an image and persist it to local storage."""
        with self.lock:
            self.import_bytes(data)
            self.autosave()

    def save_to_local_storage(self, key: str | None = None) -> None:
        """Write the base64-encoded database to local storage.

        Raises:
            StorageError: If the store is not initialized, no local storage is
                configured, or the write fails
        """
        if self.local_storage is None:
            raise StorageError("No local storage configured")

        key = key or self.storage_key
        with self.lock:
            encoded = base64.b64encode(self.export()).decode("ascii")
            try:
                self.local_storage.set_item(key, encoded)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to save database to local storage: {e}")
                raise StorageError(f"Failed to save database: {e}") from e
        logger.debug(f"Saved database to local storage key={key}")

    def load_from_local_storage(self, key: str | None = None) -> bool:
        """Load the database previously saved under key.

        Returns:
            False when nothing is stored, True after loading

        Raises:
            StorageError: If the stored blob cannot be read or decoded
        """
        if self.local_storage is None:
            return False

        key = key or self.storage_key
        try:
            encoded = self.local_storage.get_item(key)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read local storage: {e}")
            raise StorageError(f"Failed to read local storage: {e}") from e

        if not encoded:
            logger.info("No database stored in local storage")
            return False

        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise StorageError(f"Stored database is corrupted: {e}") from e

        self.import_bytes(data)
        logger.info(f"Loaded database from local storage key={key}")
        return True

    def clear_local_storage(self, key: str | None = None) -> None:
        """Remove the stored database blob."""
        if self.local_storage is None:
            return
        key = key or self.storage_key
        try:
            self.local_storage.remove_item(key)
        except OSError as e:
            raise StorageError(f"Failed to clear local storage: {e}") from e
        logger.info(f"Cleared local storage key={key}")

    def export_to_file(self, path: str | Path) -> Path:
        """Write a raw binary backup file.

        Returns:
            Path written
        """
        path = Path(path)
        try:
            path.write_bytes(self.export())
        except OSError as e:
            logger.error(f"Failed to export database to {path}: {e}")
            raise StorageError(f"Failed to write backup {path}: {e}") from e
        logger.info(f"Exported database to {path}")
        return path

    def import_from_file(self, path: str | Path) -> None:
        """Load a raw binary backup file, then persist it to local storage."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read backup {path}: {e}")
            raise StorageError(f"Failed to read backup {path}: {e}") from e

        self.restore(data)
        logger.info(f"Imported database from {path}")

    def autosave(self) -> None:
        """Persist after a write; no-op when local storage is not configured."""
        if self.local_storage is not None:
            self.save_to_local_storage()

    def reset(self) -> None:
        """Clear local storage and start over with a fresh default database."""
        with self.lock:
            self.clear_local_storage()
            self.initialize()
        logger.info("Billing data cleared")

    def close(self) -> None:
        with self.lock:
            if self.engine is not None:
                self.engine.dispose()
            self.engine = None
            self._session_factory = None


def open_store(
    local_storage: LocalStorage | None,
    storage_key: str = DEFAULT_STORAGE_KEY,
) -> BillingStore:
    """Open the saved database, or create a new one with default units."""
    store = BillingStore(local_storage, storage_key)
    if not store.load_from_local_storage():
        store.initialize()
    return store
