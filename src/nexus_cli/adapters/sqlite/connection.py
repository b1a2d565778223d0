"""Process-wide SQLite connection for the local Nexus database.

The connection is opened once per database path with WAL journaling and
foreign keys on, the file is made owner-only (it holds OAuth tokens), and
pending migrations run before the connection is handed out.
"""

from __future__ import annotations

import atexit
import logging
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from nexus_cli.adapters.sqlite.migrations.m001_initial_schema import ALL_MIGRATIONS
from nexus_cli.adapters.sqlite.migrations.runner import run_migrations

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Singleton holder of the open connection and its path."""

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None
    _atexit_registered = False

    def __new__(cls) -> DatabaseConnection:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Return the shared connection, reopening it if *db_path* changed.

        Args:
            db_path: Database file; defaults to ``nexus.db`` in the user data dir.
        """
        instance = cls()
        db_path = Path(db_path) if db_path else Path(user_data_dir("nexus_cli")) / "nexus.db"

        if instance._connection is not None and instance._db_path == db_path:
            return instance._connection

        if instance._connection is not None:
            instance._connection.close()

        instance._connection = open_connection(db_path)
        instance._db_path = db_path

        if not cls._atexit_registered:
            atexit.register(cls.close_connection)
            cls._atexit_registered = True

        return instance._connection

    @classmethod
    def close_connection(cls) -> None:
        instance = cls()
        if instance._connection is None:
            return
        try:
            instance._connection.commit()
            instance._connection.close()
        except sqlite3.Error as e:
            logger.warning("Error closing database %s: %s", instance._db_path, e)
        finally:
            instance._connection = None
            instance._db_path = None

    @classmethod
    def get_db_path(cls) -> Path | None:
        return cls()._db_path


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply row factory and pragmas, then bring the schema up to date."""
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    connection.execute("PRAGMA journal_mode = WAL")
    run_migrations(connection, ALL_MIGRATIONS)
    return connection


def open_connection(db_path: str | Path) -> sqlite3.Connection:
    """Open and migrate a database file (``":memory:"`` is accepted)."""
    if str(db_path) == ":memory:":
        return configure_connection(sqlite3.connect(":memory:", check_same_thread=False))

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    is_new_database = not db_path.exists()

    connection = sqlite3.connect(str(db_path), check_same_thread=False, timeout=30.0)
    if is_new_database:
        os.chmod(db_path, 0o600)
        logger.info("Created database %s", db_path)

    return configure_connection(connection)


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    return DatabaseConnection.get_connection(db_path)
