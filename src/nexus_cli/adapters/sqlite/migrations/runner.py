"""Version-numbered, forward-only schema migrations.

Applied versions are recorded in ``schema_version``; on every connection the
runner applies, in order, each migration newer than the recorded maximum.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


class Migration(ABC):
    """Base class for database migrations."""

    @property
    @abstractmethod
    def version(self) -> int:
        """Sequential migration number."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable summary."""

    @abstractmethod
    def up(self, connection: sqlite3.Connection) -> None:
        """Apply the migration (without committing)."""


class MigrationRunner:
    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                description TEXT NOT NULL,
                applied_at DATETIME NOT NULL
            )
            """
        )
        self.connection.commit()

    def get_current_version(self) -> int:
        """Highest applied version, 0 on a fresh database."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def pending(self, migrations: list[Migration]) -> list[Migration]:
        current = self.get_current_version()
        return sorted(
            (m for m in migrations if m.version > current), key=lambda m: m.version
        )

    def apply(self, migration: Migration) -> None:
        """Apply one migration inside a transaction.

        Raises:
            ValueError: The migration is not newer than the current version.
            RuntimeError: The migration failed; nothing from it is kept.
        """
        current = self.get_current_version()
        if migration.version <= current:
            raise ValueError(
                f"Migration {migration.version} is not newer than schema "
                f"version {current}"
            )

        try:
            migration.up(self.connection)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) "
                "VALUES (?, ?, ?)",
                (migration.version, migration.description, datetime.now(UTC).isoformat()),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise RuntimeError(f"Migration {migration.version} failed: {e}") from e

        logger.info("Applied migration %03d: %s", migration.version, migration.description)

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Apply every pending migration; returns how many were applied."""
        pending = self.pending(migrations)
        for migration in pending:
            self.apply(migration)
        return len(pending)


def run_migrations(connection: sqlite3.Connection, migrations: list[Migration]) -> int:
    return MigrationRunner(connection).run_migrations(migrations)
