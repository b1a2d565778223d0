"""Forward-only schema migrations for the local database."""

from .runner import Migration, MigrationRunner, run_migrations

__all__ = [
    "Migration",
    "MigrationRunner",
    "run_migrations",
]
