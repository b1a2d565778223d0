"""Unit tests for the MigrationRunner in migrations/runner.py."""

from __future__ import annotations

import os
import sqlite3
import stat

import pytest

from nexus_cli.adapters.sqlite.connection import open_connection
from nexus_cli.adapters.sqlite.migrations.m001_initial_schema import ALL_MIGRATIONS
from nexus_cli.adapters.sqlite.migrations.runner import (
    Migration,
    MigrationRunner,
    run_migrations,
)

# ---------------------------------------------------------------------------
# Concrete test migrations
# ---------------------------------------------------------------------------


class _Migration1(Migration):
    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Create test_table_one"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute("CREATE TABLE test_table_one (id INTEGER PRIMARY KEY, name TEXT)")


class _Migration2(Migration):
    @property
    def version(self) -> int:
        return 2

    @property
    def description(self) -> str:
        return "Create test_table_two"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute("CREATE TABLE test_table_two (id INTEGER PRIMARY KEY, value TEXT)")


class _FailingMigration(Migration):
    @property
    def version(self) -> int:
        return 3

    @property
    def description(self) -> str:
        return "Intentionally fails"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute("CREATE TABLE half_done (id INTEGER)")
        connection.execute("THIS IS NOT SQL")


def _tables(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows}


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


class TestMigrationRunner:
    def test_fresh_database_is_version_zero(self, conn):
        assert MigrationRunner(conn).get_current_version() == 0

    def test_applies_pending_in_version_order(self, conn):
        applied = run_migrations(conn, [_Migration2(), _Migration1()])

        assert applied == 2
        assert {"test_table_one", "test_table_two"} <= _tables(conn)
        assert MigrationRunner(conn).get_current_version() == 2

    def test_second_run_is_a_no_op(self, conn):
        run_migrations(conn, [_Migration1(), _Migration2()])
        assert run_migrations(conn, [_Migration1(), _Migration2()]) == 0

    def test_only_newer_migrations_are_pending(self, conn):
        runner = MigrationRunner(conn)
        runner.apply(_Migration1())
        assert [m.version for m in runner.pending([_Migration1(), _Migration2()])] == [2]

    def test_reapplying_an_old_version_is_rejected(self, conn):
        runner = MigrationRunner(conn)
        runner.apply(_Migration1())
        with pytest.raises(ValueError):
            runner.apply(_Migration1())

    def test_failed_migration_is_not_recorded(self, conn):
        runner = MigrationRunner(conn)
        runner.run_migrations([_Migration1(), _Migration2()])

        with pytest.raises(RuntimeError, match="Migration 3 failed"):
            runner.apply(_FailingMigration())

        assert runner.get_current_version() == 2

    def test_records_description(self, conn):
        run_migrations(conn, [_Migration1()])
        row = conn.execute("SELECT description FROM schema_version WHERE version = 1").fetchone()
        assert row[0] == "Create test_table_one"


class TestInitialSchema:
    def test_in_memory_connection_has_all_tables(self):
        conn = open_connection(":memory:")
        try:
            assert {"user_meta", "events", "notifications", "schema_version"} <= _tables(conn)
            assert MigrationRunner(conn).get_current_version() == len(ALL_MIGRATIONS)
        finally:
            conn.close()

    def test_reopening_file_database_keeps_version(self, tmp_path):
        path = tmp_path / "nested" / "nexus.db"
        open_connection(path).close()

        conn = open_connection(path)
        try:
            versions = conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
            assert versions == len(ALL_MIGRATIONS)
        finally:
            conn.close()

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions only")
    def test_new_database_file_is_owner_only(self, tmp_path):
        path = tmp_path / "nexus.db"
        open_connection(path).close()
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
