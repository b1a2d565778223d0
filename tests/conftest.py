"""Shared test fixtures and configuration.

Provides a fixed clock, in-memory SQLite repositories and an isolated
ConfigService so tests never touch the real filesystem or Google.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import UTC, datetime

import pytest

from nexus_cli.adapters.sqlite import (
    SqliteEventRepository,
    SqliteNotificationRepository,
    SqliteUserRepository,
    open_connection,
)

NOW = datetime(2025, 11, 26, 10, 0, 0, tzinfo=UTC)
USER_ID = "user-123"


def fixed_clock(value: datetime = NOW):
    return lambda: value


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------


@pytest.fixture
def db() -> sqlite3.Connection:
    """Fresh, fully migrated in-memory database."""
    conn = open_connection(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def user_repo(db) -> SqliteUserRepository:
    return SqliteUserRepository(connection=db, clock=fixed_clock())


@pytest.fixture
def event_repo(db) -> SqliteEventRepository:
    return SqliteEventRepository(connection=db, clock=fixed_clock())


@pytest.fixture
def notification_repo(db) -> SqliteNotificationRepository:
    return SqliteNotificationRepository(connection=db, clock=fixed_clock())


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Real ConfigService rooted in *tmp_path* with an empty environment."""
    from nexus_cli.services.config_service import ConfigService, get_config_service

    get_config_service.cache_clear()
    svc = ConfigService(
        config_dir=tmp_path / "config", data_dir=tmp_path / "data", environ={}
    )
    svc.load_config()
    yield svc
    get_config_service.cache_clear()


@pytest.fixture(autouse=True)
def _no_log_file(monkeypatch):
    """Keep command runs from creating a log file in the user's log dir."""
    monkeypatch.setattr(
        "nexus_cli.commands.decorators.get_logger",
        lambda: logging.getLogger("nexus_cli.tests"),
    )
