"""Table definitions for the local Nexus database.

Timestamps are ISO-8601 strings, booleans are 0/1 integers and notification
metadata is a JSON document.
"""

from __future__ import annotations

# One row per local user; Google columns are NULL while disconnected.
CREATE_USER_META_TABLE = """
CREATE TABLE IF NOT EXISTS user_meta (
    user_id TEXT PRIMARY KEY,
    google_access_token TEXT,
    google_refresh_token TEXT,
    google_expires_at DATETIME,
    google_email TEXT,
    google_connected_at DATETIME,
    google_sync_token TEXT,
    google_last_sync_at DATETIME,
    updated_at DATETIME NOT NULL
)
"""

CREATE_EVENTS_TABLE = """
CREATE TABLE IF NOT EXISTS events (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    is_all_day BOOLEAN NOT NULL DEFAULT 0,
    start_utc DATETIME NOT NULL,
    end_utc DATETIME NOT NULL,
    start_tzid TEXT,
    end_tzid TEXT,
    location TEXT,
    color TEXT NOT NULL DEFAULT '#3B82F6',
    status TEXT NOT NULL DEFAULT 'CONFIRMED'
        CHECK (status IN ('CONFIRMED', 'TENTATIVE', 'CANCELLED')),
    rrule TEXT,
    recur_type TEXT CHECK (recur_type IS NULL OR recur_type IN ('MASTER', 'INSTANCE')),
    master_event_id TEXT,
    original_start_utc DATETIME,
    google_event_id TEXT,
    google_calendar_id TEXT,
    google_etag TEXT,
    google_synced_at DATETIME,
    version INTEGER NOT NULL DEFAULT 1,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
)
"""

CREATE_NOTIFICATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS notifications (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    title TEXT NOT NULL,
    message TEXT NOT NULL,
    metadata TEXT NOT NULL DEFAULT '{}',
    read_at DATETIME,
    created_at DATETIME NOT NULL
)
"""

ALL_TABLES = [
    CREATE_USER_META_TABLE,
    CREATE_EVENTS_TABLE,
    CREATE_NOTIFICATIONS_TABLE,
]

ALL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_user_start ON events(user_id, start_utc)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_events_user_google "
    "ON events(user_id, google_event_id) WHERE google_event_id IS NOT NULL",
    "CREATE INDEX IF NOT EXISTS idx_notifications_user_created "
    "ON notifications(user_id, created_at)",
]
