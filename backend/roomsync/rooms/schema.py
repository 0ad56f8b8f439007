"""Schema bootstrap for room and default-config tables."""

from __future__ import annotations

from roomsync.core.db import create_sqlite_connection

CREATE_ROOM_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS rooms (
    id TEXT PRIMARY KEY,
    state TEXT NOT NULL,
    seat_config TEXT NULL,
    version INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_rooms_updated_at ON rooms(updated_at);

CREATE TABLE IF NOT EXISTS game_config (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    config TEXT NOT NULL,
    updated_at INTEGER NOT NULL
);
"""


def init_room_schema(sqlite_path: str) -> None:
    """Ensure room tables and indexes exist."""
    conn = create_sqlite_connection(sqlite_path)
    try:
        conn.executescript(CREATE_ROOM_SCHEMA_SQL)
    finally:
        conn.close()
