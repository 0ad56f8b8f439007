"""SQLite schema contract for room and default-config tables."""

from __future__ import annotations

from pathlib import Path
import sqlite3

import pytest

from roomsync.core.db import create_sqlite_connection
from roomsync.rooms.schema import CREATE_ROOM_SCHEMA_SQL
from roomsync.rooms.schema import init_room_schema


def test_game_config_holds_a_single_row() -> None:
    """Input: insert game_config row with id=2 -> Output: CHECK constraint error."""
    conn = create_sqlite_connection(":memory:")
    conn.executescript(CREATE_ROOM_SCHEMA_SQL)
    conn.execute("INSERT INTO game_config (id, config, updated_at) VALUES (1, '{}', 0)")

    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO game_config (id, config, updated_at) VALUES (2, '{}', 0)")


def test_room_codes_are_unique() -> None:
    conn = create_sqlite_connection(":memory:")
    conn.executescript(CREATE_ROOM_SCHEMA_SQL)
    conn.execute("INSERT INTO rooms (id, state, seat_config, version, updated_at) VALUES ('ABC234', '{}', NULL, 1, 1)")

    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO rooms (id, state, seat_config, version, updated_at) VALUES ('ABC234', '{}', NULL, 2, 2)"
        )


def test_room_state_is_required() -> None:
    conn = create_sqlite_connection(":memory:")
    conn.executescript(CREATE_ROOM_SCHEMA_SQL)

    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO rooms (id, state, seat_config, version, updated_at) VALUES ('ABC234', NULL, NULL, 1, 1)")


def test_schema_bootstrap_is_repeatable(tmp_path: Path) -> None:
    path = str(tmp_path / "rooms.sqlite3")

    init_room_schema(path)
    init_room_schema(path)

    conn = create_sqlite_connection(path)
    try:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        indexes = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
    finally:
        conn.close()
    assert {"rooms", "game_config"} <= tables
    assert "idx_rooms_updated_at" in indexes


def test_connection_enables_foreign_keys() -> None:
    conn = create_sqlite_connection(":memory:")

    assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 5000
