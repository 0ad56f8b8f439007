"""SQLite connection helpers for room persistence."""

from __future__ import annotations

import sqlite3


def create_sqlite_connection(path: str, *, timeout: float = 5.0) -> sqlite3.Connection:
    """Create an autocommit SQLite connection; callers open transactions explicitly."""
    conn = sqlite3.connect(path, timeout=timeout, isolation_level=None, check_same_thread=False)
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn
