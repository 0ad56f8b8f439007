"""Room persistence: keyed snapshot storage with server-assigned versions."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterator
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
import json
import logging
import sqlite3
import threading
import time
from typing import Any, Protocol

from roomsync.core.config import Settings
from roomsync.core.db import create_sqlite_connection
from roomsync.rooms.errors import PersistenceError
from roomsync.rooms.errors import VersionConflictError
from roomsync.rooms.schema import init_room_schema

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    """Wall clock in integer milliseconds."""
    return time.time_ns() // 1_000_000


def next_version(previous: int | None, now: int) -> int:
    """Stamp a write: the clock, but always past the previous stamp for the room."""
    if previous is None:
        return int(now)
    return max(int(now), int(previous) + 1)


@dataclass(slots=True)
class StoredRoom:
    """One persisted room record."""

    room_id: str
    state: dict[str, Any]
    seat_config: dict[str, Any] | None
    version: int
    updated_at: int


class RoomStore(Protocol):
    """Storage contract shared by the sqlite and in-memory backends."""

    def initialize(self) -> None: ...

    def is_available(self) -> bool: ...

    def create(self, room_id: str, state: dict[str, Any], seat_config: dict[str, Any] | None) -> StoredRoom: ...

    def get(self, room_id: str) -> dict[str, Any] | None: ...

    def get_record(self, room_id: str) -> StoredRoom | None: ...

    def exists(self, room_id: str) -> bool: ...

    def update(
        self,
        room_id: str,
        state: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> int | None: ...

    def update_seat_config(self, room_id: str, seat_config: dict[str, Any]) -> int | None: ...

    def delete(self, room_id: str) -> bool: ...

    def expire_older_than(self, duration_ms: int) -> int: ...

    def get_default_config(self) -> dict[str, Any] | None: ...

    def set_default_config(self, config: dict[str, Any]) -> None: ...


class SqliteRoomStore:
    """SQLite-backed store; one short-lived connection per call."""

    def __init__(self, sqlite_path: str, clock: Clock = now_ms) -> None:
        self._path = sqlite_path
        self._clock = clock

    @property
    def path(self) -> str:
        return self._path

    def initialize(self) -> None:
        try:
            init_room_schema(self._path)
        except sqlite3.Error as exc:
            logger.exception("room schema bootstrap failed path=%s", self._path)
            raise PersistenceError(f"cannot initialise {self._path}: {exc}") from exc

    @contextmanager
    def _connection(self, *, write: bool = False) -> Iterator[sqlite3.Connection]:
        try:
            conn = create_sqlite_connection(self._path)
        except sqlite3.Error as exc:
            logger.exception("sqlite connect failed path=%s", self._path)
            raise PersistenceError(f"cannot open {self._path}: {exc}") from exc
        try:
            if write:
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            if write:
                conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("sqlite operation failed path=%s", self._path)
            raise PersistenceError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def _current_version(conn: sqlite3.Connection, room_id: str) -> int | None:
        row = conn.execute("SELECT version FROM rooms WHERE id = ?", (room_id,)).fetchone()
        return None if row is None else int(row[0])

    def is_available(self) -> bool:
        try:
            conn = create_sqlite_connection(self._path)
        except sqlite3.Error:
            return False
        try:
            conn.execute("SELECT 1 FROM rooms LIMIT 1")
            return True
        except sqlite3.Error:
            return False
        finally:
            conn.close()

    def create(self, room_id: str, state: dict[str, Any], seat_config: dict[str, Any] | None) -> StoredRoom:
        """Insert a room, overwriting any stale record that held the same code."""
        with self._connection(write=True) as conn:
            version = next_version(self._current_version(conn, room_id), self._clock())
            conn.execute(
                """
                INSERT INTO rooms (id, state, seat_config, version, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    state = excluded.state,
                    seat_config = excluded.seat_config,
                    version = excluded.version,
                    updated_at = excluded.updated_at
                """,
                (room_id, _dumps(state), _dumps_optional(seat_config), version, version),
            )
        return StoredRoom(
            room_id=room_id,
            state=deepcopy(state),
            seat_config=deepcopy(seat_config),
            version=version,
            updated_at=version,
        )

    def get_record(self, room_id: str) -> StoredRoom | None:
        with self._connection() as conn:
            row = conn.execute(
                """
                SELECT id, state, seat_config, version, updated_at
                FROM rooms
                WHERE id = ?
                """,
                (room_id,),
            ).fetchone()
        if row is None:
            return None
        stored_id, state, seat_config, version, updated_at = row
        return StoredRoom(
            room_id=str(stored_id),
            state=json.loads(state),
            seat_config=None if seat_config is None else json.loads(seat_config),
            version=int(version),
            updated_at=int(updated_at),
        )

    def get(self, room_id: str) -> dict[str, Any] | None:
        record = self.get_record(room_id)
        return None if record is None else record.state

    def exists(self, room_id: str) -> bool:
        with self._connection() as conn:
            return self._current_version(conn, room_id) is not None

    def update(
        self,
        room_id: str,
        state: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> int | None:
        """Replace the snapshot; returns the new version, or None when the room is gone."""
        with self._connection(write=True) as conn:
            current = self._current_version(conn, room_id)
            if current is None:
                return None
            if expected_version is not None and int(expected_version) != current:
                raise VersionConflictError(room_id, int(expected_version), current)
            version = next_version(current, self._clock())
            conn.execute(
                "UPDATE rooms SET state = ?, version = ?, updated_at = ? WHERE id = ?",
                (_dumps(state), version, version, room_id),
            )
        return version

    def update_seat_config(self, room_id: str, seat_config: dict[str, Any]) -> int | None:
        with self._connection(write=True) as conn:
            current = self._current_version(conn, room_id)
            if current is None:
                return None
            version = next_version(current, self._clock())
            conn.execute(
                "UPDATE rooms SET seat_config = ?, version = ?, updated_at = ? WHERE id = ?",
                (_dumps(seat_config), version, version, room_id),
            )
        return version

    def delete(self, room_id: str) -> bool:
        with self._connection(write=True) as conn:
            cursor = conn.execute("DELETE FROM rooms WHERE id = ?", (room_id,))
            return cursor.rowcount > 0

    def expire_older_than(self, duration_ms: int) -> int:
        """Delete rooms untouched for longer than ``duration_ms``; returns how many went."""
        cutoff = self._clock() - int(duration_ms)
        with self._connection(write=True) as conn:
            cursor = conn.execute("DELETE FROM rooms WHERE updated_at < ?", (cutoff,))
            removed = int(cursor.rowcount)
        if removed:
            logger.info("expired %d room(s) older than %d ms", removed, duration_ms)
        return removed

    def get_default_config(self) -> dict[str, Any] | None:
        with self._connection() as conn:
            row = conn.execute("SELECT config FROM game_config WHERE id = 1").fetchone()
        return None if row is None else json.loads(row[0])

    def set_default_config(self, config: dict[str, Any]) -> None:
        with self._connection(write=True) as conn:
            conn.execute(
                """
                INSERT INTO game_config (id, config, updated_at)
                VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET config = excluded.config, updated_at = excluded.updated_at
                """,
                (_dumps(config), self._clock()),
            )


class MemoryRoomStore:
    """Process-local store for tests and single-process deployments."""

    def __init__(self, clock: Clock = now_ms) -> None:
        self._clock = clock
        self._rooms: dict[str, StoredRoom] = {}
        self._default_config: dict[str, Any] | None = None
        self._lock = threading.RLock()

    def initialize(self) -> None:
        return None

    def is_available(self) -> bool:
        return True

    def create(self, room_id: str, state: dict[str, Any], seat_config: dict[str, Any] | None) -> StoredRoom:
        with self._lock:
            previous = self._rooms.get(room_id)
            version = next_version(None if previous is None else previous.version, self._clock())
            record = StoredRoom(
                room_id=room_id,
                state=deepcopy(state),
                seat_config=deepcopy(seat_config),
                version=version,
                updated_at=version,
            )
            self._rooms[room_id] = record
            return _copy_record(record)

    def get_record(self, room_id: str) -> StoredRoom | None:
        with self._lock:
            record = self._rooms.get(room_id)
            return None if record is None else _copy_record(record)

    def get(self, room_id: str) -> dict[str, Any] | None:
        record = self.get_record(room_id)
        return None if record is None else record.state

    def exists(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def update(
        self,
        room_id: str,
        state: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> int | None:
        with self._lock:
            record = self._rooms.get(room_id)
            if record is None:
                return None
            if expected_version is not None and int(expected_version) != record.version:
                raise VersionConflictError(room_id, int(expected_version), record.version)
            record.version = record.updated_at = next_version(record.version, self._clock())
            record.state = deepcopy(state)
            return record.version

    def update_seat_config(self, room_id: str, seat_config: dict[str, Any]) -> int | None:
        with self._lock:
            record = self._rooms.get(room_id)
            if record is None:
                return None
            record.version = record.updated_at = next_version(record.version, self._clock())
            record.seat_config = deepcopy(seat_config)
            return record.version

    def delete(self, room_id: str) -> bool:
        with self._lock:
            return self._rooms.pop(room_id, None) is not None

    def expire_older_than(self, duration_ms: int) -> int:
        cutoff = self._clock() - int(duration_ms)
        with self._lock:
            stale = [room_id for room_id, record in self._rooms.items() if record.updated_at < cutoff]
            for room_id in stale:
                del self._rooms[room_id]
        if stale:
            logger.info("expired %d room(s) older than %d ms", len(stale), duration_ms)
        return len(stale)

    def get_default_config(self) -> dict[str, Any] | None:
        with self._lock:
            return deepcopy(self._default_config)

    def set_default_config(self, config: dict[str, Any]) -> None:
        with self._lock:
            self._default_config = deepcopy(config)


def build_store(settings: Settings, clock: Clock = now_ms) -> RoomStore | None:
    """Select the backend named by settings; ``disabled`` yields no store."""
    if settings.roomsync_store == "disabled":
        return None
    if settings.roomsync_store == "memory":
        return MemoryRoomStore(clock=clock)
    return SqliteRoomStore(settings.roomsync_sqlite_path, clock=clock)


def _copy_record(record: StoredRoom) -> StoredRoom:
    return StoredRoom(
        room_id=record.room_id,
        state=deepcopy(record.state),
        seat_config=deepcopy(record.seat_config),
        version=record.version,
        updated_at=record.updated_at,
    )


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _dumps_optional(payload: dict[str, Any] | None) -> str | None:
    return None if payload is None else _dumps(payload)
