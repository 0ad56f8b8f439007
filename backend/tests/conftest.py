"""Shared fixtures for room sync tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from flightchess.core import FlightChessEngine
from flightchess.tests.state_kit import build_players
from roomsync.rooms.service import RoomSyncService
from roomsync.rooms.store import MemoryRoomStore
from roomsync.rooms.store import SqliteRoomStore

START_MS = 1_760_000_000_000
DAY_MS = 24 * 3600 * 1000


class FakeClock:
    """Millisecond clock the test moves by hand."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["sqlite", "memory"])
def store(request: pytest.FixtureRequest, tmp_path: Path, clock: FakeClock):
    """Each store test runs against both backends."""
    if request.param == "sqlite":
        backend = SqliteRoomStore(str(tmp_path / "rooms.sqlite3"), clock=clock)
    else:
        backend = MemoryRoomStore(clock=clock)
    backend.initialize()
    return backend


@pytest.fixture
def service(store) -> RoomSyncService:
    return RoomSyncService(store, expiry_ms=DAY_MS)


@pytest.fixture
def playable_state() -> dict[str, Any]:
    """A started two-player game, as a device would push it."""
    engine = FlightChessEngine(rng_seed=2026)
    return engine.init_game(build_players(2))["new_state"]
