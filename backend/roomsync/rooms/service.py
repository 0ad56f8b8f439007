"""Room sync orchestration: session bootstrap plus pull/push reconciliation."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
import random
from typing import Any

from flightchess.core import FlightChessEngine
from flightchess.reducer import DEFAULT_TIMER_SECONDS
from flightchess.reducer import initial_state
from roomsync.rooms.codes import allocate_room_code
from roomsync.rooms.codes import generate_room_code
from roomsync.rooms.codes import normalize_room_code
from roomsync.rooms.errors import PersistenceError
from roomsync.rooms.errors import RoomNotFoundError
from roomsync.rooms.seats import SeatAllocator
from roomsync.rooms.seats import all_seats_filled
from roomsync.rooms.seats import build_seat_config
from roomsync.rooms.seats import players_from_seats
from roomsync.rooms.seats import seat_config_from_players
from roomsync.rooms.store import RoomStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CreatedRoom:
    room_id: str
    seat_config: dict[str, Any]
    version: int


@dataclass(slots=True)
class JoinResult:
    exists: bool
    room_id: str | None = None
    state: dict[str, Any] | None = None
    seat_config: dict[str, Any] | None = None
    version: int | None = None
    playable: bool = False


@dataclass(slots=True)
class PullResult:
    updated: bool
    version: int
    state: dict[str, Any] | None = None
    seat_config: dict[str, Any] | None = None


@dataclass(slots=True)
class StartResult:
    started: bool
    state: dict[str, Any]
    version: int


def is_playable(state: dict[str, Any] | None) -> bool:
    """A room is playable once it has seated players and a generated board."""
    return bool(state) and bool(state.get("players")) and bool(state.get("cells"))


class RoomSyncService:
    """Server side of the reconciliation protocol over one room store."""

    def __init__(
        self,
        store: RoomStore,
        *,
        expiry_ms: int,
        optimistic_concurrency: bool = False,
        config_provider: Callable[[], dict[str, Any]] | None = None,
        code_generator: Callable[[], str] = generate_room_code,
    ) -> None:
        self._store = store
        self._expiry_ms = int(expiry_ms)
        self._optimistic_concurrency = optimistic_concurrency
        self._config_provider = config_provider
        self._code_generator = code_generator
        self._seats = SeatAllocator(store)

    @property
    def store(self) -> RoomStore:
        return self._store

    @property
    def seats(self) -> SeatAllocator:
        return self._seats

    def expire_rooms(self) -> int:
        """Sweep rooms idle past the expiry window; a failed sweep never blocks callers."""
        try:
            return self._store.expire_older_than(self._expiry_ms)
        except PersistenceError:
            logger.warning("room expiry sweep failed; continuing without it")
            return 0

    def create_room(
        self,
        state: dict[str, Any] | None = None,
        *,
        male_count: int = 1,
        female_count: int = 1,
    ) -> CreatedRoom:
        """Allocate a code and persist the initial snapshot.

        A supplied game keeps its own players, so its seats come back already
        held; otherwise the layout is empty seats for the requested counts.
        """
        self.expire_rooms()
        if state is None:
            state = initial_state(players=[], config=None, rng=random.Random(0))
        if state.get("players"):
            seat_config = seat_config_from_players(state["players"])
        else:
            seat_config = build_seat_config(male_count, female_count)
        room_id = allocate_room_code(self._store.exists, generate=self._code_generator)
        record = self._store.create(room_id, state, seat_config)
        logger.info(
            "room created room=%s seats=%d direct=%s",
            room_id,
            seat_config["total_players"],
            is_playable(state),
        )
        return CreatedRoom(room_id=room_id, seat_config=record.seat_config or seat_config, version=record.version)

    def join_room(self, raw_code: str) -> JoinResult:
        """Look a room up by user-entered code; unknown and malformed codes both miss."""
        try:
            room_id = normalize_room_code(raw_code)
        except RoomNotFoundError:
            return JoinResult(exists=False)
        record = self._store.get_record(room_id)
        if record is None:
            return JoinResult(exists=False)
        return JoinResult(
            exists=True,
            room_id=room_id,
            state=record.state,
            seat_config=record.seat_config,
            version=record.version,
            playable=is_playable(record.state),
        )

    def pull(self, raw_code: str, last_known_version: int = 0) -> PullResult:
        """Return the snapshot only when it is newer than what the caller holds."""
        room_id = normalize_room_code(raw_code)
        record = self._store.get_record(room_id)
        if record is None:
            raise RoomNotFoundError(f"room_id={room_id} not found")
        if record.version <= int(last_known_version):
            return PullResult(updated=False, version=record.version)
        return PullResult(
            updated=True,
            version=record.version,
            state=record.state,
            seat_config=record.seat_config,
        )

    def push(self, raw_code: str, state: dict[str, Any], base_version: int | None = None) -> int:
        """Replace the room snapshot and return its new version.

        Last writer wins unless optimistic concurrency is enabled and the
        caller names the version it built on.
        """
        room_id = normalize_room_code(raw_code)
        expected = base_version if self._optimistic_concurrency else None
        version = self._store.update(room_id, state, expected_version=expected)
        if version is None:
            raise RoomNotFoundError(f"room_id={room_id} not found")
        logger.debug("push accepted room=%s version=%d", room_id, version)
        return version

    def claim_seat(
        self,
        raw_code: str,
        *,
        seat_index: int,
        player_id: str,
        player_name: str,
    ) -> tuple[dict[str, Any], int]:
        room_id = normalize_room_code(raw_code)
        return self._seats.claim_seat(room_id, seat_index=seat_index, player_id=player_id, player_name=player_name)

    def start_game_if_ready(
        self,
        raw_code: str,
        *,
        rng_seed: int | None = None,
        timer_duration: int = DEFAULT_TIMER_SECONDS,
    ) -> StartResult:
        """Turn a fully seated setup room into a playable game; repeat calls are no-ops."""
        room_id = normalize_room_code(raw_code)
        with self._seats.lock_room(room_id):
            record = self._store.get_record(room_id)
            if record is None:
                raise RoomNotFoundError(f"room_id={room_id} not found")
            if record.state.get("players") or not all_seats_filled(record.seat_config):
                return StartResult(started=False, state=record.state, version=record.version)

            config = self._config_provider() if self._config_provider is not None else None
            engine = FlightChessEngine(config=config, rng_seed=rng_seed)
            state = engine.init_game(
                players_from_seats(record.seat_config or {}),
                timer_duration=timer_duration,
            )["new_state"]
            version = self._store.update(room_id, state)
            if version is None:
                raise RoomNotFoundError(f"room_id={room_id} not found")
        logger.info("game started room=%s players=%d", room_id, len(state["players"]))
        return StartResult(started=True, state=state, version=version)


__all__ = [
    "CreatedRoom",
    "JoinResult",
    "PullResult",
    "RoomSyncService",
    "StartResult",
    "is_playable",
]
