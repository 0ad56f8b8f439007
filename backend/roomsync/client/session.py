"""One device's view of a shared room: local engine plus sync client."""

from __future__ import annotations

import logging
import time
from typing import Any

from flightchess.core import FlightChessEngine
from flightchess.reducer import PHASE_SETUP
from flightchess.reducer import PHASE_WON
from roomsync.client.polling import DEFAULT_POLL_INTERVAL_SECONDS
from roomsync.client.polling import PollingLoop
from roomsync.client.sync_client import SyncClient

logger = logging.getLogger(__name__)


class RoomSession:
    """Applies local actions optimistically, then pushes the whole snapshot.

    Only the device whose player holds the turn may roll or resolve tasks;
    the engine refuses anyone else before touching state. Timer and restart
    are shared controls.
    """

    def __init__(self, client: SyncClient, engine: FlightChessEngine, *, player_id: str) -> None:
        self._client = client
        self._engine = engine
        self._player_id = player_id
        self._version = 0
        self.seat_config: dict[str, Any] | None = None

    @property
    def player_id(self) -> str:
        return self._player_id

    @property
    def version(self) -> int:
        return self._version

    @property
    def state(self) -> dict[str, Any]:
        return self._engine.dump_state()

    def can_act(self) -> bool:
        """True when this device's player may take the next turn action."""
        try:
            phase = self._engine.phase
        except RuntimeError:
            return False
        if phase in {PHASE_SETUP, PHASE_WON}:
            return False
        return self._engine.is_players_turn(self._player_id)

    def apply_remote(self, state: dict[str, Any], version: int) -> bool:
        """Adopt a server snapshot if it is newer than the one held locally."""
        if int(version) <= self._version:
            return False
        self._engine.load_state(state)
        self._version = int(version)
        return True

    def apply_seats(self, seat_config: dict[str, Any]) -> None:
        self.seat_config = seat_config

    def _adopt_room(self, data: dict[str, Any]) -> None:
        if data.get("seat_config") is not None:
            self.apply_seats(data["seat_config"])
        if data.get("state") is not None:
            self.apply_remote(data["state"], int(data["version"]))

    def create(
        self,
        state: dict[str, Any] | None = None,
        *,
        male_count: int = 1,
        female_count: int = 1,
    ) -> str | None:
        """Create a room and load its opening snapshot; returns the room code."""
        created = self._client.create_room(state, male_count=male_count, female_count=female_count)
        if created is None:
            return None
        room_id = str(created["room_id"])
        joined = self.join(room_id)
        if joined is None:
            self.apply_seats(created["seat_config"])
        return room_id

    def join(self, code: str) -> dict[str, Any] | None:
        """Join a room and adopt the snapshot the server answered with."""
        data = self._client.join_room(code)
        if data is not None and data.get("exists"):
            self._adopt_room(data)
        return data

    def claim_seat(self, seat_index: int, player_name: str) -> bool:
        data = self._client.claim_seat(seat_index, player_id=self._player_id, player_name=player_name)
        if data is None:
            return False
        self.apply_seats(data["seat_config"])
        # Seat claims bump the room version without touching the game state.
        if self._version:
            self._version = max(self._version, int(data["version"]))
        return True

    def start(self, *, rng_seed: int | None = None) -> bool:
        """Ask the server to start the game; True once this device holds a started game."""
        data = self._client.start_game(rng_seed=rng_seed)
        if data is None:
            return False
        self._adopt_room(data)
        return self.playable

    @property
    def playable(self) -> bool:
        try:
            phase = self._engine.phase
        except RuntimeError:
            return False
        return phase != PHASE_SETUP

    def polling_loop(self, *, interval: float = DEFAULT_POLL_INTERVAL_SECONDS) -> PollingLoop:
        return PollingLoop(self._client, on_state=self.apply_remote, on_seats=self.apply_seats, interval=interval)

    def _act(self, action: dict[str, Any]) -> bool:
        self._engine.apply_action(action, self._player_id)
        state = self._engine.dump_state()
        state["last_update"] = time.time_ns() // 1_000_000
        self._engine.load_state(state)
        pushed = self._client.push(state, base_version=self._version or None)
        if pushed:
            self._version = self._client.last_version
        else:
            logger.warning("push failed (%s); keeping local state", self._client.last_error)
        return pushed

    def roll(self, value: int | None = None) -> bool:
        action: dict[str, Any] = {"type": "ROLL"}
        if value is not None:
            action["value"] = value
        return self._act(action)

    def complete_task(self) -> bool:
        return self._act({"type": "COMPLETE_TASK"})

    def change_task(self) -> bool:
        return self._act({"type": "CHANGE_TASK"})

    def set_timer(self, op: str, value: int | None = None) -> bool:
        return self._act({"type": "TIMER", "op": op, "value": value})

    def restart(self) -> bool:
        return self._act({"type": "RESTART"})
