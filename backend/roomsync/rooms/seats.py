"""Seat layout building and seat claims for seat-based room setup."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from copy import deepcopy
import logging
import threading
from typing import Any

from flightchess.reducer import new_player
from roomsync.rooms.errors import RoomNotFoundError
from roomsync.rooms.errors import SeatNotFoundError
from roomsync.rooms.errors import SeatTakenError
from roomsync.rooms.store import RoomStore

logger = logging.getLogger(__name__)

DEFAULT_MALE_COUNT = 1
DEFAULT_FEMALE_COUNT = 1


def build_seat_config(male_count: int = DEFAULT_MALE_COUNT, female_count: int = DEFAULT_FEMALE_COUNT) -> dict[str, Any]:
    """Lay out empty seats: all male seats first, then female seats."""
    if male_count < 0 or female_count < 0 or male_count + female_count < 1:
        raise ValueError("seat counts must be >= 0 with at least one seat")
    seats: list[dict[str, Any]] = []
    for gender, count in (("male", male_count), ("female", female_count)):
        for _ in range(count):
            seats.append({"index": len(seats), "gender": gender, "player_id": None, "player_name": None})
    return {
        "male_count": male_count,
        "female_count": female_count,
        "total_players": male_count + female_count,
        "seats": seats,
    }


def seat_config_from_players(players: list[dict[str, Any]]) -> dict[str, Any]:
    """Seat layout for a game that arrives already populated, one held seat per player in turn order."""
    seats = [
        {"index": index, "gender": player["gender"], "player_id": player["id"], "player_name": player["name"]}
        for index, player in enumerate(players)
    ]
    male_count = sum(1 for seat in seats if seat["gender"] == "male")
    return {
        "male_count": male_count,
        "female_count": len(seats) - male_count,
        "total_players": len(seats),
        "seats": seats,
    }


def _find_seat(config: dict[str, Any], seat_index: int) -> dict[str, Any]:
    for seat in config.get("seats") or []:
        if int(seat["index"]) == int(seat_index):
            return seat
    raise SeatNotFoundError(f"seat_index={seat_index} not found")


def claim_seat_in_config(
    config: dict[str, Any],
    *,
    seat_index: int,
    player_id: str,
    player_name: str,
) -> dict[str, Any]:
    """Return a copy of ``config`` with the seat assigned to the player.

    A player holds at most one seat, so any seat they held before is cleared.
    Re-claiming one's own seat is allowed and refreshes the display name.
    """
    updated = deepcopy(config)
    seat = _find_seat(updated, seat_index)
    if seat["player_id"] is not None and seat["player_id"] != player_id:
        raise SeatTakenError(f"seat_index={seat_index} is held by another player")

    for other in updated["seats"]:
        if other["player_id"] == player_id:
            other["player_id"] = None
            other["player_name"] = None
    seat["player_id"] = player_id
    seat["player_name"] = player_name
    return updated


def release_seat_in_config(config: dict[str, Any], *, player_id: str) -> dict[str, Any]:
    updated = deepcopy(config)
    for seat in updated.get("seats") or []:
        if seat["player_id"] == player_id:
            seat["player_id"] = None
            seat["player_name"] = None
    return updated


def all_seats_filled(config: dict[str, Any] | None) -> bool:
    seats = (config or {}).get("seats") or []
    return bool(seats) and all(seat["player_id"] is not None for seat in seats)


def players_from_seats(config: dict[str, Any]) -> list[dict[str, Any]]:
    """Build the turn order from occupied seats, in seat index order."""
    seats = sorted(config.get("seats") or [], key=lambda seat: int(seat["index"]))
    return [
        new_player(
            player_id=seat["player_id"],
            name=seat["player_name"] or seat["player_id"],
            gender=seat["gender"],
            seat_index=int(seat["index"]),
        )
        for seat in seats
        if seat["player_id"] is not None
    ]


class SeatAllocator:
    """Serialises seat claims per room inside this process."""

    def __init__(self, store: RoomStore) -> None:
        self._store = store
        self._room_locks: dict[str, threading.RLock] = {}
        self._room_locks_guard = threading.Lock()

    @contextmanager
    def lock_room(self, room_id: str) -> Iterator[None]:
        """Acquire the write lock for one room code."""
        with self._room_locks_guard:
            lock = self._room_locks.setdefault(room_id, threading.RLock())
        with lock:
            yield

    def claim_seat(
        self,
        room_id: str,
        *,
        seat_index: int,
        player_id: str,
        player_name: str,
    ) -> tuple[dict[str, Any], int]:
        """Claim a seat and persist the layout; returns the new config and version."""
        with self.lock_room(room_id):
            record = self._store.get_record(room_id)
            if record is None or record.seat_config is None:
                raise RoomNotFoundError(f"room_id={room_id} not found")
            try:
                updated = claim_seat_in_config(
                    record.seat_config,
                    seat_index=seat_index,
                    player_id=player_id,
                    player_name=player_name,
                )
            except SeatTakenError:
                logger.info("seat claim rejected room=%s seat=%s player=%s", room_id, seat_index, player_id)
                raise
            version = self._store.update_seat_config(room_id, updated)
            if version is None:
                raise RoomNotFoundError(f"room_id={room_id} not found")
        logger.info("seat claimed room=%s seat=%s player=%s", room_id, seat_index, player_id)
        return updated, version

    def release_seat(self, room_id: str, *, player_id: str) -> tuple[dict[str, Any], int]:
        with self.lock_room(room_id):
            record = self._store.get_record(room_id)
            if record is None or record.seat_config is None:
                raise RoomNotFoundError(f"room_id={room_id} not found")
            updated = release_seat_in_config(record.seat_config, player_id=player_id)
            version = self._store.update_seat_config(room_id, updated)
            if version is None:
                raise RoomNotFoundError(f"room_id={room_id} not found")
        return updated, version
