"""Room REST routes: bootstrap, seats and state reconciliation."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Query

from roomsync.api.deps import require_sync_service
from roomsync.api.errors import room_errors
from roomsync.api.room_views import created_room_view
from roomsync.api.room_views import join_view
from roomsync.api.room_views import pull_view
from roomsync.api.room_views import seat_view
from roomsync.api.room_views import start_view
from roomsync.rooms.models import ClaimSeatRequest
from roomsync.rooms.models import CreateRoomRequest
from roomsync.rooms.models import PushStateRequest
from roomsync.rooms.models import StartGameRequest
from roomsync.rooms.models import state_payload

router = APIRouter()


@router.post("/api/rooms")
def create_room(payload: CreateRoomRequest) -> dict[str, object]:
    """Create a room with a fresh code and an empty seat layout."""
    service = require_sync_service()
    state = None if payload.state is None else state_payload(payload.state)
    with room_errors():
        created = service.create_room(
            state,
            male_count=payload.male_count,
            female_count=payload.female_count,
        )
    return created_room_view(created)


@router.get("/api/rooms/{room_id}")
def join_room(room_id: str) -> dict[str, object]:
    """Check a room code; unknown or expired rooms answer ``exists: false``."""
    service = require_sync_service()
    with room_errors(room_id):
        result = service.join_room(room_id)
    return join_view(result)


@router.post("/api/rooms/{room_id}/seats")
def claim_seat(room_id: str, payload: ClaimSeatRequest) -> dict[str, object]:
    """Claim one seat for a player, releasing any seat they held before."""
    service = require_sync_service()
    with room_errors(room_id):
        seat_config, version = service.claim_seat(
            room_id,
            seat_index=payload.seat_index,
            player_id=payload.player_id,
            player_name=payload.player_name,
        )
    return seat_view(seat_config, version)


@router.post("/api/rooms/{room_id}/start")
def start_game(room_id: str, payload: StartGameRequest) -> dict[str, object]:
    """Generate the board once every seat is taken."""
    service = require_sync_service()
    with room_errors(room_id):
        result = service.start_game_if_ready(
            room_id,
            rng_seed=payload.rng_seed,
            timer_duration=payload.timer_duration,
        )
    return start_view(result)


@router.get("/api/rooms/{room_id}/state")
def pull_state(room_id: str, last_known_version: int = Query(default=0, ge=0)) -> dict[str, object]:
    """Return the snapshot when it is newer than ``last_known_version``."""
    service = require_sync_service()
    with room_errors(room_id):
        result = service.pull(room_id, last_known_version)
    return pull_view(result)


@router.post("/api/rooms/{room_id}/state")
def push_state(room_id: str, payload: PushStateRequest) -> dict[str, object]:
    """Replace the room snapshot with the caller's full state."""
    service = require_sync_service()
    with room_errors(room_id):
        version = service.push(room_id, state_payload(payload.state), base_version=payload.base_version)
    return {"version": version}
