"""Response builders used by the room REST routes."""

from __future__ import annotations

from roomsync.rooms.service import CreatedRoom
from roomsync.rooms.service import JoinResult
from roomsync.rooms.service import PullResult
from roomsync.rooms.service import StartResult


def created_room_view(created: CreatedRoom) -> dict[str, object]:
    return {
        "room_id": created.room_id,
        "seat_config": created.seat_config,
        "version": created.version,
    }


def join_view(result: JoinResult) -> dict[str, object]:
    if not result.exists:
        return {"exists": False}
    return {
        "exists": True,
        "room_id": result.room_id,
        "state": result.state,
        "seat_config": result.seat_config,
        "version": result.version,
        "playable": result.playable,
    }


def pull_view(result: PullResult) -> dict[str, object]:
    view: dict[str, object] = {"updated": result.updated, "version": result.version}
    if result.updated:
        view["state"] = result.state
        view["seat_config"] = result.seat_config
    return view


def seat_view(seat_config: dict[str, object], version: int) -> dict[str, object]:
    return {"seat_config": seat_config, "version": version}


def start_view(result: StartResult) -> dict[str, object]:
    return {"started": result.started, "state": result.state, "version": result.version}
