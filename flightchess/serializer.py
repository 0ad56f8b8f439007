"""State serializer helpers: canonical-shape checks on load and dump."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from flightchess.board import last_index
from flightchess.errors import InvalidStateError

_PLAYER_KEYS = {"id", "name", "gender", "position", "is_skipped", "seat_index"}
_TIMER_KEYS = {"duration", "time_left", "is_running"}
_GENDERS = {"male", "female"}


def _assert_players_canonical(state: dict[str, Any]) -> None:
    players = state.get("players")
    if not isinstance(players, list):
        raise InvalidStateError("state.players must be list")

    final = last_index(state)
    seen_ids: set[str] = set()
    for idx, player in enumerate(players):
        if not isinstance(player, dict) or not _PLAYER_KEYS <= set(player):
            raise InvalidStateError(f"state.players[{idx}] is missing fields")
        if player["gender"] not in _GENDERS:
            raise InvalidStateError(f"state.players[{idx}].gender is invalid")
        if player["id"] in seen_ids:
            raise InvalidStateError("state.players ids must be unique")
        seen_ids.add(player["id"])
        position = int(player["position"])
        if position < 0 or (state.get("cells") and position > final):
            raise InvalidStateError(f"state.players[{idx}].position is out of range")

    current = int(state.get("current_player_index", 0))
    if players and not 0 <= current < len(players):
        raise InvalidStateError("state.current_player_index is out of range")


def _assert_timer_canonical(state: dict[str, Any]) -> None:
    timer = state.get("timer")
    if not isinstance(timer, dict) or not _TIMER_KEYS <= set(timer):
        raise InvalidStateError("state.timer is missing fields")
    if int(timer["time_left"]) < 0 or int(timer["time_left"]) > int(timer["duration"]):
        raise InvalidStateError("state.timer.time_left is out of range")


def _assert_pending_canonical(state: dict[str, Any]) -> None:
    pending = state.get("pending_task")
    if pending is None:
        return
    if not isinstance(pending, dict) or "index" not in pending or "cell" not in pending:
        raise InvalidStateError("state.pending_task must hold index and cell")


def load_state(state: dict[str, Any]) -> dict[str, Any]:
    """Validate and copy an incoming state."""

    if not isinstance(state, dict):
        raise InvalidStateError("state must be object")
    loaded = deepcopy(state)
    loaded.setdefault("task_changed_cells", [])
    loaded.setdefault("pending_task", None)
    loaded.setdefault("last_update", None)
    _assert_players_canonical(loaded)
    _assert_timer_canonical(loaded)
    _assert_pending_canonical(loaded)
    return loaded


def dump_state(state: dict[str, Any] | None) -> dict[str, Any]:
    if state is None:
        return {}
    return deepcopy(state)
