"""Reducer functions for turn and task transitions."""

from __future__ import annotations

from copy import deepcopy
import random
from typing import Any

from flightchess.board import cell_at
from flightchess.board import generate_board
from flightchess.board import generate_endpoint_cells
from flightchess.board import last_index
from flightchess.content import RETURN_TO_START
from flightchess.errors import IllegalActionError

SCHEMA_VERSION = 1
DEFAULT_TIMER_SECONDS = 60
MAX_TIMER_SECONDS = 3600
DICE_FACES = 6

PHASE_SETUP = "setup"
PHASE_AWAITING_ROLL = "awaiting_roll"
PHASE_TASK_PENDING = "task_pending"
PHASE_ROLL_AGAIN = "roll_again"
PHASE_WON = "won"


def new_timer(duration: int = DEFAULT_TIMER_SECONDS) -> dict[str, Any]:
    return {"duration": int(duration), "time_left": int(duration), "is_running": False}


def new_player(
    *,
    player_id: str,
    name: str,
    gender: str,
    seat_index: int,
) -> dict[str, Any]:
    return {
        "id": str(player_id),
        "name": str(name),
        "gender": str(gender),
        "position": 0,
        "is_skipped": False,
        "seat_index": int(seat_index),
    }


def initial_state(
    *,
    players: list[dict[str, Any]],
    config: dict[str, Any] | None,
    rng: random.Random,
    timer_duration: int = DEFAULT_TIMER_SECONDS,
) -> dict[str, Any]:
    """Build a fresh state; without a config the board is left empty (setup mode)."""

    cells: list[dict[str, Any]] = []
    endpoint_cells: list[dict[str, Any]] = []
    if config is not None:
        cells = generate_board(config, rng)
        endpoint_cells = generate_endpoint_cells(config, rng)
    return {
        "schema_version": SCHEMA_VERSION,
        "players": deepcopy(players),
        "current_player_index": 0,
        "can_roll_again": False,
        "winner": None,
        "pending_task": None,
        "cells": cells,
        "endpoint_cells": endpoint_cells,
        "timer": new_timer(timer_duration),
        "task_changed_cells": [],
        "last_update": None,
    }


def phase_of(state: dict[str, Any]) -> str:
    """Derive the state-machine phase from the synchronized snapshot."""

    if state.get("winner") is not None:
        return PHASE_WON
    if not state.get("players") or not state.get("cells"):
        return PHASE_SETUP
    if state.get("pending_task") is not None:
        return PHASE_TASK_PENDING
    if state.get("can_roll_again"):
        return PHASE_ROLL_AGAIN
    return PHASE_AWAITING_ROLL


def active_player(state: dict[str, Any]) -> dict[str, Any] | None:
    players = state.get("players") or []
    if not players:
        return None
    return players[int(state.get("current_player_index", 0)) % len(players)]


def clamp_position(state: dict[str, Any], position: int) -> int:
    return max(0, min(int(position), last_index(state)))


def advance_turn(state: dict[str, Any]) -> None:
    """Pass the turn round-robin; skipped players lose their turn silently."""

    players = state["players"]
    candidate = (int(state["current_player_index"]) + 1) % len(players)
    while players[candidate]["is_skipped"]:
        players[candidate]["is_skipped"] = False
        candidate = (candidate + 1) % len(players)
    state["current_player_index"] = candidate
    state["can_roll_again"] = False


def _move_to(state: dict[str, Any], player: dict[str, Any], target: int) -> bool:
    """Move a player, returning True when the move wins the game."""

    final = last_index(state)
    player["position"] = clamp_position(state, target)
    if player["position"] >= final:
        player["position"] = final
        state["winner"] = player["name"]
        state["pending_task"] = None
        state["can_roll_again"] = False
        return True
    return False


def _require_phase(state: dict[str, Any], *phases: str) -> None:
    if phase_of(state) not in phases:
        raise IllegalActionError("ENGINE_INVALID_PHASE")


def apply_roll(state: dict[str, Any], value: int) -> dict[str, Any]:
    """Apply one dice roll for the active player in-place."""

    _require_phase(state, PHASE_AWAITING_ROLL, PHASE_ROLL_AGAIN)
    if not 1 <= int(value) <= DICE_FACES:
        raise IllegalActionError("ENGINE_INVALID_ROLL")

    player = active_player(state)
    assert player is not None
    state["can_roll_again"] = False

    if player["is_skipped"]:
        player["is_skipped"] = False
        advance_turn(state)
        return state

    if _move_to(state, player, int(player["position"]) + int(value)):
        return state

    cell = cell_at(state, player["position"])
    if cell is None:
        advance_turn(state)
        return state
    state["pending_task"] = {"index": player["position"], "cell": deepcopy(cell)}
    return state


def apply_complete_task(state: dict[str, Any]) -> dict[str, Any]:
    """Resolve the pending task and its optional effect in-place."""

    _require_phase(state, PHASE_TASK_PENDING)
    player = active_player(state)
    assert player is not None
    effect = state["pending_task"]["cell"].get("effect") or {}
    state["pending_task"] = None
    effect_type = effect.get("type")

    if effect_type == "again":
        state["can_roll_again"] = True
        return state

    if effect_type == "move" and effect.get("value"):
        delta = int(effect["value"])
        target = 0 if delta == RETURN_TO_START else int(player["position"]) + delta
        if _move_to(state, player, target):
            return state
    elif effect_type == "skip":
        player["is_skipped"] = True
    elif effect_type == "swap":
        players = state["players"]
        if len(players) > 1:
            other = players[(int(state["current_player_index"]) + 1) % len(players)]
            player["position"], other["position"] = other["position"], player["position"]

    advance_turn(state)
    return state


def apply_change_task(
    state: dict[str, Any],
    *,
    config: dict[str, Any],
    rng: random.Random,
) -> dict[str, Any]:
    """Replace the pending task with a gender-specific one, once per cell."""

    _require_phase(state, PHASE_TASK_PENDING)
    pending = state["pending_task"]
    if pending["index"] in state["task_changed_cells"]:
        raise IllegalActionError("ENGINE_TASK_ALREADY_CHANGED")

    player = active_player(state)
    assert player is not None
    pool = config.get("male_cells" if player["gender"] == "male" else "female_cells") or []
    if not pool:
        raise IllegalActionError("ENGINE_NO_REPLACEMENT_TASK")

    replacement = deepcopy(rng.choice(pool))
    replacement["id"] = pending["cell"].get("id")
    replacement.setdefault("effect", None)
    pending["cell"] = replacement
    state["task_changed_cells"].append(pending["index"])
    return state


def apply_timer(state: dict[str, Any], op: str, value: int | None = None) -> dict[str, Any]:
    """Update the embedded timer sub-state."""

    timer = state["timer"]
    if op == "toggle":
        if not timer["is_running"] and timer["time_left"] <= 0:
            timer["time_left"] = timer["duration"]
        timer["is_running"] = not timer["is_running"]
    elif op == "set_duration":
        if value is None or not 1 <= int(value) <= MAX_TIMER_SECONDS:
            raise IllegalActionError("ENGINE_INVALID_TIMER")
        timer.update(new_timer(int(value)))
    elif op == "reset":
        timer["time_left"] = timer["duration"]
        timer["is_running"] = False
    elif op == "tick":
        if timer["is_running"]:
            timer["time_left"] = max(0, int(timer["time_left"]) - int(value or 1))
            if timer["time_left"] == 0:
                timer["is_running"] = False
    else:
        raise IllegalActionError("ENGINE_INVALID_TIMER")
    return state


def apply_restart(
    state: dict[str, Any],
    *,
    config: dict[str, Any],
    rng: random.Random,
) -> dict[str, Any]:
    """Reset positions and flags and regenerate the board; players stay seated."""

    for player in state["players"]:
        player["position"] = 0
        player["is_skipped"] = False
    state.update(
        {
            "current_player_index": 0,
            "can_roll_again": False,
            "winner": None,
            "pending_task": None,
            "cells": generate_board(config, rng),
            "endpoint_cells": generate_endpoint_cells(config, rng),
            "task_changed_cells": [],
        }
    )
    state["timer"]["time_left"] = state["timer"]["duration"]
    state["timer"]["is_running"] = False
    return state
