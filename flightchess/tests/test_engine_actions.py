"""Engine facade: turn gating, legal actions, task change, timer and restart."""

from __future__ import annotations

import pytest

from flightchess.core import FlightChessEngine
from flightchess.errors import EngineError
from flightchess.errors import IllegalActionError
from flightchess.errors import InvalidStateError
from flightchess.errors import NotYourTurnError
from flightchess.reducer import PHASE_AWAITING_ROLL
from flightchess.reducer import PHASE_TASK_PENDING
from flightchess.reducer import PHASE_WON
from flightchess.tests.state_kit import build_players
from flightchess.tests.state_kit import build_state


def _engine_with(state: dict, seed: int = 7) -> FlightChessEngine:
    engine = FlightChessEngine(rng_seed=seed)
    engine.load_state(state)
    return engine


def _action_types(engine: FlightChessEngine, player_id: str) -> list[str]:
    return [action["type"] for action in engine.get_legal_actions(player_id)["actions"]]


def test_init_game_builds_board_and_starts_with_first_seat() -> None:
    engine = FlightChessEngine(rng_seed=1)

    result = engine.init_game(build_players(2))
    state = result["new_state"]

    assert len(state["cells"]) == 48
    assert state["current_player_index"] == 0
    assert state["timer"] == {"duration": 60, "time_left": 60, "is_running": False}
    assert engine.phase == PHASE_AWAITING_ROLL


def test_init_game_without_players_is_rejected() -> None:
    engine = FlightChessEngine(rng_seed=1)

    with pytest.raises(ValueError, match="ENGINE_INVALID_CONFIG"):
        engine.init_game([])


def test_same_seed_produces_same_board() -> None:
    first = FlightChessEngine(rng_seed=2026).init_game(build_players(2))["new_state"]
    second = FlightChessEngine(rng_seed=2026).init_game(build_players(2))["new_state"]

    assert first["cells"] == second["cells"]
    assert first["endpoint_cells"] == second["endpoint_cells"]


def test_out_of_turn_action_leaves_state_untouched() -> None:
    """Input: p2 tries to roll during p1's turn -> Output: NotYourTurnError and identical state."""
    engine = _engine_with(build_state(positions=[3, 3]))
    before = engine.dump_state()

    for action in ({"type": "ROLL", "value": 4}, {"type": "COMPLETE_TASK"}, {"type": "CHANGE_TASK"}):
        with pytest.raises(NotYourTurnError, match="ENGINE_NOT_YOUR_TURN"):
            engine.apply_action(action, "p2")

    assert engine.dump_state() == before


def test_not_your_turn_is_an_engine_error() -> None:
    assert issubclass(NotYourTurnError, EngineError)
    assert issubclass(EngineError, ValueError)


def test_legal_actions_follow_phase_and_turn() -> None:
    engine = _engine_with(build_state(positions=[0, 0]))

    assert _action_types(engine, "p1") == ["ROLL", "TIMER", "RESTART"]
    assert _action_types(engine, "p2") == ["TIMER", "RESTART"]

    engine.apply_action({"type": "ROLL", "value": 3}, "p1")

    assert engine.phase == PHASE_TASK_PENDING
    assert _action_types(engine, "p1") == ["COMPLETE_TASK", "CHANGE_TASK", "TIMER", "RESTART"]
    assert _action_types(engine, "p2") == ["TIMER", "RESTART"]


def test_apply_action_returns_new_state_copy() -> None:
    engine = _engine_with(build_state())

    result = engine.apply_action({"type": "ROLL", "value": 2}, "p1")
    result["new_state"]["players"][0]["position"] = 40

    assert engine.dump_state()["players"][0]["position"] == 2


def test_roll_without_value_uses_seeded_die() -> None:
    first = _engine_with(build_state(), seed=99)
    second = _engine_with(build_state(), seed=99)

    first.apply_action({"type": "ROLL"}, "p1")
    second.apply_action({"type": "ROLL"}, "p1")

    position = first.dump_state()["players"][0]["position"]
    assert 1 <= position <= 6
    assert second.dump_state()["players"][0]["position"] == position


def test_change_task_swaps_in_gender_task_once_per_cell() -> None:
    engine = _engine_with(build_state(positions=[4, 0]))
    engine.apply_action({"type": "ROLL", "value": 2}, "p1")

    engine.apply_action({"type": "CHANGE_TASK"}, "p1")
    state = engine.dump_state()

    replacement = state["pending_task"]["cell"]
    assert replacement["player"] == "female"
    assert replacement["id"] == 6
    assert state["task_changed_cells"] == [6]
    assert "CHANGE_TASK" not in _action_types(engine, "p1")

    with pytest.raises(IllegalActionError, match="ENGINE_TASK_ALREADY_CHANGED"):
        engine.apply_action({"type": "CHANGE_TASK"}, "p1")


def test_change_task_without_pool_is_rejected() -> None:
    engine = FlightChessEngine(config={"female_cells": []}, rng_seed=3)
    engine.load_state(build_state(positions=[4, 0]))
    engine.apply_action({"type": "ROLL", "value": 1}, "p1")

    with pytest.raises(IllegalActionError, match="ENGINE_NO_REPLACEMENT_TASK"):
        engine.apply_action({"type": "CHANGE_TASK"}, "p1")
    assert engine.dump_state()["task_changed_cells"] == []


def test_timer_controls_are_shared_by_every_player() -> None:
    engine = _engine_with(build_state())

    engine.apply_action({"type": "TIMER", "op": "set_duration", "value": 30}, "p2")
    engine.apply_action({"type": "TIMER", "op": "toggle"}, "p2")
    engine.apply_action({"type": "TIMER", "op": "tick", "value": 5}, "p1")

    assert engine.dump_state()["timer"] == {"duration": 30, "time_left": 25, "is_running": True}

    engine.apply_action({"type": "TIMER", "op": "reset"}, "p1")
    assert engine.dump_state()["timer"] == {"duration": 30, "time_left": 30, "is_running": False}


def test_timer_stops_at_zero_and_toggle_refills() -> None:
    engine = _engine_with(build_state())
    engine.apply_action({"type": "TIMER", "op": "set_duration", "value": 3}, "p1")
    engine.apply_action({"type": "TIMER", "op": "toggle"}, "p1")

    engine.apply_action({"type": "TIMER", "op": "tick", "value": 10}, "p1")
    assert engine.dump_state()["timer"] == {"duration": 3, "time_left": 0, "is_running": False}

    engine.apply_action({"type": "TIMER", "op": "toggle"}, "p1")
    assert engine.dump_state()["timer"] == {"duration": 3, "time_left": 3, "is_running": True}


@pytest.mark.parametrize(
    "action",
    [
        {"type": "TIMER", "op": "set_duration", "value": 0},
        {"type": "TIMER", "op": "set_duration", "value": 3601},
        {"type": "TIMER", "op": "set_duration"},
        {"type": "TIMER", "op": "rewind"},
    ],
)
def test_invalid_timer_operations_are_rejected(action: dict) -> None:
    engine = _engine_with(build_state())

    with pytest.raises(IllegalActionError, match="ENGINE_INVALID_TIMER"):
        engine.apply_action(action, "p1")


def test_unknown_action_type_is_rejected() -> None:
    engine = _engine_with(build_state())

    with pytest.raises(IllegalActionError, match="ENGINE_INVALID_ACTION"):
        engine.apply_action({"type": "TELEPORT"}, "p1")


def test_restart_after_win_resets_positions_and_keeps_seats() -> None:
    engine = _engine_with(build_state(positions=[48, 20]))
    engine.apply_action({"type": "ROLL", "value": 5}, "p1")
    assert engine.phase == PHASE_WON
    assert _action_types(engine, "p1") == ["TIMER", "RESTART"]

    engine.apply_action({"type": "RESTART"}, "p2")
    state = engine.dump_state()

    assert state["winner"] is None
    assert [player["position"] for player in state["players"]] == [0, 0]
    assert [player["id"] for player in state["players"]] == ["p1", "p2"]
    assert state["current_player_index"] == 0
    assert state["task_changed_cells"] == []
    assert len(state["cells"]) == 48
    assert engine.phase == PHASE_AWAITING_ROLL


def test_load_state_rejects_duplicate_player_ids() -> None:
    state = build_state()
    state["players"][1]["id"] = "p1"

    with pytest.raises(InvalidStateError):
        FlightChessEngine().load_state(state)


def test_load_state_rejects_position_past_finish() -> None:
    state = build_state()
    state["players"][0]["position"] = 99

    with pytest.raises(InvalidStateError):
        FlightChessEngine().load_state(state)


def test_engine_requires_state_before_play() -> None:
    with pytest.raises(RuntimeError):
        FlightChessEngine().apply_action({"type": "ROLL"}, "p1")
