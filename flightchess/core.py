"""Core game engine facade used by local play and synced room sessions."""

from __future__ import annotations

import random
from typing import Any

from flightchess.content import load_game_config
from flightchess.errors import IllegalActionError
from flightchess.errors import NotYourTurnError
from flightchess.reducer import DEFAULT_TIMER_SECONDS
from flightchess.reducer import PHASE_AWAITING_ROLL
from flightchess.reducer import PHASE_ROLL_AGAIN
from flightchess.reducer import PHASE_TASK_PENDING
from flightchess.reducer import PHASE_WON
from flightchess.reducer import active_player as reducer_active_player
from flightchess.reducer import apply_change_task
from flightchess.reducer import apply_complete_task
from flightchess.reducer import apply_restart
from flightchess.reducer import apply_roll
from flightchess.reducer import apply_timer
from flightchess.reducer import initial_state
from flightchess.reducer import phase_of
from flightchess.serializer import dump_state as serializer_dump_state
from flightchess.serializer import load_state as serializer_load_state

# Actions only the active player may take; timer and restart are shared controls.
TURN_ACTIONS = frozenset({"ROLL", "COMPLETE_TASK", "CHANGE_TASK"})


class FlightChessEngine:
    """Stateful engine facade around the pure reducer functions.

    The engine never talks to the network. Synced sessions load the latest
    server snapshot, apply local actions and push the dumped state back.
    """

    def __init__(self, config: dict[str, Any] | None = None, rng_seed: int | None = None) -> None:
        self._config = load_game_config(config)
        self._rng = random.Random(rng_seed)
        self._state: dict[str, Any] | None = None

    @property
    def config(self) -> dict[str, Any]:
        return self._config

    def _require_state(self) -> dict[str, Any]:
        if self._state is None:
            raise RuntimeError("engine state is not initialized")
        return self._state

    def init_game(
        self,
        players: list[dict[str, Any]],
        *,
        with_board: bool = True,
        timer_duration: int = DEFAULT_TIMER_SECONDS,
    ) -> dict[str, Any]:
        if with_board and not players:
            raise ValueError("ENGINE_INVALID_CONFIG")
        self._state = initial_state(
            players=players,
            config=self._config if with_board else None,
            rng=self._rng,
            timer_duration=timer_duration,
        )
        return {"new_state": self.dump_state()}

    def load_state(self, state: dict[str, Any]) -> None:
        self._state = serializer_load_state(state)

    def dump_state(self) -> dict[str, Any]:
        return serializer_dump_state(self._state)

    @property
    def phase(self) -> str:
        return phase_of(self._require_state())

    def active_player(self) -> dict[str, Any] | None:
        return reducer_active_player(self._require_state())

    def is_players_turn(self, player_id: str) -> bool:
        player = self.active_player()
        return player is not None and player["id"] == player_id

    def get_legal_actions(self, player_id: str) -> dict[str, Any]:
        """Return legal actions for one player; only the active player may roll or act."""

        state = self._require_state()
        phase = phase_of(state)
        actions: list[dict[str, Any]] = [{"type": "TIMER"}, {"type": "RESTART"}]
        if phase == PHASE_WON or not self.is_players_turn(player_id):
            return {"player_id": player_id, "phase": phase, "actions": actions}

        if phase in {PHASE_AWAITING_ROLL, PHASE_ROLL_AGAIN}:
            actions.insert(0, {"type": "ROLL"})
        elif phase == PHASE_TASK_PENDING:
            actions.insert(0, {"type": "COMPLETE_TASK"})
            if state["pending_task"]["index"] not in state["task_changed_cells"]:
                actions.insert(1, {"type": "CHANGE_TASK"})
        return {"player_id": player_id, "phase": phase, "actions": actions}

    def roll_dice(self) -> int:
        return self._rng.randint(1, 6)

    def apply_action(self, action: dict[str, Any], player_id: str) -> dict[str, Any]:
        """Apply one action for ``player_id``; out-of-turn actions never touch state."""

        state = self._require_state()
        action_type = str(action.get("type", ""))
        if action_type in TURN_ACTIONS and not self.is_players_turn(player_id):
            raise NotYourTurnError("ENGINE_NOT_YOUR_TURN")

        if action_type == "ROLL":
            value = action.get("value")
            apply_roll(state, self.roll_dice() if value is None else int(value))
        elif action_type == "COMPLETE_TASK":
            apply_complete_task(state)
        elif action_type == "CHANGE_TASK":
            apply_change_task(state, config=self._config, rng=self._rng)
        elif action_type == "TIMER":
            apply_timer(state, str(action.get("op", "")), action.get("value"))
        elif action_type == "RESTART":
            apply_restart(state, config=self._config, rng=self._rng)
        else:
            raise IllegalActionError("ENGINE_INVALID_ACTION")
        return {"new_state": self.dump_state()}

    def restart(self) -> dict[str, Any]:
        apply_restart(self._require_state(), config=self._config, rng=self._rng)
        return {"new_state": self.dump_state()}
