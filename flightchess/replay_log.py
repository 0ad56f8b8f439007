"""Replay log for local games."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from flightchess.reducer import active_player
from flightchess.reducer import phase_of

REPLAY_FILE = "replay.jsonl"
FINAL_STATE_FILE = "final_state.json"


def turn_summary(state: dict[str, Any]) -> dict[str, Any]:
    """The parts of a snapshot worth reading back when replaying a game."""
    acting = active_player(state)
    pending = state.get("pending_task")
    return {
        "phase": phase_of(state),
        "active_player": acting["id"] if acting else None,
        "positions": {player["id"]: player["position"] for player in state.get("players") or []},
        "pending_task": pending["cell"].get("content") if pending else None,
        "winner": state.get("winner"),
    }


class ReplayLog:
    """One JSON line per step, plus the final snapshot once the game stops.

    Step 0 carries the seed and seating, so ``--seed`` reproduces the run the
    later lines describe.
    """

    def __init__(self, log_dir: str | Path, *, seed: int) -> None:
        self._dir = Path(log_dir)
        self._seed = seed

    @property
    def replay_path(self) -> Path:
        return self._dir / REPLAY_FILE

    def begin(self, state: dict[str, Any]) -> None:
        """Start a fresh log, dropping whatever an earlier run left behind."""
        self._dir.mkdir(parents=True, exist_ok=True)
        (self._dir / FINAL_STATE_FILE).unlink(missing_ok=True)
        seating = [
            {"id": player["id"], "name": player["name"], "gender": player["gender"]}
            for player in state.get("players") or []
        ]
        header = {"step": 0, "seed": self._seed, "players": seating, "board_size": len(state.get("cells") or [])}
        with self.replay_path.open("w", encoding="utf-8") as stream:
            stream.write(json.dumps({**header, **turn_summary(state)}, ensure_ascii=False) + "\n")

    def record(self, step: int, player_id: str, action: dict[str, Any], state: dict[str, Any]) -> None:
        entry = {"step": int(step), "player_id": player_id, "action": action, **turn_summary(state)}
        with self.replay_path.open("a", encoding="utf-8") as stream:
            stream.write(json.dumps(entry, ensure_ascii=False) + "\n")

    def finish(self, state: dict[str, Any]) -> None:
        target = self._dir / FINAL_STATE_FILE
        temp_path = target.with_name(f"{target.name}.tmp")
        with temp_path.open("w", encoding="utf-8") as stream:
            json.dump(state, stream, ensure_ascii=False, indent=2)
            stream.write("\n")
        temp_path.replace(target)


def read_replay(log_dir: str | Path) -> list[dict[str, Any]]:
    path = Path(log_dir) / REPLAY_FILE
    with path.open("r", encoding="utf-8") as stream:
        return [json.loads(line) for line in stream if line.strip()]
