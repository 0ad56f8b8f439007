"""Command-line runner for same-device local play."""

from __future__ import annotations

import argparse
import time
from typing import Any, Callable

from flightchess.board import last_index
from flightchess.core import FlightChessEngine
from flightchess.errors import EngineError
from flightchess.replay_log import ReplayLog
from flightchess.reducer import PHASE_WON
from flightchess.reducer import new_player

_GENDER_MARK = {"male": "M", "female": "F"}


def resolve_seed(seed: int | None, now_provider: Callable[[], int] | None = None) -> int:
    """Return an explicit seed or derive one from current time."""

    if seed is not None:
        return int(seed)

    provider = now_provider or time.time_ns
    value = int(provider())
    return abs(value)


def parse_players(raw: str) -> list[dict[str, Any]]:
    """Parse ``NAME:GENDER`` pairs separated by commas into seated players."""

    players: list[dict[str, Any]] = []
    for seat_index, chunk in enumerate(token.strip() for token in raw.split(",")):
        if not chunk:
            continue
        name, _, gender = chunk.partition(":")
        gender = gender.strip().lower() or "male"
        if gender not in _GENDER_MARK or not name.strip():
            raise ValueError("players format must be NAME:male|female separated by commas")
        players.append(
            new_player(player_id=f"local-{seat_index}", name=name.strip(), gender=gender, seat_index=seat_index)
        )
    if not players:
        raise ValueError("at least one player is required")
    return players


def render_state_view(state: dict[str, Any]) -> str:
    """Render positions, the active player and any pending task."""

    final = last_index(state)
    lines = ["=== Board ==="]
    for idx, player in enumerate(state.get("players") or []):
        marker = ">" if idx == int(state.get("current_player_index", 0)) else " "
        skipped = " (skips next turn)" if player.get("is_skipped") else ""
        mark = _GENDER_MARK.get(player["gender"], "?")
        lines.append(f"{marker} {player['name']} [{mark}] at {player['position']}/{final}{skipped}")

    timer = state.get("timer") or {}
    running = "running" if timer.get("is_running") else "paused"
    lines.append(f"timer: {timer.get('time_left')}/{timer.get('duration')}s {running}")

    pending = state.get("pending_task")
    if pending is not None:
        lines.append(f"task @ {pending['index']}: {pending['cell'].get('content')}")
    if state.get("can_roll_again"):
        lines.append("roll again!")
    return "\n".join(lines)


def _render_actions(actions: list[dict[str, Any]]) -> str:
    lines = ["=== Legal Actions ==="]
    for idx, action in enumerate(actions):
        lines.append(f"[{idx}] {action.get('type')}")
    return "\n".join(lines)


def _timer_action(input_fn: Callable[[str], str]) -> dict[str, Any]:
    raw = input_fn("timer op (toggle | reset | set_duration SECONDS): ").strip().split()
    if not raw:
        raise ValueError("timer op is required")
    action: dict[str, Any] = {"type": "TIMER", "op": raw[0]}
    if len(raw) > 1:
        action["value"] = int(raw[1])
    return action


def run_cli(
    seed: int | None = None,
    players: list[dict[str, Any]] | None = None,
    *,
    auto: bool = False,
    log_dir: str | None = None,
    max_steps: int = 10_000,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> int:
    """Run one local game, rotating control to whichever player holds the turn."""

    actual_seed = resolve_seed(seed)
    output_fn(f"seed={actual_seed}")
    output_fn(f"replay: python -m flightchess.cli --seed {actual_seed}")

    engine = FlightChessEngine(rng_seed=actual_seed)
    engine.init_game(players or parse_players("Player 1:male,Player 2:female"))

    replay = ReplayLog(log_dir, seed=actual_seed) if log_dir else None
    if replay is not None:
        replay.begin(engine.dump_state())

    for step in range(1, max_steps + 1):
        state = engine.dump_state()
        if engine.phase == PHASE_WON:
            output_fn(render_state_view(state))
            output_fn(f"winner: {state['winner']}")
            if replay is not None:
                replay.finish(state)
            return 0

        acting = engine.active_player()
        assert acting is not None
        output_fn(render_state_view(state))
        actions = engine.get_legal_actions(acting["id"])["actions"]

        if auto:
            selected: dict[str, Any] = dict(actions[0])
        else:
            output_fn(f"{acting['name']}, your move.")
            output_fn(_render_actions(actions))
            try:
                idx = int(input_fn("action_idx: ").strip())
                if idx < 0 or idx >= len(actions):
                    raise ValueError("ENGINE_INVALID_ACTION_INDEX")
                selected = dict(actions[idx])
                if selected["type"] == "TIMER":
                    selected = _timer_action(input_fn)
            except ValueError as exc:
                output_fn(str(exc))
                continue

        try:
            engine.apply_action(selected, acting["id"])
        except EngineError as exc:
            output_fn(str(exc))
            continue

        new_state = engine.dump_state()
        pending = new_state.get("pending_task")
        if selected["type"] == "ROLL" and pending is not None:
            output_fn(f"landed on: {pending['cell'].get('content')}")
        if replay is not None:
            replay.record(step, acting["id"], selected, new_state)

    output_fn("step limit reached")
    if replay is not None:
        replay.finish(engine.dump_state())
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Play flight chess locally on one device.")
    parser.add_argument("--seed", type=int, default=None, help="Optional random seed for reproducible runs.")
    parser.add_argument(
        "--players",
        default="Player 1:male,Player 2:female",
        help="Comma separated NAME:GENDER pairs in turn order.",
    )
    parser.add_argument("--auto", action="store_true", help="Always pick the first legal action.")
    parser.add_argument("--log-dir", default=None, help="Write a step-by-step replay log to this directory.")
    args = parser.parse_args(argv)
    return run_cli(seed=args.seed, players=parse_players(args.players), auto=args.auto, log_dir=args.log_dir)


if __name__ == "__main__":
    raise SystemExit(main())
