"""Board generation and cell lookup helpers."""

from __future__ import annotations

from copy import deepcopy
import random
from typing import Any, Sequence, TypeVar

from flightchess.content import EFFECT_POOL_TYPES
from flightchess.content import POOL_KEYS

T = TypeVar("T")

# Cumulative thresholds for cells without a fixed special type.
_RANDOM_FILL = (
    (0.60, "normal"),
    (0.70, "truth"),
    (0.80, "dare"),
    (0.85, "kiss"),
    (0.90, "hug"),
    (0.95, "reward"),
    (1.00, "punishment"),
)


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a shuffled copy; the input is left untouched."""
    result = list(items)
    rng.shuffle(result)
    return result


class _Pools:
    """Round-robin draws from per-type cell pools."""

    def __init__(self, config: dict[str, Any], rng: random.Random) -> None:
        self._pools: dict[str, list[dict[str, Any]]] = {}
        for cell_type, key in POOL_KEYS.items():
            self._pools[cell_type] = shuffled(config.get(key) or [], rng)
        effect_cells = config.get("effect_cells") or []
        for cell_type in EFFECT_POOL_TYPES:
            self._pools[cell_type] = [cell for cell in effect_cells if cell.get("type") == cell_type]
        self._cursor: dict[str, int] = {}

    def draw(self, cell_type: str) -> dict[str, Any] | None:
        pool = self._pools.get(cell_type)
        if not pool:
            return None
        cursor = self._cursor.get(cell_type, 0)
        self._cursor[cell_type] = cursor + 1
        return deepcopy(pool[cursor % len(pool)])


def _filler(position: int, content: str) -> dict[str, Any]:
    return {"id": position, "content": content, "type": "normal", "player": "both", "effect": None}


def generate_board(config: dict[str, Any], rng: random.Random) -> list[dict[str, Any]]:
    """Build the ordered board cells for positions ``1..board_size``."""

    pools = _Pools(config, rng)
    special_positions: dict[int, str] = config.get("special_cell_positions") or {}
    board: list[dict[str, Any]] = []

    for position in range(1, int(config["board_size"]) + 1):
        fixed_type = special_positions.get(position)
        if fixed_type:
            cell = pools.draw(fixed_type)
            fallback = "Take a break"
        else:
            roll = rng.random()
            picked = next(cell_type for threshold, cell_type in _RANDOM_FILL if roll < threshold)
            cell = pools.draw(picked)
            fallback = "Safe cell"

        if cell is None:
            board.append(_filler(position, fallback))
            continue
        cell["id"] = position
        cell.setdefault("effect", None)
        board.append(cell)
    return board


def generate_endpoint_cells(config: dict[str, Any], rng: random.Random) -> list[dict[str, Any]]:
    return [deepcopy(cell) for cell in shuffled(config.get("endpoint_cells") or [], rng)]


def total_cells(state: dict[str, Any]) -> int:
    """Start cell + board cells + endpoint zone + finish cell."""
    return len(state.get("cells") or []) + len(state.get("endpoint_cells") or []) + 2


def last_index(state: dict[str, Any]) -> int:
    return total_cells(state) - 1


def cell_at(state: dict[str, Any], index: int) -> dict[str, Any] | None:
    """Return the task cell at a board index, or None for start/finish."""

    if index <= 0 or index >= last_index(state):
        return None
    cells = state.get("cells") or []
    if index <= len(cells):
        return cells[index - 1]
    endpoint_cells = state.get("endpoint_cells") or []
    endpoint_index = index - len(cells) - 1
    if endpoint_index < len(endpoint_cells):
        return endpoint_cells[endpoint_index]
    return None
