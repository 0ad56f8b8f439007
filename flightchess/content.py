"""Default task tables and board configuration."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

CELL_TYPES = (
    "normal",
    "start",
    "end",
    "endpoint-zone",
    "forward",
    "backward",
    "skip",
    "again",
    "truth",
    "dare",
    "kiss",
    "hug",
    "punishment",
    "reward",
    "swap",
)

EFFECT_TYPES = ("move", "skip", "again", "swap")

# Effect value meaning "back to the start cell" rather than a literal offset.
RETURN_TO_START = -999

POOL_KEYS = {
    "normal": "normal_cells",
    "truth": "truth_cells",
    "dare": "dare_cells",
    "kiss": "kiss_cells",
    "hug": "hug_cells",
    "punishment": "punishment_cells",
    "reward": "reward_cells",
}

EFFECT_POOL_TYPES = ("forward", "backward", "skip", "again", "swap")


def _cell(
    cell_id: int,
    content: str,
    cell_type: str,
    player: str = "both",
    effect: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {"id": cell_id, "content": content, "type": cell_type, "player": player, "effect": effect}


_MALE_CELLS = [
    _cell(1001, "Do 20 push-ups", "dare", "male"),
    _cell(1002, "Kneel and say a heartfelt line", "dare", "male"),
    _cell(1003, "Carry your partner across the room", "dare", "male"),
    _cell(1004, "Describe the moment you first fell for them", "truth", "male"),
]

_FEMALE_CELLS = [
    _cell(2001, "Dance for ten seconds", "dare", "female"),
    _cell(2002, "Say something sweet in a cute voice", "dare", "female"),
    _cell(2003, "Name your favourite thing about your partner", "truth", "female"),
    _cell(2004, "Describe your ideal date", "truth", "female"),
]

_NORMAL_CELLS = [
    _cell(1, "Give a 30 second shoulder massage", "normal"),
    _cell(2, "Hold hands for one minute", "normal"),
    _cell(3, "Keep eye contact for 30 seconds without laughing", "normal"),
    _cell(4, "Mouth a sentence for the other player to guess", "normal"),
    _cell(5, "Sing a line from a love song", "normal"),
    _cell(6, "Walk a lap of the room hand in hand", "normal"),
    _cell(7, "Name three things you like about each other", "normal"),
    _cell(8, "Imitate one of the other player's habits", "normal"),
]

_TRUTH_CELLS = [
    _cell(101, "Name three qualities you admire in the other player", "truth"),
    _cell(102, "What did you think the first time you met?", "truth"),
    _cell(103, "Share a small secret", "truth"),
    _cell(104, "Where would you most like to travel together?", "truth"),
]

_DARE_CELLS = [
    _cell(201, "Say 'I love you' in a silly voice", "dare"),
    _cell(202, "Perform a short improvised dance", "dare"),
    _cell(203, "Act out a film without words", "dare"),
    _cell(204, "Draw the other player with your eyes closed", "dare"),
]

_KISS_CELLS = [
    _cell(301, "Kiss the other player's cheek", "kiss"),
    _cell(302, "Kiss the back of their hand", "kiss"),
    _cell(303, "Five quick kisses", "kiss"),
]

_HUG_CELLS = [
    _cell(401, "Hug for one minute", "hug"),
    _cell(402, "Hug from behind for 30 seconds", "hug"),
    _cell(403, "Spin around while hugging", "hug"),
]

_PUNISHMENT_CELLS = [
    _cell(501, "Go back 3 cells", "punishment", effect={"type": "move", "value": -3}),
    _cell(502, "Go back 2 cells", "punishment", effect={"type": "move", "value": -2}),
    _cell(503, "Return to the start", "punishment", effect={"type": "move", "value": RETURN_TO_START}),
    _cell(504, "Miss a turn", "punishment", effect={"type": "skip", "value": None}),
    _cell(505, "Drink a glass of water", "punishment"),
    _cell(506, "Do 20 squats", "punishment"),
]

_REWARD_CELLS = [
    _cell(601, "Move forward 3 cells", "reward", effect={"type": "move", "value": 3}),
    _cell(602, "Move forward 2 cells", "reward", effect={"type": "move", "value": 2}),
    _cell(603, "Roll again", "reward", effect={"type": "again", "value": None}),
    _cell(604, "Skip your next task", "reward"),
]

_EFFECT_CELLS = [
    _cell(701, "Move forward 2 cells", "forward", effect={"type": "move", "value": 2}),
    _cell(702, "Move forward 3 cells", "forward", effect={"type": "move", "value": 3}),
    _cell(703, "Go back 2 cells", "backward", effect={"type": "move", "value": -2}),
    _cell(704, "Go back 3 cells", "backward", effect={"type": "move", "value": -3}),
    _cell(705, "Miss a turn", "skip", effect={"type": "skip", "value": None}),
    _cell(706, "Roll again", "again", effect={"type": "again", "value": None}),
    _cell(707, "Swap places with the next player", "swap", effect={"type": "swap", "value": None}),
]

_ENDPOINT_CELLS = [
    _cell(801, "Final sprint: a five second kiss", "endpoint-zone"),
    _cell(802, "A 30 second declaration of love", "endpoint-zone"),
    _cell(803, "A one minute hug", "endpoint-zone"),
    _cell(804, "A two minute massage", "endpoint-zone"),
    _cell(805, "Say what you most want to do tonight", "endpoint-zone"),
]

_ENDPOINT_CONTENT = {
    "title": "Finish",
    "subtitle": "You made it!",
    "reward": "The winner makes one request the other must accept",
}

_SPECIAL_CELL_POSITIONS = {
    5: "truth",
    10: "forward",
    15: "dare",
    18: "backward",
    22: "kiss",
    25: "again",
    28: "truth",
    32: "hug",
    35: "punishment",
    38: "reward",
    40: "dare",
    42: "swap",
    45: "kiss",
}

DEFAULT_BOARD_SIZE = 48


def default_game_config() -> dict[str, Any]:
    """Return a fresh copy of the built-in board configuration."""
    return deepcopy(
        {
            "normal_cells": _NORMAL_CELLS,
            "truth_cells": _TRUTH_CELLS,
            "dare_cells": _DARE_CELLS,
            "kiss_cells": _KISS_CELLS,
            "hug_cells": _HUG_CELLS,
            "punishment_cells": _PUNISHMENT_CELLS,
            "reward_cells": _REWARD_CELLS,
            "effect_cells": _EFFECT_CELLS,
            "endpoint_cells": _ENDPOINT_CELLS,
            "male_cells": _MALE_CELLS,
            "female_cells": _FEMALE_CELLS,
            "endpoint_content": _ENDPOINT_CONTENT,
            "board_size": DEFAULT_BOARD_SIZE,
            "special_cell_positions": _SPECIAL_CELL_POSITIONS,
        }
    )


def load_game_config(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Merge a partial config over the defaults and normalize position keys.

    JSON round trips turn the integer keys of ``special_cell_positions`` into
    strings, so they are coerced back here.
    """

    config = default_game_config()
    if raw:
        for key, value in raw.items():
            if key in config:
                config[key] = deepcopy(value)

    board_size = int(config["board_size"])
    if board_size < 1:
        raise ValueError("ENGINE_INVALID_CONFIG")
    config["board_size"] = board_size

    positions: dict[int, str] = {}
    for raw_position, cell_type in dict(config["special_cell_positions"]).items():
        position = int(raw_position)
        if cell_type not in CELL_TYPES or not 1 <= position <= board_size:
            raise ValueError("ENGINE_INVALID_CONFIG")
        positions[position] = str(cell_type)
    config["special_cell_positions"] = positions

    for key in [key for key in config if key.endswith("_cells")]:
        if not isinstance(config[key], list):
            raise ValueError("ENGINE_INVALID_CONFIG")
        config[key] = [_checked_cell(cell) for cell in config[key]]
    return config


def _checked_cell(cell: Any) -> dict[str, Any]:
    if not isinstance(cell, dict):
        raise ValueError("ENGINE_INVALID_CONFIG")
    if not isinstance(cell.get("id"), int) or not isinstance(cell.get("content"), str):
        raise ValueError("ENGINE_INVALID_CONFIG")
    if cell.get("type") not in CELL_TYPES or cell.get("player", "both") not in ("male", "female", "both"):
        raise ValueError("ENGINE_INVALID_CONFIG")
    effect = cell.get("effect")
    if effect is not None:
        if not isinstance(effect, dict) or effect.get("type") not in EFFECT_TYPES:
            raise ValueError("ENGINE_INVALID_CONFIG")
        value = effect.get("value")
        if value is not None and not isinstance(value, int):
            raise ValueError("ENGINE_INVALID_CONFIG")
        effect = {"type": effect["type"], "value": value}
    # Board cells are copied into game state, which only carries these fields.
    return _cell(cell["id"], cell["content"], cell["type"], cell.get("player", "both"), effect)
