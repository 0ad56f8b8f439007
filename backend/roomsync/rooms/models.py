"""Pydantic models for room APIs and the synchronized game snapshot."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator

from flightchess.content import CELL_TYPES
from flightchess.content import EFFECT_TYPES
from flightchess.reducer import DEFAULT_TIMER_SECONDS
from flightchess.reducer import MAX_TIMER_SECONDS

Gender = Literal["male", "female"]


class CellEffect(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str
    value: int | None = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        if value not in EFFECT_TYPES:
            raise ValueError(f"effect type must be one of {', '.join(EFFECT_TYPES)}")
        return value


class GameCell(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    content: str
    type: str
    player: Literal["male", "female", "both"] = "both"
    effect: CellEffect | None = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        if value not in CELL_TYPES:
            raise ValueError(f"unknown cell type {value!r}")
        return value


class PlayerState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=64)
    gender: Gender
    position: int = Field(default=0, ge=0)
    is_skipped: bool = False
    seat_index: int = Field(default=0, ge=0)


class TimerState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration: int = Field(default=DEFAULT_TIMER_SECONDS, ge=1, le=MAX_TIMER_SECONDS)
    time_left: int = Field(default=DEFAULT_TIMER_SECONDS, ge=0)
    is_running: bool = False

    @model_validator(mode="after")
    def validate_time_left(self) -> "TimerState":
        if self.time_left > self.duration:
            raise ValueError("timer.time_left must not exceed timer.duration")
        return self


class PendingTask(BaseModel):
    model_config = ConfigDict(extra="forbid")

    index: int = Field(ge=1)
    cell: GameCell


class GameState(BaseModel):
    """The whole-room snapshot every device pulls and pushes."""

    model_config = ConfigDict(extra="forbid")

    schema_version: Literal[1] = 1
    players: list[PlayerState] = Field(default_factory=list)
    current_player_index: int = Field(default=0, ge=0)
    can_roll_again: bool = False
    winner: str | None = None
    pending_task: PendingTask | None = None
    cells: list[GameCell] = Field(default_factory=list)
    endpoint_cells: list[GameCell] = Field(default_factory=list)
    timer: TimerState = Field(default_factory=TimerState)
    task_changed_cells: list[int] = Field(default_factory=list)
    last_update: int | None = None

    @model_validator(mode="after")
    def validate_players(self) -> "GameState":
        """Keep the turn pointer inside the player list and ids unique."""
        if self.players and self.current_player_index >= len(self.players):
            raise ValueError("current_player_index is out of range")
        if not self.players and self.current_player_index != 0:
            raise ValueError("current_player_index must be 0 without players")
        ids = [player.id for player in self.players]
        if len(ids) != len(set(ids)):
            raise ValueError("player ids must be unique")
        return self


class Seat(BaseModel):
    model_config = ConfigDict(extra="forbid")

    index: int = Field(ge=0)
    gender: Gender
    player_id: str | None = None
    player_name: str | None = None


class SeatConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    male_count: int = Field(ge=0)
    female_count: int = Field(ge=0)
    total_players: int = Field(ge=1)
    seats: list[Seat]

    @model_validator(mode="after")
    def validate_layout(self) -> "SeatConfig":
        """Seats are indexed 0..n-1 and no player holds two of them."""
        if self.total_players != self.male_count + self.female_count:
            raise ValueError("total_players must equal male_count + female_count")
        if [seat.index for seat in self.seats] != list(range(self.total_players)):
            raise ValueError("seats must be indexed 0..total_players-1")
        occupants = [seat.player_id for seat in self.seats if seat.player_id is not None]
        if len(occupants) != len(set(occupants)):
            raise ValueError("a player may hold at most one seat")
        return self


class CreateRoomRequest(BaseModel):
    """POST /api/rooms request body; omit ``state`` for seat-based setup."""

    state: GameState | None = None
    male_count: int = Field(default=1, ge=0, le=8)
    female_count: int = Field(default=1, ge=0, le=8)

    @model_validator(mode="after")
    def validate_seat_counts(self) -> "CreateRoomRequest":
        if self.male_count + self.female_count < 1:
            raise ValueError("a room needs at least one seat")
        return self


class ClaimSeatRequest(BaseModel):
    """POST /api/rooms/{room_id}/seats request body."""

    seat_index: int = Field(ge=0)
    player_id: str = Field(min_length=1, max_length=64)
    player_name: str = Field(min_length=1, max_length=32)

    @field_validator("player_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("player_name must not be blank")
        return stripped


class StartGameRequest(BaseModel):
    """POST /api/rooms/{room_id}/start request body."""

    rng_seed: int | None = None
    timer_duration: int = Field(default=DEFAULT_TIMER_SECONDS, ge=1, le=MAX_TIMER_SECONDS)


class PushStateRequest(BaseModel):
    """POST /api/rooms/{room_id}/state request body."""

    state: GameState
    base_version: int | None = Field(default=None, ge=0)


class GameConfigPayload(BaseModel):
    """Admin-editable board configuration.

    Omitted pools fall back to the built-in ones; unknown keys are kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    normal_cells: list[GameCell] = Field(min_length=1)
    truth_cells: list[GameCell] | None = None
    dare_cells: list[GameCell] | None = None
    kiss_cells: list[GameCell] | None = None
    hug_cells: list[GameCell] | None = None
    punishment_cells: list[GameCell] | None = None
    reward_cells: list[GameCell] | None = None
    effect_cells: list[GameCell] | None = None
    endpoint_cells: list[GameCell] | None = None
    male_cells: list[GameCell] | None = None
    female_cells: list[GameCell] | None = None
    board_size: int = Field(ge=1)
    special_cell_positions: dict[int, str]

    def config_dict(self) -> dict[str, Any]:
        return {key: value for key, value in self.model_dump(mode="json").items() if value is not None}


class SaveConfigRequest(BaseModel):
    """POST /api/game-config request body."""

    password: str
    config: GameConfigPayload


def state_payload(state: GameState) -> dict[str, Any]:
    return state.model_dump(mode="json")
