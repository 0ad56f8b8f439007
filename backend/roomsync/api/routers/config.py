"""Default game configuration routes."""

from __future__ import annotations

from fastapi import APIRouter

from roomsync.api.deps import get_config_store
from roomsync.api.errors import raise_api_error
from roomsync.api.errors import room_errors
from roomsync.rooms.models import SaveConfigRequest


router = APIRouter()


@router.get("/api/game-config")
def get_game_config() -> dict[str, object]:
    """Return the config new boards are generated from."""
    return {"config": get_config_store().get()}


@router.post("/api/game-config")
def save_game_config(payload: SaveConfigRequest) -> dict[str, bool]:
    """Replace the default config; requires the admin password."""
    config = payload.config.config_dict()
    with room_errors():
        try:
            get_config_store().save(config, payload.password)
        except ValueError:
            raise_api_error(
                status_code=400,
                code="INVALID_GAME_CONFIG",
                message="game config is invalid",
                detail={},
            )
    return {"ok": True}
