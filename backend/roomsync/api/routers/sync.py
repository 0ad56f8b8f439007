"""Sync capability probe."""

from __future__ import annotations

from fastapi import APIRouter

import roomsync.runtime as runtime

router = APIRouter()


@router.get("/api/sync-status")
def sync_status() -> dict[str, object]:
    """Tell devices whether rooms can be shared or play must stay local."""
    if runtime.settings.roomsync_store == "disabled":
        return {"sync_enabled": False, "message": "no room store configured; local play only"}
    if not runtime.sync_enabled():
        return {"sync_enabled": False, "message": "room store connection failed; local play only"}
    return {"sync_enabled": True, "message": "multi-device sync enabled"}
