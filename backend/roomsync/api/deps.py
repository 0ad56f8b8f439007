"""Dependency helpers shared by API routers."""

from __future__ import annotations

import roomsync.runtime as runtime
from roomsync.api.errors import raise_api_error
from roomsync.config_store import ConfigStore
from roomsync.rooms.service import RoomSyncService


def require_sync_service() -> RoomSyncService:
    """Return the live sync service, or fail with SYNC_DISABLED when there is no store."""
    service = runtime.service
    if service is None or not runtime.sync_enabled():
        raise_api_error(
            status_code=503,
            code="SYNC_DISABLED",
            message="multi-device sync is unavailable; play on one device",
            detail={"store": runtime.settings.roomsync_store},
        )
    return service


def get_config_store() -> ConfigStore:
    return runtime.config_store
