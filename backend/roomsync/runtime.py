"""Process-wide runtime state shared by the REST handlers."""

from __future__ import annotations

import logging

from roomsync.config_store import ConfigStore
from roomsync.core.config import Settings
from roomsync.core.config import load_settings
from roomsync.core.logging import configure_logging
from roomsync.rooms.errors import PersistenceError
from roomsync.rooms.service import RoomSyncService
from roomsync.rooms.store import RoomStore
from roomsync.rooms.store import build_store

logger = logging.getLogger(__name__)

settings = load_settings()
store: RoomStore | None = None
service: RoomSyncService | None = None
config_store = ConfigStore(None, settings.roomsync_admin_password)


def sync_enabled() -> bool:
    return service is not None and store is not None and store.is_available()


def startup() -> None:
    """Reload settings, open the configured store and rebuild the sync service."""
    global settings, store, service, config_store
    settings = load_settings()
    configure_logging(settings.roomsync_log_level)

    store = build_store(settings)
    service = None
    if store is not None:
        try:
            store.initialize()
        except PersistenceError:
            logger.error("room store unavailable; falling back to local-only play")
            store = None

    config_store = ConfigStore(store, settings.roomsync_admin_password)
    if store is None:
        logger.warning("sync disabled (store=%s)", settings.roomsync_store)
        return

    config_store.load()
    service = RoomSyncService(
        store,
        expiry_ms=settings.room_expiry_ms,
        optimistic_concurrency=settings.roomsync_optimistic_concurrency,
        config_provider=config_store.get,
    )
    logger.info(
        "sync enabled store=%s expiry_hours=%s optimistic_concurrency=%s",
        settings.roomsync_store,
        settings.roomsync_room_expiry_hours,
        settings.roomsync_optimistic_concurrency,
    )


__all__ = [
    "Settings",
    "config_store",
    "service",
    "settings",
    "startup",
    "store",
    "sync_enabled",
]
