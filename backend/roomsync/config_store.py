"""Admin-managed default board configuration."""

from __future__ import annotations

from copy import deepcopy
import logging
import secrets
import threading
from typing import Any

from flightchess.content import default_game_config
from flightchess.content import load_game_config
from roomsync.rooms.errors import AdminForbiddenError
from roomsync.rooms.store import RoomStore

logger = logging.getLogger(__name__)


def verify_admin_password(candidate: str | None, admin_password: str | None) -> bool:
    """Exact match against the configured secret; no secret configured means no admin."""
    if not admin_password or candidate is None:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), admin_password.encode("utf-8"))


class ConfigStore:
    """Holds the default config new games are generated from."""

    def __init__(self, store: RoomStore | None, admin_password: str | None) -> None:
        self._store = store
        self._admin_password = admin_password
        self._config: dict[str, Any] = default_game_config()
        self._lock = threading.Lock()

    def load(self) -> dict[str, Any]:
        """Adopt the persisted config, keeping the built-in one when nothing was saved."""
        saved = self._store.get_default_config() if self._store is not None else None
        with self._lock:
            if saved is not None:
                self._config = load_game_config(saved)
                logger.info("loaded saved default game config")
            return deepcopy(self._config)

    def get(self) -> dict[str, Any]:
        with self._lock:
            return deepcopy(self._config)

    def save(self, config: dict[str, Any], password: str | None) -> dict[str, Any]:
        """Validate and persist a new default config after the admin check."""
        if not verify_admin_password(password, self._admin_password):
            raise AdminForbiddenError("admin password rejected")
        normalized = load_game_config(config)
        if self._store is not None:
            self._store.set_default_config(normalized)
        with self._lock:
            self._config = normalized
        logger.info("default game config updated")
        return deepcopy(normalized)
