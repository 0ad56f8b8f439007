"""HTTP client a device uses to create, join, pull and push a shared room."""

from __future__ import annotations

import logging
import threading
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 8.0


class SyncClient:
    """Thin wrapper over the room REST API.

    Network and server failures never raise: they flip ``connected`` to False
    and surface as ``None`` / ``False`` results so the UI can keep running on
    its local copy. ``last_version`` only ever moves forward.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport, trust_env=False)
        self._lock = threading.Lock()
        self.connected = False
        self.last_version = 0
        self.last_error: str | None = None
        self.room_id: str | None = None

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SyncClient":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _set_connected(self, value: bool, reason: str | None = None) -> None:
        if value != self.connected:
            if value:
                logger.info("sync connection restored")
            else:
                logger.warning("sync connection lost: %s", reason)
        self.connected = value

    def _observe_version(self, version: int) -> None:
        with self._lock:
            if version > self.last_version:
                self.last_version = version

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response | None:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            self.last_error = "NETWORK_ERROR"
            self._set_connected(False, str(exc) or type(exc).__name__)
            return None
        if response.status_code >= 500:
            self.last_error = _error_code(response)
            self._set_connected(False, f"HTTP {response.status_code}")
            return response
        self._set_connected(True)
        if response.status_code >= 400:
            self.last_error = _error_code(response)
        else:
            self.last_error = None
        return response

    def _require_room(self) -> str:
        if self.room_id is None:
            raise RuntimeError("no room joined")
        return self.room_id

    def probe(self) -> bool:
        """Ask the server whether shared rooms are available."""
        response = self._request("GET", "/api/sync-status")
        if response is None or response.status_code != 200:
            return False
        return bool(response.json().get("sync_enabled"))

    def create_room(
        self,
        state: dict[str, Any] | None = None,
        *,
        male_count: int = 1,
        female_count: int = 1,
    ) -> dict[str, Any] | None:
        payload: dict[str, Any] = {"male_count": male_count, "female_count": female_count}
        if state is not None:
            payload["state"] = state
        response = self._request("POST", "/api/rooms", json=payload)
        if response is None or response.status_code != 200:
            return None
        data = response.json()
        self.room_id = str(data["room_id"])
        self.last_version = 0
        self._observe_version(int(data["version"]))
        return data

    def join_room(self, code: str) -> dict[str, Any] | None:
        """Look a room up; returns ``{"exists": False}`` for unknown codes, None when offline."""
        response = self._request("GET", f"/api/rooms/{code.strip()}")
        if response is None or response.status_code != 200:
            return None
        data = response.json()
        if data.get("exists"):
            self.room_id = str(data["room_id"])
            self.last_version = 0
            self._observe_version(int(data["version"]))
        return data

    def claim_seat(self, seat_index: int, *, player_id: str, player_name: str) -> dict[str, Any] | None:
        room_id = self._require_room()
        response = self._request(
            "POST",
            f"/api/rooms/{room_id}/seats",
            json={"seat_index": seat_index, "player_id": player_id, "player_name": player_name},
        )
        if response is None or response.status_code != 200:
            return None
        data = response.json()
        self._observe_version(int(data["version"]))
        return data

    def start_game(self, *, rng_seed: int | None = None) -> dict[str, Any] | None:
        room_id = self._require_room()
        response = self._request("POST", f"/api/rooms/{room_id}/start", json={"rng_seed": rng_seed})
        if response is None or response.status_code != 200:
            return None
        data = response.json()
        self._observe_version(int(data["version"]))
        return data

    def acknowledge(self, version: int) -> None:
        """Record that a snapshot at ``version`` has been taken in by the caller."""
        self._observe_version(version)

    def pull(self, *, adopt: bool = True) -> dict[str, Any] | None:
        """Fetch the room snapshot if it is newer than ``last_version``.

        With ``adopt=False`` the caller confirms the version through
        :meth:`acknowledge` once the snapshot is applied, so a rejected
        snapshot is fetched again on the next pull.
        """
        room_id = self._require_room()
        known = self.last_version
        response = self._request("GET", f"/api/rooms/{room_id}/state", params={"last_known_version": known})
        if response is None or response.status_code != 200:
            return None
        data = response.json()
        version = int(data["version"])
        with self._lock:
            # A push may have moved last_version while this pull was in flight.
            if data.get("updated") and version <= self.last_version:
                data["updated"] = False
        if data.get("updated") and adopt:
            self._observe_version(version)
        return data

    def push(self, state: dict[str, Any], *, base_version: int | None = None) -> bool:
        """Send the full snapshot; True when the server stored it."""
        room_id = self._require_room()
        payload: dict[str, Any] = {"state": state}
        if base_version is not None:
            payload["base_version"] = base_version
        response = self._request("POST", f"/api/rooms/{room_id}/state", json=payload)
        if response is None or response.status_code != 200:
            return False
        self._observe_version(int(response.json()["version"]))
        return True


def _error_code(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP_{response.status_code}"
    if isinstance(payload, dict) and isinstance(payload.get("code"), str):
        return payload["code"]
    return f"HTTP_{response.status_code}"
