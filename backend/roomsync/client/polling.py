"""Background pull loop that keeps a device's copy of the room current."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any

from roomsync.client.sync_client import SyncClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 0.8
MIN_POLL_INTERVAL_SECONDS = 0.5
MAX_POLL_INTERVAL_SECONDS = 0.8


class PollingLoop:
    """Pull the room every ``interval`` seconds and hand newer snapshots to callbacks."""

    def __init__(
        self,
        client: SyncClient,
        *,
        on_state: Callable[[dict[str, Any], int], Any],
        on_seats: Callable[[dict[str, Any]], Any] | None = None,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        allow_any_interval: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("poll interval must be positive")
        if not allow_any_interval and not MIN_POLL_INTERVAL_SECONDS <= interval <= MAX_POLL_INTERVAL_SECONDS:
            raise ValueError(
                f"poll interval must be within {MIN_POLL_INTERVAL_SECONDS}..{MAX_POLL_INTERVAL_SECONDS}s"
            )
        self._client = client
        self._on_state = on_state
        self._on_seats = on_seats
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> bool:
        """Run one pull; True when a newer snapshot was delivered."""
        data = await asyncio.to_thread(self._client.pull, adopt=False)
        if data is None or not data.get("updated"):
            return False
        seat_config = data.get("seat_config")
        if seat_config is not None and self._on_seats is not None:
            self._on_seats(seat_config)
        version = int(data["version"])
        self._on_state(data["state"], version)
        self._client.acknowledge(version)
        return True

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("poll iteration failed; retrying")
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start polling on the running event loop; calling twice is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
