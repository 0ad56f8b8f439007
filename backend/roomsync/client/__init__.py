"""Device-side sync: HTTP client, poll loop and room session."""

from roomsync.client.polling import PollingLoop
from roomsync.client.session import RoomSession
from roomsync.client.sync_client import SyncClient

__all__ = [
    "PollingLoop",
    "RoomSession",
    "SyncClient",
]
