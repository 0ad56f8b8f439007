"""Room domain package: codes, seats, storage and the sync service."""

from roomsync.rooms.codes import ROOM_CODE_ALPHABET
from roomsync.rooms.codes import ROOM_CODE_LENGTH
from roomsync.rooms.errors import PersistenceError
from roomsync.rooms.errors import RoomCreationExhaustedError
from roomsync.rooms.errors import RoomError
from roomsync.rooms.errors import RoomNotFoundError
from roomsync.rooms.errors import SeatNotFoundError
from roomsync.rooms.errors import SeatTakenError
from roomsync.rooms.errors import VersionConflictError
from roomsync.rooms.service import RoomSyncService
from roomsync.rooms.store import MemoryRoomStore
from roomsync.rooms.store import SqliteRoomStore

__all__ = [
    "ROOM_CODE_ALPHABET",
    "ROOM_CODE_LENGTH",
    "MemoryRoomStore",
    "PersistenceError",
    "RoomCreationExhaustedError",
    "RoomError",
    "RoomNotFoundError",
    "RoomSyncService",
    "SeatNotFoundError",
    "SeatTakenError",
    "SqliteRoomStore",
    "VersionConflictError",
]
