"""Room-domain errors raised by the store, seat allocator and sync service."""

from __future__ import annotations


class RoomError(Exception):
    """Base class for room-domain errors."""


class RoomNotFoundError(RoomError):
    """Raised when a room code is unknown or its room has expired."""


class InvalidRoomCodeError(RoomNotFoundError):
    """Raised when a room code cannot be canonicalised; treated as not found."""


class SeatNotFoundError(RoomError):
    """Raised when a seat index does not exist in the room's seat config."""


class SeatTakenError(RoomError):
    """Raised when a seat is already held by a different player."""


class RoomCreationExhaustedError(RoomError):
    """Raised when no unused room code was found within the allowed attempts."""


class PersistenceError(RoomError):
    """Raised when the backing store fails a read or write."""


class VersionConflictError(RoomError):
    """Raised when a push names a base version that is no longer current."""

    def __init__(self, room_id: str, expected: int, actual: int) -> None:
        super().__init__(f"room_id={room_id} expected version {expected}, stored {actual}")
        self.room_id = room_id
        self.expected = expected
        self.actual = actual


class AdminForbiddenError(RoomError):
    """Raised when the admin secret is missing, disabled or wrong."""
