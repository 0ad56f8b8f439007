"""HTTP error mapping helpers for API routes."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

from fastapi import HTTPException

from roomsync.api.http import api_error
from roomsync.rooms.errors import AdminForbiddenError
from roomsync.rooms.errors import PersistenceError
from roomsync.rooms.errors import RoomCreationExhaustedError
from roomsync.rooms.errors import RoomNotFoundError
from roomsync.rooms.errors import SeatNotFoundError
from roomsync.rooms.errors import SeatTakenError
from roomsync.rooms.errors import VersionConflictError


def raise_api_error(
    *,
    status_code: int,
    code: str,
    message: str,
    detail: dict[str, Any],
) -> NoReturn:
    raise HTTPException(
        status_code=status_code,
        detail=api_error(code=code, message=message, detail=detail),
    )


@contextmanager
def room_errors(room_id: str | None = None) -> Iterator[None]:
    """Translate room-domain errors raised inside the block into API errors."""
    detail: dict[str, Any] = {} if room_id is None else {"room_id": room_id}
    try:
        yield
    except RoomNotFoundError:
        raise_api_error(status_code=404, code="ROOM_NOT_FOUND", message="room not found or expired", detail=detail)
    except SeatNotFoundError:
        raise_api_error(status_code=404, code="SEAT_NOT_FOUND", message="seat not found", detail=detail)
    except SeatTakenError:
        raise_api_error(status_code=409, code="SEAT_TAKEN", message="seat is already taken", detail=detail)
    except VersionConflictError as exc:
        raise_api_error(
            status_code=409,
            code="ROOM_VERSION_CONFLICT",
            message="room state changed since base_version",
            detail={**detail, "expected": exc.expected, "current_version": exc.actual},
        )
    except RoomCreationExhaustedError:
        raise_api_error(
            status_code=503,
            code="ROOM_CODE_EXHAUSTED",
            message="could not allocate a room code, try again",
            detail=detail,
        )
    except AdminForbiddenError:
        raise_api_error(status_code=403, code="ADMIN_FORBIDDEN", message="admin password rejected", detail={})
    except PersistenceError:
        raise_api_error(status_code=500, code="PERSISTENCE_FAILURE", message="room storage failed", detail=detail)
