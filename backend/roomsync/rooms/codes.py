"""Room code generation and canonicalisation."""

from __future__ import annotations

from collections.abc import Callable
import random
import secrets

from roomsync.rooms.errors import InvalidRoomCodeError
from roomsync.rooms.errors import RoomCreationExhaustedError

# No I, O, 0 or 1: codes are read aloud and typed by hand.
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6
MAX_CREATE_ATTEMPTS = 10


def generate_room_code(rng: random.Random | None = None) -> str:
    """Draw a uniform code; a seeded ``rng`` makes the draw reproducible in tests."""
    if rng is None:
        return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
    return "".join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def normalize_room_code(raw: str) -> str:
    """Strip and uppercase a user-entered code, rejecting anything outside the alphabet."""
    code = str(raw).strip().upper()
    if len(code) != ROOM_CODE_LENGTH or any(char not in ROOM_CODE_ALPHABET for char in code):
        raise InvalidRoomCodeError(f"room code {raw!r} is malformed")
    return code


def allocate_room_code(
    exists: Callable[[str], bool],
    generate: Callable[[], str] = generate_room_code,
    max_attempts: int = MAX_CREATE_ATTEMPTS,
) -> str:
    """Return a code ``exists`` reports as unused, giving up after ``max_attempts`` draws."""
    for _ in range(max_attempts):
        code = generate()
        if not exists(code):
            return code
    raise RoomCreationExhaustedError(f"no free room code after {max_attempts} attempts")
