"""Room code generation, canonicalisation and collision retries."""

from __future__ import annotations

import random

import pytest

from roomsync.rooms.codes import MAX_CREATE_ATTEMPTS
from roomsync.rooms.codes import ROOM_CODE_ALPHABET
from roomsync.rooms.codes import ROOM_CODE_LENGTH
from roomsync.rooms.codes import allocate_room_code
from roomsync.rooms.codes import generate_room_code
from roomsync.rooms.codes import normalize_room_code
from roomsync.rooms.errors import InvalidRoomCodeError
from roomsync.rooms.errors import RoomCreationExhaustedError
from roomsync.rooms.errors import RoomNotFoundError


def test_alphabet_has_no_ambiguous_characters() -> None:
    assert len(ROOM_CODE_ALPHABET) == 32
    assert not set("IO01") & set(ROOM_CODE_ALPHABET)


def test_generated_codes_stay_inside_alphabet() -> None:
    """Input: 10,000 generated codes -> Output: every code is 6 chars, none ambiguous."""
    codes = [generate_room_code() for _ in range(10_000)]

    assert all(len(code) == ROOM_CODE_LENGTH for code in codes)
    assert all(set(code) <= set(ROOM_CODE_ALPHABET) for code in codes)
    assert not any(set(code) & set("IO01") for code in codes)


def test_seeded_generation_is_reproducible() -> None:
    assert generate_room_code(random.Random(9)) == generate_room_code(random.Random(9))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("abc234", "ABC234"), ("  XyZ987 ", "XYZ987"), ("HJKMNP", "HJKMNP")],
)
def test_codes_are_canonicalised(raw: str, expected: str) -> None:
    assert normalize_room_code(raw) == expected


@pytest.mark.parametrize("raw", ["", "ABC23", "ABC2345", "ABCD0O", "ABC 23", "ABCDI1"])
def test_malformed_codes_are_treated_as_not_found(raw: str) -> None:
    with pytest.raises(InvalidRoomCodeError):
        normalize_room_code(raw)
    assert issubclass(InvalidRoomCodeError, RoomNotFoundError)


def test_allocation_retries_past_collisions() -> None:
    taken = {"AAAAAA", "BBBBBB"}
    draws = iter(["AAAAAA", "BBBBBB", "CCCCCC"])

    code = allocate_room_code(lambda candidate: candidate in taken, generate=lambda: next(draws))

    assert code == "CCCCCC"


def test_allocation_gives_up_after_ten_collisions() -> None:
    """Input: every draw collides -> Output: exhausted after exactly 10 attempts."""
    calls: list[str] = []

    def always_taken(code: str) -> bool:
        calls.append(code)
        return True

    with pytest.raises(RoomCreationExhaustedError):
        allocate_room_code(always_taken, generate=lambda: "AAAAAA")

    assert MAX_CREATE_ATTEMPTS == 10
    assert len(calls) == 10
