"""State pull/push contract tests."""

from __future__ import annotations

import importlib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from flightchess.core import FlightChessEngine
from flightchess.tests.state_kit import build_players


def _new_client(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    db_name: str,
    *,
    optimistic: bool = False,
) -> TestClient:
    db_path = tmp_path / db_name
    monkeypatch.setenv("ROOMSYNC_STORE", "sqlite")
    monkeypatch.setenv("ROOMSYNC_SQLITE_PATH", str(db_path))
    monkeypatch.setenv("ROOMSYNC_OPTIMISTIC_CONCURRENCY", "true" if optimistic else "false")

    import roomsync.main as app_main

    app_main = importlib.reload(app_main)
    return TestClient(app_main.app)


def _started_state(seed: int = 8) -> dict:
    return FlightChessEngine(rng_seed=seed).init_game(build_players(2))["new_state"]


def _create(client: TestClient, state: dict) -> tuple[str, int]:
    payload = client.post("/api/rooms", json={"state": state}).json()
    return payload["room_id"], payload["version"]


def test_pull_from_zero_returns_full_snapshot(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    state = _started_state()
    with _new_client(tmp_path, monkeypatch, "pull_full.sqlite3") as client:
        room_id, version = _create(client, state)

        payload = client.get(f"/api/rooms/{room_id}/state", params={"last_known_version": 0}).json()

        assert payload["updated"] is True
        assert payload["version"] == version
        assert payload["state"] == state
        assert payload["seat_config"]["total_players"] == 2


def test_pull_at_current_version_is_not_updated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with _new_client(tmp_path, monkeypatch, "pull_same.sqlite3") as client:
        room_id, version = _create(client, _started_state())

        payload = client.get(f"/api/rooms/{room_id}/state", params={"last_known_version": version}).json()

        assert payload == {"updated": False, "version": version}


def test_pull_rejects_negative_version(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with _new_client(tmp_path, monkeypatch, "pull_negative.sqlite3") as client:
        room_id, _ = _create(client, _started_state())

        response = client.get(f"/api/rooms/{room_id}/state", params={"last_known_version": -1})

        assert response.status_code == 422


def test_push_then_pull_sees_new_snapshot(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Input: push a moved state -> Output: higher version; another device's pull sees the move."""
    state = _started_state()
    with _new_client(tmp_path, monkeypatch, "push_pull.sqlite3") as client:
        room_id, version = _create(client, state)
        engine = FlightChessEngine()
        engine.load_state(state)
        moved = engine.apply_action({"type": "ROLL", "value": 5}, "p1")["new_state"]

        pushed = client.post(f"/api/rooms/{room_id}/state", json={"state": moved, "base_version": version})
        pulled = client.get(f"/api/rooms/{room_id}/state", params={"last_known_version": version}).json()

        assert pushed.status_code == 200
        assert pushed.json()["version"] > version
        assert pulled["updated"] is True
        assert pulled["version"] == pushed.json()["version"]
        assert pulled["state"]["players"][0]["position"] == 5


def test_push_to_missing_room(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with _new_client(tmp_path, monkeypatch, "push_missing.sqlite3") as client:
        response = client.post("/api/rooms/ZZZZZZ/state", json={"state": _started_state()})

        assert response.status_code == 404
        assert response.json()["code"] == "ROOM_NOT_FOUND"


def test_pull_missing_room(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with _new_client(tmp_path, monkeypatch, "pull_missing.sqlite3") as client:
        response = client.get("/api/rooms/ZZZZZZ/state")

        assert response.status_code == 404
        assert response.json()["detail"] == {"room_id": "ZZZZZZ"}


def test_push_rejects_malformed_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    state = _started_state()
    with _new_client(tmp_path, monkeypatch, "push_invalid.sqlite3") as client:
        room_id, version = _create(client, state)
        broken = dict(state, current_player_index=5)

        response = client.post(f"/api/rooms/{room_id}/state", json={"state": broken})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert client.get(f"/api/rooms/{room_id}/state").json()["version"] == version


def test_last_writer_wins_by_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    state = _started_state()
    with _new_client(tmp_path, monkeypatch, "lww.sqlite3") as client:
        room_id, version = _create(client, state)
        first = dict(state, can_roll_again=True)

        a = client.post(f"/api/rooms/{room_id}/state", json={"state": first, "base_version": version})
        b = client.post(f"/api/rooms/{room_id}/state", json={"state": state, "base_version": version})

        assert a.status_code == b.status_code == 200
        assert b.json()["version"] > a.json()["version"]
        assert client.get(f"/api/rooms/{room_id}/state").json()["state"]["can_roll_again"] is False


def test_stale_base_version_conflicts_when_optimistic(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Input: second push built on an old version -> Output: 409 ROOM_VERSION_CONFLICT with current version."""
    state = _started_state()
    with _new_client(tmp_path, monkeypatch, "occ.sqlite3", optimistic=True) as client:
        room_id, version = _create(client, state)
        accepted = client.post(f"/api/rooms/{room_id}/state", json={"state": state, "base_version": version})

        rejected = client.post(f"/api/rooms/{room_id}/state", json={"state": state, "base_version": version})

        assert accepted.status_code == 200
        assert rejected.status_code == 409
        assert rejected.json() == {
            "code": "ROOM_VERSION_CONFLICT",
            "message": "room state changed since base_version",
            "detail": {
                "room_id": room_id,
                "expected": version,
                "current_version": accepted.json()["version"],
            },
        }
