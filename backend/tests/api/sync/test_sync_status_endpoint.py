"""Sync capability probe and local-only fallback."""

from __future__ import annotations

import importlib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


def _new_client(monkeypatch: pytest.MonkeyPatch, *, store: str, sqlite_path: str = "") -> TestClient:
    monkeypatch.setenv("ROOMSYNC_STORE", store)
    monkeypatch.setenv("ROOMSYNC_SQLITE_PATH", sqlite_path or "unused.sqlite3")

    import roomsync.main as app_main

    app_main = importlib.reload(app_main)
    return TestClient(app_main.app)


def test_sqlite_store_enables_sync(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with _new_client(monkeypatch, store="sqlite", sqlite_path=str(tmp_path / "status.sqlite3")) as client:
        assert client.get("/api/sync-status").json() == {
            "sync_enabled": True,
            "message": "multi-device sync enabled",
        }


def test_memory_store_enables_sync(monkeypatch: pytest.MonkeyPatch) -> None:
    with _new_client(monkeypatch, store="memory") as client:
        assert client.get("/api/sync-status").json()["sync_enabled"] is True
        assert client.post("/api/rooms", json={}).status_code == 200


def test_disabled_store_reports_local_only(monkeypatch: pytest.MonkeyPatch) -> None:
    """Input: ROOMSYNC_STORE=disabled -> Output: sync-status false and room calls answer 503 SYNC_DISABLED."""
    with _new_client(monkeypatch, store="disabled") as client:
        status = client.get("/api/sync-status").json()
        create = client.post("/api/rooms", json={})
        pull = client.get("/api/rooms/ABC234/state")

        assert status == {"sync_enabled": False, "message": "no room store configured; local play only"}
        assert create.status_code == 503
        assert create.json() == {
            "code": "SYNC_DISABLED",
            "message": "multi-device sync is unavailable; play on one device",
            "detail": {"store": "disabled"},
        }
        assert pull.status_code == 503


def test_unreachable_sqlite_path_falls_back_to_local_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    broken = str(tmp_path / "no-such-dir" / "rooms.sqlite3")
    with _new_client(monkeypatch, store="sqlite", sqlite_path=broken) as client:
        status = client.get("/api/sync-status").json()

        assert status == {"sync_enabled": False, "message": "room store connection failed; local play only"}
        assert client.post("/api/rooms", json={}).json()["code"] == "SYNC_DISABLED"


def test_game_config_still_served_without_store(monkeypatch: pytest.MonkeyPatch) -> None:
    with _new_client(monkeypatch, store="disabled") as client:
        assert client.get("/api/game-config").status_code == 200
