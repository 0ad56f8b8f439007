"""Room sync against a real uvicorn process."""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx

from flightchess.core import FlightChessEngine
from roomsync.client.session import RoomSession
from roomsync.client.sync_client import SyncClient
from tests.integration.real_service.live_server import run_live_server


def test_two_clients_share_one_room_over_http(tmp_path: Path) -> None:
    """Input: two SyncClients against a live server -> Output: pushes from one reach the other's pull."""
    with run_live_server(tmp_path=tmp_path, db_filename="live_sync.sqlite3") as server:
        with server.client() as host, server.client() as guest:
            assert host.probe() is True
            created = host.create_room(male_count=1, female_count=1)
            assert guest.join_room(created["room_id"])["exists"] is True

            host.claim_seat(0, player_id="host", player_name="Hal")
            guest.claim_seat(1, player_id="guest", player_name="Gia")
            started = host.start_game(rng_seed=3)
            assert started["started"] is True

            state = started["state"]
            state["timer"]["is_running"] = True
            assert host.push(state) is True

            pulled = guest.pull()
            assert pulled["updated"] is True
            assert pulled["state"]["timer"]["is_running"] is True
            assert pulled["version"] == host.last_version


def test_rooms_survive_server_restart(tmp_path: Path) -> None:
    with run_live_server(tmp_path=tmp_path, db_filename="live_restart.sqlite3") as server:
        room_id = httpx.post(server.url("/api/rooms"), json={}, trust_env=False).json()["room_id"]

    with run_live_server(tmp_path=tmp_path, db_filename="live_restart.sqlite3") as server:
        payload = httpx.get(server.url(f"/api/rooms/{room_id}"), trust_env=False).json()

    assert payload["exists"] is True
    assert payload["room_id"] == room_id


def test_unreachable_server_leaves_client_offline() -> None:
    with SyncClient("http://127.0.0.1:9", timeout=0.5) as client:
        assert client.probe() is False
        assert client.connected is False
        assert client.last_error == "NETWORK_ERROR"


def test_late_device_follows_live_game(tmp_path: Path) -> None:
    """Input: a device joins a started room, host toggles the timer -> Output: the device's poll picks it up."""
    with run_live_server(tmp_path=tmp_path, db_filename="live_late.sqlite3") as server:
        with server.client() as host_client, server.client() as late_client:
            host = RoomSession(host_client, FlightChessEngine(rng_seed=2), player_id="host")
            room_id = host.create(male_count=1, female_count=0)
            host.claim_seat(0, "Hal")
            assert host.start(rng_seed=8) is True

            late = RoomSession(late_client, FlightChessEngine(), player_id="watcher")
            assert late.join(room_id)["playable"] is True
            assert host.set_timer("toggle") is True
            assert asyncio.run(late.polling_loop().poll_once()) is True

            assert late.state["timer"]["is_running"] is True
            assert late.version == host.version
