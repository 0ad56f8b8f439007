"""Admin-managed default board configuration."""

from __future__ import annotations

import pytest

from flightchess.content import default_game_config
from roomsync.config_store import ConfigStore
from roomsync.config_store import verify_admin_password
from roomsync.rooms.errors import AdminForbiddenError


def test_password_check_is_exact() -> None:
    assert verify_admin_password("s3cret", "s3cret") is True
    assert verify_admin_password("S3CRET", "s3cret") is False
    assert verify_admin_password(None, "s3cret") is False


def test_admin_is_disabled_without_configured_password() -> None:
    assert verify_admin_password("", None) is False
    assert verify_admin_password("anything", "") is False


def test_builtin_config_is_used_until_one_is_saved(store) -> None:
    config_store = ConfigStore(store, "s3cret")

    assert config_store.load() == default_game_config()


def test_save_persists_and_survives_reload(store) -> None:
    """Input: admin saves board_size=20 -> Output: a fresh ConfigStore loads it from the store."""
    saved = ConfigStore(store, "s3cret").save({"board_size": 20, "special_cell_positions": {"4": "truth"}}, "s3cret")

    reloaded = ConfigStore(store, "s3cret").load()

    assert saved["board_size"] == 20
    assert reloaded["board_size"] == 20
    assert reloaded["special_cell_positions"] == {4: "truth"}
    assert reloaded["normal_cells"] == default_game_config()["normal_cells"]


def test_wrong_password_changes_nothing(store) -> None:
    config_store = ConfigStore(store, "s3cret")

    with pytest.raises(AdminForbiddenError):
        config_store.save({"board_size": 20}, "guess")

    assert store.get_default_config() is None
    assert config_store.get()["board_size"] == default_game_config()["board_size"]


def test_invalid_config_is_rejected(store) -> None:
    config_store = ConfigStore(store, "s3cret")

    with pytest.raises(ValueError):
        config_store.save({"board_size": 5, "special_cell_positions": {"9": "truth"}}, "s3cret")

    assert store.get_default_config() is None


def test_get_returns_a_copy() -> None:
    config_store = ConfigStore(None, None)

    config_store.get()["board_size"] = 1

    assert config_store.get()["board_size"] == default_game_config()["board_size"]
