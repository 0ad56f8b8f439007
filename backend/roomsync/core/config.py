"""Application settings for the room sync service and tests."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings

StoreKind = Literal["sqlite", "memory", "disabled"]


class Settings(BaseSettings):
    """Typed settings loaded from environment variables or explicit kwargs."""

    roomsync_app_env: str = "dev"
    roomsync_app_host: str = "127.0.0.1"
    roomsync_app_port: int = Field(default=8000, ge=1)

    roomsync_store: StoreKind = "sqlite"
    roomsync_sqlite_path: str = "roomsync.db"
    roomsync_room_expiry_hours: float = Field(default=24.0, gt=0)
    roomsync_optimistic_concurrency: bool = False

    roomsync_admin_password: str | None = None
    roomsync_cors_allow_origins: str = "*"
    roomsync_log_level: str = "INFO"

    @model_validator(mode="after")
    def validate_store_and_logging(self) -> "Settings":
        """Reject a sqlite store without a path and unknown log levels."""
        if self.roomsync_store == "sqlite" and not self.roomsync_sqlite_path.strip():
            raise ValueError("ROOMSYNC_SQLITE_PATH must be set when ROOMSYNC_STORE=sqlite")
        level = self.roomsync_log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"ROOMSYNC_LOG_LEVEL {self.roomsync_log_level!r} is not a logging level")
        self.roomsync_log_level = level
        return self

    @property
    def room_expiry_ms(self) -> int:
        return int(self.roomsync_room_expiry_hours * 3600 * 1000)

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.roomsync_cors_allow_origins.split(",") if origin.strip()]


def load_settings() -> Settings:
    """Load settings from process environment."""
    return Settings()
