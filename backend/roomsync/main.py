"""FastAPI application entrypoint for room-based state sync."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import roomsync.runtime as runtime
from roomsync.api.http import handle_http_exception
from roomsync.api.http import handle_validation_error
from roomsync.api.routers.config import get_game_config
from roomsync.api.routers.config import router as config_router
from roomsync.api.routers.config import save_game_config
from roomsync.api.routers.rooms import claim_seat
from roomsync.api.routers.rooms import create_room
from roomsync.api.routers.rooms import join_room
from roomsync.api.routers.rooms import pull_state
from roomsync.api.routers.rooms import push_state
from roomsync.api.routers.rooms import router as rooms_router
from roomsync.api.routers.rooms import start_game
from roomsync.api.routers.sync import router as sync_router
from roomsync.api.routers.sync import sync_status
from roomsync.core.config import Settings
from roomsync.rooms.models import ClaimSeatRequest
from roomsync.rooms.models import CreateRoomRequest
from roomsync.rooms.models import PushStateRequest
from roomsync.rooms.models import StartGameRequest

settings = runtime.settings


def startup() -> None:
    """Rebuild runtime state from the current environment."""
    global settings
    runtime.startup()
    settings = runtime.settings


@asynccontextmanager
async def lifespan(_: FastAPI):
    startup()
    yield


app = FastAPI(title="flightchess room sync", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def handle_http_exception_route(request: Request, exc: HTTPException) -> JSONResponse:
    """Adapter used by FastAPI exception handling."""
    return await handle_http_exception(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error_route(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await handle_validation_error(request, exc)


app.include_router(sync_router)
app.include_router(rooms_router)
app.include_router(config_router)


__all__ = [
    "ClaimSeatRequest",
    "CreateRoomRequest",
    "PushStateRequest",
    "Settings",
    "StartGameRequest",
    "app",
    "claim_seat",
    "create_room",
    "get_game_config",
    "join_room",
    "pull_state",
    "push_state",
    "save_game_config",
    "settings",
    "start_game",
    "startup",
    "sync_status",
]
