"""Run the room sync service: ``python -m roomsync``."""

from __future__ import annotations

import argparse

import uvicorn

from roomsync.core.config import load_settings


def main(argv: list[str] | None = None) -> None:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Serve flight chess rooms over HTTP.")
    parser.add_argument("--host", default=settings.roomsync_app_host)
    parser.add_argument("--port", type=int, default=settings.roomsync_app_port)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only).")
    args = parser.parse_args(argv)
    uvicorn.run(
        "roomsync.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.roomsync_log_level.lower(),
    )


if __name__ == "__main__":
    main()
