"""HTTP helpers for the unified ``{code, message, detail}`` error payload."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


def api_error(*, code: str, message: str, detail: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build a unified API error payload."""
    return {"code": code, "message": message, "detail": detail or {}}


async def handle_http_exception(_: Request, exc: HTTPException) -> JSONResponse:
    """Unify HTTP errors to {code,message,detail} payload."""
    if isinstance(exc.detail, dict) and {"code", "message", "detail"} <= set(exc.detail):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers=exc.headers,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=api_error(
            code="HTTP_ERROR",
            message=str(exc.detail),
            detail={},
        ),
        headers=exc.headers,
    )


async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Reshape pydantic request validation failures into the unified payload."""
    return JSONResponse(
        status_code=422,
        content=api_error(
            code="VALIDATION_ERROR",
            message="request payload is invalid",
            detail={"errors": jsonable_encoder(exc.errors())},
        ),
    )
