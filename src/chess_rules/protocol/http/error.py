from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException

from ...engine.errors import ChessError, GameOver


logger = logging.getLogger(__name__)


CODE_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "unprocessable_entity",
}


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """Build the JSON body shared by every error response.

    Shape: ``{"error": {"code", "message", "type", "request_id"}}`` plus
    ``field_errors`` for request validation failures.
    """
    body: Dict[str, Any] = {
        "code": code,
        "message": message,
        "type": err_type,
        "request_id": request_id,
    }
    if field_errors:
        body["field_errors"] = field_errors
    return {"error": body}


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _respond(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    field_errors: Optional[List[Dict[str, str]]] = None,
) -> JSONResponse:
    payload = error_envelope(
        code=code,
        message=message,
        err_type="server_error" if status_code >= 500 else "client_error",
        request_id=_request_id(request),
        field_errors=field_errors,
    )
    return JSONResponse(status_code=status_code, content=payload)


def code_for_status(status_code: int) -> str:
    if status_code >= 500:
        return "internal_error"
    return CODE_BY_STATUS.get(status_code, "error")


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, HTTPException):
        return await exception_handler(request, exc)
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _respond(request, exc.status_code, code_for_status(exc.status_code), detail)


async def chess_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a rejected move; the game itself is left untouched."""
    err = cast(ChessError, exc)
    status_code = (
        status.HTTP_409_CONFLICT if isinstance(err, GameOver) else status.HTTP_400_BAD_REQUEST
    )
    logger.info("move rejected", extra={"request_id": _request_id(request), "code": err.code})
    return _respond(request, status_code, err.code, str(err))


async def game_not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return _respond(request, status.HTTP_404_NOT_FOUND, "not_found", "game not found")


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    field_errors = []
    for e in cast(RequestValidationError, exc).errors():
        field_errors.append(
            {
                "field": ".".join(str(p) for p in e.get("loc", []) if p is not None),
                "code": e.get("type", "value_error"),
                "message": e.get("msg", "invalid value"),
            }
        )
    return _respond(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "unprocessable_entity",
        "Validation error",
        field_errors=field_errors or None,
    )


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, HTTPException):
        return await http_exception_handler(request, exc)
    logger.exception("Unhandled exception", extra={"request_id": _request_id(request)})
    return _respond(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "Internal Server Error",
    )
