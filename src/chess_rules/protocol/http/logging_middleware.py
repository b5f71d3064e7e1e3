from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any, Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_GAME_PATH = re.compile(r"^/api/games/(?P<game_id>[^/]+)")


def game_id_from_path(path: str) -> Optional[str]:
    """Return the game id addressed by ``path``, if it names one."""
    m = _GAME_PATH.match(path)
    return m.group("game_id") if m else None


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, log request/response, echo the header.

    A client-supplied ``x-request-id`` is reused. Requests addressed to one
    game also carry its ``game_id`` in both records.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        tags: Dict[str, Any] = {"request_id": request_id}
        game_id = game_id_from_path(request.url.path)
        if game_id is not None:
            tags["game_id"] = game_id

        logger.info(
            "request",
            extra={**tags, "method": request.method, "path": request.url.path},
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "response",
            extra={
                **tags,
                "status_code": response.status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response
