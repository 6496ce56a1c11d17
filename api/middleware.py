# ============================================================================
# File: api/middleware.py
# ============================================================================
"""
Request correlation for the eligibility API.

Every request gets one request id: the caller's X-Request-ID when present,
otherwise a generated one. Routes and exception handlers read it through
get_request_id (usable as a FastAPI dependency) so that check logs, audit
lines and error bodies all carry the same id the client sees in the
response headers.
"""

import time
import uuid
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
LATENCY_HEADER = "X-API-Latency-ms"

# Longer ids are replaced rather than logged
MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(request: Request) -> str:
    request_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if request_id and len(request_id) <= MAX_REQUEST_ID_LENGTH:
        return request_id
    return f"req_{uuid.uuid4().hex[:12]}"


def get_request_id(request: Request) -> str:
    """Request id of the current request, assigned on first use"""
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = _incoming_request_id(request)
        request.state.request_id = request_id
    return request_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Injects:
    - request_id into request.state and the X-Request-ID response header
    - api_latency_ms into the X-API-Latency-ms response header

    Logs one access line per request with the request id and status code.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = get_request_id(request)
        start_time = time.perf_counter()

        response: Response = await call_next(request)

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[LATENCY_HEADER] = str(latency_ms)

        logger.info(
            f"[{request_id}] {request.method} {request.url.path} -> "
            f"{response.status_code} ({latency_ms}ms)"
        )
        return response
