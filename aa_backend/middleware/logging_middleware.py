"""
Per-request access log.

Every request gets a request id (taken from ``x-request-id`` when the caller
sends one) bound into structlog contextvars, so provider and flow logs of the
same request share it. UserOperation hashes in the path are bound as well.
"""

import re
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("aa_backend.http")

REQUEST_ID_HEADER = "x-request-id"

_USER_OP_PATH = re.compile(r"^/user-operations/(0x[a-fA-F0-9]{64})$")

# Polled by load balancers; logged at debug to keep the access log readable
_QUIET_PATHS = frozenset({"/health", "/"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        path = request.url.path

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        match = _USER_OP_PATH.match(path)
        if match:
            structlog.contextvars.bind_contextvars(user_op_hash=match.group(1))

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            elif path in _QUIET_PATHS:
                log = logger.debug
            else:
                log = logger.info

            log(
                "request_completed",
                method=request.method,
                path=path,
                status=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
