"""
Recipe Book Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request, on the `recipebook.access` logger.
How:   Times the downstream app and logs method, path, status, duration,
       request ID, caller uid and client IP. The level follows the status
       class so 5xx can page and 4xx can be trended.

Privacy:
    ✅ Log: method, path, status, duration, IP, request ID, caller uid
    ❌ Don't log: request bodies, Authorization headers, token contents
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("recipebook.access")

# Probes hit these every few seconds
_SKIP_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access logger that runs inside RequestIDMiddleware.

    The caller uid is read from request.state.user after the route ran, so it
    is only present when the route authenticated someone; "-" otherwise.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        user = getattr(request.state, "user", None)
        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
            "uid": user.uid if user is not None else "-",
        }
        logger.log(
            level_for_status(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] "
            "uid=%(uid)s from %(client_ip)s",
            fields,
            extra=fields,
        )
        return response
