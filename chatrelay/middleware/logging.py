import json
import logging
import os
import sys
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware

# Logger for emitting one JSON line per request for API monitoring.
json_logger = logging.getLogger("chatrelay.access")
if not json_logger.handlers:
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter("%(message)s"))
    json_logger.addHandler(h)
json_logger.setLevel(
    getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
)
json_logger.propagate = False


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log a single JSON line for each HTTP request.

    Logs:
        - request_id (UUID4, also returned as X-Request-Id)
        - method, path, status
        - elapsed_ms until response headers (streamed bodies keep flowing after)
        - user_id (X-User-Id header, if any)
        - client_ip
        - content_length (from headers)
    """

    async def dispatch(self, request, call_next):
        rid = str(uuid.uuid4())
        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            json_logger.info(
                json.dumps(
                    {
                        "request_id": rid,
                        "method": request.method,
                        "path": request.url.path,
                        "status": status_code,
                        "elapsed_ms": int((time.perf_counter() - start) * 1000),
                        "user_id": request.headers.get("x-user-id"),
                        "client_ip": request.headers.get("x-forwarded-for")
                        or getattr(request.client, "host", None),
                        "content_length": request.headers.get("content-length"),
                    },
                    separators=(",", ":"),
                )
            )

        response.headers["X-Request-Id"] = rid
        return response
