from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from fastapi import Request


class MaxSizeMiddleware(BaseHTTPMiddleware):
    """
    Reject POST bodies whose Content-Length exceeds ``max_bytes`` with HTTP 413.

    Chat messages are capped by the request model as well; this stops oversized
    bodies before they are read at all.
    """

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        if request.method == "POST":
            try:
                size = int(request.headers.get("content-length", ""))
            except ValueError:
                size = None
            if size is not None and size > self.max_bytes:
                # Return a response, raising here bypasses the exception handlers
                return JSONResponse(
                    {"error": "Payload too large", "type": "PayloadTooLarge"},
                    status_code=413,
                )
        return await call_next(request)
