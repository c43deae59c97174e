from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class ChatRelayException(Exception):
    """Base exception for the chat relay"""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(ChatRelayException):
    """Missing or invalid server-side configuration (e.g. an API key)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class AuthenticationError(ChatRelayException):
    """No authenticated user on the request"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class ValidationError(ChatRelayException):
    """Missing or invalid request field"""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class NotFoundError(ChatRelayException):
    """Resource absent or not owned by the caller"""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


class QuotaExceeded(ChatRelayException):
    """Monthly search quota exhausted"""

    def __init__(self, message: str = "Monthly search quota exceeded"):
        super().__init__(message, status_code=429)


class UpstreamError(ChatRelayException):
    """Non-success response from an LLM provider or search service"""

    def __init__(self, service: str, status: Optional[int], body: str):
        self.service = service
        self.status = status
        self.body = body
        super().__init__(f"{service} error: {status} - {body}", status_code=500)


class StreamProcessingError(ChatRelayException):
    """Failure while decoding or classifying an in-flight stream.

    Only ever reported in-band as an ``{"error": ...}`` event.
    """

    def __init__(self, message: str = "Stream processing error"):
        super().__init__(message, status_code=500)


async def chatrelay_exception_handler(request: Request, exc: ChatRelayException):
    """Handle custom chat relay exceptions"""
    logger.error(
        f"ChatRelay Exception: {exc.message}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client_ip": request.client.host if request.client else None,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "type": exc.__class__.__name__,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.exception(
        f"Unexpected error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    # Don't leak implementation details
    return JSONResponse(
        status_code=500,
        content={
            "error": "An internal error occurred. Please try again later.",
        },
    )
