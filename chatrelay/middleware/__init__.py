from chatrelay.middleware.logging import LoggingMiddleware
from chatrelay.middleware.max_size import MaxSizeMiddleware

__all__ = ["LoggingMiddleware", "MaxSizeMiddleware"]
