from .error_handler import error_response, register_error_handlers
from .logging_middleware import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "error_response",
    "register_error_handlers",
]
