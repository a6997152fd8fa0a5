"""
Error taxonomy for the account abstraction backend.

Domain errors derive from AccountAbstractionError and are reported to API
clients as HTTP 400. Anything else reaching the HTTP boundary is treated as
an unclassified server error.
"""

from typing import Any, Dict, List, Optional


class AccountAbstractionError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AccountAbstractionError):
    """A required configuration value is missing."""
    pass


class UpstreamError(AccountAbstractionError):
    """A bundler or paymaster call failed.

    Gateways raise this with a fixed, operation-specific prefix followed by
    the upstream message; the original exception is kept as ``__cause__``.
    """
    pass


class PollExhaustedError(AccountAbstractionError):
    """Receipt polling ran out of attempts without a result."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class InvalidTransitionError(AccountAbstractionError):
    """UserOperation flow was asked to make a transition it does not allow."""

    def __init__(self, from_state: str, to_state: str):
        super().__init__(f"Invalid transition from {from_state} to {to_state}")
        self.from_state = from_state
        self.to_state = to_state


class JsonRpcError(Exception):
    """Error object returned by a JSON-RPC endpoint."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    @classmethod
    def from_payload(cls, error: Any) -> "JsonRpcError":
        if isinstance(error, dict):
            return cls(
                str(error.get("message") or error),
                code=error.get("code"),
                data=error.get("data"),
            )
        return cls(str(error))


class RequestValidationError(Exception):
    """Incoming request body or path parameter has the wrong shape."""

    def __init__(self, code: str, message: str, details: List[Dict[str, str]]):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ApiError(Exception):
    """Error raised by route handlers with an explicit status and code."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_SERVER_ERROR"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
