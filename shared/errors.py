"""
Shared error handling for the starfetch services.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from .logging import cycle_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    cycle_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class StarfetchException(Exception):
    """Base exception for starfetch services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            cycle_id=cycle_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class FetchError(StarfetchException):
    """Base class for failures while fetching one endpoint."""

    def __init__(self, code: str, endpoint: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.endpoint = endpoint
        super().__init__(code, message, {"endpoint": endpoint, **(details or {})})


class NetworkError(FetchError):
    """Connection failed before any response arrived (DNS, TCP, TLS)."""

    def __init__(self, endpoint: str, cause: BaseException):
        self.cause = cause
        super().__init__(
            "NETWORK_ERROR",
            endpoint,
            f"Request error for {endpoint}: {cause}",
            {"cause": str(cause)}
        )


class FetchTimeoutError(FetchError):
    """The request did not complete within the configured deadline."""

    def __init__(self, endpoint: str, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(
            "TIMEOUT_ERROR",
            endpoint,
            f"Timeout for {endpoint} after {timeout_ms}ms",
            {"timeout_ms": timeout_ms}
        )


class HttpStatusError(FetchError):
    """The remote answered with a 4xx/5xx status."""

    def __init__(self, endpoint: str, status_code: int):
        self.status_code = status_code
        super().__init__(
            "HTTP_STATUS_ERROR",
            endpoint,
            f"HTTP Error {status_code} for {endpoint}",
            {"status_code": status_code}
        )


class ParseError(FetchError):
    """The response body was not valid JSON."""

    def __init__(self, endpoint: str, cause: BaseException):
        self.cause = cause
        super().__init__(
            "PARSE_ERROR",
            endpoint,
            f"Parse error for {endpoint}: {cause}",
            {"cause": str(cause)}
        )


class CycleAborted(StarfetchException):
    """A fetch cycle stopped at ``step`` because of ``cause``."""

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        details: Dict[str, Any] = {"step": step, "error_type": type(cause).__name__}
        if isinstance(cause, StarfetchException):
            details["cause_code"] = cause.code
            details.update(cause.details)
        super().__init__("CYCLE_ABORTED", f"Cycle aborted at {step}: {cause}", details)
