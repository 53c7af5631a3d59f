# errors.py

from typing import Optional


class GatewayError(Exception):
    """Base for every failure the gateway can report to a caller."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ConfigMissing(GatewayError):
    status_code = 503
    error = "API key not configured"

    def __init__(self, message: str = "Please configure TMDB_API_KEY in your environment"):
        super().__init__(message)


# Name used by the route contracts for the same condition
UpstreamUnavailable = ConfigMissing


class UpstreamTransient(GatewayError):
    """Network error, timeout, 5xx or 429 from upstream. Retried, never surfaced."""

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        super().__init__(message)


class UpstreamError(GatewayError):
    def __init__(self, message: str, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        super().__init__(message)


class MalformedResponse(GatewayError):
    pass


class TooManyRequests(GatewayError):
    status_code = 429
    error = "Too many requests from this IP, please try again later."

    def __init__(self, retry_after: float = 0.0):
        self.retry_after = retry_after
        super().__init__(self.error)
