"""
Error taxonomy for the search pipeline.

Only validation and configuration errors are ever shown to the caller.
Upstream query failures degrade a single content type to zero results and
analytics write failures are logged and dropped.
"""


class SearchError(Exception):
    """Base error carrying a stable code and an HTTP status."""

    code = "SEARCH_FAILED"
    status_code = 500

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_payload(self, code: str = None) -> dict:
        """Error envelope, optionally under an endpoint-specific code."""
        return {"error": {"code": code or self.code, "message": self.message}}


class QueryValidationError(SearchError):
    """Missing, empty or malformed query. Raised before any store call."""

    status_code = 400


class ConfigurationError(SearchError):
    """Content store or credentials unavailable. Fails the whole request."""

    status_code = 503


class UpstreamQueryError(SearchError):
    """A single store query failed; the affected content type is treated as empty."""

    status_code = 502


class StoreTimeoutError(UpstreamQueryError):
    """A store query exceeded its time budget."""


class AnalyticsWriteError(SearchError):
    """Analytics sink rejected a write. Always swallowed."""
