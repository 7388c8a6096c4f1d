"""Error types carried back to API callers as structured JSON."""
from typing import Optional

import requests


class TrackerError(Exception):
    """Base error: an HTTP-style status code plus a human-readable message."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict:
        payload = {"success": False, "error": self.message, "statusCode": self.status_code}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidQueryError(TrackerError):
    """Raised for a malformed query parameter."""
    status_code = 400
    default_message = "Invalid request."


class InvalidDateError(InvalidQueryError):
    """Raised for a malformed date or an inverted date range."""
    default_message = "Invalid date."


class ConfigurationError(TrackerError):
    """Raised when the Finnhub token is missing or rejected."""
    status_code = 500
    default_message = "Server configuration error. API key not found."


class UpstreamError(TrackerError):
    """Raised when Finnhub fails for a reason other than authentication."""
    status_code = 502
    default_message = "Failed to fetch data from Finnhub API"


def upstream_error(exc: Exception) -> TrackerError:
    """Map a requests exception to the error surfaced to callers."""
    if isinstance(exc, TrackerError):
        return exc
    response = getattr(exc, "response", None)
    if isinstance(exc, requests.exceptions.HTTPError) and response is not None:
        status = response.status_code
        if status == 401:
            return ConfigurationError("Invalid API key configuration")
        if status == 429:
            return UpstreamError(
                "API rate limit exceeded. Please try again later.",
                status_code=429,
                details="Finnhub API rate limit reached",
            )
        if status == 404:
            return UpstreamError("Resource not found", status_code=404)
        message = _response_message(response) or str(exc)
        return UpstreamError(details=f"API returned {status}: {message}")
    if isinstance(exc, requests.exceptions.RequestException):
        return UpstreamError(
            "Service temporarily unavailable. Please try again.",
            status_code=503,
            details="No response from Finnhub API",
        )
    return TrackerError(details=str(exc))


def _response_message(response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None
