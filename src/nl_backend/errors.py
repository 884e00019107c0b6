"""
Client-facing error types for the locations API.

Each error carries the HTTP status it maps to and a short message that is
safe to return verbatim. Anything not derived from LocationApiError is
treated as an internal failure: it is logged server-side and reported to
the caller with a generic message only.
"""

from __future__ import annotations

from typing import Any, Dict

INTERNAL_ERROR_MESSAGE = "Internal server error"


class LocationApiError(Exception):
    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidLanguage(LocationApiError):
    default_message = "Invalid language"


class InvalidParameter(LocationApiError):
    default_message = "Invalid parameter"


class SearchTermTooLong(LocationApiError):
    default_message = "Search string too long (max 30 characters)"


class RateLimitExceeded(LocationApiError):
    status_code = 429
    default_message = "Rate limit exceeded"

    def __init__(self, reset_at: int, message: str | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["reset"] = self.reset_at
        return payload


__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "InvalidLanguage",
    "InvalidParameter",
    "LocationApiError",
    "RateLimitExceeded",
    "SearchTermTooLong",
]
