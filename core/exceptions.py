# core/exceptions.py
"""
Error types shared by the fetch gateway, the listing service and the API.

``ListingException`` subclasses carry the HTTP status the API should answer
with and render themselves as the standard ``{ok, items, error}`` envelope.
``ParseFailure`` never leaves a strategy.
"""

from typing import Any, Dict, List, Optional


class ListingException(Exception):
    """Base class for errors that end a listing request."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "items": [],
            "error": self.message,
            "code": self.code,
        }


class FetchFailure(ListingException):
    """Transport error or non-2xx answer from the upstream source."""

    status_code = 502
    code = "FETCH_FAILED"

    def __init__(self, message: str, upstream_status: Optional[int] = None, url: str = ""):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.url = url

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.upstream_status is not None:
            payload["upstreamStatus"] = self.upstream_status
        return payload


class ConfigurationError(ListingException):
    """A required setting (e.g. the vendor API key) is missing."""

    status_code = 500
    code = "CONFIGURATION_ERROR"


class MissingIdentifierError(ListingException):
    """The organisation identifier was supplied but empty."""

    status_code = 400
    code = "MISSING_IDENTIFIER"


class ValidationError(ListingException):
    """Request parameters failed FastAPI/Pydantic validation."""

    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, errors: List[Any]):
        super().__init__("Invalid request parameters")
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["details"] = self.errors
        return payload


class ParseFailure(Exception):
    """A document fragment could not be parsed by one extraction strategy."""
