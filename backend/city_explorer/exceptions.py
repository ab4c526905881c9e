"""
City Explorer Backend — Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for the failure modes of the proxy.
Why:   Each failure maps to one HTTP status in a global handler, so services
       and the cache engine raise and never format responses themselves.
How:   Each exception carries a user-safe message and an optional context dict
       that is logged but never returned to the client.

Exception Hierarchy:
    CityExplorerError (base)
    ├── ValidationError            → 400 Bad Request (client can fix)
    ├── NotFoundError              → 404 Not Found (geocoder found nothing)
    ├── UpstreamUnavailableError   → 502 Bad Gateway (network, non-2xx, timeout)
    ├── MalformedPayloadError      → 502 Bad Gateway (upstream shape changed)
    └── StoreUnavailableError      → 500 Internal Server Error

    Nothing in this hierarchy is retried. A single upstream or store failure
    is terminal for the request that hit it.
"""

from typing import Any, Dict, Optional


class CityExplorerError(Exception):
    """
    Base exception for all City Explorer application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CityExplorerError):
    """
    Raised when the query parameters cannot identify what to fetch.

    When:    Empty search string, no location id or coordinates, malformed `data`.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(CityExplorerError):
    """
    Raised when a requested resource does not exist.

    When:    The geocoder returns zero results for a search string.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UpstreamUnavailableError(CityExplorerError):
    """
    Raised when a third-party API call fails.

    What:    Network error, timeout, or a non-2xx response from a provider.
    HTTP:    502 Bad Gateway

    Context carries the provider name and, when there was a response,
    its status code.
    """

    def __init__(
        self,
        message: str = "An upstream data provider is unavailable",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if provider:
            ctx["provider"] = provider
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.provider = provider
        self.status_code = status_code


class MalformedPayloadError(CityExplorerError):
    """
    Raised when an upstream payload lacks a required structural path.

    When:    e.g. geocoder result without `geometry.location`, forecast without
             `daily.data`, response body that is not JSON.
    HTTP:    502 Bad Gateway
    """

    def __init__(
        self,
        message: str = "An upstream data provider returned an unexpected payload",
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message=message, context=ctx)
        self.path = path


class StoreUnavailableError(CityExplorerError):
    """
    Raised when a cache store operation fails.

    HTTP:    500 Internal Server Error

    Security Note:
        The client always gets a generic message. The SQL error type and the
        cache kind are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
