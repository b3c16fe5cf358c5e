"""
Transport-level exceptions for the ShopScript HTTP client.

These describe what happened on the wire. They never leave the request
pipeline: the pipeline translates them into a ShopScriptError before the
caller sees anything.
"""

from typing import Any, Mapping, Optional


class HTTPClientError(Exception):
    """
    Base exception for all transport errors.

    Catch this to handle any failure raised by HTTPClient generically.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize transport error.

        Args:
            message: Human-readable error description
            url: The URL that was being accessed (optional)
            status_code: HTTP status code if a response was received (optional)
            original_error: The underlying httpx exception (optional)
        """
        self.message = message
        self.url = url
        self.status_code = status_code
        self.original_error = original_error

        super().__init__(self.message)

    @property
    def has_response(self) -> bool:
        """True when the backend answered with a status code."""
        return self.status_code is not None

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")
        if self.status_code:
            parts.append(f"Status: {self.status_code}")
        return " | ".join(parts)


class HTTPConnectionError(HTTPClientError):
    """
    Raised when no response reached the client.

    This includes DNS resolution failures, refused connections and
    dropped sockets.
    """
    pass


class HTTPTimeoutError(HTTPClientError):
    """
    Raised when the connect or receive timeout elapsed before a response.
    """
    pass


class HTTPStatusError(HTTPClientError):
    """
    Raised when the backend returned a non-2xx status code.

    Carries the response headers and decoded body so the error translator
    can read `message`, `errors` and `Retry-After` from them.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            url=url,
            status_code=status_code,
            original_error=original_error
        )
        self.headers = headers or {}
        self.body = body
