"""
HTTP transport layer.

This module provides the async HTTP client and the transport exceptions
used by the request pipeline.
"""

from shopscript.core.http.client import HTTPClient
from shopscript.core.http.exceptions import (
    HTTPClientError,
    HTTPConnectionError,
    HTTPTimeoutError,
    HTTPStatusError
)

__all__ = [
    "HTTPClient",
    "HTTPClientError",
    "HTTPConnectionError",
    "HTTPTimeoutError",
    "HTTPStatusError",
]
