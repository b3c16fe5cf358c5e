"""
HTTP transport for the ShopScript backend.

This module provides the only component that touches the network. It wraps a
long-lived httpx.AsyncClient bound to one backend origin and converts every
httpx failure into the transport exceptions of `shopscript.core.http.exceptions`.
"""

from typing import Optional, Dict, Any, Mapping
import httpx

from shopscript.core.http.exceptions import (
    HTTPClientError,
    HTTPConnectionError,
    HTTPTimeoutError,
    HTTPStatusError
)
from shopscript.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Return a copy of `headers` that is safe to log."""
    safe = {}
    for key, value in headers.items():
        if key.lower() == "authorization":
            scheme = value.split(" ", 1)[0] if value else ""
            safe[key] = f"{scheme} ***" if scheme else "***"
        else:
            safe[key] = value
    return safe


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text (or None when empty)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HTTPClient:
    """
    Async HTTP transport bound to a single ShopScript backend.

    This client provides:
    - One connection pool per backend origin
    - JSON content negotiation headers on every request
    - Separate connect and receive timeouts
    - Automatic wrapping of httpx failures into transport exceptions

    Example:
        ```python
        client = HTTPClient("https://shop.example.com")
        response = await client.get("/api/products", params={"page": 1})
        data = response.json()
        await client.aclose()
        ```
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        connect_timeout: float = 30.0,
        receive_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize HTTP transport.

        Args:
            base_url: Backend origin every relative path is resolved against
            headers: Additional static headers sent with every request (optional)
            connect_timeout: Connect timeout in seconds (default: 30.0)
            receive_timeout: Read/write/pool timeout in seconds (default: 30.0)
            transport: Custom httpx transport, e.g. httpx.MockTransport in tests (optional)
        """
        self.base_url = base_url.rstrip("/")
        self.default_headers = {**DEFAULT_HEADERS, **(headers or {})}
        self.timeout = httpx.Timeout(receive_timeout, connect=connect_timeout)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.default_headers,
            timeout=self.timeout,
            transport=transport
        )

    async def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """Make an async GET request."""
        return await self.request("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """Make an async POST request with an optional JSON body."""
        return await self.request("POST", url, params=params, json=json, headers=headers)

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> httpx.Response:
        """
        Send one request with unified error handling.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, PATCH)
            url: Path relative to the base URL, or an absolute URL
            params: URL query parameters (optional)
            json: JSON-serializable request body (optional)
            headers: Per-request headers merged over the defaults (optional)

        Returns:
            httpx.Response object with a 2xx status

        Raises:
            HTTPConnectionError: If no connection could be made
            HTTPTimeoutError: If the connect or receive timeout elapsed
            HTTPStatusError: If the backend returned a non-2xx status code
        """
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if json is not None:
            kwargs["json"] = json
        if headers:
            kwargs["headers"] = headers

        logger.debug(
            f"Request: {method} {url} headers={redact_headers(headers or {})} params={params}"
        )

        try:
            response = await self._client.request(method, url, **kwargs)

        except httpx.TimeoutException as e:
            raise HTTPTimeoutError(
                message=f"Request to {url} timed out",
                url=url,
                original_error=e
            ) from e

        except httpx.RequestError as e:
            raise HTTPConnectionError(
                message=f"Connection failed for {method} {url}: {str(e)}",
                url=url,
                original_error=e
            ) from e

        except Exception as e:
            raise HTTPClientError(
                message=f"Unexpected error during {method} {url}: {str(e)}",
                url=url,
                original_error=e
            ) from e

        logger.debug(f"Response: {response.status_code} {method} {url}")

        if not response.is_success:
            raise HTTPStatusError(
                message=f"HTTP {response.status_code} error for {method} {url}",
                url=url,
                status_code=response.status_code,
                headers=response.headers,
                body=decode_body(response)
            )

        return response

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
