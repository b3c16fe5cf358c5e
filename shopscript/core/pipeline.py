"""
Authenticated request pipeline.

Every endpoint call goes through `RequestPipeline.request()`. The pipeline
attaches the bearer token, performs the single refresh-and-replay on a 401,
and turns every other failure into a ShopScriptError.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx

from shopscript.core.error_translator import translate_error
from shopscript.core.errors import ErrorRecord, ShopScriptError
from shopscript.core.http import (
    HTTPClient,
    HTTPClientError,
    HTTPConnectionError,
    HTTPTimeoutError,
    HTTPStatusError
)
from shopscript.core.logging import get_logger
from shopscript.core.session import SessionManager

logger = get_logger(__name__)


def _freeze(mapping: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    return MappingProxyType(dict(mapping)) if mapping is not None else None


@dataclass(frozen=True)
class RequestDescriptor:
    """One API call as built by an endpoint module. Never mutated after creation."""

    method: str
    path: str
    query: Optional[Mapping[str, Any]] = None
    body: Any = None
    headers: Optional[Mapping[str, str]] = field(default=None)

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "query", _freeze(self.query))
        object.__setattr__(self, "headers", _freeze(self.headers))


class RequestPipeline:
    """
    Single entry point for all authenticated HTTP calls.

    Args:
        transport: HTTP transport executing the requests
        session_manager: Owner of the tokens and of the refresh protocol
    """

    def __init__(self, transport: HTTPClient, session_manager: SessionManager):
        self._transport = transport
        self._session = session_manager

    @property
    def session_manager(self) -> SessionManager:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    async def request(self, descriptor: RequestDescriptor) -> httpx.Response:
        """
        Execute `descriptor`, refreshing the session and replaying once on 401.

        Returns:
            The backend's 2xx response, unchanged

        Raises:
            ShopScriptError: Translated failure of the call
        """
        sent_token = self._session.access_token
        try:
            return await self._send(descriptor, sent_token)
        except HTTPStatusError as e:
            if e.status_code != 401:
                raise self._translate(e) from e
            first_failure = e

        current_token = self._session.access_token
        if current_token != sent_token:
            if current_token is None:
                # Session was cleared while this call was in flight.
                raise ShopScriptError(ErrorRecord.session_expired()) from first_failure
            logger.debug(f"Token changed since dispatch, replaying {descriptor.method} {descriptor.path}")
        elif self._session.refresh_token is not None:
            logger.info(f"401 on {descriptor.method} {descriptor.path}, refreshing session")
            await self._session.refresh()
        else:
            raise self._translate(first_failure) from first_failure

        try:
            return await self._send(descriptor, self._session.access_token)
        except HTTPClientError as e:
            # A 401 here is final: the replay is never refreshed again.
            raise self._translate(e) from e

    async def _send(self, descriptor: RequestDescriptor, token: Optional[str]) -> httpx.Response:
        # Case-insensitive, so a caller's "authorization" key is replaced too
        headers = httpx.Headers(descriptor.headers or {})
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        elif "Authorization" in headers:
            del headers["Authorization"]

        try:
            return await self._transport.request(
                descriptor.method,
                descriptor.path,
                params=dict(descriptor.query) if descriptor.query else None,
                json=descriptor.body,
                headers=headers or None
            )
        except HTTPStatusError:
            raise
        except HTTPClientError as e:
            raise self._translate(e) from e

    @staticmethod
    def _translate(error: HTTPClientError) -> ShopScriptError:
        if isinstance(error, HTTPStatusError):
            record = translate_error(error.status_code, error.body, error.headers)
            logger.warning(f"{error.message}: {record.kind.value} - {record.message}")
        elif isinstance(error, (HTTPConnectionError, HTTPTimeoutError)):
            record = translate_error(None, transport_failed=True, detail=error.message)
            logger.warning(record.message)
        else:
            record = translate_error(None, detail=error.message)
            logger.error(f"Unexpected transport failure: {error.message}")
        return ShopScriptError(record)

    async def get(self, path: str, query: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        return await self.request(RequestDescriptor("GET", path, query=query))

    async def post(self, path: str, body: Any = None, query: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        return await self.request(RequestDescriptor("POST", path, query=query, body=body))

    async def put(self, path: str, body: Any = None, query: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        return await self.request(RequestDescriptor("PUT", path, query=query, body=body))

    async def delete(self, path: str, body: Any = None, query: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        return await self.request(RequestDescriptor("DELETE", path, query=query, body=body))
