"""
Session state and the token refresh protocol.

The SessionManager is the only owner of the access/refresh tokens. It keeps
them in memory, mirrors them into a TokenStore and runs at most one refresh
call at a time: concurrent callers of `refresh()` all await the same
in-flight task.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional

from shopscript.core.errors import ErrorRecord, ShopScriptError
from shopscript.core.http import HTTPClient, HTTPClientError
from shopscript.core.logging import get_logger
from shopscript.storage.token_store import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TokenStore

logger = get_logger(__name__)

REFRESH_PATH = "/api/auth/refresh"


@dataclass
class Session:
    base_url: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None


class SessionManager:
    """
    Holds the Session, persists/restores tokens and refreshes them.

    Args:
        transport: HTTP transport used for the refresh call. The call goes
            straight to the transport, never through the request pipeline,
            so no Authorization header is attached and no 401 handling recurses.
        token_store: Durable storage for the tokens.
    """

    def __init__(self, transport: HTTPClient, token_store: TokenStore):
        self._transport = transport
        self._store = token_store
        self._session = Session(base_url=transport.base_url)
        self._refresh_task: Optional[asyncio.Task] = None
        self._clear_listeners: List[Callable[[], None]] = []

    @property
    def session(self) -> Session:
        return self._session

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._session.refresh_token

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def restore(self) -> None:
        """Load tokens from the store into memory. Never raises."""
        try:
            access_token = self._store.read(ACCESS_TOKEN_KEY)
            refresh_token = self._store.read(REFRESH_TOKEN_KEY)
        except Exception as e:
            logger.warning(f"Could not restore tokens, starting signed out: {e}")
            access_token = refresh_token = None

        self._session.access_token = access_token
        self._session.refresh_token = refresh_token
        logger.info(f"Session restored (authenticated={self._session.is_authenticated})")

    def store(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """
        Install new tokens in memory and in the durable store.

        A None `refresh_token` keeps the refresh token already held.
        """
        self._session.access_token = access_token
        if refresh_token is not None:
            self._session.refresh_token = refresh_token

        try:
            self._store.write(ACCESS_TOKEN_KEY, access_token)
            if refresh_token is not None:
                self._store.write(REFRESH_TOKEN_KEY, refresh_token)
        except Exception as e:
            # The in-memory session stays usable for this process.
            logger.error(f"Failed to persist tokens: {e}", exc_info=True)

    def clear(self) -> None:
        """Forget tokens in memory and in the durable store."""
        self._session.access_token = None
        self._session.refresh_token = None

        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY):
            try:
                self._store.delete(key)
            except Exception as e:
                logger.error(f"Failed to delete persisted {key}: {e}", exc_info=True)

        for listener in list(self._clear_listeners):
            try:
                listener()
            except Exception:
                logger.exception("Session cleared listener failed")

    def on_cleared(self, listener: Callable[[], None]) -> Callable[[], None]:
        """
        Call `listener()` every time the session is cleared, whether by
        logout or by a failed refresh.

        Returns:
            A callable that removes the listener again
        """
        self._clear_listeners.append(listener)

        def remove() -> None:
            if listener in self._clear_listeners:
                self._clear_listeners.remove(listener)

        return remove

    async def refresh(self) -> None:
        """
        Exchange the refresh token for a new access token.

        Concurrent callers share one in-flight refresh. A caller being
        cancelled does not cancel the shared refresh.

        Raises:
            ShopScriptError: SESSION_EXPIRED when there is no refresh token
                or the refresh call failed (the session is cleared then).
        """
        task = self._refresh_task
        if task is None:
            if self._session.refresh_token is None:
                raise ShopScriptError(ErrorRecord.session_expired())
            task = asyncio.get_running_loop().create_task(self._perform_refresh())
            task.add_done_callback(self._on_refresh_done)
            self._refresh_task = task
        else:
            logger.debug("Joining in-flight token refresh")

        await asyncio.shield(task)

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        if not task.cancelled():
            # Mark the outcome as retrieved even if every waiter was cancelled.
            task.exception()

    async def _perform_refresh(self) -> None:
        refresh_token = self._session.refresh_token
        logger.info("Refreshing access token")

        try:
            response = await self._transport.post(
                REFRESH_PATH,
                json={"refresh_token": refresh_token}
            )
            data = response.json()
        except (HTTPClientError, ValueError) as e:
            logger.warning(f"Token refresh failed: {e}")
            self.clear()
            raise ShopScriptError(ErrorRecord.session_expired()) from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(access_token, str) or not access_token:
            logger.warning("Token refresh response did not contain an access token")
            self.clear()
            raise ShopScriptError(ErrorRecord.session_expired())

        if self._session.refresh_token != refresh_token:
            # Signed out (or signed in again) while the refresh was in flight.
            logger.info("Discarding refreshed token for a session that has changed")
            raise ShopScriptError(ErrorRecord.session_expired())

        new_refresh_token = data.get("refresh_token")
        self.store(access_token, new_refresh_token if isinstance(new_refresh_token, str) else None)
        logger.info("Access token refreshed")
