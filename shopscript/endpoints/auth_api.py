from typing import Callable

from shopscript.core.errors import ShopScriptError
from shopscript.core.logging import get_logger
from shopscript.endpoints.base_api import BaseApi
from shopscript.pydantic_models.auth.auth_response_model import AuthResponse, TokenRefreshResponse
from shopscript.pydantic_models.customer.customer_model import (
    Customer,
    CustomerRegistrationRequest,
    CustomerUpdateRequest
)

logger = get_logger(__name__)


class AuthApi(BaseApi):
    """
    Authentication endpoints: login, registration, profile and sign-out.

    Successful logins hand their tokens to the SessionManager; this module is
    the only place outside the pipeline that touches the session.
    """

    async def login(self, email: str, password: str, remember_me: bool = False) -> AuthResponse:
        response = await self._pipeline.post(
            "/api/auth/login",
            body={"email": email, "password": password, "remember_me": remember_me}
        )
        auth = self._parse(response, AuthResponse)
        self._pipeline.session_manager.store(auth.access_token, auth.refresh_token)
        logger.info(f"Customer {auth.customer.id} logged in")
        return auth

    async def social_login(self, provider: str, token: str) -> AuthResponse:
        """Login through an external identity provider (e.g. google, facebook)."""
        response = await self._pipeline.post(f"/api/auth/social/{provider}", body={"token": token})
        auth = self._parse(response, AuthResponse)
        self._pipeline.session_manager.store(auth.access_token, auth.refresh_token)
        logger.info(f"Customer {auth.customer.id} logged in via {provider}")
        return auth

    async def register(self, request: CustomerRegistrationRequest) -> Customer:
        """Create a customer. Does not sign the customer in."""
        response = await self._pipeline.post(
            "/api/auth/register",
            body=request.model_dump(mode="json", exclude_none=True)
        )
        return self._parse(response, Customer)

    async def get_current_customer(self) -> Customer:
        response = await self._pipeline.get("/api/customer/me")
        return self._parse(response, Customer)

    async def update_customer(self, request: CustomerUpdateRequest) -> Customer:
        response = await self._pipeline.put(
            "/api/customer/me",
            body=request.model_dump(mode="json", exclude_none=True)
        )
        return self._parse(response, Customer)

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self._pipeline.post(
            "/api/customer/password/change",
            body={"current_password": current_password, "new_password": new_password}
        )

    async def reset_password(self, email: str) -> None:
        """Ask the backend to email a password reset link."""
        await self._pipeline.post("/api/auth/password/reset", body={"email": email})

    async def refresh_token(self) -> TokenRefreshResponse:
        """
        Explicitly refresh the session.

        Runs through the SessionManager so it shares any refresh already in
        flight instead of issuing a second one.
        """
        await self._pipeline.session_manager.refresh()
        session = self._pipeline.session_manager.session
        return TokenRefreshResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token
        )

    async def logout(self) -> None:
        """
        Sign out remotely (best effort) and always clear local tokens.
        """
        try:
            await self._pipeline.post("/api/auth/logout")
        except ShopScriptError as e:
            logger.warning(f"Remote logout failed, clearing local session anyway: {e}")
        finally:
            self._pipeline.session_manager.clear()

    def invalidate_session(self) -> None:
        """Drop the local tokens after the backend rejected them."""
        self._pipeline.session_manager.clear()

    def on_session_cleared(self, listener: Callable[[], None]) -> Callable[[], None]:
        return self._pipeline.session_manager.on_cleared(listener)

    @property
    def is_authenticated(self) -> bool:
        return self._pipeline.is_authenticated
