from datetime import date
from typing import Any, Dict, Optional

from shopscript.core.errors import ErrorKind, ShopScriptError
from shopscript.core.logging import get_logger
from shopscript.endpoints.auth_api import AuthApi
from shopscript.pydantic_models.auth.auth_response_model import AuthResponse
from shopscript.pydantic_models.customer.customer_model import (
    Customer,
    CustomerRegistrationRequest,
    CustomerUpdateRequest
)
from shopscript.services.observable import ObservableService, ServiceState

logger = get_logger(__name__)

# Profile-fetch failures that mean the credentials are no longer valid.
# Network, server and other failures leave the signed-in state untouched.
SIGN_OUT_KINDS = (ErrorKind.AUTHENTICATION, ErrorKind.SESSION_EXPIRED)


class AuthState(ServiceState[Customer]):
    """`data` holds the current customer."""

    is_authenticated: bool = False


class AuthService(ObservableService[AuthState]):
    """
    Observable customer session.

    Args:
        auth_api: Auth endpoint module used for every remote call.
    """

    def __init__(self, auth_api: AuthApi):
        super().__init__(AuthState())
        self._auth_api = auth_api
        self._auth_api.on_session_cleared(self._on_session_cleared)

    @property
    def current_customer(self) -> Optional[Customer]:
        return self._state.data

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated and self._auth_api.is_authenticated

    @staticmethod
    def _signed_in(auth: AuthResponse) -> Dict[str, Any]:
        return {"data": auth.customer, "is_authenticated": True}

    async def login(self, email: str, password: str, remember_me: bool = False) -> AuthResponse:
        """
        Sign in with credentials.

        On failure the previous auth state is kept and the error re-raised.
        """
        return await self._run(
            self._auth_api.login(email=email, password=password, remember_me=remember_me),
            on_success=self._signed_in
        )

    async def social_login(self, provider: str, token: str) -> AuthResponse:
        return await self._run(
            self._auth_api.social_login(provider=provider, token=token),
            on_success=self._signed_in
        )

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Customer:
        """Create a customer account. Call `login` afterwards to sign in."""
        request = CustomerRegistrationRequest(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone=phone
        )
        return await self._run(self._auth_api.register(request))

    async def get_current_customer(self) -> Customer:
        """
        Fetch the signed-in customer's profile.

        Authentication and session-expired failures sign the customer out;
        other failures are recorded without touching the session.
        """
        return await self._run(
            self._auth_api.get_current_customer(),
            on_success=lambda customer: {"data": customer, "is_authenticated": True},
            on_error=self._on_profile_error
        )

    def _on_session_cleared(self) -> None:
        # Tokens are gone, e.g. a refresh failed during another service's call
        if self._state.is_authenticated or self._state.data is not None:
            logger.info("Session cleared, publishing signed-out state")
            self._publish(data=None, is_authenticated=False)

    def _on_profile_error(self, error: ShopScriptError) -> Dict[str, Any]:
        if error.kind not in SIGN_OUT_KINDS:
            logger.warning(f"Profile fetch failed ({error.kind.value}), keeping session")
            return {}

        logger.info(f"Profile fetch rejected ({error.kind.value}), signing out")
        if error.kind is ErrorKind.AUTHENTICATION:
            self._auth_api.invalidate_session()
        return {"data": None, "is_authenticated": False}

    async def update_customer(
        self,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None,
        birth_date: Optional[date] = None
    ) -> Customer:
        request = CustomerUpdateRequest(
            email=email,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            birth_date=birth_date
        )
        return await self._run(
            self._auth_api.update_customer(request),
            on_success=lambda customer: {"data": customer}
        )

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self._run(
            self._auth_api.change_password(current_password=current_password, new_password=new_password)
        )

    async def reset_password(self, email: str) -> None:
        await self._run(self._auth_api.reset_password(email=email))

    async def logout(self) -> None:
        """Sign out. Local state is cleared even when the remote call fails."""
        self._begin()
        try:
            await self._auth_api.logout()
        finally:
            self._end(data=None, is_authenticated=False)
        logger.info("Customer signed out")

    async def check_auth_status(self) -> bool:
        """
        Sync the published state with the restored session.

        Never raises: any failure while hydrating the customer degrades to
        signed out.
        """
        if not self._auth_api.is_authenticated:
            self._publish(data=None, is_authenticated=False)
            return False

        if self.current_customer is not None:
            self._publish(is_authenticated=True)
            return True

        try:
            await self.get_current_customer()
        except ShopScriptError as e:
            logger.info(f"Could not restore customer session: {e}")
            self._publish(data=None, is_authenticated=False)
            return False

        return True
