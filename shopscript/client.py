from typing import Optional

import httpx

from shopscript.core.config import ClientConfig
from shopscript.core.http import HTTPClient
from shopscript.core.logging import get_logger, setup_logging
from shopscript.core.pipeline import RequestPipeline
from shopscript.core.session import SessionManager
from shopscript.endpoints.auth_api import AuthApi
from shopscript.endpoints.cart_api import CartApi
from shopscript.endpoints.checkout_api import CheckoutApi
from shopscript.endpoints.order_api import OrderApi
from shopscript.endpoints.product_api import ProductApi
from shopscript.services.auth_service import AuthService
from shopscript.services.cart_service import CartService
from shopscript.storage.token_store import FileTokenStore, InMemoryTokenStore, TokenStore

logger = get_logger(__name__)


class ShopScriptClient:
    """
    Wires one backend origin: transport, session, pipeline, endpoints and services.

    Every instance owns its own session, so several clients (e.g. two stores,
    or isolated tests) can live in one process.

    Example:
        ```python
        async with ShopScriptClient(ClientConfig.from_env()) as shop:
            await shop.auth.login("jane@example.com", "secret")
            await shop.cart.add_to_cart(product_id=123, quantity=2)
            print(shop.cart.item_count)
        ```

    Args:
        config: Client configuration
        token_store: Durable token storage. Defaults to a FileTokenStore when
            `config.token_file` is set, else to process memory.
        transport: Custom httpx transport (optional, e.g. httpx.MockTransport)
    """

    def __init__(
        self,
        config: ClientConfig,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config

        if token_store is None:
            token_store = FileTokenStore(config.token_file) if config.token_file else InMemoryTokenStore()
        self.token_store = token_store

        self.http = HTTPClient(
            base_url=config.base_url,
            headers=config.headers,
            connect_timeout=config.connect_timeout,
            receive_timeout=config.receive_timeout,
            transport=transport
        )
        self.session_manager = SessionManager(self.http, token_store)
        self.pipeline = RequestPipeline(self.http, self.session_manager)

        self.auth_api = AuthApi(self.pipeline)
        self.cart_api = CartApi(self.pipeline)
        self.product_api = ProductApi(self.pipeline)
        self.order_api = OrderApi(self.pipeline)
        self.checkout_api = CheckoutApi(self.pipeline)

        self.auth = AuthService(self.auth_api)
        self.cart = CartService(self.cart_api)

    @classmethod
    def from_env(cls, token_store: Optional[TokenStore] = None, **overrides) -> "ShopScriptClient":
        """
        Build a client from SHOPSCRIPT_* environment variables and configure
        logging at the configured level.
        """
        config = ClientConfig.from_env(**overrides)
        setup_logging(log_level=config.log_level)
        return cls(config, token_store=token_store)

    @property
    def is_authenticated(self) -> bool:
        return self.session_manager.is_authenticated

    async def initialize(self) -> bool:
        """
        Restore persisted tokens and sync the auth state.

        Returns:
            True when a customer session was restored
        """
        self.session_manager.restore()
        restored = await self.auth.check_auth_status()
        logger.info(f"ShopScript client ready for {self.config.base_url} (authenticated={restored})")
        return restored

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "ShopScriptClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
