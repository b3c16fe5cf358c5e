"""
ShopScript storefront client.

Async client for ShopScript e-commerce backends: authenticated request
pipeline with transparent token refresh, typed endpoint modules and
observable auth and cart services.
"""

from shopscript.client import ShopScriptClient
from shopscript.core.config import ClientConfig
from shopscript.core.errors import ErrorKind, ErrorRecord, ShopScriptError
from shopscript.core.logging import get_logger, setup_logging
from shopscript.core.pipeline import RequestDescriptor, RequestPipeline
from shopscript.core.session import Session, SessionManager
from shopscript.services.auth_service import AuthService, AuthState
from shopscript.services.cart_service import CartService, CartState
from shopscript.storage.token_store import FileTokenStore, InMemoryTokenStore, TokenStore

__version__ = "0.1.0"

__all__ = [
    "ShopScriptClient",
    "ClientConfig",
    "ErrorKind",
    "ErrorRecord",
    "ShopScriptError",
    "get_logger",
    "setup_logging",
    "RequestDescriptor",
    "RequestPipeline",
    "Session",
    "SessionManager",
    "AuthService",
    "AuthState",
    "CartService",
    "CartState",
    "FileTokenStore",
    "InMemoryTokenStore",
    "TokenStore",
]
