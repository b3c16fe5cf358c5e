"""
Pytest configuration and fixtures.

Tests never touch the network: every ShopScriptClient is built on an
httpx.MockTransport driven by StoreBackend (see tests/fake_backend.py).
"""
import pytest

from shopscript.client import ShopScriptClient
from shopscript.storage.token_store import InMemoryTokenStore
from tests.fake_backend import StoreBackend, make_client


@pytest.fixture
def backend() -> StoreBackend:
    return StoreBackend()


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture
def client(backend: StoreBackend, token_store: InMemoryTokenStore) -> ShopScriptClient:
    return make_client(backend, token_store)
