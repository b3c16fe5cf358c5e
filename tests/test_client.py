import logging

import httpx
import pytest
from pydantic import ValidationError

from shopscript.client import ShopScriptClient
from shopscript.core.config import ClientConfig
from shopscript.core.http import HTTPClient, HTTPStatusError
from shopscript.core.http.client import redact_headers
from shopscript.core.logging import get_logger
from shopscript.storage.token_store import FileTokenStore, InMemoryTokenStore
from tests.fake_backend import BASE_URL, StoreBackend, make_client, sign_in


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SHOPSCRIPT_BASE_URL", "https://shop.example.com/")
    monkeypatch.setenv("SHOPSCRIPT_RECEIVE_TIMEOUT_MS", "5000")
    monkeypatch.setenv("SHOPSCRIPT_TOKEN_FILE", str(tmp_path / "tokens.json"))
    monkeypatch.setenv("SHOPSCRIPT_LOG_LEVEL", "debug")

    config = ClientConfig.from_env()

    assert config.base_url == "https://shop.example.com"
    assert config.receive_timeout == 5.0
    assert config.connect_timeout == 30.0
    assert config.token_file == tmp_path / "tokens.json"
    assert config.log_level == "DEBUG"


def test_config_from_env_requires_base_url(monkeypatch):
    monkeypatch.delenv("SHOPSCRIPT_BASE_URL", raising=False)

    with pytest.raises(ValueError):
        ClientConfig.from_env()


def test_config_overrides_win_over_env(monkeypatch):
    monkeypatch.setenv("SHOPSCRIPT_BASE_URL", "https://shop.example.com")

    config = ClientConfig.from_env(base_url="https://other.example.com")

    assert config.base_url == "https://other.example.com"


def test_config_from_env_reads_env_file(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("SHOPSCRIPT_BASE_URL=https://dotenv.example.com\nSHOPSCRIPT_LOG_LEVEL=warning\n")
    # setenv first so both variables are restored after load_dotenv writes them
    monkeypatch.setenv("SHOPSCRIPT_BASE_URL", "unset")
    monkeypatch.delenv("SHOPSCRIPT_BASE_URL")
    monkeypatch.setenv("SHOPSCRIPT_LOG_LEVEL", "unset")
    monkeypatch.delenv("SHOPSCRIPT_LOG_LEVEL")

    config = ClientConfig.from_env(env_file=env_file)

    assert config.base_url == "https://dotenv.example.com"
    assert config.log_level == "WARNING"


def test_environment_wins_over_env_file(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("SHOPSCRIPT_BASE_URL=https://dotenv.example.com\n")
    monkeypatch.setenv("SHOPSCRIPT_BASE_URL", "https://shop.example.com")

    config = ClientConfig.from_env(env_file=env_file)

    assert config.base_url == "https://shop.example.com"


@pytest.mark.parametrize("kwargs", [{"base_url": "ftp://shop"}, {"base_url": BASE_URL, "connect_timeout_ms": 0}])
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValidationError):
        ClientConfig(**kwargs)


def test_default_token_store_follows_config(tmp_path):
    memory_client = ShopScriptClient(ClientConfig(base_url=BASE_URL))
    file_client = ShopScriptClient(ClientConfig(base_url=BASE_URL, token_file=tmp_path / "tokens.json"))

    assert isinstance(memory_client.token_store, InMemoryTokenStore)
    assert isinstance(file_client.token_store, FileTokenStore)


def test_clients_have_independent_sessions():
    backend = StoreBackend()
    first = make_client(backend)
    second = make_client(backend)

    sign_in(first, backend)

    assert first.is_authenticated
    assert not second.is_authenticated


@pytest.mark.asyncio
async def test_context_manager_restores_session(tmp_path):
    backend = StoreBackend()
    path = tmp_path / "tokens.json"
    FileTokenStore(path).write("access_token", backend.access_token)
    FileTokenStore(path).write("refresh_token", backend.refresh_token)

    async with make_client(backend, token_file=path) as shop:
        assert shop.is_authenticated
        assert shop.auth.current_customer.id == 7


@pytest.mark.asyncio
async def test_session_survives_restart(tmp_path):
    backend = StoreBackend()
    path = tmp_path / "tokens.json"

    async with make_client(backend, token_file=path) as shop:
        await shop.auth.login("jane@example.com", "secret")

    async with make_client(backend, token_file=path) as shop:
        assert shop.auth.is_authenticated


@pytest.mark.asyncio
async def test_http_client_status_error_carries_response():
    def handler(request):
        return httpx.Response(429, json={"message": "Slow down"}, headers={"Retry-After": "7"})

    http = HTTPClient(BASE_URL, transport=httpx.MockTransport(handler))

    with pytest.raises(HTTPStatusError) as exc_info:
        await http.get("/api/products")

    assert exc_info.value.status_code == 429
    assert exc_info.value.body == {"message": "Slow down"}
    assert exc_info.value.headers["retry-after"] == "7"
    assert "Status: 429" in str(exc_info.value)
    await http.aclose()


@pytest.mark.asyncio
async def test_http_client_sends_json_headers():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, json={})

    http = HTTPClient(BASE_URL, headers={"X-Store": "eu"}, transport=httpx.MockTransport(handler))
    await http.get("/api/products")
    await http.aclose()

    assert seen["accept"] == "application/json"
    assert seen["x-store"] == "eu"


def test_redact_headers_masks_token():
    assert redact_headers({"Authorization": "Bearer secret", "Accept": "application/json"}) == {
        "Authorization": "Bearer ***",
        "Accept": "application/json",
    }


def test_loggers_live_under_package_root():
    assert get_logger("shopscript.core.pipeline").name == "shopscript.core.pipeline"
    assert get_logger("tests").name == "shopscript.tests"


def test_client_from_env_configures_logging(monkeypatch):
    monkeypatch.setenv("SHOPSCRIPT_BASE_URL", BASE_URL)
    monkeypatch.setenv("SHOPSCRIPT_LOG_LEVEL", "WARNING")

    shop = ShopScriptClient.from_env()

    assert shop.config.base_url == BASE_URL
    assert logging.getLogger("shopscript").level == logging.WARNING
