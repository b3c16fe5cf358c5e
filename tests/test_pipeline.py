"""
Tests for RequestPipeline: bearer injection, refresh-and-replay on 401,
single-flight refresh and failure translation.
"""
import asyncio
import json

import httpx
import pytest

from shopscript.core.errors import ErrorKind, ShopScriptError
from shopscript.core.pipeline import RequestDescriptor
from tests.fake_backend import connect_error, expire_access_token, sign_in


def test_request_descriptor_is_immutable():
    query = {"page": 1}
    descriptor = RequestDescriptor("get", "/api/products", query=query)
    query["page"] = 2

    assert descriptor.method == "GET"
    assert descriptor.query["page"] == 1
    with pytest.raises(TypeError):
        descriptor.query["page"] = 3


@pytest.mark.asyncio
async def test_no_authorization_header_without_token(client, backend):
    backend.override("GET", "/api/products/featured", httpx.Response(200, json=[]))

    await client.pipeline.get("/api/products/featured")

    assert "Authorization" not in backend.requests[-1].headers


@pytest.mark.asyncio
async def test_bearer_token_attached_when_signed_in(client, backend):
    sign_in(client, backend)

    response = await client.pipeline.get("/api/cart")

    assert response.status_code == 200
    assert backend.requests[-1].headers["Authorization"] == "Bearer access-1"


@pytest.mark.asyncio
async def test_caller_authorization_header_dropped_without_token(client, backend):
    backend.override("GET", "/api/products/featured", httpx.Response(200, json=[]))

    await client.pipeline.request(
        RequestDescriptor("GET", "/api/products/featured", headers={"authorization": "Bearer stale"})
    )

    assert "authorization" not in backend.requests[-1].headers


@pytest.mark.asyncio
async def test_caller_authorization_header_replaced_by_session_token(client, backend):
    sign_in(client, backend)

    await client.pipeline.request(
        RequestDescriptor("GET", "/api/cart", headers={"authorization": "Bearer stale", "X-Trace": "abc"})
    )

    sent = backend.requests[-1].headers
    assert sent.get_list("authorization") == ["Bearer access-1"]
    assert sent["x-trace"] == "abc"


@pytest.mark.asyncio
async def test_401_refreshes_and_replays_transparently(client, backend, token_store):
    expire_access_token(client, backend)

    response = await client.pipeline.get("/api/cart")

    assert response.status_code == 200
    assert backend.refresh_calls == 1
    assert [r.headers["Authorization"] for r in backend.calls("GET", "/api/cart")] == [
        "Bearer expired",
        "Bearer access-2",
    ]
    assert token_store.read("access_token") == "access-2"


@pytest.mark.asyncio
async def test_replay_is_attempted_at_most_once(client, backend):
    expire_access_token(client, backend)
    backend.override("GET", "/api/cart", httpx.Response(401, json={"message": "Still unauthorized"}))

    with pytest.raises(ShopScriptError) as exc_info:
        await client.pipeline.get("/api/cart")

    assert exc_info.value.kind is ErrorKind.AUTHENTICATION
    assert exc_info.value.message == "Still unauthorized"
    assert backend.refresh_calls == 1
    assert len(backend.calls("GET", "/api/cart")) == 2


@pytest.mark.asyncio
async def test_401_without_refresh_token_is_authentication_error(client, backend):
    client.session_manager.store("expired")

    with pytest.raises(ShopScriptError) as exc_info:
        await client.pipeline.get("/api/cart")

    assert exc_info.value.kind is ErrorKind.AUTHENTICATION
    assert exc_info.value.http_status == 401
    assert backend.refresh_calls == 0


@pytest.mark.asyncio
async def test_concurrent_401s_share_one_refresh(client, backend):
    expire_access_token(client, backend)

    responses = await asyncio.gather(*(client.pipeline.get("/api/cart") for _ in range(5)))

    assert all(r.status_code == 200 for r in responses)
    assert backend.refresh_calls == 1
    assert client.session_manager.access_token == "access-2"


@pytest.mark.asyncio
async def test_concurrent_401s_all_fail_when_shared_refresh_fails(client, backend, token_store):
    expire_access_token(client, backend)
    backend.refresh_status = 401

    results = await asyncio.gather(
        *(client.pipeline.get("/api/cart") for _ in range(5)),
        return_exceptions=True
    )

    assert backend.refresh_calls == 1
    assert all(isinstance(r, ShopScriptError) for r in results)
    assert {r.kind for r in results} == {ErrorKind.SESSION_EXPIRED}
    assert client.session_manager.access_token is None
    assert token_store.read("access_token") is None
    assert token_store.read("refresh_token") is None


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_refresh(client, backend):
    expire_access_token(client, backend)
    backend.refresh_started = asyncio.Event()
    backend.refresh_gate = asyncio.Event()

    first = asyncio.create_task(client.pipeline.get("/api/cart"))
    second = asyncio.create_task(client.pipeline.get("/api/cart"))
    await backend.refresh_started.wait()

    first.cancel()
    backend.refresh_gate.set()

    response = await second
    with pytest.raises(asyncio.CancelledError):
        await first

    assert response.status_code == 200
    assert backend.refresh_calls == 1
    assert client.session_manager.access_token == "access-2"


@pytest.mark.asyncio
async def test_token_changed_since_dispatch_replays_without_refresh(client, backend):
    client.session_manager.store("old-token", backend.refresh_token)

    def orders(request):
        if request.headers["Authorization"] == "Bearer old-token":
            # Another caller installed a fresh token while this call was in flight
            client.session_manager.store(backend.access_token)
            return httpx.Response(401, json={"message": "Unauthorized"})
        return httpx.Response(200, json={"orders": [], "total": 0, "page": 1, "page_size": 20})

    backend.override("GET", "/api/orders", orders)

    response = await client.pipeline.get("/api/orders")

    assert response.status_code == 200
    assert backend.refresh_calls == 0
    assert backend.requests[-1].headers["Authorization"] == "Bearer access-1"


@pytest.mark.asyncio
async def test_session_cleared_while_in_flight_is_session_expired(client, backend):
    sign_in(client, backend)

    def cart(request):
        client.session_manager.clear()
        return httpx.Response(401, json={"message": "Unauthorized"})

    backend.override("GET", "/api/cart", cart)

    with pytest.raises(ShopScriptError) as exc_info:
        await client.pipeline.get("/api/cart")

    assert exc_info.value.kind is ErrorKind.SESSION_EXPIRED
    assert backend.refresh_calls == 0


@pytest.mark.asyncio
async def test_connection_failure_is_network_error(client, backend):
    backend.override("GET", "/api/products", connect_error)

    with pytest.raises(ShopScriptError) as exc_info:
        await client.pipeline.get("/api/products")

    assert exc_info.value.kind is ErrorKind.NETWORK
    assert exc_info.value.message.startswith("Network error:")
    assert exc_info.value.http_status is None


@pytest.mark.asyncio
async def test_timeout_is_network_error(client, backend):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    backend.override("GET", "/api/products", slow)

    with pytest.raises(ShopScriptError) as exc_info:
        await client.pipeline.get("/api/products")

    assert exc_info.value.kind is ErrorKind.NETWORK


@pytest.mark.asyncio
async def test_non_401_status_is_translated_without_refresh(client, backend):
    expire_access_token(client, backend)
    backend.override("GET", "/api/products", httpx.Response(503, json={"message": "Maintenance"}))

    with pytest.raises(ShopScriptError) as exc_info:
        await client.pipeline.get("/api/products")

    assert exc_info.value.kind is ErrorKind.SERVER
    assert exc_info.value.message == "Maintenance"
    assert backend.refresh_calls == 0


@pytest.mark.asyncio
async def test_query_and_body_are_forwarded(client, backend):
    def echo(request):
        return httpx.Response(200, json={"query": dict(request.url.params), "body": request.content.decode()})

    backend.override("POST", "/api/echo", echo)

    response = await client.pipeline.post("/api/echo", body={"a": 1}, query={"page": 2, "skip": None})

    assert response.json()["query"] == {"page": "2"}
    assert json.loads(response.json()["body"]) == {"a": 1}
