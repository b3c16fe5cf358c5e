import httpx
import pytest

from shopscript.core.errors import ErrorKind, ShopScriptError
from tests.fake_backend import recorder, sign_in


@pytest.fixture
def signed_in_client(client, backend):
    sign_in(client, backend)
    return client


@pytest.mark.asyncio
async def test_add_to_cart_replaces_snapshot(signed_in_client):
    cart = signed_in_client.cart

    await cart.add_to_cart(product_id=123, quantity=2)

    assert cart.item_count == 2
    assert cart.subtotal == 20.0
    assert cart.total == 20.0
    assert not cart.is_empty
    assert cart.cart.items[0].product_id == 123


@pytest.mark.asyncio
async def test_empty_service_has_zero_derived_values(client):
    assert client.cart.cart is None
    assert client.cart.item_count == 0
    assert client.cart.total == 0.0
    assert client.cart.is_empty


@pytest.mark.asyncio
async def test_failed_mutation_keeps_previous_snapshot(signed_in_client, backend):
    cart = signed_in_client.cart
    await cart.add_to_cart(product_id=123, quantity=2)
    before = cart.cart
    backend.override("POST", "/api/cart/items", httpx.Response(500, json={"message": "Internal error"}))

    with pytest.raises(ShopScriptError) as exc_info:
        await cart.add_to_cart(product_id=456, quantity=1)

    assert exc_info.value.kind is ErrorKind.SERVER
    assert cart.cart == before
    assert cart.item_count == 2
    assert cart.last_error.kind is ErrorKind.SERVER
    assert not cart.is_loading


@pytest.mark.asyncio
async def test_next_operation_clears_last_error(signed_in_client, backend):
    cart = signed_in_client.cart
    backend.override("GET", "/api/cart", httpx.Response(503, json={"message": "Maintenance"}))
    with pytest.raises(ShopScriptError):
        await cart.load_cart()

    await cart.add_to_cart(product_id=1)

    assert cart.last_error is None


@pytest.mark.asyncio
async def test_clear_cart_empties_snapshot(signed_in_client):
    cart = signed_in_client.cart
    await cart.add_to_cart(product_id=123, quantity=2)

    await cart.clear_cart()

    assert cart.cart is None
    assert cart.item_count == 0
    assert cart.is_empty


@pytest.mark.asyncio
async def test_remove_item_refetches_cart_after_no_content(signed_in_client, backend):
    cart = signed_in_client.cart
    await cart.add_to_cart(product_id=123, quantity=2)
    await cart.add_to_cart(product_id=456, quantity=1)

    await cart.remove_item("item-123")

    assert cart.item_count == 1
    assert [item.product_id for item in cart.cart.items] == [456]
    assert len(backend.calls("GET", "/api/cart")) == 1


@pytest.mark.asyncio
async def test_is_loading_while_in_flight(signed_in_client, backend):
    cart = signed_in_client.cart
    seen = []

    def get_cart(request):
        seen.append(cart.is_loading)
        return httpx.Response(200, json=backend.cart_json())

    backend.override("GET", "/api/cart", get_cart)

    await cart.load_cart()

    assert seen == [True]
    assert not cart.is_loading


@pytest.mark.asyncio
async def test_subscribers_receive_every_snapshot_until_unsubscribed(signed_in_client):
    cart = signed_in_client.cart
    states, listener = recorder()
    unsubscribe = cart.subscribe(listener)

    await cart.add_to_cart(product_id=123)
    unsubscribe()
    await cart.add_to_cart(product_id=123)

    assert [s.is_loading for s in states] == [True, False]
    assert states[-1].data.item_count == 1


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_operation(signed_in_client):
    cart = signed_in_client.cart

    def broken(state):
        raise RuntimeError("listener bug")

    cart.subscribe(broken)

    await cart.add_to_cart(product_id=123, quantity=3)

    assert cart.item_count == 3


@pytest.mark.asyncio
async def test_totals_do_not_touch_snapshot(signed_in_client, backend):
    cart = signed_in_client.cart
    await cart.add_to_cart(product_id=123)
    before = cart.state
    backend.override(
        "GET",
        "/api/cart/totals",
        httpx.Response(200, json={"subtotal": 10.0, "total": 12.5, "tax": 2.5})
    )

    totals = await cart.get_totals()

    assert totals.total == 12.5
    assert cart.cart == before.data


@pytest.mark.asyncio
async def test_shipping_methods_accept_wrapped_list(signed_in_client, backend):
    backend.override(
        "GET",
        "/api/cart/shipping-methods",
        httpx.Response(200, json={"data": [{"id": "flat", "name": "Flat rate", "price": 5.0}]})
    )

    methods = await signed_in_client.cart.get_shipping_methods()

    assert [m.id for m in methods] == ["flat"]


def test_reset_restores_initial_state(client):
    states, listener = recorder()
    client.cart.subscribe(listener)

    client.cart.reset()

    assert client.cart.cart is None
    assert len(states) == 1


@pytest.mark.asyncio
async def test_update_quantity_and_coupon_replace_snapshot(signed_in_client, backend):
    cart = signed_in_client.cart
    await cart.add_to_cart(product_id=123)

    def update(request):
        backend.cart_items[0]["quantity"] = 4
        return httpx.Response(200, json=backend.cart_json())

    def coupon(request):
        return httpx.Response(200, json={**backend.cart_json(), "coupon_code": "SAVE10", "total": 36.0})

    backend.override("PUT", "/api/cart/items/item-123", update)
    backend.override("POST", "/api/cart/coupon", coupon)

    await cart.update_item_quantity("item-123", 4)
    assert cart.item_count == 4

    await cart.apply_coupon("SAVE10")
    assert cart.cart.coupon_code == "SAVE10"
    assert cart.total == 36.0

    backend.override("DELETE", "/api/cart/coupon", httpx.Response(204))
    await cart.remove_coupon()
    assert cart.cart.coupon_code is None
